"""
Homebrew adapter — the native package manager on macOS.

A freshly bootstrapped Homebrew is not on PATH yet, so the binary is
also looked up under the well-known prefixes. The 'prefix' operation
puts ``<prefix>/bin`` and ``<prefix>/sbin`` on this process's PATH so
that later steps (pip3, zsh) find what brew installed.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from shellstrap.adapters.base import ExecutionContext
from shellstrap.adapters.packages.base import PackageManagerAdapter
from shellstrap.core.data.urls import HOMEBREW_PREFIXES
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)


class BrewAdapter(PackageManagerAdapter):
    """Operations: 'update', 'install', 'prefix'."""

    operations = frozenset({"update", "install", "prefix"})

    def __init__(self, prefixes: tuple[str, ...] = HOMEBREW_PREFIXES):
        self._prefixes = prefixes

    @property
    def name(self) -> str:
        return "brew"

    def binary(self) -> str | None:
        found = shutil.which("brew")
        if found:
            return found
        for prefix in self._prefixes:
            candidate = Path(prefix) / "bin" / "brew"
            if candidate.is_file() and os.access(candidate, os.X_OK):
                return str(candidate)
        return None

    def build_argv(self, binary: str, operation: str, packages: list[str]) -> list[str]:
        if operation == "update":
            return [binary, "update"]
        if operation == "prefix":
            return [binary, "--prefix"]
        return [binary, "install", *packages]

    def execute(self, context: ExecutionContext) -> Receipt:
        if context.params.get("operation") != "prefix":
            return super().execute(context)

        params = {**context.params, "capture": True}
        receipt = super().execute(context.model_copy(update={"params": params}))
        if receipt.ok and receipt.output:
            prefix = receipt.output.strip()
            export_prefix_path(prefix)
            receipt.metadata["prefix"] = prefix
        return receipt


def export_prefix_path(prefix: str) -> None:
    """Prepend ``<prefix>/bin:<prefix>/sbin`` to PATH if missing."""
    current = os.environ.get("PATH", "")
    parts = current.split(os.pathsep) if current else []
    additions = [p for p in (f"{prefix}/bin", f"{prefix}/sbin") if p not in parts]
    if additions:
        os.environ["PATH"] = os.pathsep.join([*additions, *parts])
        logger.info("PATH now starts with %s", os.pathsep.join(additions))
