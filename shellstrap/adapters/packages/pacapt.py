"""
pacapt adapter — the universal package-manager shim.

pacapt (https://github.com/icy/pacapt) speaks pacman syntax and
translates it to apt, dnf, pkg and friends, so one command line works
on every Linux family and on FreeBSD.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from shellstrap.adapters.packages.base import PackageManagerAdapter
from shellstrap.core.models.settings import DEFAULT_SHIM_PATH


class PacaptAdapter(PackageManagerAdapter):
    """Operations: 'sync' (``-Sy``) and 'install' (``-S --noconfirm``)."""

    operations = frozenset({"sync", "install"})

    def __init__(self, shim_path: Path = DEFAULT_SHIM_PATH):
        self._shim_path = Path(shim_path)

    @property
    def name(self) -> str:
        return "pacapt"

    @property
    def shim_path(self) -> Path:
        return self._shim_path

    def binary(self) -> str | None:
        found = shutil.which("pacapt")
        if found:
            return found
        if self._shim_path.is_file() and os.access(self._shim_path, os.X_OK):
            return str(self._shim_path)
        return None

    def build_argv(self, binary: str, operation: str, packages: list[str]) -> list[str]:
        if operation == "sync":
            return [binary, "-Sy"]
        return [binary, "-S", "--noconfirm", *packages]
