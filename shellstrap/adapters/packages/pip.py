"""
pip adapter — Python packages that have no system package.
"""

from __future__ import annotations

import shutil

from shellstrap.adapters.packages.base import PackageManagerAdapter


class PipAdapter(PackageManagerAdapter):
    """Operation: 'install' via ``pip3 install``."""

    @property
    def name(self) -> str:
        return "pip"

    def binary(self) -> str | None:
        return shutil.which("pip3")

    def build_argv(self, binary: str, operation: str, packages: list[str]) -> list[str]:
        return [binary, "install", *packages]
