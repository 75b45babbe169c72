"""
Package manager adapters — the shared shape.

pacapt, Homebrew and pip differ only in their binary and in how an
operation maps onto a command line. Subclasses provide those two
pieces; validation, privilege handling and receipts live here.
"""

from __future__ import annotations

import logging
from abc import abstractmethod

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.adapters.shell.command import guarded_run
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)


class PackageManagerAdapter(Adapter):
    """Base for adapters that drive a system or language package manager.

    Action params:
        operation (str): One of ``operations``.
        packages (list[str]): Package names (for 'install').
        sudo (bool): Run with root privileges (default: False).
        capture (bool): Capture output instead of streaming it.
    """

    operations: frozenset[str] = frozenset({"install"})

    @abstractmethod
    def binary(self) -> str | None:
        """Resolved path of the package manager, or None if missing."""

    @abstractmethod
    def build_argv(self, binary: str, operation: str, packages: list[str]) -> list[str]:
        """Command line for ``operation``."""

    def is_available(self) -> bool:
        return self.binary() is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if operation not in self.operations:
            valid = ", ".join(sorted(self.operations))
            return False, f"Unknown operation '{operation}'. Valid: {valid}"

        if operation == "install":
            packages = context.params.get("packages")
            if not packages:
                return False, "Missing required param: 'packages' for install"
            if not all(isinstance(p, str) and p for p in packages):
                return False, "Param 'packages' must be a list of names"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        binary = self.binary()
        if binary is None:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{self.name} is not installed",
            )

        operation = context.params["operation"]
        argv = self.build_argv(binary, operation, list(context.params.get("packages") or []))
        logger.info("%s %s", self.name, operation)
        return guarded_run(
            self.name,
            context.action.id,
            argv,
            sudo=bool(context.params.get("sudo", False)),
            capture=bool(context.params.get("capture", False)),
        )
