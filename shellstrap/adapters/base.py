"""
Adapter base — the contract between stages and the outside world.

Every external effect of a provisioning run (running a command,
installing packages, cloning a repository, downloading a file, copying
a config file) goes through an adapter. Stages only build Actions and
read Receipts, which is what lets the tests swap every adapter for a
fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from shellstrap.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute one action."""

    action: Action
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str | None:
        """Directory to run in, if the action names one."""
        cwd = self.params.get("cwd")
        return str(cwd) if cwd else None


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They never raise; failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g. 'shell', 'git', 'pacapt')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be used right now.

        Stages use this to decide whether a tool must be bootstrapped
        first (pacapt, brew, pip3). Must be fast and never raise.
        """

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action's params.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Perform the action. Never raises."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
