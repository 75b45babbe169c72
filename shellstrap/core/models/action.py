"""
Action and Receipt models — the provisioning contract.

Stages never touch the outside world themselves. They describe each
effect as an Action (run this command, clone that repository, fetch
this file) and hand it to an adapter, which answers with a Receipt.
Adapters report failures in the Receipt instead of raising.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One requested effect, addressed to a named adapter."""

    id: str                         # e.g. "sync:fzf:clone"
    name: str = ""                  # progress label
    adapter: str                    # "shell", "git", "pacapt", ...
    stage: str = ""
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """What an adapter did with one Action.

    ``output`` carries the command output, or the reason for a skip;
    ``error`` is set only on failure. ``metadata`` holds adapter-specific
    facts later steps read back, such as the path a download landed at.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
