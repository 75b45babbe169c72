"""
Mock adapter — stand-in for any adapter in tests.

Records every context it receives and answers with success unless told
otherwise. ``side_effect`` lets a test emulate what the real tool would
leave on disk (a cloned directory, a downloaded file).
"""

from __future__ import annotations

from collections.abc import Callable

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.core.models.action import Receipt


class MockAdapter(Adapter):
    """Configurable fake adapter."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
        side_effect: Callable[[ExecutionContext], None] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._side_effect = side_effect
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def action_ids(self) -> list[str]:
        """IDs of executed actions, in order."""
        return [ctx.action.id for ctx in self._call_log]

    def operations(self) -> list[str]:
        """The 'operation' param of each call (empty string if none)."""
        return [ctx.params.get("operation", "") for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_available(self, available: bool) -> None:
        self._available = available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        """Set a custom response for a specific action ID."""
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action.id in self._responses:
            return self._responses[context.action.id]

        if self._side_effect is not None:
            self._side_effect(context)

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
