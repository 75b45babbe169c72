"""
Engine executor — dispatches stage actions and applies failure policy.

Each stage owns an ActionRunner bound to its StageReport. ``run()``
sends one Action through the registry, files the Receipt in the
report, and decides what a failure means:

    critical=True,  keep_going=False  →  raise StageAborted (fail fast)
    critical=True,  keep_going=True   →  record and continue
    critical=False                    →  record and continue

Package-manager actions are non-critical: a failed install is reported
and the run carries on. Repository and config actions are critical.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from shellstrap.adapters.registry import AdapterRegistry
from shellstrap.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

StageStatus = Literal["ok", "partial", "failed", "skipped", "aborted"]


class StageAborted(Exception):
    """A critical action failed while fail-fast was in effect."""

    def __init__(self, stage: str, receipt: Receipt):
        self.stage = stage
        self.receipt = receipt
        super().__init__(f"{stage}: {receipt.action_id} failed: {receipt.error}")


@dataclass
class StageReport:
    """Receipts and outcome of one stage."""

    name: str
    receipts: list[Receipt] = field(default_factory=list)
    skipped_reason: str | None = None
    aborted: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def status(self) -> StageStatus:
        if self.aborted:
            return "aborted"
        if self.skipped_reason is not None and not self.receipts:
            return "skipped"
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def receipt_for(self, action_id: str) -> Receipt | None:
        for receipt in self.receipts:
            if receipt.action_id == action_id:
                return receipt
        return None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }
        if self.skipped_reason:
            result["skipped_reason"] = self.skipped_reason
        if self.details:
            result["details"] = self.details
        return result


class ActionRunner:
    """Dispatches one stage's actions through the registry."""

    def __init__(
        self,
        registry: AdapterRegistry,
        report: StageReport,
        *,
        dry_run: bool = False,
        keep_going: bool = False,
    ):
        self.registry = registry
        self.report = report
        self.dry_run = dry_run
        self.keep_going = keep_going

    def is_available(self, adapter: str) -> bool:
        return self.registry.is_available(adapter)

    def run(
        self,
        action_id: str,
        adapter: str,
        *,
        name: str = "",
        critical: bool = True,
        **params: Any,
    ) -> Receipt:
        """Execute one action and apply the failure policy.

        Raises:
            StageAborted: ``critical`` action failed and fail-fast is on.
        """
        action = Action(
            id=f"{self.report.name}:{action_id}",
            name=name,
            adapter=adapter,
            stage=self.report.name,
            params=params,
        )
        receipt = self.registry.execute_action(action, dry_run=self.dry_run)
        self.report.receipts.append(receipt)

        if receipt.failed:
            if critical and not self.keep_going:
                logger.error("%s failed, aborting: %s", action.id, receipt.error)
                self.report.aborted = True
                raise StageAborted(self.report.name, receipt)
            logger.warning("%s failed, continuing: %s", action.id, receipt.error)
        elif receipt.ok:
            logger.debug("%s ok (%dms)", action.id, receipt.duration_ms)

        return receipt
