"""
Tests for the action runner and stage reports.
"""

import json

import pytest

from shellstrap.core.engine.executor import StageAborted, StageReport
from shellstrap.core.models.action import Receipt


def _ok(action_id: str = "a") -> Receipt:
    return Receipt.success(adapter="mock", action_id=action_id)


def _failed(action_id: str = "b") -> Receipt:
    return Receipt.failure(adapter="mock", action_id=action_id, error="nope")


# ── Stage report ─────────────────────────────────────────────────────


class TestStageReport:
    def test_empty_is_ok(self):
        assert StageReport(name="x").status == "ok"

    def test_statuses(self):
        assert StageReport(name="x", receipts=[_ok(), _ok("c")]).status == "ok"
        assert StageReport(name="x", receipts=[_ok(), _failed()]).status == "partial"
        assert StageReport(name="x", receipts=[_failed()]).status == "failed"
        assert StageReport(name="x", skipped_reason="n/a").status == "skipped"
        assert StageReport(name="x", receipts=[_ok()], aborted=True).status == "aborted"

    def test_counts_and_lookup(self):
        report = StageReport(name="x", receipts=[_ok(), _failed()])
        assert (report.total, report.succeeded, report.failed) == (2, 1, 1)
        assert report.receipt_for("b").failed
        assert report.receipt_for("zzz") is None

    def test_to_dict(self):
        report = StageReport(name="x", receipts=[_ok()], skipped_reason="why", details={"k": "v"})
        data = json.loads(json.dumps(report.to_dict()))
        assert data["name"] == "x"
        assert data["receipts"][0]["action_id"] == "a"
        assert data["skipped_reason"] == "why"
        assert data["details"] == {"k": "v"}


# ── Action runner ────────────────────────────────────────────────────


class TestActionRunner:
    def test_action_ids_are_stage_scoped(self, registry, make_runner):
        runner = make_runner("sync")
        receipt = runner.run("fzf:clone", "shell", argv=["true"])
        assert receipt.action_id == "sync:fzf:clone"
        assert registry.get("shell").call_log[0].action.stage == "sync"
        assert runner.report.receipts == [receipt]

    def test_critical_failure_aborts(self, registry, make_runner):
        registry.get("shell").set_failure("config:x")
        runner = make_runner("config")
        with pytest.raises(StageAborted) as exc:
            runner.run("x", "shell", argv=["false"])
        assert exc.value.stage == "config"
        assert exc.value.receipt.error == "Mock failure"
        assert runner.report.aborted

    def test_critical_failure_with_keep_going(self, registry, make_runner):
        registry.get("shell").set_failure("config:x")
        runner = make_runner("config", keep_going=True)
        assert runner.run("x", "shell", argv=["false"]).failed
        assert not runner.report.aborted

    def test_non_critical_failure_continues(self, registry, make_runner):
        registry.get("pip").set_failure("packages:x")
        runner = make_runner("packages")
        assert runner.run("x", "pip", critical=False, operation="install").failed
        assert runner.report.failed == 1

    def test_dry_run(self, registry, make_runner):
        runner = make_runner("sync", dry_run=True)
        assert runner.run("x", "git", operation="pull").status == "skipped"
        assert registry.get("git").call_count == 0

    def test_unregistered_adapter_is_a_failure(self, make_runner):
        with pytest.raises(StageAborted):
            make_runner("sync").run("x", "svn")

    def test_is_available(self, registry, make_runner):
        registry.get("brew").set_available(False)
        runner = make_runner()
        assert not runner.is_available("brew")
        assert runner.is_available("pip")
