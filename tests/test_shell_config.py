"""
Tests for the shell config stage and the final login-shell switch.
"""

from datetime import date
from pathlib import Path

import pytest

from shellstrap.core.data import template_path
from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.resource import TargetKind
from shellstrap.core.services import shell_config
from shellstrap.core.services.shell_config import (
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    build_targets,
    ensure_framework,
    install_shell_config,
    switch_shell,
)

TODAY = date(2024, 3, 9)


def _install(settings, make_runner, **runner_kwargs):
    runner = make_runner("config", **runner_kwargs)
    return install_shell_config(build_targets(settings), settings, runner, TODAY)


@pytest.fixture
def zsh_on_path(monkeypatch) -> str:
    monkeypatch.setattr(shell_config.shutil, "which", lambda name: "/usr/bin/zsh")
    return "/usr/bin/zsh"


# ── Targets ──────────────────────────────────────────────────────────


class TestTargets:
    def test_order_and_kinds(self, settings):
        zshrc, framework = build_targets(settings)
        assert zshrc.path == settings.home / ".zshrc"
        assert zshrc.kind is TargetKind.FILE
        assert zshrc.template == "zshrc"
        assert framework.path == settings.zsh_dir
        assert framework.kind is TargetKind.DIRECTORY
        assert framework.template is None

    def test_keep_flag(self, make_settings):
        zshrc, framework = build_targets(make_settings(keep_zshrc=True))
        assert zshrc.keep
        assert not framework.keep

    def test_backup_path(self, settings):
        zshrc, _ = build_targets(settings)
        assert zshrc.backup_path("2024-03-09") == settings.home / ".zshrc_backup_2024-03-09"

    def test_template_is_bundled(self):
        assert "oh-my-zsh.sh" in template_path("zshrc").read_text()

    def test_missing_template(self):
        with pytest.raises(FileNotFoundError):
            template_path("no-such-template")


# ── Backup ───────────────────────────────────────────────────────────


class TestBackup:
    def test_existing_zshrc_backed_up_and_framework_bootstrapped(self, settings, registry, make_runner):
        original = b"# mine\nalias ll='ls -l'\n"
        settings.zshrc.write_bytes(original)

        report = _install(settings, make_runner)

        backup = settings.home / ".zshrc_backup_2024-03-09"
        assert backup.read_bytes() == original
        assert settings.zshrc.read_bytes() == original
        assert report.details["targets"][str(settings.zshrc)] == "backed_up"

        clone = registry.get("git").call_log[0]
        assert clone.params["url"] == settings.remote
        assert clone.params["dest"] == str(settings.zsh_dir)
        assert clone.params["branch"] == "master"
        assert clone.params["depth"] == 1
        assert clone.params["config"] == {"core.eol": "lf", "core.autocrlf": "false"}

    def test_same_day_backup_overwritten(self, settings, make_runner):
        settings.zshrc.write_text("second\n")
        backup = settings.home / ".zshrc_backup_2024-03-09"
        backup.write_text("first\n")

        _install(settings, make_runner)

        assert backup.read_text() == "second\n"

    def test_existing_framework_backed_up_recursively(self, settings, registry, make_runner):
        (settings.zsh_dir / "custom").mkdir(parents=True)
        (settings.zsh_dir / "oh-my-zsh.sh").write_text("# framework\n")
        (settings.zsh_dir / "custom" / "my.zsh").write_text("# custom\n")
        settings.zshrc.write_text("# rc\n")

        _install(settings, make_runner)

        backup = settings.home / ".oh-my-zsh_backup_2024-03-09"
        assert (backup / "oh-my-zsh.sh").read_text() == "# framework\n"
        assert (backup / "custom" / "my.zsh").read_text() == "# custom\n"
        assert (settings.zsh_dir / "oh-my-zsh.sh").exists()
        assert registry.get("git").call_count == 0

    def test_keep_zshrc(self, make_settings, registry, make_runner):
        settings = make_settings(keep_zshrc=True)
        settings.zshrc.write_text("# keep me\n")

        report = _install(settings, make_runner)

        assert not (settings.home / ".zshrc_backup_2024-03-09").exists()
        assert settings.zshrc.read_text() == "# keep me\n"
        assert report.details["targets"][str(settings.zshrc)] == "kept"


# ── Bootstrap ────────────────────────────────────────────────────────


class TestBootstrap:
    def test_fresh_home(self, settings, registry, make_runner):
        report = _install(settings, make_runner)

        assert settings.zshrc.read_text() == template_path("zshrc").read_text()
        assert registry.get("git").call_count == 1
        # framework cloned while handling .zshrc is not backed up afterwards
        assert not (settings.home / ".oh-my-zsh_backup_2024-03-09").exists()
        assert set(report.details["targets"].values()) == {"installed"}

    def test_dangling_zshrc_link_gets_template(self, settings, registry, make_runner):
        settings.zshrc.symlink_to(settings.home / "dotfiles" / "zshrc")

        report = _install(settings, make_runner)

        assert not settings.zshrc.is_symlink()
        assert settings.zshrc.read_text() == template_path("zshrc").read_text()
        assert report.details["targets"][str(settings.zshrc)] == "installed"
        assert not (settings.home / ".zshrc_backup_2024-03-09").exists()
        assert registry.get("git").call_count == 1

    def test_ensure_framework_is_idempotent(self, settings, registry, make_runner):
        runner = make_runner("config")
        assert ensure_framework(settings, runner) is True
        assert ensure_framework(settings, runner) is False
        assert registry.get("git").call_count == 1

    def test_custom_remote_and_branch(self, make_settings, registry, make_runner):
        settings = make_settings(remote="https://example.com/fork.git", branch="dev")
        _install(settings, make_runner)
        clone = registry.get("git").call_log[0]
        assert clone.params["url"] == "https://example.com/fork.git"
        assert clone.params["branch"] == "dev"

    def test_dry_run_writes_nothing(self, settings, registry, make_runner):
        settings.zshrc.write_text("# rc\n")

        report = _install(settings, make_runner, dry_run=True)

        assert sorted(p.name for p in settings.home.iterdir()) == [".zshrc"]
        assert registry.get("git").call_count == 0
        assert all(r.status == "skipped" for r in report.receipts)


# ── Shell switch ─────────────────────────────────────────────────────


class TestSwitchShell:
    def _runner(self, registry) -> ActionRunner:
        return ActionRunner(registry, StageReport(name="switch"))

    def test_chsh_and_update(self, settings, registry, zsh_on_path):
        outcome = switch_shell(settings, self._runner(registry))

        argvs = [ctx.params["argv"] for ctx in registry.get("shell").call_log]
        assert argvs == [
            ["chsh", "-s", "/usr/bin/zsh"],
            ["/usr/bin/zsh", "-i", "-c", "omz update"],
        ]
        assert outcome.success
        assert outcome.message == SUCCESS_MESSAGE

    def test_skip_chsh(self, make_settings, registry, zsh_on_path):
        outcome = switch_shell(make_settings(chsh=False), self._runner(registry))
        assert registry.get("shell").call_log[0].params["argv"][-1] == "omz update"
        assert not outcome.chsh_attempted
        assert outcome.success

    def test_unattended(self, make_settings, registry, zsh_on_path):
        runner = self._runner(registry)
        outcome = switch_shell(make_settings(chsh=False, runzsh=False), runner)
        assert outcome.skipped
        assert outcome.success
        assert registry.get("shell").call_count == 0
        assert runner.report.status == "skipped"

    def test_chsh_failure_skips_update(self, settings, registry, zsh_on_path):
        registry.get("shell").set_failure("switch:chsh")
        outcome = switch_shell(settings, self._runner(registry))
        assert registry.get("shell").call_count == 1
        assert not outcome.success
        assert outcome.message == FAILURE_MESSAGE

    def test_zsh_missing(self, settings, registry, monkeypatch):
        monkeypatch.setattr(shell_config.shutil, "which", lambda name: None)
        outcome = switch_shell(settings, self._runner(registry))
        assert outcome.zsh_path is None
        assert outcome.message == FAILURE_MESSAGE
        assert registry.get("shell").call_count == 0

    def test_to_dict(self, settings, registry, zsh_on_path):
        data = switch_shell(settings, self._runner(registry)).to_dict()
        assert data["zsh_path"] == "/usr/bin/zsh"
        assert data["success"] is True
