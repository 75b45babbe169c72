"""
End-to-end tests for the provision use case, with every external tool faked.
"""

import json
from datetime import date

import pytest

from shellstrap.core.data.packages import PACKAGE_SETS
from shellstrap.core.data.resources import RESOURCE_TABLE
from shellstrap.core.models.platform import PlatformFamily
from shellstrap.core.services import shell_config
from shellstrap.core.services.platform_detect import PlatformInputs
from shellstrap.core.use_cases.provision import default_registry, run_provision

TODAY = date(2024, 3, 9)
UNKNOWN_INPUTS = PlatformInputs(ostype="msys", release_text="", kernel_name="MINGW64_NT")


@pytest.fixture
def unattended(make_settings):
    return make_settings(chsh=False, runzsh=False)


def _provision(settings, registry, inputs, **kwargs):
    return run_provision(settings, registry=registry, platform_inputs=inputs, today=TODAY, **kwargs)


# ── Scenarios ────────────────────────────────────────────────────────


class TestScenarios:
    def test_fresh_arch_home(self, unattended, registry, arch_inputs):
        result = _provision(unattended, registry, arch_inputs)

        assert result.profile.family is PlatformFamily.ARCH
        assert result.stage("packages").status == "ok"
        install = registry.get("pacapt").call_log[-1]
        assert install.params["packages"] == list(PACKAGE_SETS[PlatformFamily.ARCH])
        assert registry.get("brew").call_count == 0
        assert unattended.zshrc.exists()
        assert result.exit_code == 0

    def test_existing_zshrc(self, unattended, registry, arch_inputs):
        unattended.zshrc.write_text("# old rc\n")

        result = _provision(unattended, registry, arch_inputs)

        backup = unattended.home / ".zshrc_backup_2024-03-09"
        assert backup.read_text() == "# old rc\n"
        assert registry.get("git").call_log[0].params["dest"] == str(unattended.zsh_dir)
        assert result.exit_code == 0

    def test_dangling_zshrc_link(self, unattended, registry, arch_inputs):
        unattended.zshrc.symlink_to(unattended.home / "dotfiles" / "zshrc")

        result = _provision(unattended, registry, arch_inputs)

        assert result.aborted_stage is None
        assert result.stage("sync").status == "ok"
        assert not unattended.zshrc.is_symlink()
        assert result.exit_code == 0

    def test_unattended_exits_zero(self, unattended, registry, arch_inputs):
        result = _provision(unattended, registry, arch_inputs)

        assert result.switch.skipped
        assert result.handoff_shell is None
        assert result.exit_code == 0
        assert registry.get("shell").action_ids == ["sync:fzf:hook0", "sync:marker:hook0"]


# ── Ordering ─────────────────────────────────────────────────────────


class TestOrdering:
    def test_stage_order(self, unattended, registry, arch_inputs):
        seen = []
        result = _provision(unattended, registry, arch_inputs, on_stage=seen.append)

        assert seen == ["detect", "packages", "config", "sync", "switch"]
        assert [r.name for r in result.stages] == ["packages", "config", "sync", "switch"]

    def test_extras_before_switch(self, make_settings, registry, arch_inputs):
        seen = []
        settings = make_settings(chsh=False, runzsh=False, with_extras=True)
        _provision(settings, registry, arch_inputs, on_stage=seen.append)
        assert seen[-2:] == ["extras", "switch"]

    def test_framework_cloned_before_plugins(self, unattended, registry, arch_inputs):
        _provision(unattended, registry, arch_inputs)
        dests = [ctx.params["dest"] for ctx in registry.get("git").call_log]
        assert dests[0] == str(unattended.zsh_dir)
        assert len(dests) == 1 + len(RESOURCE_TABLE)

    def test_second_run_pulls(self, unattended, registry, arch_inputs):
        _provision(unattended, registry, arch_inputs)
        registry.get("git").reset()

        _provision(unattended, registry, arch_inputs)

        assert set(registry.get("git").operations()) == {"pull"}
        assert (unattended.home / ".zshrc_backup_2024-03-09").exists()


# ── Failures ─────────────────────────────────────────────────────────


class TestFailures:
    def test_unknown_platform(self, unattended, registry):
        result = _provision(unattended, registry, UNKNOWN_INPUTS)

        assert result.stage("packages").status == "skipped"
        assert result.stage("sync").status == "ok"
        assert result.switch is not None
        assert result.exit_code == 1
        assert result.handoff_shell is None

    def test_sync_failure_aborts(self, unattended, registry, arch_inputs):
        registry.get("git").set_failure("sync:k:clone", error="exit status 128")

        result = _provision(unattended, registry, arch_inputs)

        assert result.aborted_stage == "sync"
        assert "exit status 128" in result.error
        assert result.stages[-1].name == "sync"
        assert result.switch is None
        assert result.exit_code == 1

    def test_keep_going(self, make_settings, registry, arch_inputs):
        settings = make_settings(chsh=False, runzsh=False, keep_going=True)
        registry.get("git").set_failure("sync:k:clone")

        result = _provision(settings, registry, arch_inputs)

        assert result.aborted_stage is None
        assert result.stage("sync").status == "partial"
        assert result.exit_code == 0

    def test_package_failure_does_not_abort(self, unattended, registry, arch_inputs):
        registry.get("pacapt").set_failure("packages:install")

        result = _provision(unattended, registry, arch_inputs)

        assert result.stage("packages").failed == 1
        assert result.aborted_stage is None
        assert result.exit_code == 0


# ── Shell hand-off ───────────────────────────────────────────────────


class TestHandoff:
    def test_handoff_shell(self, make_settings, registry, arch_inputs, monkeypatch):
        monkeypatch.setattr(shell_config.shutil, "which", lambda name: "/bin/zsh")
        result = _provision(make_settings(), registry, arch_inputs)
        assert result.switch.success
        assert result.handoff_shell == "/bin/zsh"

    def test_zsh_missing(self, make_settings, registry, arch_inputs, monkeypatch):
        monkeypatch.setattr(shell_config.shutil, "which", lambda name: None)
        result = _provision(make_settings(), registry, arch_inputs)
        assert result.exit_code == 1
        assert result.handoff_shell is None

    def test_chsh_only_needs_no_handoff(self, make_settings, registry, arch_inputs, monkeypatch):
        monkeypatch.setattr(shell_config.shutil, "which", lambda name: None)
        result = _provision(make_settings(runzsh=False), registry, arch_inputs)
        assert result.exit_code == 0


# ── Dry run / report ─────────────────────────────────────────────────


class TestDryRunAndReport:
    def test_dry_run_changes_nothing(self, make_settings, registry, arch_inputs):
        settings = make_settings(chsh=False, runzsh=False, dry_run=True)

        result = _provision(settings, registry, arch_inputs)

        assert list(settings.home.iterdir()) == []
        for name in ("shell", "git", "download", "pacapt", "brew", "pip"):
            assert registry.get(name).call_count == 0
        assert result.dry_run
        assert result.exit_code == 0

    def test_to_dict_is_json(self, unattended, registry, arch_inputs):
        data = _provision(unattended, registry, arch_inputs).to_dict()
        encoded = json.loads(json.dumps(data))
        assert encoded["platform"]["family"] == "linux-arch"
        assert [s["name"] for s in encoded["stages"]] == ["packages", "config", "sync", "switch"]
        assert encoded["switch"]["skipped"] is True

    def test_default_registry(self, settings):
        names = set(default_registry(settings).list_adapters())
        assert names == {"shell", "filesystem", "git", "download", "pacapt", "brew", "pip"}
