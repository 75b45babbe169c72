"""
Tests for the repository synchronizer — clone vs pull, hooks, idempotence.
"""

import pytest

from shellstrap.core.config.loader import ConfigError
from shellstrap.core.data.resources import RESOURCE_TABLE, ResourceEntry, resolve_resources
from shellstrap.core.engine.executor import StageAborted
from shellstrap.core.models.resource import ManagedResource
from shellstrap.core.services.repo_sync import sync_resource, sync_resources

# ── Resource table ───────────────────────────────────────────────────


class TestResourceTable:
    def test_paths_are_unique(self, settings):
        resources = resolve_resources(settings)
        paths = [r.local_path for r in resources]
        assert len(paths) == len(set(paths)) == len(RESOURCE_TABLE)

    def test_roots(self, settings):
        by_name = {r.name: r for r in resolve_resources(settings)}
        assert by_name["zsh-autosuggestions"].local_path == settings.plugins_dir / "zsh-autosuggestions"
        assert by_name["powerlevel10k"].local_path == settings.themes_dir / "powerlevel10k"
        assert by_name["fzf"].local_path == settings.home / ".fzf"
        assert by_name["marker"].local_path == settings.home / ".marker"

    def test_custom_root_is_honoured(self, make_settings, tmp_path):
        settings = make_settings(zsh_custom=tmp_path / "custom")
        by_name = {r.name: r for r in resolve_resources(settings)}
        assert by_name["zsh-z"].local_path == tmp_path / "custom" / "plugins" / "zsh-z"

    def test_duplicate_paths_rejected(self, settings):
        table = (
            ResourceEntry("a", "https://example.com/a", "plugins", "same"),
            ResourceEntry("b", "https://example.com/b", "plugins", "same"),
        )
        with pytest.raises(ConfigError, match="both resolve"):
            resolve_resources(settings, table)

    def test_render_substitutes_path(self, tmp_path):
        resource = ManagedResource(name="x", remote_url="u", local_path=tmp_path / "x")
        assert resource.render(("{path}/install", "--all")) == [f"{tmp_path / 'x'}/install", "--all"]


# ── Clone / pull ─────────────────────────────────────────────────────


class TestSync:
    def test_first_run_clones_everything(self, settings, registry, make_runner):
        report = sync_resources(resolve_resources(settings), make_runner("sync"))

        git = registry.get("git")
        assert set(git.operations()) == {"clone"}
        assert git.call_count == len(RESOURCE_TABLE)
        assert set(report.details["resources"].values()) == {"cloned"}
        assert report.status == "ok"

    def test_second_run_only_pulls(self, settings, registry, make_runner):
        resources = resolve_resources(settings)
        sync_resources(resources, make_runner("sync"))
        registry.get("git").reset()

        report = sync_resources(resources, make_runner("sync"))

        assert set(registry.get("git").operations()) == {"pull"}
        assert set(report.details["resources"].values()) == {"pulled"}

    def test_shallow_flag(self, settings, registry, make_runner):
        sync_resources(resolve_resources(settings), make_runner("sync"))
        depths = {
            ctx.params["dest"].rsplit("/", 1)[-1]: ctx.params.get("depth")
            for ctx in registry.get("git").call_log
        }
        assert depths["zsh-autosuggestions"] == 1
        assert depths["zsh-completions"] is None
        assert depths["zsh-history-substring-search"] is None

    def test_fzf_hook_runs_on_clone_and_update(self, settings, registry, make_runner):
        fzf = next(r for r in resolve_resources(settings) if r.name == "fzf")
        shell = registry.get("shell")

        sync_resource(fzf, make_runner("sync"))
        sync_resource(fzf, make_runner("sync"))

        assert shell.call_count == 2
        for ctx in shell.call_log:
            assert ctx.params["argv"][0] == f"{settings.home}/.fzf/install"
            assert "--no-update-rc" in ctx.params["argv"]

    def test_marker_hook_runs_on_clone_only(self, settings, registry, make_runner):
        marker = next(r for r in resolve_resources(settings) if r.name == "marker")
        shell = registry.get("shell")

        assert sync_resource(marker, make_runner("sync")) == "cloned"
        assert shell.call_log[0].params["argv"] == [
            f"{settings.home}/.marker/install.py",
            str(settings.home / ".marker"),
        ]
        assert sync_resource(marker, make_runner("sync")) == "pulled"
        assert shell.call_count == 1


# ── Failure policy ───────────────────────────────────────────────────


class TestFailurePolicy:
    def test_fail_fast(self, settings, registry, make_runner):
        registry.get("git").set_failure("sync:zsh-syntax-highlighting:clone", error="network down")
        runner = make_runner("sync")

        with pytest.raises(StageAborted) as exc:
            sync_resources(resolve_resources(settings), runner)

        assert exc.value.stage == "sync"
        assert runner.report.aborted
        assert runner.report.status == "aborted"
        # stopped right after the failure
        assert registry.get("git").call_count == 2

    def test_keep_going(self, settings, registry, make_runner):
        registry.get("git").set_failure("sync:fzf:clone")
        runner = make_runner("sync", keep_going=True)

        report = sync_resources(resolve_resources(settings), runner)

        assert registry.get("git").call_count == len(RESOURCE_TABLE)
        assert report.details["resources"]["fzf"] == "failed"
        assert report.failed == 1
        assert report.status == "partial"
        # no install hook for a checkout that isn't there
        assert registry.get("shell").action_ids == ["sync:marker:hook0"]
