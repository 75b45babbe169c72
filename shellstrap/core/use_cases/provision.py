"""
Provision use case — the whole bootstrap, stage by stage.

    detect → packages → config → sync → [extras] → switch

The shell config stage runs before repository sync: plugins and themes
are cloned under the framework's ``custom/`` directory, so cloning them
first would create the framework root and the framework bootstrap
would be skipped.

A critical failure in config or sync stops the run (unless
``keep_going``); the remaining stages are not started and the result
carries the aborted stage name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from shellstrap.adapters.registry import AdapterRegistry
from shellstrap.core.data.resources import resolve_resources
from shellstrap.core.engine.executor import ActionRunner, StageAborted, StageReport
from shellstrap.core.models.platform import PlatformProfile
from shellstrap.core.models.settings import Settings
from shellstrap.core.services import extras, package_install, repo_sync, shell_config
from shellstrap.core.services.platform_detect import (
    PlatformInputs,
    detect_platform,
    gather_platform_inputs,
)
from shellstrap.core.services.shell_config import ShellSwitchOutcome

logger = logging.getLogger(__name__)

DETECT_STAGE = "detect"

StageCallback = Callable[[str], None]


@dataclass
class ProvisionResult:
    """Outcome of one provisioning run."""

    profile: PlatformProfile | None = None
    stages: list[StageReport] = field(default_factory=list)
    switch: ShellSwitchOutcome | None = None
    aborted_stage: str | None = None
    error: str | None = None
    dry_run: bool = False
    runzsh: bool = True

    def stage(self, name: str) -> StageReport | None:
        for report in self.stages:
            if report.name == name:
                return report
        return None

    @property
    def platform_supported(self) -> bool:
        return self.profile is not None and self.profile.supported

    @property
    def handoff_shell(self) -> str | None:
        """zsh binary to exec into after a clean run, if any."""
        if self.exit_code != 0 or not self.runzsh or self.switch is None:
            return None
        return self.switch.zsh_path

    @property
    def exit_code(self) -> int:
        if self.aborted_stage is not None or self.error:
            return 1
        if not self.platform_supported:
            return 1
        if self.runzsh and self.switch is not None and self.switch.zsh_path is None:
            return 1
        return 0

    def to_dict(self) -> dict:
        result: dict = {
            "exit_code": self.exit_code,
            "dry_run": self.dry_run,
            "stages": [r.to_dict() for r in self.stages],
        }
        if self.profile is not None:
            result["platform"] = self.profile.model_dump(mode="json")
        if self.switch is not None:
            result["switch"] = self.switch.to_dict()
        if self.aborted_stage:
            result["aborted_stage"] = self.aborted_stage
        if self.error:
            result["error"] = self.error
        return result


def default_registry(settings: Settings) -> AdapterRegistry:
    """Registry wired to the real tools on this host."""
    from shellstrap.adapters.net.download import DownloadAdapter
    from shellstrap.adapters.packages.brew import BrewAdapter
    from shellstrap.adapters.packages.pacapt import PacaptAdapter
    from shellstrap.adapters.packages.pip import PipAdapter
    from shellstrap.adapters.shell.command import ShellCommandAdapter
    from shellstrap.adapters.shell.filesystem import FilesystemAdapter
    from shellstrap.adapters.vcs.git import GitAdapter

    return AdapterRegistry([
        ShellCommandAdapter(),
        FilesystemAdapter(),
        GitAdapter(),
        DownloadAdapter(),
        PacaptAdapter(settings.shim_path),
        BrewAdapter(),
        PipAdapter(),
    ])


def run_provision(
    settings: Settings,
    registry: AdapterRegistry | None = None,
    platform_inputs: PlatformInputs | None = None,
    today: date | None = None,
    on_stage: StageCallback | None = None,
) -> ProvisionResult:
    """Run every stage in order and collect their reports.

    Args:
        settings: Resolved run configuration.
        registry: Adapter registry (default: real adapters).
        platform_inputs: Host facts for detection (default: read from host).
        today: Date used for backup names (default: today).
        on_stage: Called with each stage name before it starts.

    Returns:
        ProvisionResult; never raises for command failures.

    Raises:
        ConfigError: The resource table resolves to conflicting paths.
    """
    result = ProvisionResult(dry_run=settings.dry_run, runzsh=settings.runzsh)
    registry = registry or default_registry(settings)
    today = today or date.today()
    resources = resolve_resources(settings)

    def announce(name: str) -> None:
        logger.info("── %s ──", name)
        if on_stage is not None:
            on_stage(name)

    def runner_for(name: str) -> ActionRunner:
        report = StageReport(name=name)
        result.stages.append(report)
        return ActionRunner(
            registry,
            report,
            dry_run=settings.dry_run,
            keep_going=settings.keep_going,
        )

    # ── Detect ───────────────────────────────────────────────────
    announce(DETECT_STAGE)
    inputs = platform_inputs or gather_platform_inputs(settings)
    result.profile = detect_platform(inputs.ostype, inputs.release_text, inputs.kernel_name)
    logger.info("Detected platform: %s (%s)", result.profile.family.value, result.profile.matched_by)

    try:
        # ── Packages ─────────────────────────────────────────────
        announce(package_install.STAGE_NAME)
        package_install.install_packages(
            result.profile, settings, runner_for(package_install.STAGE_NAME),
        )

        # ── Shell config ─────────────────────────────────────────
        announce(shell_config.STAGE_NAME)
        shell_config.install_shell_config(
            shell_config.build_targets(settings),
            settings,
            runner_for(shell_config.STAGE_NAME),
            today,
        )

        # ── Repositories ─────────────────────────────────────────
        announce(repo_sync.STAGE_NAME)
        repo_sync.sync_resources(resources, runner_for(repo_sync.STAGE_NAME))

        # ── Extras ───────────────────────────────────────────────
        if settings.with_extras:
            announce(extras.STAGE_NAME)
            extras.install_extras(settings, runner_for(extras.STAGE_NAME))

    except StageAborted as e:
        logger.error("Stage '%s' aborted: %s", e.stage, e.receipt.error)
        result.aborted_stage = e.stage
        result.error = str(e)
        return result

    # ── Shell switch ─────────────────────────────────────────────
    announce(shell_config.SWITCH_STAGE_NAME)
    result.switch = shell_config.switch_shell(settings, runner_for(shell_config.SWITCH_STAGE_NAME))

    return result
