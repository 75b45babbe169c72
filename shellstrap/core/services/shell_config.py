"""
Shell configuration — back up, bootstrap and switch.

Two targets are managed: the ``.zshrc`` run-control file and the
framework root. A target that already exists is copied aside to
``<path>_backup_<YYYY-MM-DD>`` and left as it was. A missing target gets
the bundled template (if it has one) and the framework is cloned.

``switch_shell`` is the last step of a run: change the login shell and
let an interactive zsh update the framework.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import date

from shellstrap.core.data import template_path
from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.resource import ShellConfigTarget, TargetKind
from shellstrap.core.models.settings import Settings

logger = logging.getLogger(__name__)

STAGE_NAME = "config"
SWITCH_STAGE_NAME = "switch"

BACKUP_DATE_FORMAT = "%Y-%m-%d"
FRAMEWORK_GIT_CONFIG = {"core.eol": "lf", "core.autocrlf": "false"}

SUDO_NOTICE = "Sudo access is needed to change default shell"
SUCCESS_MESSAGE = "Installation Successful, exit terminal and enter a new session"
FAILURE_MESSAGE = "Something is wrong"


def build_targets(settings: Settings) -> list[ShellConfigTarget]:
    """The run-control file first, then the framework root."""
    return [
        ShellConfigTarget(
            path=settings.zshrc,
            kind=TargetKind.FILE,
            template="zshrc",
            keep=settings.keep_zshrc,
        ),
        ShellConfigTarget(path=settings.zsh_dir, kind=TargetKind.DIRECTORY),
    ]


def ensure_framework(settings: Settings, runner: ActionRunner) -> bool:
    """Clone the framework into ``settings.zsh_dir`` unless it is there.

    Returns:
        True if a clone was attempted.
    """
    if settings.zsh_dir.exists():
        logger.debug("Framework already present at %s", settings.zsh_dir)
        return False

    logger.info("Cloning %s (%s) into %s", settings.remote, settings.branch, settings.zsh_dir)
    runner.run(
        "framework:clone", "git",
        name=f"Install {settings.repo}",
        operation="clone",
        url=settings.remote,
        dest=str(settings.zsh_dir),
        depth=1,
        branch=settings.branch,
        config=dict(FRAMEWORK_GIT_CONFIG),
    )
    return True


def install_shell_config(
    targets: list[ShellConfigTarget],
    settings: Settings,
    runner: ActionRunner,
    today: date,
) -> StageReport:
    """Back up existing targets, bootstrap missing ones.

    Existence is sampled once up front so a framework cloned while
    handling ``.zshrc`` is not immediately backed up again. A dangling
    symlink counts as missing; the template copy replaces the link.
    """
    stamp = today.strftime(BACKUP_DATE_FORMAT)
    present = {t.path: t.path.exists() for t in targets}
    outcomes: dict[str, str] = {}
    runner.report.details["targets"] = outcomes
    bootstrapped = False

    for target in targets:
        key = str(target.path)

        if target.keep:
            logger.info("Keeping %s as is", target.path)
            outcomes[key] = "kept"
            continue

        if present[target.path]:
            backup = target.backup_path(stamp)
            logger.info("%s found, backing up to %s", target.path, backup)
            runner.run(
                f"backup:{target.path.name}", "filesystem",
                name=f"Back up {target.path.name}",
                operation="copy",
                source=key,
                path=str(backup),
            )
            outcomes[key] = "backed_up"
            continue

        logger.info("%s not found", target.path)
        if target.template:
            runner.run(
                f"template:{target.path.name}", "filesystem",
                name=f"Install {target.path.name} template",
                operation="copy",
                source=str(template_path(target.template)),
                path=key,
            )
        if not bootstrapped:
            ensure_framework(settings, runner)
            bootstrapped = True
        outcomes[key] = "installed"

    return runner.report


@dataclass
class ShellSwitchOutcome:
    """Result of the final login-shell step."""

    zsh_path: str | None = None
    skipped: bool = False
    chsh_attempted: bool = False
    chsh_ok: bool = False
    update_attempted: bool = False
    update_ok: bool = False

    @property
    def success(self) -> bool:
        if self.skipped:
            return True
        if self.zsh_path is None:
            return False
        if self.chsh_attempted and not self.chsh_ok:
            return False
        if self.update_attempted and not self.update_ok:
            return False
        return True

    @property
    def message(self) -> str:
        return SUCCESS_MESSAGE if self.success else FAILURE_MESSAGE

    def to_dict(self) -> dict:
        return {
            "zsh_path": self.zsh_path,
            "skipped": self.skipped,
            "chsh_attempted": self.chsh_attempted,
            "chsh_ok": self.chsh_ok,
            "update_attempted": self.update_attempted,
            "update_ok": self.update_ok,
            "success": self.success,
            "message": self.message,
        }


def switch_shell(settings: Settings, runner: ActionRunner) -> ShellSwitchOutcome:
    """Make zsh the login shell and run ``omz update`` in it. Never aborts.

    A failed ``chsh`` skips the update. In dry-run, skipped actions
    count as success.
    """
    if settings.unattended:
        logger.info("Unattended run, leaving the login shell alone")
        runner.report.skipped_reason = "unattended"
        return ShellSwitchOutcome(skipped=True)

    outcome = ShellSwitchOutcome(zsh_path=shutil.which("zsh"))
    if outcome.zsh_path is None:
        logger.error("zsh not found on PATH")
        runner.report.skipped_reason = "zsh not found"
        return outcome

    if settings.chsh:
        logger.info(SUDO_NOTICE)
        outcome.chsh_attempted = True
        receipt = runner.run(
            "chsh", "shell",
            name="Change login shell",
            critical=False,
            argv=["chsh", "-s", outcome.zsh_path],
        )
        outcome.chsh_ok = not receipt.failed
        if not outcome.chsh_ok:
            return outcome

    if settings.runzsh:
        outcome.update_attempted = True
        receipt = runner.run(
            "omz-update", "shell",
            name="omz update",
            critical=False,
            argv=[outcome.zsh_path, "-i", "-c", "omz update"],
        )
        outcome.update_ok = not receipt.failed

    return outcome
