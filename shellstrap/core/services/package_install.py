"""
Package installation — map the detected platform onto a package manager.

Linux families and FreeBSD go through pacapt, a single-file shim that
speaks pacman syntax on every distribution. When pacapt isn't already
present it is downloaded, installed for the duration of the run, and
removed again at the end. macOS uses Homebrew (bootstrapped if
missing) plus pip3 for the one package brew doesn't carry.

Every action here is non-critical: a failed install is recorded in the
stage report and the run continues with repositories and config.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import assert_never

from shellstrap.core.data.packages import MACOS_PIP_PACKAGES, packages_for
from shellstrap.core.data.urls import HOMEBREW_INSTALL_URL, PACAPT_URL, PACMAN_LINK
from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.platform import PlatformFamily, PlatformProfile
from shellstrap.core.models.settings import Settings

logger = logging.getLogger(__name__)

STAGE_NAME = "packages"
UNSUPPORTED_MESSAGE = "OS NOT DETECTED, couldn't install packages."


@dataclass
class ShimState:
    """What this run did to provide pacapt."""

    installed_by_run: bool = False
    link_created: bool = False
    ready: bool = True


def ensure_shim(settings: Settings, runner: ActionRunner) -> ShimState:
    """Make pacapt available, installing it at ``settings.shim_path`` if needed."""
    if runner.is_available("pacapt"):
        logger.debug("pacapt already available")
        return ShimState()

    shim = str(settings.shim_path)
    logger.warning("Universal Package Manager(icy/pacapt) Download && Install(need sudo permission)")

    with tempfile.TemporaryDirectory(prefix="shellstrap-") as tmpdir:
        fetched = str(Path(tmpdir) / "pacapt")
        download = runner.run(
            "shim-download", "download",
            name="Download pacapt",
            critical=False,
            url=PACAPT_URL,
            dest=fetched,
        )
        if download.failed:
            return ShimState(ready=False)

        install = runner.run(
            "shim-install", "shell",
            name=f"Install pacapt to {shim}",
            critical=False,
            argv=["install", "-m", "0755", fetched, shim],
            sudo=True,
        )
    if install.failed:
        return ShimState(ready=False)

    state = ShimState(installed_by_run=True)
    link = Path(PACMAN_LINK)
    if not (link.exists() or link.is_symlink()):
        linked = runner.run(
            "shim-link", "shell",
            name=f"Link {PACMAN_LINK} → pacapt",
            critical=False,
            argv=["ln", "-s", shim, PACMAN_LINK],
            sudo=True,
        )
        state.link_created = linked.ok
    return state


def remove_shim(settings: Settings, runner: ActionRunner, state: ShimState) -> None:
    """Undo ``ensure_shim`` if it installed pacapt during this run."""
    if not state.installed_by_run:
        return
    targets = [str(settings.shim_path)]
    if state.link_created:
        targets.append(PACMAN_LINK)
    runner.run(
        "shim-remove", "shell",
        name="Remove temporary pacapt",
        critical=False,
        argv=["rm", "-f", *targets],
        sudo=True,
    )


def _install_with_pacapt(
    profile: PlatformProfile,
    packages: list[str],
    settings: Settings,
    runner: ActionRunner,
) -> None:
    shim = ensure_shim(settings, runner)
    runner.report.details["shim_installed_by_run"] = shim.installed_by_run
    if not shim.ready:
        runner.report.skipped_reason = "pacapt could not be installed"
        return

    runner.run("sync", "pacapt", name="Refresh package databases", critical=False,
               operation="sync", sudo=True)
    runner.run("install", "pacapt", name="Install packages", critical=False,
               operation="install", packages=packages,
               sudo=profile.family is not PlatformFamily.BSD)

    remove_shim(settings, runner, shim)


def _install_with_brew(packages: list[str], runner: ActionRunner) -> None:
    if not runner.is_available("brew"):
        logger.warning("Now, Install Brew.")
        with tempfile.TemporaryDirectory(prefix="shellstrap-") as tmpdir:
            script = str(Path(tmpdir) / "install.sh")
            fetched = runner.run(
                "brew-download", "download",
                name="Download Homebrew installer",
                critical=False,
                url=HOMEBREW_INSTALL_URL,
                dest=script,
            )
            if fetched.failed:
                runner.report.skipped_reason = "Homebrew could not be installed"
                return
            bootstrap = runner.run(
                "brew-bootstrap", "shell",
                name="Install Homebrew",
                critical=False,
                argv=["bash", script],
            )
        if bootstrap.failed:
            runner.report.skipped_reason = "Homebrew could not be installed"
            return
        runner.run("brew-prefix", "brew", name="Put Homebrew on PATH", critical=False,
                   operation="prefix")

    runner.run("brew-update", "brew", name="brew update", critical=False, operation="update")
    runner.run("brew-install", "brew", name="brew install", critical=False,
               operation="install", packages=packages)
    runner.run("pip-install", "pip", name="pip3 install", critical=False,
               operation="install", packages=list(MACOS_PIP_PACKAGES), sudo=True)


def install_packages(profile: PlatformProfile, settings: Settings, runner: ActionRunner) -> StageReport:
    """Install the package set for ``profile``.

    An unknown platform performs no actions and marks the stage skipped;
    it never raises.
    """
    report = runner.report
    packages = packages_for(profile)
    report.details.update({"family": profile.family.value, "packages": packages})

    match profile.family:
        case PlatformFamily.ARCH | PlatformFamily.DEBIAN | PlatformFamily.RHEL | PlatformFamily.BSD:
            _install_with_pacapt(profile, packages, settings, runner)
        case PlatformFamily.MACOS:
            _install_with_brew(packages, runner)
        case PlatformFamily.UNKNOWN:
            logger.info(UNSUPPORTED_MESSAGE)
            report.skipped_reason = UNSUPPORTED_MESSAGE
        case _:
            assert_never(profile.family)

    return report
