"""
Optional extras: thefuck, zinit and prettyping.

Off unless ``--with-extras`` or ``SHELLSTRAP_EXTRAS=yes``. Everything
here follows the package-stage policy: failures are recorded and the
run continues.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from shellstrap.core.data.packages import EXTRAS_PIP_PACKAGES
from shellstrap.core.data.urls import GET_PIP_URL, PRETTYPING_URL, ZINIT_REMOTE
from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.resource import ManagedResource, ResourceKind
from shellstrap.core.models.settings import Settings
from shellstrap.core.services.repo_sync import sync_resource

logger = logging.getLogger(__name__)

STAGE_NAME = "extras"


def zinit_resource(settings: Settings) -> ManagedResource:
    return ManagedResource(
        name="zinit",
        remote_url=ZINIT_REMOTE,
        local_path=settings.home / ".zplugin" / "bin",
        kind=ResourceKind.TOOL,
        shallow=False,
    )


def ensure_pip(runner: ActionRunner) -> bool:
    """Bootstrap pip3 with get-pip.py if it is missing."""
    if runner.is_available("pip"):
        return True

    logger.warning("pip3 not found, installing it with get-pip.py")
    with tempfile.TemporaryDirectory(prefix="shellstrap-") as tmpdir:
        script = str(Path(tmpdir) / "get-pip.py")
        fetched = runner.run("get-pip", "download", name="Download get-pip.py",
                             critical=False, url=GET_PIP_URL, dest=script)
        if fetched.failed:
            return False
        installed = runner.run(
            "pip-bootstrap", "shell",
            name="Install pip3",
            critical=False,
            argv=["python3", script],
            sudo=True,
        )
    return not installed.failed


def install_extras(settings: Settings, runner: ActionRunner) -> StageReport:
    report = runner.report

    if ensure_pip(runner):
        runner.run("pip-install", "pip", name="pip3 install", critical=False,
                   operation="install", packages=list(EXTRAS_PIP_PACKAGES), sudo=True)
    else:
        logger.warning("Skipping %s, pip3 is unavailable", ", ".join(EXTRAS_PIP_PACKAGES))

    zinit = zinit_resource(settings)
    report.details["zinit"] = sync_resource(zinit, runner, critical=False)

    prettyping = settings.home / ".local" / "bin" / "prettyping"
    runner.run(
        "prettyping", "download",
        name="Download prettyping",
        critical=False,
        url=PRETTYPING_URL,
        dest=str(prettyping),
        mode=0o755,
    )
    report.details["prettyping"] = str(prettyping)
    return report
