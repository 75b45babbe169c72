"""
Repository sync — clone missing resources, fast-forward present ones.

The existence of ``local_path`` is the only state consulted: a second
run against the same home finds every directory and turns every clone
into a pull. Post-sync hooks (fzf's installer, marker's install.py) run
through the shell adapter right after their checkout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.resource import ManagedResource

logger = logging.getLogger(__name__)

STAGE_NAME = "sync"


def sync_resource(resource: ManagedResource, runner: ActionRunner, *, critical: bool = True) -> str:
    """Clone or pull one resource and run its hooks.

    Returns:
        ``"pulled"``, ``"cloned"`` or ``"failed"`` when a non-aborting failure occurred.

    Raises:
        StageAborted: via the runner, when fail-fast is on.
    """
    path = str(resource.local_path)

    if resource.local_path.is_dir():
        logger.info("Updating %s", resource.name)
        receipt = runner.run(
            f"{resource.name}:pull", "git",
            name=f"git pull {resource.name}",
            critical=critical,
            operation="pull",
            cwd=path,
        )
        hooks, verb, phase = resource.on_update, "pulled", "update"
    else:
        logger.info("Cloning %s", resource.name)
        params = {"operation": "clone", "url": resource.remote_url, "dest": path}
        if resource.shallow:
            params["depth"] = 1
        receipt = runner.run(f"{resource.name}:clone", "git", name=f"git clone {resource.name}",
                             critical=critical, **params)
        hooks, verb, phase = resource.on_clone, "cloned", "clone"

    if receipt.failed:
        return "failed"

    for index, argv in enumerate(hooks):
        runner.run(
            f"{resource.name}:hook{index}", "shell",
            name=f"{resource.name} post-{phase} hook",
            critical=critical,
            argv=resource.render(argv),
        )
    return verb


def sync_resources(resources: Iterable[ManagedResource], runner: ActionRunner) -> StageReport:
    """Bring every resource up to date, in table order."""
    outcomes: dict[str, str] = {}
    runner.report.details["resources"] = outcomes
    for resource in resources:
        outcomes[resource.name] = sync_resource(resource, runner)
    return runner.report
