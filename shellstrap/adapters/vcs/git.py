"""
Git adapter — clone and fast-forward working copies.

Uses the git CLI. Output streams to the terminal so clone progress is
visible during long fetches.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.adapters.shell.command import guarded_run
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {"clone", "pull"}


class GitAdapter(Adapter):
    """Version-control operations for managed resources.

    Action params:
        operation (str): 'clone' or 'pull'.
        url (str): Remote URL (for 'clone').
        dest (str): Destination directory (for 'clone').
        depth (int): Shallow clone depth (for 'clone', default: full).
        branch (str): Branch to check out (for 'clone').
        config (dict[str, str]): ``-c key=value`` settings (for 'clone').
        cwd (str): Working copy to update (for 'pull').
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"

        if operation == "clone":
            if not context.params.get("url"):
                return False, "Missing required param: 'url' for clone"
            if not context.params.get("dest"):
                return False, "Missing required param: 'dest' for clone"
        else:
            cwd = context.working_dir
            if not cwd:
                return False, "Missing required param: 'cwd' for pull"
            if not Path(cwd).is_dir():
                return False, f"Working copy does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        if context.params["operation"] == "clone":
            argv = self.clone_argv(context.params)
            return guarded_run(self.name, context.action.id, argv)

        return guarded_run(
            self.name,
            context.action.id,
            ["git", "pull", "--ff-only"],
            cwd=context.working_dir,
        )

    @staticmethod
    def clone_argv(params: dict) -> list[str]:
        """Build the ``git clone`` command line for an action."""
        argv = ["git"]
        for key, value in (params.get("config") or {}).items():
            argv += ["-c", f"{key}={value}"]
        argv.append("clone")
        if params.get("depth"):
            argv.append(f"--depth={int(params['depth'])}")
        if params.get("branch"):
            argv += ["--branch", str(params["branch"])]
        argv += [str(params["url"]), str(params["dest"])]
        return argv
