"""
Filesystem adapter — copy, mkdir and chmod with receipts.

Used for backups of existing config targets and for installing the
bundled run-control template, so those effects show up in the run
report and honour ``--dry-run`` like every other action.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {"copy", "mkdir", "chmod"}


class FilesystemAdapter(Adapter):
    """Local file and directory operations.

    Action params:
        operation (str): One of 'copy', 'mkdir', 'chmod'.
        path (str): Target path (destination for 'copy').
        source (str): Source path (for 'copy').
        mode (int): Permission bits (for 'chmod').

    ``copy`` is recursive for directories and replaces whatever already
    sits at the destination; it never touches the source.
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"

        if not context.params.get("path"):
            return False, "Missing required param: 'path'"

        if operation == "copy" and not context.params.get("source"):
            return False, "Missing required param: 'source' for copy operation"
        if operation == "chmod" and not isinstance(context.params.get("mode"), int):
            return False, "Missing required param: 'mode' for chmod operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.params["operation"]
        target = Path(context.params["path"])

        try:
            if operation == "copy":
                return self._copy(context, Path(context.params["source"]), target)
            if operation == "mkdir":
                return self._mkdir(context, target)
            return self._chmod(context, target, context.params["mode"])
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    def _copy(self, ctx: ExecutionContext, source: Path, target: Path) -> Receipt:
        if not source.exists():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Source not found: {source}",
            )

        replaced = target.exists() or target.is_symlink()
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif replaced:
            target.unlink()

        target.parent.mkdir(parents=True, exist_ok=True)
        if source.is_dir():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target)

        logger.info("Copied %s → %s", source, target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Copied {source} → {target}",
            metadata={"source": str(source), "path": str(target), "replaced": replaced},
        )

    def _mkdir(self, ctx: ExecutionContext, target: Path) -> Receipt:
        target.mkdir(parents=True, exist_ok=True)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Directory ready: {target}",
            metadata={"path": str(target)},
        )

    def _chmod(self, ctx: ExecutionContext, target: Path, mode: int) -> Receipt:
        target.chmod(mode)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"chmod {mode:o} {target}",
            metadata={"path": str(target), "mode": mode},
        )
