"""
Managed resources and shell config targets.

A ManagedResource is an external git repository that must exist as a
working copy at ``local_path``. Whether that path exists on disk is the
only state used to choose between clone and pull.

A ShellConfigTarget is a file or directory in the user's home that the
installer backs up (when present) or bootstraps (when missing).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(str, Enum):
    PLUGIN = "plugin"
    THEME = "theme"
    TOOL = "tool"


class ManagedResource(BaseModel):
    """One plugin, theme or tool checkout.

    ``on_clone`` / ``on_update`` hold argv templates run after the
    checkout is created or fast-forwarded. ``{path}`` is replaced with
    ``local_path``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    remote_url: str
    local_path: Path
    kind: ResourceKind = ResourceKind.PLUGIN
    shallow: bool = True
    on_clone: tuple[tuple[str, ...], ...] = ()
    on_update: tuple[tuple[str, ...], ...] = ()

    def render(self, argv: tuple[str, ...]) -> list[str]:
        """Substitute ``{path}`` in a post-sync command template."""
        return [part.replace("{path}", str(self.local_path)) for part in argv]


class TargetKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class ShellConfigTarget(BaseModel):
    """A run-control file or framework directory under management."""

    model_config = ConfigDict(frozen=True)

    path: Path
    kind: TargetKind = TargetKind.FILE
    template: str | None = None     # bundled template name, see core/data/templates
    keep: bool = Field(default=False, description="Leave untouched, no backup.")

    def backup_path(self, stamp: str) -> Path:
        """Backup location: ``<path>_backup_<stamp>`` next to the target."""
        return self.path.with_name(f"{self.path.name}_backup_{stamp}")
