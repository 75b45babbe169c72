"""
Platform models — what kind of host are we provisioning?

The detector produces exactly one PlatformProfile per run. Everything
downstream branches on ``profile.family`` and never re-reads release
files or OSTYPE.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PlatformFamily(str, Enum):
    """Closed set of host families the installer knows about."""

    ARCH = "linux-arch"
    DEBIAN = "linux-debian"
    RHEL = "linux-rhel"
    MACOS = "macos"
    BSD = "bsd"
    UNKNOWN = "unknown"


MatchSource = Literal["strict", "fuzzy", "ostype", "uname", "none"]


class PlatformProfile(BaseModel):
    """Result of platform detection. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    family: PlatformFamily = PlatformFamily.UNKNOWN
    distribution_markers: frozenset[str] = Field(default_factory=frozenset)
    matched_by: MatchSource = "none"
    version_id: str | None = None   # VERSION_ID from os-release, if any

    @property
    def supported(self) -> bool:
        """Whether a package path exists for this host."""
        return self.family is not PlatformFamily.UNKNOWN

    def has_marker(self, marker: str) -> bool:
        return marker in self.distribution_markers
