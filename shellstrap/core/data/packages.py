"""
Package sets per platform family.

Every family the detector can produce has an entry. ``UNKNOWN`` maps to
an empty list, which the installer treats as "nothing to do".
"""

from __future__ import annotations

from shellstrap.core.models.platform import PlatformFamily, PlatformProfile

_BASE_PACKAGES: tuple[str, ...] = (
    "zsh",
    "git",
    "wget",
    "curl",
    "terminator",
    "bat",
    "exa",
    "tmux",
    "powerline",
)

PACKAGE_SETS: dict[PlatformFamily, tuple[str, ...]] = {
    PlatformFamily.ARCH: _BASE_PACKAGES,
    PlatformFamily.DEBIAN: _BASE_PACKAGES,
    PlatformFamily.RHEL: _BASE_PACKAGES,
    PlatformFamily.MACOS: _BASE_PACKAGES,
    PlatformFamily.BSD: _BASE_PACKAGES,
    PlatformFamily.UNKNOWN: (),
}

# Installed through pip3 after Homebrew on macOS.
MACOS_PIP_PACKAGES: tuple[str, ...] = ("powerline-status",)

# Installed through pip3 by the optional extras stage.
EXTRAS_PIP_PACKAGES: tuple[str, ...] = ("thefuck",)

# Ubuntu before 18.04 ships ack as "ack-grep".
_LEGACY_UBUNTU_RENAMES: dict[str, str] = {"ack": "ack-grep"}


def _ubuntu_major(profile: PlatformProfile) -> int | None:
    if not any("ubuntu" in m.lower() for m in profile.distribution_markers):
        return None
    if not profile.version_id:
        return None
    head = profile.version_id.split(".", 1)[0]
    return int(head) if head.isdigit() else None


def packages_for(profile: PlatformProfile) -> list[str]:
    """Ordered package names to install for ``profile``."""
    packages = list(PACKAGE_SETS[profile.family])
    major = _ubuntu_major(profile)
    if profile.family is PlatformFamily.DEBIAN and major is not None and major < 18:
        packages = [_LEGACY_UBUNTU_RENAMES.get(p, p) for p in packages]
    return packages
