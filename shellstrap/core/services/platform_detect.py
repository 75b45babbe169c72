"""
Platform detection — classify the host into a PlatformFamily.

``detect_platform`` is pure: it takes the OSTYPE string, the text of
the release files and the kernel name, and returns a PlatformProfile.
``gather_platform_inputs`` is the only part that looks at the host.

Linux classification runs in two passes. The strict pass walks an
ordered rule list where each rule needs a release line that starts
with a given key and contains a given marker (``ID=arch``,
``NAME="Ubuntu"``). If nothing matches, the fuzzy pass searches the
whole text for broader family aliases.
"""

from __future__ import annotations

import glob
import logging
import platform
import re
from pathlib import Path
from typing import NamedTuple

from shellstrap.core.models.platform import MatchSource, PlatformFamily, PlatformProfile
from shellstrap.core.models.settings import Settings

logger = logging.getLogger(__name__)


class ReleaseRule(NamedTuple):
    prefix: str          # line must start with this key
    needle: str          # and contain this substring
    family: PlatformFamily


_ARCH, _DEB, _RHEL = PlatformFamily.ARCH, PlatformFamily.DEBIAN, PlatformFamily.RHEL

# Priority order matters: the first matching rule wins.
STRICT_RULES: tuple[ReleaseRule, ...] = (
    ReleaseRule("NAME", "Manjaro", _ARCH),
    ReleaseRule("NAME", "Chakra", _ARCH),
    ReleaseRule("ID", "arch", _ARCH),
    ReleaseRule("ID_LIKE", "arch", _ARCH),
    ReleaseRule("NAME", "Ubuntu", _DEB),
    ReleaseRule("NAME", "Debian", _DEB),
    ReleaseRule("NAME", "Mint", _DEB),
    ReleaseRule("NAME", "Knoppix", _DEB),
    ReleaseRule("ID_LIKE", "debian", _DEB),
    ReleaseRule("NAME", "CentOS", _RHEL),
    ReleaseRule("NAME", "Red", _RHEL),
    ReleaseRule("NAME", "Fedora", _RHEL),
    ReleaseRule("ID_LIKE", "rhel", _RHEL),
)

FUZZY_PATTERNS: tuple[tuple[re.Pattern[str], PlatformFamily], ...] = (
    (re.compile(r"arch|Manjaro|Chakra"), _ARCH),
    (re.compile(r"[Dd]ebian|[Uu]buntu|[Mm]int|[Kk]noppix"), _DEB),
    (re.compile(r"rhel|CentOS|RED|Fedora"), _RHEL),
)

# os-release keys kept as distribution markers
_MARKER_KEYS = ("NAME", "ID", "ID_LIKE", "VERSION_ID", "DISTRIB_ID")

# platform.system() → OSTYPE-style value, for when OSTYPE isn't exported
_SYSTEM_TO_OSTYPE = {
    "Linux": "linux-gnu",
    "Darwin": "darwin",
    "FreeBSD": "FreeBSD",
}


class PlatformInputs(NamedTuple):
    ostype: str
    release_text: str
    kernel_name: str


def parse_release_fields(release_text: str) -> dict[str, str]:
    """``KEY=value`` pairs from release text, quotes stripped.

    The first occurrence of a key wins, matching /etc/os-release
    being read before the other *release files.
    """
    fields: dict[str, str] = {}
    for raw in release_text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields.setdefault(key.strip(), value.strip().strip("'\""))
    return fields


def _markers(fields: dict[str, str]) -> frozenset[str]:
    markers: set[str] = set()
    for key in _MARKER_KEYS:
        value = fields.get(key)
        if value:
            markers.add(f"{key}={value}")
    return frozenset(markers)


def _match_strict(lines: list[str]) -> PlatformFamily | None:
    for rule in STRICT_RULES:
        for line in lines:
            if line.startswith(rule.prefix) and rule.needle in line:
                logger.debug("Strict match %s/%s on %r", rule.prefix, rule.needle, line)
                return rule.family
    return None


def _match_fuzzy(release_text: str) -> PlatformFamily | None:
    for pattern, family in FUZZY_PATTERNS:
        if pattern.search(release_text):
            logger.debug("Fuzzy match %s", pattern.pattern)
            return family
    return None


def detect_platform(ostype: str, release_text: str = "", kernel_name: str = "") -> PlatformProfile:
    """Classify the host. Pure function, no side effects.

    Args:
        ostype: OSTYPE-style string (``linux-gnu``, ``darwin23``, ``FreeBSD``).
        release_text: Concatenated contents of the release files (Linux).
        kernel_name: Kernel identification, e.g. the output of ``uname -a``.

    Returns:
        PlatformProfile; ``family`` is UNKNOWN when nothing matched.
    """
    fields = parse_release_fields(release_text)
    markers = _markers(fields)
    version_id = fields.get("VERSION_ID") or fields.get("DISTRIB_RELEASE")

    family: PlatformFamily | None = None
    matched_by: MatchSource = "none"

    if ostype.startswith("linux"):
        lines = [line.strip() for line in release_text.splitlines()]
        family = _match_strict(lines)
        if family is not None:
            matched_by = "strict"
        else:
            logger.warning("OS NOT DETECTED, try to flexible mode..")
            family = _match_fuzzy(release_text)
            if family is not None:
                matched_by = "fuzzy"
    elif ostype.startswith("darwin"):
        family, matched_by = PlatformFamily.MACOS, "ostype"
    elif ostype.startswith("FreeBSD"):
        family, matched_by = PlatformFamily.BSD, "ostype"
    elif "FreeBSD" in kernel_name:
        family, matched_by = PlatformFamily.BSD, "uname"

    profile = PlatformProfile(
        family=family or PlatformFamily.UNKNOWN,
        distribution_markers=markers,
        matched_by=matched_by if family else "none",
        version_id=version_id,
    )
    logger.info("Platform: %s (matched by %s)", profile.family.value, profile.matched_by)
    return profile


def read_release_text(pattern: str) -> str:
    """Concatenate every readable file matching ``pattern``.

    /etc/os-release sorts after /etc/lsb-release, so it is moved to the
    front to make its fields win in ``parse_release_fields``.
    """
    paths = sorted(glob.glob(pattern), key=lambda p: (Path(p).name != "os-release", p))
    chunks: list[str] = []
    for path in paths:
        try:
            chunks.append(Path(path).read_text(encoding="utf-8", errors="replace"))
        except OSError as e:
            logger.debug("Skipping unreadable release file %s: %s", path, e)
    return "\n".join(chunks)


def gather_platform_inputs(settings: Settings) -> PlatformInputs:
    """Read OSTYPE, release files and kernel name from the host."""
    system = platform.system()
    ostype = settings.ostype or _SYSTEM_TO_OSTYPE.get(system, system.lower())
    release_text = read_release_text(settings.release_glob) if ostype.startswith("linux") else ""
    kernel_name = " ".join(platform.uname())
    return PlatformInputs(ostype=ostype, release_text=release_text, kernel_name=kernel_name)
