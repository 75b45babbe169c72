"""
Static data shipped with the package: package lists, managed resource
table, download URLs and the bundled run-control template.

Templates live in ``shellstrap/core/data/templates/`` and are read on
demand; nothing here touches the network or the user's home.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent
TEMPLATES_DIR = _DATA_DIR / "templates"


def template_path(name: str) -> Path:
    """Absolute path of a bundled template.

    Raises:
        FileNotFoundError: No template with that name is bundled.
    """
    path = TEMPLATES_DIR / name
    if not path.is_file():
        raise FileNotFoundError(f"Bundled template not found: {name}")
    logger.debug("Resolved template %s → %s", name, path)
    return path
