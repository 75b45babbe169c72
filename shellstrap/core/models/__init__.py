"""
Domain models — pydantic types for the bootstrapper.

    from shellstrap.core.models import Settings, PlatformProfile, ManagedResource
"""

from shellstrap.core.models.action import Action, Receipt
from shellstrap.core.models.platform import PlatformFamily, PlatformProfile
from shellstrap.core.models.resource import (
    ManagedResource,
    ResourceKind,
    ShellConfigTarget,
    TargetKind,
)
from shellstrap.core.models.settings import Settings

__all__ = [
    # action.py
    "Action",
    # resource.py
    "ManagedResource",
    # platform.py
    "PlatformFamily",
    "PlatformProfile",
    "Receipt",
    "ResourceKind",
    # settings.py
    "Settings",
    "ShellConfigTarget",
    "TargetKind",
]
