"""
WeDeploy CLI Base Command Classes

Abstract base classes for consistent command structure.
"""

from .base_command import BaseCommand
from .remote_command import RemoteCommand

__all__ = [
    "BaseCommand",
    "RemoteCommand",
]
