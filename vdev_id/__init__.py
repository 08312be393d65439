"""
vdev_id - udev helper for ZFS by-vdev disk names

This module resolves a block device to a stable alias derived from its
physical SAS enclosure location (channel + slot) or from a literal alias
configured in vdev_id.conf.
"""

from .config import ConfigError, ConfigTable
from .models import DeviceContext, ResolvedLocation
from .resolver import Resolver

__version__ = "1.0.0"
__all__ = ["ConfigError", "ConfigTable", "DeviceContext", "ResolvedLocation", "Resolver"]
