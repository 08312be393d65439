"""Multipath component disk resolution"""

import logging
from typing import Optional, Tuple

from .models import DeviceContext, partition_suffix, strip_partition
from .sources import MultipathSource


class MultipathResolver:
    """Substitutes a multipath map with one of its running component disks"""

    def __init__(self, source: Optional[MultipathSource] = None, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.source = source or MultipathSource(logger=self.logger)

    def resolve_component(self, ctx: DeviceContext) -> Optional[Tuple[str, str]]:
        """Find the disk to walk in place of a multipath device

        Args:
            ctx: Device being resolved

        Returns:
            Tuple of (component device name, partition suffix), or None if
            the map has no running path
        """
        dm_name = ctx.dm_name or self.source.find_dm_name(ctx.dev)
        if not dm_name:
            self.logger.debug(f"{ctx.dev} is not a device-mapper device")
            return None

        part = ""
        if not ctx.is_partition:
            part = partition_suffix(dm_name)

        dm_name = strip_partition(dm_name)
        if not dm_name:
            return None

        paths = self.source.get_running_paths(dm_name)
        if not paths:
            self.logger.debug(f"No running path for multipath map {dm_name}")
            return None

        self.logger.debug(f"Using {paths[0]} for multipath map {dm_name}")
        return paths[0], part
