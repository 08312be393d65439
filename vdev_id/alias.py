"""Literal alias lookup"""

import logging
import os
from typing import Optional

from .config import ConfigTable
from .models import DeviceContext, partition_suffix, strip_partition


class AliasResolver:
    """Resolves devices through "alias" records in the config file"""

    def __init__(self, config: ConfigTable, logger: Optional[logging.Logger] = None):
        """Initialize alias resolver

        Args:
            config: Parsed configuration
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, ctx: DeviceContext) -> Optional[str]:
        """Find the alias for a device from the links udev already created

        udev reports DEVTYPE=disk for partitions of device-mapper devices, so
        their -partN suffix is derived from the dm name and the links are
        matched against the parent device's alias. Plain block device
        partitions get their suffix from the udev rules instead.

        Args:
            ctx: Device being resolved

        Returns:
            The alias, or None if no link has one
        """
        dm_part = ""
        if not ctx.is_partition:
            dm_part = partition_suffix(ctx.dm_name)

        for link in ctx.dev_links:
            if dm_part:
                link = strip_partition(link)

            # Fully qualified name first, then the base name
            for candidate in (link, os.path.basename(link)):
                alias = self.config.lookup_alias(candidate)
                if alias:
                    self.logger.debug(f"Link {candidate} has alias {alias}")
                    return f"{alias}{dm_part}"

        return None
