"""Device to vdev alias resolution"""

import logging
from typing import Optional

from .alias import AliasResolver
from .config import ConfigError, ConfigTable
from .mapper import ChannelSlotMapper
from .models import (
    DEFAULT_PHYS_PER_PORT,
    DEFAULT_SLOT,
    DEFAULT_TOPOLOGY,
    DeviceContext,
    TOPOLOGIES,
)
from .multipath import MultipathResolver
from .sources import MultipathSource, UdevSource
from .topology import TopologyWalker


class Resolver:
    """Resolves one device to its vdev alias

    It orchestrates the work of specialized components:
    - Literal aliases from the config file
    - Multipath component disk lookup
    - SAS topology walking
    - Channel and slot mapping
    """

    def __init__(self, config: ConfigTable, udev_source: Optional[UdevSource] = None,
                 multipath_source: Optional[MultipathSource] = None, sysfs_root: str = "/sys",
                 logger: Optional[logging.Logger] = None):
        """Initialize the resolver

        Args:
            config: Parsed configuration
            udev_source: Source for device paths
            multipath_source: Source for multipath maps
            sysfs_root: Mount point of sysfs
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.udev_source = udev_source or UdevSource(logger=self.logger)

        self.alias_resolver = AliasResolver(config, logger=self.logger)
        self.multipath_resolver = MultipathResolver(multipath_source, logger=self.logger)
        self.walker = TopologyWalker(sysfs_root, logger=self.logger)
        self.mapper = ChannelSlotMapper(config, logger=self.logger)

    def resolve(self, ctx: DeviceContext) -> Optional[str]:
        """Resolve a device to its alias

        Args:
            ctx: Device being resolved

        Returns:
            The alias (e.g., A4 or A4-part1), or None if nothing maps

        Raises:
            ConfigError: If the effective topology or phys_per_port is invalid
        """
        alias = self.alias_resolver.resolve(ctx)
        if alias:
            return alias

        return self._resolve_topology(ctx)

    def _resolve_topology(self, ctx: DeviceContext) -> Optional[str]:
        topology = self.effective_topology(ctx)
        if topology not in TOPOLOGIES:
            raise ConfigError(f"unknown topology {topology}")
        phys_per_port = self.effective_phys_per_port(ctx)

        dev = ctx.dev
        part = ""
        if self.effective_multipath(ctx):
            component = self.multipath_resolver.resolve_component(ctx)
            if component is None:
                return None
            dev, part = component

        sys_path = self._get_sys_path(dev)
        if not sys_path:
            return None

        location = self.walker.walk(sys_path, topology, self.effective_slot(), phys_per_port)
        if location is None:
            return None
        location.partition_suffix = part

        channel = self.mapper.map_channel(topology, location.pci_id, location.port)
        if not channel:
            return None

        slot = self.mapper.map_slot(location.raw_slot, channel)
        return f"{channel}{slot}{location.partition_suffix}"

    def _get_sys_path(self, dev: str) -> Optional[str]:
        """Get the sysfs device path for a kernel name or a /devices/ path"""
        if dev.startswith("/devices/"):
            return dev
        return self.udev_source.get_sys_path(dev)

    def effective_topology(self, ctx: DeviceContext) -> str:
        return ctx.topology or self.config.lookup_singleton("topology") or DEFAULT_TOPOLOGY

    def effective_multipath(self, ctx: DeviceContext) -> bool:
        if ctx.multipath:
            return True
        return self.config.lookup_singleton("multipath") == "yes"

    def effective_phys_per_port(self, ctx: DeviceContext) -> int:
        """Get the phys per port in effect

        Raises:
            ConfigError: If the configured value is not a positive integer
        """
        if ctx.phys_per_port:
            return ctx.phys_per_port
        value = self.config.lookup_singleton("phys_per_port")
        if value is None:
            return DEFAULT_PHYS_PER_PORT
        if not value.isdecimal() or int(value) == 0:
            raise ConfigError(f"phys_per_port value {value} is not a positive integer")
        return int(value)

    def effective_slot(self) -> str:
        return self.config.lookup_singleton("slot") or DEFAULT_SLOT
