"""Channel and slot mapping"""

import logging
from typing import Optional

from .config import ConfigTable


class ChannelSlotMapper:
    """Maps ports to channel names and Linux slots to physical bays"""

    def __init__(self, config: ConfigTable, logger: Optional[logging.Logger] = None):
        """Initialize the mapper

        Args:
            config: Parsed configuration
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def map_channel(self, topology: str, pci_id: Optional[str], port: int) -> Optional[str]:
        """Get the channel name for an HBA or switch port

        Args:
            topology: sas_direct or sas_switch
            pci_id: HBA PCI id, only consulted for sas_direct
            port: Port number

        Returns:
            Channel name if a channel record matches, None otherwise
        """
        channel = self.config.lookup_channel(topology, pci_id, port)
        if channel is None:
            self.logger.debug(f"No channel for {topology} pci_id={pci_id} port={port}")
        return channel

    def map_slot(self, linux_slot: int, channel: Optional[str]) -> str:
        """Get the physical slot for a Linux slot number

        Args:
            linux_slot: Slot number as reported by the kernel
            channel: Channel the slot belongs to

        Returns:
            The remapped slot, or the Linux slot when no record applies
        """
        mapped_slot = self.config.lookup_slot_remap(linux_slot, channel)
        if mapped_slot is None:
            mapped_slot = linux_slot
        else:
            self.logger.debug(f"Remapped slot {linux_slot} on channel {channel} to {mapped_slot}")

        return f"{int(mapped_slot):d}"
