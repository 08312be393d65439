"""Physical location discovery from the sysfs device path"""

import logging
import os
import re
from typing import List, Optional, Union

from .models import (
    ResolvedLocation,
    SLOT_BAY,
    SLOT_ID,
    SLOT_LUN,
    SLOT_PHY,
    TOPOLOGY_SAS_DIRECT,
    TOPOLOGY_SAS_SWITCH,
)

HOST_RE = re.compile(r"^host[0-9]+$")

# Directories below hostN holding the phy links that reveal the port
PORT_DEPTH = {
    TOPOLOGY_SAS_DIRECT: 1,
    TOPOLOGY_SAS_SWITCH: 4,
}


class TopologyWalker:
    """Walks a SAS device path to recover its HBA, port and slot

    A SAS disk's device path looks like:
        /devices/pci0000:80/0000:80:03.0/0000:85:00.0/host0/port-0:1/
            end_device-0:1/target0:0:1/0:0:1:0/block/sdb

    Devices without that structure (virtual disks, NVMe, loop) produce no
    location, which is not an error.
    """

    def __init__(self, sysfs_root: str = "/sys", logger: Optional[logging.Logger] = None):
        """Initialize the walker

        Args:
            sysfs_root: Mount point of sysfs
            logger: Logger instance
        """
        self.sysfs_root = sysfs_root
        self.logger = logger or logging.getLogger(__name__)

    def walk(self, sys_path: Union[str, List[str]], topology: str, slot_selector: str,
             phys_per_port: int) -> Optional[ResolvedLocation]:
        """Locate a device in the SAS topology

        Args:
            sys_path: Device path relative to sysfs, or its segments
            topology: sas_direct or sas_switch
            slot_selector: bay, phy, id or lun
            phys_per_port: Number of phys grouped into one port

        Returns:
            ResolvedLocation, or None if any part of the topology is missing
        """
        if isinstance(sys_path, str):
            segments = [s for s in sys_path.split("/") if s]
        else:
            segments = list(sys_path)
        num_segments = len(segments)

        # Find the hostN segment; it must not be the last one
        host_idx = None
        for i, segment in enumerate(segments[:-1]):
            if HOST_RE.match(segment):
                host_idx = i
                break

        if host_idx is None or host_idx == 0:
            self.logger.debug(f"No SCSI host in {'/'.join(segments)}")
            return None

        pci_id = self._pci_id(segments[host_idx - 1])

        port_idx = host_idx + PORT_DEPTH[topology]
        if port_idx >= num_segments:
            self.logger.debug(f"Path too short for {topology} port directory")
            return None
        port_dir = os.path.join(self.sysfs_root, *segments[:port_idx + 1])

        phy = self._first_phy(port_dir)
        if phy is None:
            self.logger.debug(f"No phy entry in {port_dir}")
            return None
        port = phy // phys_per_port

        end_idx = None
        for i in range(port_idx + 1, num_segments):
            if segments[i].startswith("end_device"):
                end_idx = i
                break

        if end_idx is None:
            self.logger.debug("No end_device in device path")
            return None

        end_device_dir = os.path.join(self.sysfs_root, *segments[:end_idx + 1],
                                      "sas_device", segments[end_idx])

        raw_slot = self._raw_slot(slot_selector, end_device_dir, segments, end_idx)
        if raw_slot is None:
            return None

        location = ResolvedLocation(pci_id=pci_id, port=port, phy=phy, raw_slot=raw_slot)
        self.logger.debug(f"Resolved location: {location.to_dict()}")
        return location

    def _pci_id(self, segment: str) -> str:
        """Get bus:device.function from a PCI segment (0000:85:00.0 -> 85:00.0)"""
        return ":".join(segment.split(":")[1:3])

    def _first_phy(self, port_dir: str) -> Optional[int]:
        """Get the phy number of the first phy* entry in a directory"""
        try:
            entries = sorted(os.listdir(port_dir))
        except OSError:
            return None

        for entry in entries:
            if entry.startswith("phy"):
                phy = entry.rsplit(":", 1)[-1]
                if phy.isdecimal():
                    return int(phy)
                return None

        return None

    def _raw_slot(self, slot_selector: str, end_device_dir: str,
                  segments: List[str], end_idx: int) -> Optional[int]:
        """Extract the kernel's slot number the way the selector asks"""
        if slot_selector == SLOT_BAY:
            value = self._read_attr(os.path.join(end_device_dir, "bay_identifier"))
        elif slot_selector == SLOT_PHY:
            value = self._read_attr(os.path.join(end_device_dir, "phy_identifier"))
        elif slot_selector in (SLOT_ID, SLOT_LUN):
            offset = 1 if slot_selector == SLOT_ID else 2
            if end_idx + offset >= len(segments):
                return None
            value = segments[end_idx + offset].rsplit(":", 1)[-1]
        else:
            self.logger.debug(f"Unknown slot selector {slot_selector}")
            return None

        if not value or not value.isdecimal():
            self.logger.debug(f"No usable {slot_selector} slot value")
            return None
        return int(value)

    def _read_attr(self, path: str) -> Optional[str]:
        try:
            with open(path, 'r') as f:
                return f.read().strip()
        except OSError:
            return None
