"""Data models for vdev alias resolution"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


TOPOLOGY_SAS_DIRECT = "sas_direct"
TOPOLOGY_SAS_SWITCH = "sas_switch"
TOPOLOGIES = (TOPOLOGY_SAS_DIRECT, TOPOLOGY_SAS_SWITCH)

SLOT_BAY = "bay"
SLOT_PHY = "phy"
SLOT_ID = "id"
SLOT_LUN = "lun"
SLOT_SELECTORS = (SLOT_BAY, SLOT_PHY, SLOT_ID, SLOT_LUN)

DEFAULT_CONFIG = "/etc/zfs/vdev_id.conf"
DEFAULT_PHYS_PER_PORT = 4
DEFAULT_SLOT = SLOT_BAY
DEFAULT_TOPOLOGY = TOPOLOGY_SAS_DIRECT

# Matches whole-disk dm names ending in p<digits> as well; that ambiguity is
# inherent to the naming scheme.
PARTITION_RE = re.compile(r"p([0-9]+)$")


def partition_suffix(name: Optional[str]) -> str:
    """Return the "-partN" suffix encoded at the end of a dm name, or ""."""
    if not name:
        return ""
    match = PARTITION_RE.search(name)
    if not match:
        return ""
    return f"-part{match.group(1)}"


def strip_partition(name: str) -> str:
    """Remove a trailing p<digits> partition marker from a name"""
    return PARTITION_RE.sub("", name)


@dataclass(frozen=True)
class DeviceContext:
    """Everything a single resolution needs to know about the device"""

    dev: str                                 # Kernel name (sda) or /devices/... path
    dm_name: Optional[str] = None            # Device-mapper name from udev
    dev_type: str = "disk"                   # disk or partition
    dev_links: Tuple[str, ...] = ()          # Links udev already created

    # Caller overrides, take precedence over the config file
    topology: Optional[str] = None
    phys_per_port: Optional[int] = None
    multipath: Optional[bool] = None

    @property
    def is_partition(self) -> bool:
        return self.dev_type == "partition"

    @classmethod
    def from_environ(cls, dev: str, environ: Mapping[str, str], **overrides) -> "DeviceContext":
        """Create DeviceContext from the environment udev passes to helpers"""
        return cls(
            dev=dev,
            dm_name=environ.get("DM_NAME") or None,
            dev_type=environ.get("DEVTYPE") or "disk",
            dev_links=tuple(environ.get("DEVLINKS", "").split()),
            **overrides
        )


@dataclass
class ResolvedLocation:
    """Physical location recovered from the sysfs topology"""

    pci_id: str                      # HBA PCI function (e.g., 85:00.0)
    port: int                        # HBA or switch port number
    phy: int                         # Phy number the port was derived from
    raw_slot: int                    # Slot as reported by the kernel
    partition_suffix: str = ""       # -partN for dm partitions

    def to_dict(self) -> dict:
        """Convert location to dictionary representation"""
        return {
            "pci_id": self.pci_id,
            "port": self.port,
            "phy": self.phy,
            "raw_slot": self.raw_slot,
            "partition_suffix": self.partition_suffix
        }


@dataclass
class ChannelRule:
    """A "channel" record from the config file"""

    port: int                        # HBA port or switch port
    name: str                        # Channel name (e.g., A)
    pci_id: Optional[str] = None     # None for sas_switch records

    def matches(self, topology: str, pci_id: Optional[str], port: int) -> bool:
        if topology == TOPOLOGY_SAS_SWITCH:
            return self.pci_id is None and self.port == port
        if topology == TOPOLOGY_SAS_DIRECT:
            return self.pci_id is not None and self.pci_id == pci_id and self.port == port
        return False


@dataclass
class SlotRule:
    """A "slot" remap record from the config file"""

    linux_slot: int                  # Slot number reported by Linux
    mapped_slot: int                 # Physical bay number
    channel: Optional[str] = None    # None applies to every channel


@dataclass
class AliasRule:
    """An "alias" record from the config file"""

    name: str                        # Alias to emit
    link: str                        # Device link name to match

