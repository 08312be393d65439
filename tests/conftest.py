"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path

import pytest

from vdev_id.models import TOPOLOGY_SAS_DIRECT, TOPOLOGY_SAS_SWITCH

SAS_DIRECT_PATH = (
    "/devices/pci0000:80/0000:80:03.0/0000:85:00.0/host0/port-0:1/"
    "end_device-0:1/target0:0:1/0:0:1:3/block/sdb"
)

SAS_SWITCH_PATH = (
    "/devices/pci0000:00/0000:00:02.0/0000:03:00.0/host1/port-1:0/"
    "expander-1:0/port-1:0:12/expander-1:1/port-1:1:4/end_device-1:1:4/"
    "target1:0:20/1:0:20:0/block/sdc"
)

PORT_DEPTH = {TOPOLOGY_SAS_DIRECT: 1, TOPOLOGY_SAS_SWITCH: 4}


@pytest.fixture()
def sysfs(tmp_path: Path) -> Path:
    """Provide an empty directory standing in for /sys."""
    root = tmp_path / "sys"
    root.mkdir()
    return root


@pytest.fixture()
def sas_device(sysfs: Path):
    """Build the sysfs entries the topology walker reads for a device path."""

    def build(sys_path: str = SAS_DIRECT_PATH, topology: str = TOPOLOGY_SAS_DIRECT,
              phy: int = 5, bay=1, phy_identifier=None) -> str:
        segments = [s for s in sys_path.split("/") if s]
        host_idx = next(i for i, s in enumerate(segments) if s.startswith("host"))
        port_idx = host_idx + PORT_DEPTH[topology]

        port_dir = sysfs.joinpath(*segments[:port_idx + 1])
        port_dir.mkdir(parents=True, exist_ok=True)
        if phy is not None:
            (port_dir / f"phy-{segments[port_idx].split('-', 1)[-1]}:{phy}").touch()

        end_idx = next(i for i, s in enumerate(segments) if s.startswith("end_device"))
        attr_dir = sysfs.joinpath(*segments[:end_idx + 1], "sas_device", segments[end_idx])
        attr_dir.mkdir(parents=True, exist_ok=True)
        if bay is not None:
            (attr_dir / "bay_identifier").write_text(f"{bay}\n")
        if phy_identifier is not None:
            (attr_dir / "phy_identifier").write_text(f"{phy_identifier}\n")

        return sys_path

    return build


@pytest.fixture()
def write_config(tmp_path: Path):
    """Write a vdev_id.conf and return its path."""

    def write(text: str, name: str = "vdev_id.conf") -> str:
        path = tmp_path / name
        path.write_text(text)
        return os.fspath(path)

    return write


@pytest.fixture()
def switch_path() -> str:
    return SAS_SWITCH_PATH
