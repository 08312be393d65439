"""Unit tests for vdev_id.topology."""

import pytest

from vdev_id.topology import TopologyWalker


@pytest.fixture()
def walker(sysfs) -> TopologyWalker:
    return TopologyWalker(str(sysfs))


class TestSasDirect:
    def test_bay_identifier(self, walker, sas_device):
        path = sas_device(phy=5, bay=1)
        location = walker.walk(path, "sas_direct", "bay", 4)

        assert location.pci_id == "85:00.0"
        assert location.phy == 5
        assert location.port == 1
        assert location.raw_slot == 1
        assert location.partition_suffix == ""

    def test_phys_per_port_divides_phy(self, walker, sas_device):
        path = sas_device(phy=5)
        assert walker.walk(path, "sas_direct", "bay", 2).port == 2

    def test_phy_identifier(self, walker, sas_device):
        path = sas_device(bay=None, phy_identifier=11)
        assert walker.walk(path, "sas_direct", "phy", 4).raw_slot == 11

    def test_id_takes_target_segment(self, walker, sas_device):
        path = sas_device()
        # target0:0:1
        assert walker.walk(path, "sas_direct", "id", 4).raw_slot == 1

    def test_lun_takes_lun_segment(self, walker, sas_device):
        path = sas_device()
        # 0:0:1:3
        assert walker.walk(path, "sas_direct", "lun", 4).raw_slot == 3

    def test_accepts_segment_list(self, walker, sas_device):
        path = sas_device()
        segments = [s for s in path.split("/") if s]
        assert walker.walk(segments, "sas_direct", "bay", 4).raw_slot == 1


class TestSasSwitch:
    def test_port_from_switch_phy(self, walker, sas_device, switch_path):
        path = sas_device(switch_path, "sas_switch", phy=12, bay=20)
        location = walker.walk(path, "sas_switch", "bay", 4)

        assert location.pci_id == "03:00.0"
        assert location.port == 3
        assert location.raw_slot == 20


class TestMisses:
    def test_virtual_device_has_no_host(self, walker):
        assert walker.walk("/devices/virtual/block/loop0", "sas_direct", "bay", 4) is None

    def test_host_as_last_segment(self, walker):
        assert walker.walk("/devices/pci0000:80/0000:85:00.0/host0", "sas_direct", "bay", 4) is None

    def test_missing_phy_entry(self, walker, sas_device):
        path = sas_device(phy=None)
        assert walker.walk(path, "sas_direct", "bay", 4) is None

    def test_missing_end_device(self, walker, sysfs):
        path = "/devices/pci0000:80/0000:85:00.0/host0/port-0:1/target0:0:1/0:0:1:0/block/sdb"
        port_dir = sysfs / "devices/pci0000:80/0000:85:00.0/host0/port-0:1"
        port_dir.mkdir(parents=True)
        (port_dir / "phy-0:4").touch()
        assert walker.walk(path, "sas_direct", "bay", 4) is None

    def test_missing_bay_identifier(self, walker, sas_device):
        path = sas_device(bay=None)
        assert walker.walk(path, "sas_direct", "bay", 4) is None

    def test_non_numeric_slot(self, walker, sas_device):
        path = sas_device(bay="unknown")
        assert walker.walk(path, "sas_direct", "bay", 4) is None

    def test_superscript_slot(self, walker, sas_device):
        path = sas_device(bay="\u00b2")
        assert walker.walk(path, "sas_direct", "bay", 4) is None

    def test_switch_walk_on_direct_path(self, walker, sas_device):
        path = sas_device()
        # four levels below host0 is a LUN directory without phys
        assert walker.walk(path, "sas_switch", "bay", 4) is None
