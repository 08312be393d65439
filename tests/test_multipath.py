"""Unit tests for vdev_id.multipath and the multipath data source."""

import os
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vdev_id.models import DeviceContext
from vdev_id.multipath import MultipathResolver
from vdev_id.sources import MultipathSource


MULTIPATH_LL = """\
mpatha (35000c50015a8b0a1) dm-0 SEAGATE,ST4000NM0023
size=3.6T features='0' hwhandler='0' wp=rw
|-+- policy='service-time 0' prio=1 status=active
| `- 0:0:1:0 sdb 8:16 failed faulty offline
`-+- policy='service-time 0' prio=1 status=enabled
  `- 1:0:1:0 sdk 8:160 active ready running
  `- 1:0:2:0 sdm 8:192 active ready running
"""


# ---------------------------------------------------------------------------
# MultipathSource
# ---------------------------------------------------------------------------

class TestMultipathSource:
    def test_running_paths_in_report_order(self):
        source = MultipathSource()
        assert source._parse_running_paths(MULTIPATH_LL) == ["sdk", "sdm"]

    def test_leading_pipe_stripped(self):
        source = MultipathSource()
        output = "| `- 0:0:1:0 sdb 8:16 active ready running\n"
        assert source._parse_running_paths(output) == ["sdb"]

    def test_get_running_paths_runs_multipath(self):
        source = MultipathSource()
        with patch("subprocess.check_output", return_value=MULTIPATH_LL.encode()) as check_output:
            assert source.get_running_paths("mpatha") == ["sdk", "sdm"]
        assert check_output.call_args[0][0] == ["multipath", "-ll", "mpatha"]

    def test_failed_command_yields_no_paths(self):
        source = MultipathSource()
        error = subprocess.CalledProcessError(1, ["multipath"])
        with patch("subprocess.check_output", side_effect=error):
            assert source.get_running_paths("mpatha") == []

    def test_missing_command_yields_no_paths(self):
        source = MultipathSource()
        with patch("subprocess.check_output", side_effect=FileNotFoundError("multipath")):
            assert source.get_running_paths("mpatha") == []

    def test_find_dm_name(self, tmp_path: Path):
        mapper_dir = tmp_path / "mapper"
        mapper_dir.mkdir()
        (mapper_dir / "control").touch()
        os.symlink("../dm-0", mapper_dir / "mpatha")
        os.symlink("../dm-3", mapper_dir / "mpathap1")

        source = MultipathSource(mapper_dir=str(mapper_dir))
        assert source.find_dm_name("dm-3") == "mpathap1"
        assert source.find_dm_name("dm-9") is None

    def test_find_dm_name_without_mapper_dir(self, tmp_path: Path):
        source = MultipathSource(mapper_dir=str(tmp_path / "missing"))
        assert source.find_dm_name("dm-0") is None


# ---------------------------------------------------------------------------
# MultipathResolver
# ---------------------------------------------------------------------------

@pytest.fixture()
def source() -> MagicMock:
    source = MagicMock(spec=MultipathSource)
    source.get_running_paths.return_value = ["sdk", "sdm"]
    return source


class TestMultipathResolver:
    def test_first_running_component(self, source):
        resolver = MultipathResolver(source)
        ctx = DeviceContext(dev="dm-0", dm_name="mpatha")

        assert resolver.resolve_component(ctx) == ("sdk", "")
        source.get_running_paths.assert_called_once_with("mpatha")

    def test_partition_suffix_kept(self, source):
        resolver = MultipathResolver(source)
        ctx = DeviceContext(dev="dm-3", dm_name="mpathap1", dev_type="disk")

        assert resolver.resolve_component(ctx) == ("sdk", "-part1")
        source.get_running_paths.assert_called_once_with("mpatha")

    def test_partition_devtype_has_no_suffix(self, source):
        resolver = MultipathResolver(source)
        ctx = DeviceContext(dev="dm-3", dm_name="mpathap1", dev_type="partition")

        assert resolver.resolve_component(ctx) == ("sdk", "")

    def test_dm_name_looked_up_when_not_supplied(self, source):
        source.find_dm_name.return_value = "mpathb"
        resolver = MultipathResolver(source)

        assert resolver.resolve_component(DeviceContext(dev="dm-1")) == ("sdk", "")
        source.find_dm_name.assert_called_once_with("dm-1")
        source.get_running_paths.assert_called_once_with("mpathb")

    def test_not_a_dm_device(self, source):
        source.find_dm_name.return_value = None
        resolver = MultipathResolver(source)

        assert resolver.resolve_component(DeviceContext(dev="sda")) is None
        source.get_running_paths.assert_not_called()

    def test_name_empty_after_stripping(self, source):
        resolver = MultipathResolver(source)

        assert resolver.resolve_component(DeviceContext(dev="dm-1", dm_name="p1")) is None
        source.get_running_paths.assert_not_called()

    def test_no_running_component(self, source):
        source.get_running_paths.return_value = []
        resolver = MultipathResolver(source)

        assert resolver.resolve_component(DeviceContext(dev="dm-0", dm_name="mpatha")) is None
