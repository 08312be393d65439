"""multipath data source"""

import os
from typing import List, Optional

from .base import BaseSource

# Tree-drawing characters multipath -ll prints in front of each path line
TREE_CHARS = " |`-+\\_"


class MultipathSource(BaseSource):
    """Queries device-mapper multipath maps"""

    def __init__(self, logger=None, mapper_dir: str = "/dev/mapper"):
        """Initialize MultipathSource

        Args:
            logger: Logger instance
            mapper_dir: Directory holding the device-mapper name links
        """
        super().__init__(logger)
        self.mapper_dir = mapper_dir

    @property
    def cmd(self) -> str:
        return "multipath"

    def find_dm_name(self, dev: str) -> Optional[str]:
        """Find the device-mapper name whose link points at a kernel device

        Args:
            dev: Kernel device name (e.g., dm-3)

        Returns:
            The map name (e.g., mpatha), or None if no link points at dev
        """
        try:
            names = sorted(os.listdir(self.mapper_dir))
        except OSError as e:
            self.logger.debug(f"Cannot list {self.mapper_dir}: {e}")
            return None

        for name in names:
            path = os.path.join(self.mapper_dir, name)
            if not os.path.islink(path):
                continue
            if os.path.basename(os.readlink(path)) == dev:
                return name

        return None

    def get_running_paths(self, dm_name: str) -> List[str]:
        """Get the component devices of a map that are in the running state

        Args:
            dm_name: Multipath map name

        Returns:
            Device names in the order multipath reports them
        """
        output = self._execute_command(["-ll", dm_name])
        return self._parse_running_paths(output)

    def _parse_running_paths(self, output: str) -> List[str]:
        """Parse multipath -ll output

        Path lines look like:
            | `- 0:0:0:0 sda 8:0   active ready running
        """
        paths = []

        for line in output.splitlines():
            if "running" not in line:
                continue

            fields = line.lstrip(TREE_CHARS).split()
            # fields: H:C:T:L, device, major:minor, states...
            if len(fields) < 2:
                continue
            paths.append(fields[1])

        return paths
