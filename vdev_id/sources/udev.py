"""udevadm data source"""

from typing import Optional

from .base import BaseSource


class UdevSource(BaseSource):
    """Looks up kernel device paths through udevadm"""

    @property
    def cmd(self) -> str:
        return "udevadm"

    def get_sys_path(self, dev: str) -> Optional[str]:
        """Get the /devices/... path of a block device

        Args:
            dev: Kernel device name (e.g., sda)

        Returns:
            The device path relative to /sys, or None if udev doesn't know it
        """
        output = self._execute_command(["info", "-q", "path", "-p", f"/sys/block/{dev}"])
        sys_path = output.strip()
        if not sys_path:
            self.logger.debug(f"No sysfs path for {dev}")
            return None
        return sys_path
