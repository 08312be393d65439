"""Base data source abstraction"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging
import shutil
import subprocess


class BaseSource(ABC):
    """Abstract base class for external device information sources"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the source

        Args:
            logger: Logger instance for output
        """
        self.logger = logger or logging.getLogger(__name__)

    @property
    @abstractmethod
    def cmd(self) -> str:
        """Get the command this source runs

        Returns:
            str: Command name (e.g., 'udevadm', 'multipath')
        """
        pass

    def is_available(self) -> bool:
        """Check if the source command exists in the system PATH"""
        return shutil.which(self.cmd) is not None

    def _execute_command(self, args: List[str], decode_method: str = 'utf-8') -> str:
        """Execute the source command and return its output

        A failing or missing command yields an empty string; callers treat
        that as "no information" rather than an error.

        Args:
            args: Arguments passed to the command
            decode_method: Method to decode command output

        Returns:
            str: Command output as string
        """
        cmd = [self.cmd] + args
        self.logger.debug(f"Executing command: {' '.join(cmd)}")

        try:
            output_bytes = subprocess.check_output(cmd, stderr=subprocess.DEVNULL)
        except subprocess.CalledProcessError as e:
            self.logger.debug(f"Command {' '.join(cmd)} failed: {e}")
            return ""
        except OSError as e:
            self.logger.debug(f"Could not run {self.cmd}: {e}")
            return ""

        try:
            return output_bytes.decode(decode_method)
        except UnicodeDecodeError:
            self.logger.debug(f"{decode_method} decoding failed, falling back to latin-1")
            return output_bytes.decode('latin-1')
