"""External device information sources"""

from .base import BaseSource
from .udev import UdevSource
from .multipath import MultipathSource

__all__ = ["BaseSource", "UdevSource", "MultipathSource"]
