"""vdev_id command line entry point"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import ConfigError, ConfigTable
from .models import DEFAULT_CONFIG, DEFAULT_PHYS_PER_PORT, DEFAULT_TOPOLOGY, DeviceContext
from .resolver import Resolver


def _positive_int(value: str) -> int:
    if not value.isdecimal() or int(value) == 0:
        raise argparse.ArgumentTypeError(f"phys_per_port value {value} is not a positive integer")
    return int(value)


class VdevId:
    """udev helper that prints ID_VDEV for a block device

    Example udev rule:

    ENV{DEVTYPE}=="disk", IMPORT{program}="vdev_id -d %k"
    """

    def __init__(self):
        """Initialize the VdevId instance"""
        # Options
        self.config_file = DEFAULT_CONFIG
        self.dev = None
        self.topology = None
        self.multipath = None
        self.phys_per_port = None
        self.verbose = False
        self.quiet = False

        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up the logger for the application"""
        logger = logging.getLogger("vdev_id")
        logger.setLevel(logging.INFO)

        # stdout is reserved for the udev properties
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(logging.INFO)

        formatter = logging.Formatter('[%(levelname)s] %(message)s')
        ch.setFormatter(formatter)

        logger.addHandler(ch)

        return logger

    def parse_arguments(self, argv: Optional[List[str]] = None) -> None:
        """Parse command line arguments"""
        parser = argparse.ArgumentParser(
            prog="vdev_id",
            description="Prints the by-vdev alias of a block device for udev."
        )

        parser.add_argument("-c", "--config", default=DEFAULT_CONFIG, metavar="CONFIG",
                            help=f"Alternate config file [default={DEFAULT_CONFIG}]")
        parser.add_argument("-d", "--device", metavar="DEVICE",
                            help="Base name of the device (e.g., sda)")
        parser.add_argument("-g", "--topology", metavar="TOPOLOGY",
                            help=f"Storage network topology, sas_direct or sas_switch "
                                 f"[default={DEFAULT_TOPOLOGY}]")
        parser.add_argument("-m", "--multipath", action="store_true",
                            help="Run in multipath mode")
        parser.add_argument("-p", "--phys-per-port", type=_positive_int, metavar="PHYS",
                            help=f"Number of phys per switch port [default={DEFAULT_PHYS_PER_PORT}]")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
        parser.add_argument("-q", "--quiet", action="store_true", help="Suppress INFO messages")

        args = parser.parse_args(argv)

        # Set instance variables
        self.config_file = args.config
        self.dev = args.device
        self.topology = args.topology
        self.multipath = True if args.multipath else None
        self.phys_per_port = args.phys_per_port
        self.verbose = args.verbose
        self.quiet = args.quiet

        # Configure logger
        if self.verbose:
            self.logger.setLevel(logging.DEBUG)
            for handler in self.logger.handlers:
                handler.setLevel(logging.DEBUG)
        elif self.quiet:
            self.logger.setLevel(logging.WARNING)
            for handler in self.logger.handlers:
                handler.setLevel(logging.WARNING)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Resolve the device and print its udev properties

        Returns:
            Process exit status
        """
        self.parse_arguments(argv)

        # No config means the feature is not in use
        if not (os.path.isfile(self.config_file) and os.access(self.config_file, os.R_OK)):
            self.logger.debug(f"Configuration file {self.config_file} not readable, nothing to do")
            return 0

        if not self.dev:
            self.logger.error("missing required option -d")
            return 1

        try:
            config = ConfigTable(self.config_file, logger=self.logger)
            ctx = DeviceContext.from_environ(
                self.dev,
                os.environ,
                topology=self.topology,
                phys_per_port=self.phys_per_port,
                multipath=self.multipath
            )
            vdev = Resolver(config, logger=self.logger).resolve(ctx)
        except ConfigError as e:
            self.logger.error(str(e))
            return 1

        if vdev:
            print(f"ID_VDEV={vdev}")
            print(f"ID_VDEV_PATH=disk/by-vdev/{vdev}")

        return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the vdev_id command line"""
    try:
        app = VdevId()
        sys.exit(app.run(argv))
    except KeyboardInterrupt:
        sys.exit(1)
    except Exception as e:
        logging.getLogger("vdev_id").exception(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
