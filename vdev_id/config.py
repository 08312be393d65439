"""Configuration loading and lookups for vdev_id.conf"""

import os
import logging
from typing import Dict, List, Optional
import yaml

from .models import AliasRule, ChannelRule, SlotRule

SINGLETON_KEYS = ("topology", "multipath", "phys_per_port", "slot")


class ConfigError(Exception):
    """Raised for configuration mistakes that make every resolution fail"""


def _non_negative_int(value) -> Optional[int]:
    """Parse a config field as a non-negative integer, None if it isn't one"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    text = str(value)
    if not text.isdecimal():
        return None
    return int(text)


class ConfigTable:
    """Parsed vdev_id.conf with first-match-wins lookups

    The file is read once; every lookup afterwards is a pure query over the
    in-memory records, scanned in file order.
    """

    def __init__(self, config_file: Optional[str] = None, logger: Optional[logging.Logger] = None):
        """Initialize the table

        Args:
            config_file: Path to configuration file, nothing is loaded if None
            logger: Logger instance
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.logger = logger or logging.getLogger(__name__)

        self.singletons: Dict[str, str] = {}
        self.channels: List[ChannelRule] = []
        self.slots: List[SlotRule] = []
        self.aliases: List[AliasRule] = []

        if self.config_file:
            self.load()

    @classmethod
    def from_text(cls, text: str, logger: Optional[logging.Logger] = None) -> "ConfigTable":
        """Build a table from config file contents"""
        table = cls(logger=logger)
        table.parse_text(text)
        return table

    def load(self) -> None:
        """Load configuration from the text or YAML file

        Text configuration structure (one record per line):
        ```
        topology       sas_direct
        phys_per_port  4
        slot           bay
        #       PCI_ID   HBA PORT  CHANNEL NAME
        channel 85:00.0  1         A
        #       LINUX  MAPPED  CHANNEL
        slot    1      4
        alias   d1     wwn-0x5000c50015a8b0a1
        ```
        """
        self.logger.debug(f"Loading configuration from {self.config_file}")

        # Comments may carry bytes in any encoding
        with open(self.config_file, 'r', encoding='utf-8', errors='surrogateescape') as f:
            text = f.read()

        if self.config_file.endswith((".yaml", ".yml")):
            self.parse_yaml(text)
        else:
            self.parse_text(text)

        self.logger.debug(
            f"Loaded {len(self.channels)} channel, {len(self.slots)} slot "
            f"and {len(self.aliases)} alias records"
        )

    def parse_text(self, text: str) -> None:
        """Parse whitespace-delimited records"""
        for lineno, line in enumerate(text.splitlines(), 1):
            tokens = line.split()
            if not tokens or tokens[0].startswith("#"):
                continue
            self._add_record(tokens, lineno)

    def parse_yaml(self, text: str) -> None:
        """Parse the YAML rendition of the config

        ```yaml
        topology: sas_direct
        phys_per_port: 4
        channels:
          - {pci_id: "85:00.0", port: 1, name: A}
        slots:
          - {linux: 1, mapped: 4, channel: A}
        aliases:
          - {name: d1, link: wwn-0x5000c50015a8b0a1}
        ```
        """
        try:
            config = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML in configuration file: {e}")

        if config is None:
            return
        if not isinstance(config, dict):
            raise ConfigError("YAML configuration must be a mapping")

        for key in SINGLETON_KEYS:
            if key in config:
                value = config[key]
                # YAML reads yes/no as booleans
                if isinstance(value, bool):
                    value = "yes" if value else "no"
                self._add_record([key, str(value)], key)

        for index, entry in enumerate(self._yaml_section(config, "channels"), 1):
            if not isinstance(entry, dict):
                self.logger.warning(f"Skipping channels[{index}]: expected a mapping")
                continue
            location = f"channels[{index}]"
            if "pci_id" in entry:
                if not isinstance(entry["pci_id"], str):
                    self.logger.warning(f"Skipping {location}: pci_id must be a quoted string")
                    continue
                tokens = ["channel", entry["pci_id"], str(entry.get("port", "")), str(entry.get("name", ""))]
            else:
                tokens = ["channel", str(entry.get("port", "")), str(entry.get("name", ""))]
            self._add_record(tokens, location)

        for index, entry in enumerate(self._yaml_section(config, "slots"), 1):
            if not isinstance(entry, dict):
                self.logger.warning(f"Skipping slots[{index}]: expected a mapping")
                continue
            tokens = ["slot", str(entry.get("linux", "")), str(entry.get("mapped", ""))]
            if entry.get("channel") is not None:
                tokens.append(str(entry["channel"]))
            self._add_record(tokens, f"slots[{index}]")

        for index, entry in enumerate(self._yaml_section(config, "aliases"), 1):
            if not isinstance(entry, dict):
                self.logger.warning(f"Skipping aliases[{index}]: expected a mapping")
                continue
            self._add_record(["alias", str(entry.get("name", "")), str(entry.get("link", ""))],
                             f"aliases[{index}]")

    def _yaml_section(self, config: dict, key: str) -> list:
        """Get a list section of the YAML config, skipping it if it isn't a list"""
        section = config.get(key)
        if section is None:
            return []
        if not isinstance(section, list):
            self.logger.warning(f"Skipping {key}: expected a list")
            return []
        return section

    def _add_record(self, tokens: List[str], where) -> None:
        """Store one record; unknown kinds are ignored"""
        kind = tokens[0]
        args = tokens[1:]

        if kind == "slot" and len(args) == 1:
            self._add_singleton(kind, args[0])
        elif kind == "slot":
            if len(args) < 2:
                self.logger.warning(f"Skipping slot record at {where}: expected a selector or slot numbers")
                return
            self._add_slot_rule(args, where)
        elif kind == "channel":
            self._add_channel_rule(args, where)
        elif kind == "alias":
            if len(args) < 2:
                self.logger.warning(f"Skipping alias record at {where}: expected name and link")
                return
            self.aliases.append(AliasRule(name=args[0], link=args[1]))
        elif kind in SINGLETON_KEYS:
            if not args:
                self.logger.warning(f"Skipping {kind} record at {where}: missing value")
                return
            self._add_singleton(kind, args[0])
        else:
            self.logger.debug(f"Ignoring unknown record '{kind}' at {where}")

    def _add_singleton(self, key: str, value: str) -> None:
        if key in self.singletons:
            return

        self.singletons[key] = value

    def _add_channel_rule(self, args: List[str], where) -> None:
        if len(args) == 2:
            pci_id, port, name = None, args[0], args[1]
        elif len(args) >= 3:
            pci_id, port, name = args[0], args[1], args[2]
        else:
            self.logger.warning(f"Skipping channel record at {where}: expected 2 or 3 fields")
            return

        port_num = _non_negative_int(port)
        if port_num is None:
            self.logger.warning(f"Skipping channel record at {where}: port {port} is not a number")
            return

        self.channels.append(ChannelRule(port=port_num, name=name, pci_id=pci_id))

    def _add_slot_rule(self, args: List[str], where) -> None:
        linux_slot = _non_negative_int(args[0])
        mapped_slot = _non_negative_int(args[1])
        if linux_slot is None or mapped_slot is None:
            self.logger.warning(f"Skipping slot record at {where}: slot numbers must be non-negative integers")
            return

        channel = args[2] if len(args) > 2 else None
        self.slots.append(SlotRule(linux_slot=linux_slot, mapped_slot=mapped_slot, channel=channel))

    def lookup_singleton(self, key: str) -> Optional[str]:
        """Get the first value configured for a singleton directive"""
        return self.singletons.get(key)

    def lookup_channel(self, topology: str, pci_id: Optional[str], port: int) -> Optional[str]:
        """Get the channel name for a port

        sas_switch records match on the switch port alone, sas_direct records
        on the (pci_id, port) pair.
        """
        for rule in self.channels:
            if rule.matches(topology, pci_id, port):
                return rule.name
        return None

    def lookup_slot_remap(self, linux_slot: int, channel: Optional[str]) -> Optional[int]:
        """Get the physical slot for a Linux slot

        A record naming the channel wins over a wildcard record, regardless
        of which comes first in the file.
        """
        if channel is not None:
            for rule in self.slots:
                if rule.linux_slot == linux_slot and rule.channel == channel:
                    return rule.mapped_slot

        for rule in self.slots:
            if rule.linux_slot == linux_slot and rule.channel is None:
                return rule.mapped_slot

        return None

    def lookup_alias(self, link: str) -> Optional[str]:
        """Get the alias configured for a device link"""
        for rule in self.aliases:
            if rule.link == link:
                return rule.name
        return None
