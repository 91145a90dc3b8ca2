"""
Configuration loader for ARP Discovery Module.
Handles loading and validation of the YAML configuration file with fallback to defaults.
"""

import yaml
from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional
from pathlib import Path

from ..utils.logger import Logger, get_logger


@dataclass
class DiscoveryConfig:
    """Configuration for the discovery engine."""
    max_connections: int = 64
    vendor_api: str = "http://api.macvendors.com/"
    resolve_vendor: bool = False
    max_hosts: int = 1024
    timeout_ms: int = 2500  # per-probe connect timeout
    port: int = 1
    flood_interval: int = 300  # seconds between floods
    restrict: Optional[str] = None
    arp_command: List[str] = field(default_factory=lambda: ["arp", "-a"])
    command_timeout: int = 10
    vendor_concurrency: int = 10
    vendor_timeout: int = 5
    monitor_interval_ms: int = 60000


class ConfigLoader:
    """
    Loads and validates the YAML configuration file for the discovery engine.
    Provides fallback to default configuration when the file is missing or invalid.
    """

    DEFAULT_CONFIG_FILE = "discovery_config.yml"

    def __init__(self, config_dir: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory relative to this file.
            logger: Logger instance
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent
        else:
            self.config_dir = Path(config_dir)

        self.logger = logger or get_logger(__name__)

    def load_discovery_config(self, config_file: str = DEFAULT_CONFIG_FILE) -> DiscoveryConfig:
        """
        Load discovery configuration from YAML file.

        Args:
            config_file: Name of the configuration file

        Returns:
            DiscoveryConfig object with loaded or default configuration
        """
        config_path = self.config_dir / config_file
        defaults = DiscoveryConfig()

        if not config_path.exists():
            self.logger.warning(f"Discovery config file not found at {config_path}. Using default configuration.")
            return defaults

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing discovery config file {config_path}: {e}")
            self.logger.warning("Using default discovery configuration.")
            return defaults
        except OSError as e:
            self.logger.error(f"Cannot read discovery config file {config_path}: {e}")
            self.logger.warning("Using default discovery configuration.")
            return defaults

        if not isinstance(config_data, dict) or not isinstance(config_data.get('discovery'), dict):
            self.logger.warning(f"Invalid discovery config structure in {config_path}. Using default configuration.")
            return defaults

        data = config_data['discovery']

        return DiscoveryConfig(
            max_connections=self._validate_positive_int(data.get('max_connections', defaults.max_connections), 'max_connections', defaults.max_connections),
            vendor_api=self._validate_url(data.get('vendor_api', defaults.vendor_api), defaults.vendor_api),
            resolve_vendor=self._validate_bool(data.get('resolve_vendor', defaults.resolve_vendor), 'resolve_vendor', defaults.resolve_vendor),
            max_hosts=self._validate_positive_int(data.get('max_hosts', defaults.max_hosts), 'max_hosts', defaults.max_hosts),
            timeout_ms=self._validate_positive_int(data.get('timeout_ms', defaults.timeout_ms), 'timeout_ms', defaults.timeout_ms),
            port=self._validate_port(data.get('port', defaults.port), defaults.port),
            flood_interval=self._validate_non_negative_int(data.get('flood_interval', defaults.flood_interval), 'flood_interval', defaults.flood_interval),
            restrict=data.get('restrict'),
            arp_command=self._validate_command(data.get('arp_command', defaults.arp_command), defaults.arp_command),
            command_timeout=self._validate_positive_int(data.get('command_timeout', defaults.command_timeout), 'command_timeout', defaults.command_timeout),
            vendor_concurrency=self._validate_positive_int(data.get('vendor_concurrency', defaults.vendor_concurrency), 'vendor_concurrency', defaults.vendor_concurrency),
            vendor_timeout=self._validate_positive_int(data.get('vendor_timeout', defaults.vendor_timeout), 'vendor_timeout', defaults.vendor_timeout),
            monitor_interval_ms=self._validate_positive_int(data.get('monitor_interval_ms', defaults.monitor_interval_ms), 'monitor_interval_ms', defaults.monitor_interval_ms),
        )

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        if isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_non_negative_int(self, value: Any, field_name: str, default: int) -> int:
        """Like _validate_positive_int but accepts 0 (flood on every cycle)."""
        if value == 0 and not isinstance(value, bool):
            return 0
        return self._validate_positive_int(value, field_name, default)

    def _validate_port(self, value: Any, default: int) -> int:
        port = self._validate_positive_int(value, 'port', default)
        if port > 65535:
            self.logger.warning(f"Invalid port: {value}. Must be 1-65535. Using default: {default}")
            return default
        return port

    def _validate_bool(self, value: Any, field_name: str, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        self.logger.warning(f"Invalid {field_name}: {value}. Must be true or false. Using default: {default}")
        return default

    def _validate_url(self, value: Any, default: str) -> str:
        if isinstance(value, str) and value.startswith(("http://", "https://")):
            return value
        self.logger.warning(f"Invalid vendor_api: {value}. Must be an http(s) URL. Using default: {default}")
        return default

    def _validate_command(self, value: Any, default: List[str]) -> List[str]:
        """
        Validate the neighbor-cache dump command.

        Accepts a list of strings or a single string that is split on whitespace.
        """
        if isinstance(value, str):
            value = value.split()
        if isinstance(value, list) and value and all(isinstance(part, str) for part in value):
            return value
        self.logger.warning(f"Invalid arp_command: {value}. Using default: {' '.join(default)}")
        return list(default)

    def create_default_config(self) -> Path:
        """
        Create the default configuration file if it doesn't exist.

        Returns:
            Path of the configuration file
        """
        config_path = self.config_dir / self.DEFAULT_CONFIG_FILE
        if config_path.exists():
            return config_path

        default_config = {'discovery': asdict(DiscoveryConfig())}

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(default_config, f, default_flow_style=False, indent=2)
            self.logger.info(f"Created default discovery config at {config_path}")
        except OSError as e:
            self.logger.error(f"Failed to create default discovery config: {e}")
        return config_path
