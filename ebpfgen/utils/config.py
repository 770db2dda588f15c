# ebpfgen/utils/config.py - Configuration management
"""
Configuration management for the generator.
Loads settings from YAML files and turns them into the immutable
CaptureMode value every generator stage receives.
"""

import enum
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import copy
import logging

from ebpfgen.errors import ConfigError


class StringReadPolicy(enum.Enum):
    """
    How string arguments are read by the generated handlers.
    """
    FIXED = 'fixed'
    FULL = 'full'
    FULL_CONST_N = 'full-const'

    @property
    def is_variable_length(self) -> bool:
        return self is not StringReadPolicy.FIXED

    @classmethod
    def parse(cls, value) -> 'StringReadPolicy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ', '.join(p.value for p in cls)
            raise ConfigError(f"unknown string read policy '{value}' (expected: {choices})") from None


@dataclass(frozen=True)
class CaptureMode:
    """
    Settings of one program generation run.

    Attributes:
        full_feature_mode: Special fork/exit handling and multi-packet strings
        string_read_policy: Fixed-length or variable-length string reads
        extra_packet_count: Number of data packets used for one string
        trace_expression: Named syscall subset, None means 'all'
        target_pid: Traced process, None excludes the generator's own pid
    """
    full_feature_mode: bool = False
    string_read_policy: StringReadPolicy = StringReadPolicy.FIXED
    extra_packet_count: int = 0
    trace_expression: Optional[str] = None
    target_pid: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.string_read_policy, StringReadPolicy):
            raise ConfigError(f"invalid string read policy: {self.string_read_policy!r}")

        if isinstance(self.extra_packet_count, bool) or not isinstance(self.extra_packet_count, int):
            raise ConfigError(f"packet count must be an integer: {self.extra_packet_count!r}")
        if self.extra_packet_count < 0:
            raise ConfigError(f"packet count must not be negative: {self.extra_packet_count}")

        if self.trace_expression is not None and not isinstance(self.trace_expression, str):
            raise ConfigError(f"trace expression must be a string: {self.trace_expression!r}")

        if self.target_pid is not None:
            if isinstance(self.target_pid, bool) or not isinstance(self.target_pid, int):
                raise ConfigError(f"pid must be an integer: {self.target_pid!r}")
            if self.target_pid <= 0:
                raise ConfigError(f"pid must be positive: {self.target_pid}")

    @property
    def uses_overflow_packets(self) -> bool:
        """True if strings need more packets than the handlers read inline."""
        return self.string_read_policy.is_variable_length and self.extra_packet_count > 2


class Config:
    """
    Configuration manager for the generator.

    Loads configuration from YAML files and provides access to settings.
    """

    DEFAULT_CONFIG = {
        'generator': {
            'expression': 'all',
            'full_feature': False,
            'string_read': 'fixed',
            'string_packets': 2,
            'pid': None,
        },
        'templates': {
            'dir': None,
        },
        'catalog': {
            'file': None,
        },
        'output': {
            'file': None,
            'debug_marks': False,
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
        """
        self.logger = logging.getLogger(__name__)
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file:
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str):
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML file
        """
        config_path = Path(config_file)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}, using defaults")
            return

        try:
            with open(config_path, 'r') as f:
                loaded_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load config: {e}")
            raise ConfigError(f"cannot load config {config_file}: {e}") from e

        if loaded_config is None:
            return
        if not isinstance(loaded_config, dict):
            raise ConfigError(f"config {config_file} must contain a mapping")

        # Merge with defaults
        self._merge_config(self.config, loaded_config)
        self.logger.info(f"Loaded configuration from {config_file}")

    def _merge_config(self, base: Dict, override: Dict):
        """
        Recursively merge configuration dictionaries.
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., 'generator.pid')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value by dot-notation key.
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def to_capture_mode(self) -> CaptureMode:
        """
        Build the immutable settings of one generation run.

        Returns:
            Validated CaptureMode

        Raises:
            ConfigError: If a generator setting is invalid
        """
        try:
            packets = int(self.get('generator.string_packets', 0))
        except (TypeError, ValueError):
            raise ConfigError(
                f"invalid string_packets: {self.get('generator.string_packets')!r}"
            ) from None

        pid = self.get('generator.pid')
        if pid is not None:
            try:
                pid = int(pid)
            except (TypeError, ValueError):
                raise ConfigError(f"invalid pid: {pid!r}") from None
            # a non-positive pid means "not set"
            if pid <= 0:
                if pid < 0:
                    self.logger.warning(f"Ignoring negative pid {pid}, excluding own pid instead")
                pid = None

        return CaptureMode(
            full_feature_mode=bool(self.get('generator.full_feature', False)),
            string_read_policy=StringReadPolicy.parse(self.get('generator.string_read', 'fixed')),
            extra_packet_count=packets,
            trace_expression=self.get('generator.expression'),
            target_pid=pid,
        )

