"""Configuration file loading and validation.

This module handles loading and saving tool configuration from
.sandbox-sync/config.yaml. A missing file means defaults; every present
field is type-checked so mistakes surface as ConfigError instead of odd
runtime behaviour.
"""

import os
from typing import Any, Dict

import yaml

from .errors import ConfigError, StateFilesystemError
from .models import SyncConfig


class ConfigLoader:
    """Handles configuration file loading, validation, and saving.

    Configuration file structure:
        batch_size: 7
        batch_delay: 1.0
        default_commit_message: "commit from sandbox-sync"
        keep_empty_files: false
        include_hidden: false
        respect_gitignore: true
        file_owner: "1000:1000"
        lock_timeout: 30
        api_url: ""
    """

    DEFAULT_CONFIG_DIR = '.sandbox-sync'
    DEFAULT_CONFIG_FILE = 'config.yaml'

    # Expected type of each known field
    FIELD_TYPES = {
        'batch_size': int,
        'batch_delay': (int, float),
        'default_commit_message': str,
        'keep_empty_files': bool,
        'include_hidden': bool,
        'respect_gitignore': bool,
        'file_owner': str,
        'lock_timeout': (int, float),
        'api_url': str,
    }

    @classmethod
    def default_path(cls) -> str:
        return os.path.join(cls.DEFAULT_CONFIG_DIR, cls.DEFAULT_CONFIG_FILE)

    @classmethod
    def load(cls, config_path: str) -> SyncConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            SyncConfig (defaults when the file does not exist)

        Raises:
            StateFilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return SyncConfig()
        except PermissionError:
            raise StateFilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return SyncConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, sync_config: SyncConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            StateFilesystemError: If file cannot be written
        """
        config_dict = {
            'batch_size': sync_config.batch_size,
            'batch_delay': sync_config.batch_delay,
            'default_commit_message': sync_config.default_commit_message,
            'keep_empty_files': sync_config.keep_empty_files,
            'include_hidden': sync_config.include_hidden,
            'respect_gitignore': sync_config.respect_gitignore,
            'file_owner': sync_config.file_owner,
            'lock_timeout': sync_config.lock_timeout,
            'api_url': sync_config.api_url,
        }

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise StateFilesystemError(config_dir, 'create_directory', str(e))

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise StateFilesystemError(config_path, 'write', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(config_path, 'write', str(e))

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> SyncConfig:
        """Parse and validate configuration dictionary.

        Unknown fields are rejected; null values fall back to defaults.

        Raises:
            ConfigError: If configuration is invalid
        """
        unknown = set(config_dict.keys()) - set(cls.FIELD_TYPES.keys())
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(str(k) for k in unknown))}")

        values: Dict[str, Any] = {}
        for name, expected in cls.FIELD_TYPES.items():
            value = config_dict.get(name)
            if value is None:
                continue
            # bool is an int subclass; reject it for numeric fields
            if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
                raise ConfigError(
                    f"Expected {cls._type_name(expected)}, got {type(value).__name__}",
                    name
                )
            values[name] = value

        config = SyncConfig(**values)

        if config.batch_size < 1:
            raise ConfigError("Must be at least 1", 'batch_size')
        if config.batch_delay < 0:
            raise ConfigError("Cannot be negative", 'batch_delay')
        if config.lock_timeout <= 0:
            raise ConfigError("Must be positive", 'lock_timeout')
        if not config.default_commit_message.strip():
            raise ConfigError("Cannot be empty", 'default_commit_message')

        config.batch_delay = float(config.batch_delay)
        config.lock_timeout = float(config.lock_timeout)
        return config

    @staticmethod
    def _type_name(expected: Any) -> str:
        if isinstance(expected, tuple):
            return "number"
        return expected.__name__
