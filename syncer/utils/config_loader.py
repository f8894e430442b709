"""
Configuration loading for Syncer.

Settings come from three layers, later ones winning: ``DEFAULT_CONFIG``,
the JSON config file, and command-line flags.  The merged result is a
:class:`SyncConfig` that gets passed explicitly to every location,
the reconcile engine and the watcher.
"""
import os
import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Optional, Dict, Any
from colorama import Fore, Style

from ..exceptions import ConfigurationError


COMPARE_MODES = ("size", "size-mtime")
RENAME_POLICIES = ("fail", "delete-create")
ERROR_POLICIES = ("abort", "continue")

# Default configuration.
# Used to bootstrap config.json when it does not exist yet.
DEFAULT_CONFIG: Dict[str, Any] = {
    "noop": False,
    "recursive": False,
    "delete": False,
    "one_time": False,
    "compare": "size",
    "rename_policy": "fail",
    "on_error": "abort",
    "retries": 0,
    "retry_delay": 1.0,
    "aws_profile": "",
    "aws_region": "",
    "endpoint_url": "",
}


@dataclass(frozen=True)
class SyncConfig:
    """Effective settings for one run.

    Attributes:
        noop: Log put/delete decisions without touching the destination
        recursive: Watch subdirectories as well as the source root
        delete: Remove destination keys missing from the source on reconcile
        one_time: Skip the watch phase after reconciling
        compare: ``size`` or ``size-mtime`` change detection
        rename_policy: ``fail`` or ``delete-create`` for rename events
        on_error: ``abort`` at the first failed key or ``continue`` and report
        retries: Extra attempts for each failed put/delete
        retry_delay: Base delay in seconds between attempts
        aws_profile: boto3 profile name (empty for the default chain)
        aws_region: AWS region (empty for the profile default)
        endpoint_url: Custom S3 endpoint for S3-compatible stores
    """

    noop: bool = False
    recursive: bool = False
    delete: bool = False
    one_time: bool = False
    compare: str = "size"
    rename_policy: str = "fail"
    on_error: str = "abort"
    retries: int = 0
    retry_delay: float = 1.0
    aws_profile: str = ""
    aws_region: str = ""
    endpoint_url: str = ""

    def __post_init__(self):
        if self.compare not in COMPARE_MODES:
            raise ConfigurationError(
                f"Unknown compare mode '{self.compare}' (expected one of {', '.join(COMPARE_MODES)})"
            )
        if self.rename_policy not in RENAME_POLICIES:
            raise ConfigurationError(
                f"Unknown rename policy '{self.rename_policy}' "
                f"(expected one of {', '.join(RENAME_POLICIES)})"
            )
        if self.on_error not in ERROR_POLICIES:
            raise ConfigurationError(
                f"Unknown error policy '{self.on_error}' (expected one of {', '.join(ERROR_POLICIES)})"
            )
        if not isinstance(self.retries, int) or isinstance(self.retries, bool) or self.retries < 0:
            raise ConfigurationError(f"retries must be a non-negative integer, got {self.retries!r}")
        if self.retry_delay < 0:
            raise ConfigurationError(f"retry_delay must be >= 0, got {self.retry_delay!r}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SyncConfig":
        """Build a config from a dict, ignoring keys that are not settings."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def merged(self, **overrides) -> "SyncConfig":
        """Return a copy with every non-``None`` override applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return SyncConfig.from_dict(data)


class ConfigLoader:
    """Handles loading and saving the JSON configuration file."""

    @staticmethod
    def get_config_path():
        """
        Get full path to the configuration file.

        ``$SYNCER_CONFIG`` wins over ``~/.syncer/config.json``.

        Returns:
            Full path to config file
        """
        override = os.environ.get("SYNCER_CONFIG")
        if override:
            return override
        return str(Path.home() / ".syncer" / "config.json")

    @staticmethod
    def ensure_config_exists():
        """
        Ensure config.json exists, creating it with defaults if missing.

        Returns:
            Path to the config.json file
        """
        config_path = Path(ConfigLoader.get_config_path())

        if not config_path.exists():
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w') as f:
                json.dump(DEFAULT_CONFIG, f, indent=2)

        return config_path

    @staticmethod
    def load_config_json():
        """
        Load config.json merged over the defaults.
        Creates the file with default values if it does not exist.

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If the file is not a JSON object
        """
        config_path = ConfigLoader.ensure_config_exists()

        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error loading {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{config_path} must contain a JSON object")

        config = dict(DEFAULT_CONFIG)
        config.update(data)
        return config

    @staticmethod
    def load_sync_config(**overrides) -> SyncConfig:
        """Load the config file and apply CLI overrides on top of it."""
        return SyncConfig.from_dict(ConfigLoader.load_config_json()).merged(**overrides)


def handle_config_update(config_json_string):
    """Handle config update command.

    Args:
        config_json_string: JSON string with config updates

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config_updates = json.loads(config_json_string)
    except json.JSONDecodeError as e:
        print(f"{Fore.RED}[ERROR] Invalid JSON in --config argument: {e}{Style.RESET_ALL}")
        return 1

    if not isinstance(config_updates, dict):
        print(f"{Fore.RED}[ERROR] --config must be a JSON object (dictionary){Style.RESET_ALL}")
        return 1

    invalid_keys = [key for key in config_updates if key not in DEFAULT_CONFIG]
    if invalid_keys:
        print(f"{Fore.RED}[ERROR] Invalid configuration key(s): {', '.join(invalid_keys)}{Style.RESET_ALL}")
        print(f"\n{Fore.YELLOW}Valid keys in config.json:{Style.RESET_ALL}")
        for key in sorted(DEFAULT_CONFIG):
            print(f"  • {key}")
        return 1

    try:
        current_config = ConfigLoader.load_config_json()
        current_config.update(config_updates)
        # Reject values the engine would refuse at startup
        SyncConfig.from_dict(current_config)
    except ConfigurationError as e:
        print(f"{Fore.RED}[ERROR] {e}{Style.RESET_ALL}")
        return 1

    config_path = ConfigLoader.ensure_config_exists()
    with open(config_path, 'w') as f:
        json.dump(current_config, f, indent=2)

    print(f"\n{Fore.GREEN}[SUCCESS] Configuration updated successfully{Style.RESET_ALL}")
    print(f"\n{Fore.CYAN}Updated values:{Style.RESET_ALL}")
    for key, value in config_updates.items():
        display_value = value
        if any(sensitive in key.lower() for sensitive in ['token', 'key', 'password', 'secret']):
            if value and len(str(value)) > 4:
                display_value = f"{str(value)[:4]}...{'*' * 8}"
        print(f"  {key}: {display_value}")

    print(f"\n{Fore.CYAN}Config file: {config_path}{Style.RESET_ALL}\n")
    return 0
