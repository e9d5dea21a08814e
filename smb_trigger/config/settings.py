"""
Runtime settings and configuration management.

This module handles the per-session watch configuration, unlike
constants which are fixed. A Settings instance is handed to each
watch session; the module-level instance is what the CLI fills in.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from smb_trigger.config.constants import (
    DEFAULT_CONNECT_ATTEMPTS,
    DEFAULT_EVENT,
    DEFAULT_WAIT_DURATION_MS,
)

VALID_EVENTS = ("created", "deleted", "updated")


class ConfigError(Exception):
    """Raised when the watch configuration is missing or invalid."""

    pass


class Settings:
    """Runtime settings manager."""

    def __init__(self, **overrides: Any):
        """Initialize default settings, then apply keyword overrides."""
        self.reset_to_defaults()
        if overrides:
            self.update(overrides)

    def reset_to_defaults(self):
        """Reset all settings to default values."""
        self._settings = {
            # Watch settings
            "watched_path": "",
            "recursive": False,
            "event": DEFAULT_EVENT,
            "wait_for_completion": True,
            "wait_duration_ms": DEFAULT_WAIT_DURATION_MS,
            "max_polls": None,
            # Share access
            "share_root": None,
            "use_polling": False,
            "connect_attempts": DEFAULT_CONNECT_ATTEMPTS,
            # Output
            "output_json": False,
            "verbose": False,
            "quiet": False,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a setting value."""
        self._settings[key] = value

    def update(self, settings: Dict[str, Any]) -> None:
        """Update multiple settings at once."""
        self._settings.update(settings)

    def to_dict(self) -> Dict[str, Any]:
        """Export settings as dictionary."""
        return self._settings.copy()

    def from_dict(self, settings: Dict[str, Any]) -> None:
        """Import settings from dictionary on top of the defaults."""
        self.reset_to_defaults()
        self._settings.update(settings)

    def save_to_file(self, filepath: Path) -> None:
        """Save settings to JSON file."""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def load_from_file(self, filepath: Path) -> None:
        """Load settings from JSON file."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise ConfigError(f"Configuration file not found: {filepath}")
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse configuration file: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a JSON object")
        self._settings.update(data)

    def validate(self) -> None:
        """Check the settings for consistency.

        Raises:
            ConfigError: If a value is missing or out of range.
        """
        path = self._settings.get("watched_path")
        if not isinstance(path, str) or not path.strip():
            raise ConfigError("watched_path must be a non-empty string")

        if self._settings.get("event") not in VALID_EVENTS:
            raise ConfigError(
                f"event must be one of: {', '.join(VALID_EVENTS)}"
            )

        wait_duration = self._settings.get("wait_duration_ms")
        if (
            isinstance(wait_duration, bool)
            or not isinstance(wait_duration, (int, float))
            or wait_duration <= 0
        ):
            raise ConfigError("wait_duration_ms must be a positive number")

        max_polls = self._settings.get("max_polls")
        if max_polls is not None and (
            isinstance(max_polls, bool) or not isinstance(max_polls, int) or max_polls <= 0
        ):
            raise ConfigError("max_polls must be a positive integer or null")

        attempts = self._settings.get("connect_attempts")
        if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
            raise ConfigError("connect_attempts must be at least 1")

    @property
    def watched_path(self) -> str:
        return self._settings["watched_path"]

    @property
    def recursive(self) -> bool:
        return bool(self._settings["recursive"])

    @property
    def event(self) -> str:
        return self._settings["event"]

    @property
    def wait_for_completion(self) -> bool:
        return bool(self._settings["wait_for_completion"])

    @property
    def effective_wait_for_completion(self) -> bool:
        """Stability tracking only applies when watching for creations."""
        return self.wait_for_completion and self.event == "created"

    @property
    def wait_duration_ms(self) -> int:
        return self._settings["wait_duration_ms"]

    @property
    def max_polls(self) -> Optional[int]:
        return self._settings["max_polls"]

    @property
    def share_root(self) -> Optional[str]:
        return self._settings["share_root"]

    @property
    def use_polling(self) -> bool:
        return bool(self._settings["use_polling"])

    @property
    def connect_attempts(self) -> int:
        return self._settings["connect_attempts"]


# Global settings instance
settings = Settings()


def configure_from_args(args, target: Optional[Settings] = None) -> Settings:
    """Configure settings from command line arguments.

    A JSON config file given with --config is loaded first so that
    explicit command line flags win over it.
    """
    target = target if target is not None else settings

    config_file = getattr(args, "config", None)
    if config_file:
        target.load_from_file(Path(config_file))

    if args.path:
        target.set("watched_path", args.path)
    if args.event is not None:
        target.set("event", args.event)
    if args.recursive:
        target.set("recursive", True)
    if args.no_wait:
        target.set("wait_for_completion", False)
    if args.wait_duration is not None:
        target.set("wait_duration_ms", args.wait_duration)
    if args.max_polls is not None:
        target.set("max_polls", args.max_polls)
    if args.root is not None:
        target.set("share_root", args.root)
    if args.polling:
        target.set("use_polling", True)

    target.set("output_json", args.json)
    target.set("verbose", args.verbose)
    target.set("quiet", args.quiet)

    target.validate()
    return target
