"""
User settings for Cull.

Scan defaults that the CLI and the web API fall back to when a request does
not name them. Each setting is looked up in this order:

1. An explicit argument from the caller (handled by the caller)
2. Its CULL_* environment variable
3. ~/.cull/config.json (directory overridable with CULL_CONFIG_DIR)
4. The constant in cull.config

A value that is malformed or out of range is logged and skipped, so the next
source in the chain decides. Environment values are parsed as JSON first, so
CULL_THRESHOLD=8 yields the integer 8.

Example config.json:
{
    "default_threshold": 10,
    "default_mode": "both",
    "default_workers": 1,
    "delete_workers": 4,
    "max_image_pixels": 500000000
}
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from .config import (
    DEFAULT_DELETE_WORKERS,
    DEFAULT_MAX_IMAGE_PIXELS,
    DEFAULT_MODE,
    DEFAULT_THRESHOLD,
    DEFAULT_WORKERS,
    MAX_THRESHOLD,
    MIN_THRESHOLD,
    SCAN_MODES,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = 'CULL_CONFIG_DIR'
CONFIG_FILE_NAME = 'config.json'


def _int_between(low: int, high: Optional[int] = None) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return value >= low and (high is None or value <= high)
    return check


@dataclass(frozen=True)
class Setting:
    """One user-tunable value: where it is read from and what it may hold."""
    key: str
    env_var: str
    default: Any
    is_valid: Callable[[Any], bool]
    help: str


SETTINGS = {
    s.key: s for s in (
        Setting('default_threshold', 'CULL_THRESHOLD', DEFAULT_THRESHOLD,
                _int_between(MIN_THRESHOLD, MAX_THRESHOLD),
                f"Perceptual match distance ({MIN_THRESHOLD}-{MAX_THRESHOLD} bits of 64)"),
        Setting('default_mode', 'CULL_MODE', DEFAULT_MODE,
                lambda v: v in SCAN_MODES,
                "Scan mode: " + ", ".join(SCAN_MODES)),
        Setting('default_workers', 'CULL_WORKERS', DEFAULT_WORKERS,
                _int_between(1, 32),
                "Hashing threads (1 = sequential)"),
        Setting('delete_workers', 'CULL_DELETE_WORKERS', DEFAULT_DELETE_WORKERS,
                _int_between(1, 32),
                "Concurrent deletions per request"),
        Setting('max_image_pixels', 'CULL_MAX_PIXELS', DEFAULT_MAX_IMAGE_PIXELS,
                _int_between(1),
                "Largest image Pillow will decode"),
    )
}


class UserConfig:
    """
    Resolves Cull settings from the environment, the config file and defaults.

    There is one shared instance (see get_user_config). The config file is
    parsed on first use and cached until reload().
    """

    _instance: Optional['UserConfig'] = None
    _file_values: Optional[dict] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        env_dir = os.getenv(CONFIG_DIR_ENV)
        return Path(env_dir) if env_dir else Path.home() / '.cull'

    @property
    def config_file_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def reload(self):
        """Forget the cached config file so the next lookup re-reads it."""
        self._file_values = None

    def _read_file(self) -> dict:
        path = self.config_file_path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: top level must be an object")
            return {}
        logger.debug(f"Loaded settings from {path}")
        return data

    def _file(self) -> dict:
        if self._file_values is None:
            self._file_values = self._read_file()
        return self._file_values

    def get(self, key: str) -> Any:
        """
        Resolve one setting.

        Args:
            key: A key of SETTINGS

        Returns:
            The first valid value from the environment, the config file or
            the built-in default

        Raises:
            KeyError: If key is not a known setting
        """
        setting = SETTINGS[key]

        raw = os.getenv(setting.env_var)
        if raw is not None:
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                value = raw
            if setting.is_valid(value):
                return value
            logger.warning(f"Ignoring {setting.env_var}={raw!r}: {setting.help}")

        file_values = self._file()
        if key in file_values:
            value = file_values[key]
            if setting.is_valid(value):
                return value
            logger.warning(f"Ignoring {key}={value!r} in {self.config_file_path}: {setting.help}")

        return setting.default

    def as_dict(self) -> dict:
        """All settings with their resolved values."""
        return {key: self.get(key) for key in SETTINGS}

    @property
    def default_threshold(self) -> int:
        return self.get('default_threshold')

    @property
    def default_mode(self) -> str:
        return self.get('default_mode')

    @property
    def default_workers(self) -> int:
        return self.get('default_workers')

    @property
    def delete_workers(self) -> int:
        return self.get('delete_workers')

    @property
    def max_image_pixels(self) -> int:
        return self.get('max_image_pixels')

    def create_example_config(self) -> bool:
        """
        Write a config file holding every setting at its default.

        Returns:
            True if the file was written
        """
        example = {"_comment": "Cull settings; delete a key to use the built-in default"}
        example.update({key: s.default for key, s in SETTINGS.items()})

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.config_file_path.write_text(json.dumps(example, indent=2), encoding='utf-8')
        except OSError as e:
            logger.error(f"Could not write {self.config_file_path}: {e}")
            return False
        logger.info(f"Wrote example settings to {self.config_file_path}")
        self.reload()
        return True


_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Return the shared UserConfig."""
    return _user_config


__all__ = ['Setting', 'SETTINGS', 'UserConfig', 'get_user_config']
