import copy
import logging
import os

import yaml

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


class Config:
    """Configuration manager that loads from YAML and merges with defaults.

    Environment variables override both, see ``ENV_OVERRIDES``.
    """

    DEFAULTS = {
        "server": {
            "host": "0.0.0.0",
            "port": 3000,
            "debug": False,
        },
        "storage": {
            "backend": "file",
            "data_file": "timelogs.json",
        },
        "records": {
            "required_fields": ["user", "timeIn", "hubstaffTime"],
            "defaults": {
                "timeOut": "N/A",
                "remarks": "",
            },
        },
        "schema": {
            "path": None,
        },
        "logging": {
            "level": "INFO",
        },
    }

    # env var -> (section, key, converter)
    ENV_OVERRIDES = {
        "HOST": ("server", "host", str),
        "PORT": ("server", "port", int),
        "DEBUG": ("server", "debug", _parse_bool),
        "DATA_FILE": ("storage", "data_file", str),
        "STORAGE_BACKEND": ("storage", "backend", str),
        "LOG_LEVEL": ("logging", "level", str.upper),
    }

    def __init__(self, config_path=None, environ=None):
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is not None:
            try:
                with open(config_path, "r") as f:
                    user_config = yaml.safe_load(f)

                if user_config and isinstance(user_config, dict):
                    self._config = self._deep_merge(self._config, user_config)
            except FileNotFoundError:
                pass
            except yaml.YAMLError:
                logger.warning("Invalid YAML in %s, using defaults", config_path)

        self._apply_env(os.environ if environ is None else environ)

    def _apply_env(self, environ):
        for name, (section, key, convert) in self.ENV_OVERRIDES.items():
            value = environ.get(name)
            if value is None:
                continue
            try:
                self._config.setdefault(section, {})[key] = convert(value)
            except ValueError:
                logger.warning("Invalid value for %s: %r, keeping %s.%s", name, value, section, key)

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, key, default=None):
        """Get a top-level config key."""
        return self._config.get(key, default)

    def __getitem__(self, key):
        return self._config[key]

    def __contains__(self, key):
        return key in self._config
