# src/agentlint/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from agentlint.core.utils.path_utils import PathUtils
from auditor.aggregator import validate_weights
from auditor.errors import WeightTableError

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    A singleton class to manage the auditor's configuration.
    It loads settings from settings.json and allows for in-memory overrides,
    e.g. recalibrating rule constants without touching the rule code.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Loads the configuration from the file."""
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the configuration.
        e.g., 'rules.aria_coverage.role_bonus_cap'.
        """
        keys = key_path.split('.')
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a nested value in the in-memory configuration.
        e.g., 'fetch.timeout', '30'
        """
        keys = key_path.split('.')
        d = self._config
        # Navigate to the second-to-last dictionary
        for key in keys[:-1]:
            d = d.setdefault(key, {})
            if not isinstance(d, dict):
                logger.error("Cannot set value: '%s' is not a dictionary.", key)
                return False

        # Cast the new value to the type of the old one when there is one
        original_value = d.get(keys[-1])
        if original_value is not None and not isinstance(original_value, (dict, list)):
            try:
                if isinstance(original_value, bool) and isinstance(value, str):
                    value = value.strip().lower() in ("1", "true", "yes", "on")
                else:
                    value = type(original_value)(value)
            except (ValueError, TypeError):
                logger.warning(
                    "Could not cast new value for '%s' to type %s. Storing as given.",
                    key_path, type(original_value).__name__
                )

        d[keys[-1]] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    def reset(self):
        """
        Resets the in-memory configuration from the settings.json file.

        The file is checked before it replaces the current configuration: a
        malformed 'auditor.weights' table raises WeightTableError, so a bad
        settings file fails at startup rather than on the first audit.
        Malformed 'rules.*' sections are dropped and their defaults apply.
        """
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}
            return

        self._config = self._checked(config)
        logger.info("Configuration has been (re)loaded from settings.json.")

    @staticmethod
    def _checked(config: Any) -> Dict[str, Any]:
        if not isinstance(config, dict):
            logger.error("settings.json must hold an object, got %s. Using empty config.", type(config).__name__)
            return {}

        auditor = config.get("auditor") or {}
        weights = auditor.get("weights") if isinstance(auditor, dict) else None
        if weights is not None:
            if not isinstance(weights, dict):
                raise WeightTableError(f"'auditor.weights' must map rule ids to weights, got {weights!r}")
            validate_weights(weights)

        rules = config.get("rules")
        if rules is not None and not isinstance(rules, dict):
            logger.error("'rules' must be an object; rule defaults apply.")
            del config["rules"]
        elif rules:
            for rule_key in [k for k, v in rules.items() if not isinstance(v, dict)]:
                logger.error("'rules.%s' must be an object; its defaults apply.", rule_key)
                del rules[rule_key]

        return config


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
