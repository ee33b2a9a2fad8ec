import json
from pathlib import Path
from typing import Any, Optional

from utils.logging_setup import get_logger

logger = get_logger("config")

DEFAULT_CONFIGS_DIR = Path(__file__).parent.parent / "configs"
DEFAULT_USER_CONFIG_PATH = Path.home() / ".catalog_helper" / "user_config.json"


class ConfigManager:
    def __init__(self, config_dir: Optional[Path] = None, user_config_path: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIGS_DIR
        self.default_config_path = self.config_dir / "default_config.json"
        self.user_config_path = Path(user_config_path) if user_config_path else DEFAULT_USER_CONFIG_PATH
        self.config = self.load_config()

    def load_config(self) -> dict:
        """Load configuration from files, merging user config with defaults."""
        default_config = self._load_json(self.default_config_path, "default")
        user_config = self._load_json(self.user_config_path, "user")
        # User config takes precedence
        return self.merge_configs(default_config, user_config)

    def _load_json(self, path: Path, label: str) -> dict:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load {label} config {path}: {e}")
            return {}
        if not isinstance(loaded, dict):
            logger.warning(f"Ignoring {label} config {path}: top level is not an object")
            return {}
        return loaded

    def merge_configs(self, default: dict, user: dict) -> dict:
        """Recursively merge user config with default config."""
        merged = default.copy()
        for key, value in user.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def save_user_config(self, config: dict) -> bool:
        """Save user configuration to file.

        Returns:
            bool: True if the file was written
        """
        try:
            self.user_config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.user_config_path, "w", encoding="utf-8") as f:
                json.dump(config, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving user config: {e}")
            return False
        self.config = self.load_config()
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation, e.g. "serializer.wrap_width"."""
        try:
            value = self.config
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> bool:
        """Set a configuration value using dot notation and persist it to the user file."""
        keys = key.split(".")
        user_config = self._load_json(self.user_config_path, "user")
        current = user_config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value
        return self.save_user_config(user_config)
