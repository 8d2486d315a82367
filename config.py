import os
import yaml

APP_VERSION = "1.0.0"
DEFAULT_DB_PATH = "tracker.db"
DEFAULT_SETTINGS_PATH = "settings.yaml"


def db_path_from_env() -> str:
    return os.environ.get("TRACKER_DB", DEFAULT_DB_PATH)


def settings_path_from_env() -> str:
    return os.environ.get("TRACKER_SETTINGS", DEFAULT_SETTINGS_PATH)


class YamlConfig:
    """Load and save settings to a YAML file."""

    def __init__(self, path: str = DEFAULT_SETTINGS_PATH) -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)
