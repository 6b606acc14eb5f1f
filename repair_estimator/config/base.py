import logging
import os
from pathlib import Path
from typing import Mapping, Self

import toml

from repair_estimator.config.sections import Appraisal, Notifications, Pricing, QuoteIds
from repair_estimator.config.serializable import Serializable
from repair_estimator.type_defs import JsonObject, JsonValue

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VARS = ("REPAIR_ESTIMATOR_CONFIG_FILE", "CONFIG_FILE")


class AppSettings(Serializable):
    """Process-wide settings, persisted as a toml file.

    Loading never fails: unreadable files and bad values are logged and the
    defaults stay in place. The file is rewritten after every load so new
    settings show up with their defaults.
    """

    _instance = None
    debug: bool = False

    def __init__(self) -> None:
        self.pricing = Pricing()
        self.appraisal = Appraisal()
        self.quote_ids = QuoteIds()
        self.notifications = Notifications()
        if not self.config_file_path.exists():
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_file_path.touch()

        self.load()

    @classmethod
    def get_instance(cls) -> Self:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    @property
    def config_file_path(self) -> Path:
        for env_var in CONFIG_FILE_ENV_VARS:
            configured_path = os.getenv(env_var)
            if configured_path:
                return Path(configured_path).expanduser()
        project_name = Path(__file__).parent.parent.name.replace("_", "-")
        return Path.home() / ".config" / project_name / "config.toml"

    @property
    def sections(self) -> dict[str, Serializable]:
        return {key: value for key, value in vars(self).items() if isinstance(value, Serializable)}

    def load(self) -> None:
        try:
            with self.config_file_path.open() as file:
                self.from_dict(toml.load(file))
        except (FileNotFoundError, OSError, toml.TomlDecodeError) as error:
            logger.exception(f"Error loading configuration {str(error)}")
        self.save()

    def save(self) -> None:
        try:
            with self.config_file_path.open("w") as file:
                toml.dump(_sorted_tables(self.to_dict()), file)
        except (FileNotFoundError, OSError) as error:
            logger.exception(f"Error saving configuration: {str(error)}")

    def update_and_save(self, **kwargs: JsonValue) -> None:
        """Apply ``section__key=value`` (or top-level ``key=value``) updates and persist them."""
        updates: JsonObject = {}
        for key, value in kwargs.items():
            section_name, _, setting_name = key.partition("__")
            if setting_name:
                section_updates = updates.setdefault(section_name, {})
                if isinstance(section_updates, dict):
                    section_updates[setting_name] = value
            else:
                updates[key] = value
        self.from_dict(updates)
        self.save()


def _sorted_tables(data: Mapping[str, JsonValue]) -> JsonObject:
    # toml writes scalars before tables regardless; sorting keeps diffs stable.
    return {
        key: _sorted_tables(value) if isinstance(value, dict) else value
        for key, value in sorted(data.items())
    }
