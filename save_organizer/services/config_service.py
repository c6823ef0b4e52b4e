# save_organizer/services/config_service.py
import dataclasses
import json
from pathlib import Path
from typing import Any
from save_organizer.core.constants import SECTION_GAMES, SECTION_SETTINGS
from save_organizer.core.exceptions import ConfigSaveError
from save_organizer.models.config_model import AppConfig, GameConfig
from save_organizer.utils.logger_utils import logger


class ConfigService:
    """Manages all read/write operations for the config.json file."""

    def __init__(self, config_path: Path):
        self.config_path = config_path
        self._current: AppConfig | None = None

    @property
    def current(self) -> AppConfig:
        """The loaded configuration, read from disk on first access."""
        if self._current is None:
            self._current = self.load_config()
        return self._current

    # --- Loading ---

    def load_config(self) -> AppConfig:
        """
        Loads the entire configuration from config.json.
        A missing or corrupt file yields the default AppConfig.
        """
        if not self.config_path.exists():
            logger.warning(f"Config file not found at '{self.config_path}'. Returning default config.")
            return AppConfig()

        try:
            data = self._read_raw()
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {self.config_path.name}: {e}. Returning default config.")
            return AppConfig()
        except OSError as e:
            logger.error(f"Failed to read {self.config_path.name}: {e}. Returning default config.")
            return AppConfig()

        settings = data.get(SECTION_SETTINGS, {})
        games: dict[str, GameConfig] = {}
        for game_key, game_dict in data.get(SECTION_GAMES, {}).items():
            if not isinstance(game_dict, dict):
                logger.error(f"Malformed game entry '{game_key}' in config: {game_dict!r}. Skipping.")
                continue
            games[game_key] = GameConfig(
                profiles_directory=self._to_path(game_dict.get("profiles_directory")),
                save_file_location=self._to_path(game_dict.get("save_file_location")),
                last_profile=game_dict.get("last_profile"),
            )

        logger.info(f"Successfully loaded configuration from {self.config_path.name}.")
        return AppConfig(
            games=games,
            last_game_key=settings.get("last_game_key"),
            compact_mode=bool(settings.get("compact_mode", False)),
            check_for_updates=bool(settings.get("check_for_updates", True)),
        )

    # --- Saving ---

    def save_config(self, config: AppConfig):
        """Serializes the whole AppConfig to config.json."""
        logger.info(f"Saving configuration to {self.config_path}...")
        config_data = {
            SECTION_SETTINGS: {
                "last_game_key": config.last_game_key,
                "compact_mode": config.compact_mode,
                "check_for_updates": config.check_for_updates,
            },
            SECTION_GAMES: {
                key: {
                    "profiles_directory": self._to_str(game_config.profiles_directory),
                    "save_file_location": self._to_str(game_config.save_file_location),
                    "last_profile": game_config.last_profile,
                }
                for key, game_config in config.games.items()
            },
        }
        self._write_raw(config_data)
        logger.info("Configuration saved successfully.")

    def save_setting(self, key: str, value: Any, section: str = SECTION_SETTINGS):
        """
        Saves a single key-value pair. Reads the file, updates one value and
        writes everything back.
        """
        section = section.lower()
        config_data = self._read_for_update()
        config_data.setdefault(section, {})[key] = value
        self._write_raw(config_data)
        logger.info(f"Saved setting: [{section}] {key} = {value}")

    def save_game_setting(self, game_key: str, key: str, value: Any):
        """Saves one value in a game's block of the games section."""
        if isinstance(value, Path):
            value = str(value)
        config_data = self._read_for_update()
        config_data.setdefault(SECTION_GAMES, {}).setdefault(game_key, {})[key] = value
        self._write_raw(config_data)
        logger.info(f"Saved game setting: [{game_key}] {key} = {value}")

    def update_game_config(self, game_key: str, **changes) -> AppConfig:
        """Persists changes to one game's block and refreshes the current config."""
        config = self.current
        for key, value in changes.items():
            self.save_game_setting(game_key, key, value)
        games = dict(config.games)
        games[game_key] = dataclasses.replace(config.for_game(game_key), **changes)
        self._current = dataclasses.replace(config, games=games)
        return self._current

    def update_setting(self, key: str, value: Any) -> AppConfig:
        """Persists one global setting and refreshes the current config."""
        self.save_setting(key, value)
        self._current = dataclasses.replace(self.current, **{key: value})
        return self._current

    # --- Helpers ---

    def _read_raw(self) -> dict:
        with open(self.config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _read_for_update(self) -> dict:
        if not self.config_path.exists():
            return {SECTION_SETTINGS: {}, SECTION_GAMES: {}}
        try:
            return self._read_raw()
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read config before updating it: {e}")
            raise ConfigSaveError(f"Failed to read config file: {e}") from e

    def _write_raw(self, config_data: dict):
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(config_data, f, indent=4)
        except OSError as e:
            logger.error(f"IOError while saving config: {e}", exc_info=True)
            raise ConfigSaveError(f"Failed to write to config file: {e}") from e
        except TypeError as e:
            logger.error(f"TypeError during JSON serialization: {e}", exc_info=True)
            raise ConfigSaveError(f"A data type could not be saved to JSON: {e}") from e

    @staticmethod
    def _to_path(value) -> Path | None:
        return Path(value) if value else None

    @staticmethod
    def _to_str(value: Path | None) -> str | None:
        return str(value) if value else None
