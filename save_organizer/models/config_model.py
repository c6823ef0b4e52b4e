# save_organizer/models/config_model.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class GameConfig:
    """User configuration for one game. Immutable."""

    profiles_directory: Path | None = None
    # Set when the user points the organizer at a relocated save file
    save_file_location: Path | None = None
    last_profile: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Holds the application's entire configuration state. Immutable."""

    games: dict[str, GameConfig] = field(default_factory=dict)

    # --- Last Session State ---
    last_game_key: str | None = None

    # --- Global Settings ---
    compact_mode: bool = False
    check_for_updates: bool = True

    def for_game(self, game_key: str) -> GameConfig:
        return self.games.get(game_key, GameConfig())
