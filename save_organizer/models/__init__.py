from .game_model import Game
from .profile_model import Profile
from .save_entry_model import EntryKind, SaveEntry
from .config_model import AppConfig, GameConfig

__all__ = ["Game", "Profile", "EntryKind", "SaveEntry", "AppConfig", "GameConfig"]
