from .config_service import ConfigService
from .game_service import DEFAULT_GAMES, GameRegistry
from .selection_service import SelectionState
from .profile_service import ProfileStore
from .save_entry_service import SaveEntryCatalog
from .file_attribute_service import FileAttributeController
from .watcher_service import SaveFolderWatcher
from .organizer_service import Organizer

__all__ = [
    "ConfigService",
    "DEFAULT_GAMES",
    "GameRegistry",
    "SelectionState",
    "ProfileStore",
    "SaveEntryCatalog",
    "FileAttributeController",
    "SaveFolderWatcher",
    "Organizer",
]
