# save_organizer/models/game_model.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True, eq=False)
class Game:
    """A supported title and where its save file lives. Immutable."""

    key: str
    caption: str
    abbreviation: str
    save_file_name: str
    # Folder under AppData/Roaming (or Documents) holding one subfolder per account
    save_folder: str
    steam_app_id: int | None = None
    documents_based: bool = False
    supports_read_only: bool = True
    # Snapshots capture the whole folder that contains the save file
    snapshot_directory: bool = False

    def __post_init__(self):
        if not self.key:
            raise ValueError("Game key must not be empty.")

    def __eq__(self, other):
        return isinstance(other, Game) and other.key == self.key

    def __hash__(self):
        return hash(self.key)

    def __str__(self):
        return self.caption
