# save_organizer/models/save_entry_model.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from .profile_model import Profile


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class SaveEntry:
    """
    One stored snapshot inside a profile directory. Identity is the path
    relative to the profile directory, so unchanged files keep their identity
    across rescans.
    """

    profile: Profile
    relative_path: Path
    kind: EntryKind = field(default=EntryKind.FILE, compare=False)
    modified: datetime | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return self.relative_path.name

    @property
    def path(self) -> Path:
        return self.profile.directory / self.relative_path

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def __str__(self):
        return self.name
