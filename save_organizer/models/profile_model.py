# save_organizer/models/profile_model.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from .game_model import Game


@dataclass(frozen=True, eq=False)
class Profile:
    """A named collection of save snapshots for one game, backed by one directory."""

    game: Game
    name: str
    directory: Path | None = None

    @property
    def is_placeholder(self) -> bool:
        """The unnamed profile that stands in while a game has no profiles."""
        return self.name == "" and self.directory is None

    @property
    def identity(self) -> tuple[str, str]:
        return (self.game.key, self.name)

    def __eq__(self, other):
        return isinstance(other, Profile) and other.identity == self.identity

    def __hash__(self):
        return hash(self.identity)

    def __str__(self):
        return self.name
