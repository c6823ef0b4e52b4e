# save_organizer/services/selection_service.py
from __future__ import annotations

import threading
from typing import Callable

from save_organizer.core.exceptions import InvalidSelectionError, NotFoundError
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile
from save_organizer.models.save_entry_model import SaveEntry
from save_organizer.services.game_service import GameRegistry
from save_organizer.utils.logger_utils import logger


class SelectionState:
    """
    The current (game, profile, entry) triple every view follows.

    Only switch_to_game/switch_to_profile change it from the outside. The
    stage_* methods are for the other services: they apply a change and return
    the events it implies, so the caller can publish one ordered list once its
    own state is consistent.

    `lock` is the organizer's single-writer lock. It is re-entrant so that
    listeners may call back into the organizer while an event is delivered.
    """

    def __init__(self, registry: GameRegistry, hub: EventHub):
        self.registry = registry
        self.hub = hub
        self.lock = threading.RLock()

        self._game: Game | None = None
        self._profile: Profile | None = None
        self._entry: SaveEntry | None = None
        self._profile_source: Callable[[Game], list[Profile]] = lambda game: []

    def bind_profile_source(self, source: Callable[[Game], list[Profile]]):
        """Tells the selection where to look up a game's profiles."""
        self._profile_source = source

    # --- Read Access ---

    @property
    def game(self) -> Game | None:
        return self._game

    @property
    def profile(self) -> Profile | None:
        return self._profile

    @property
    def entry(self) -> SaveEntry | None:
        return self._entry

    def is_profile_selected(self) -> bool:
        """True when a real (non-placeholder) profile is selected."""
        return self._profile is not None and not self._profile.is_placeholder

    def default_profile(self, game: Game) -> Profile:
        """The first profile of the game, or its placeholder if it has none."""
        profiles = self._profile_source(game)
        return profiles[0] if profiles else Profile(game, "")

    # --- Public Operations ---

    def switch_to_game(self, game: Game):
        with self.lock:
            events = self.stage_game(game)
            self.hub.publish_all(events)

    def switch_to_profile(self, profile: Profile):
        with self.lock:
            events = self.stage_profile(self._resolve_profile(profile))
            self.hub.publish_all(events)

    # --- Staging (mutate now, publish later) ---

    def stage_game(self, game: Game) -> list[Event]:
        if not self.registry.contains(game):
            raise InvalidSelectionError(f"Game '{game.key}' is not in the registry.")
        game = self.registry.get_game(game.key)
        profile = self.default_profile(game)

        self._game = game
        self._profile = profile
        self._entry = None
        logger.info(f"Switched to game '{game.caption}' with profile '{profile.name}'.")
        return [
            Event(EventKind.CHANGED_TO_GAME, game),
            Event(EventKind.CHANGED_TO_PROFILE, profile),
        ]

    def stage_profile(self, profile: Profile) -> list[Event]:
        if self._game is None or profile.game != self._game:
            raise InvalidSelectionError(
                f"Profile '{profile.name}' belongs to '{profile.game.key}', "
                f"but the selected game is '{self._game.key if self._game else None}'."
            )
        self._profile = profile
        self._entry = None
        logger.info(f"Switched to profile '{profile.name}'.")
        return [Event(EventKind.CHANGED_TO_PROFILE, profile)]

    def stage_entry(self, entry: SaveEntry) -> list[Event]:
        self._check_entry_owner(entry)
        self._entry = entry
        logger.debug(f"Selected entry '{entry.name}'.")
        return [Event(EventKind.ENTRY_SELECTED, entry)]

    def retarget_entry(self, entry: SaveEntry):
        """Points the selection at the renamed object of the selected entry."""
        self._check_entry_owner(entry)
        self._entry = entry

    def stage_clear_entry(self) -> list[Event]:
        self._entry = None
        return []

    def reset(self):
        """Forgets the whole selection. Used when the organizer is closed."""
        with self.lock:
            self._game = None
            self._profile = None
            self._entry = None

    # --- Helpers ---

    def _check_entry_owner(self, entry: SaveEntry):
        if self._profile is None or entry.profile != self._profile:
            raise InvalidSelectionError(
                f"Entry '{entry.name}' does not belong to the selected profile "
                f"'{self._profile.name if self._profile else None}'."
            )

    def _resolve_profile(self, profile: Profile) -> Profile:
        """Maps the given profile onto the stored instance of the same identity."""
        if self._game is None or profile.game != self._game:
            # Let stage_profile raise the ownership error
            return profile
        if profile.is_placeholder:
            return Profile(self._game, "")
        for known in self._profile_source(self._game):
            if known == profile:
                return known
        raise NotFoundError(f"Profile '{profile.name}' no longer exists for '{self._game.caption}'.")
