# save_organizer/services/file_attribute_service.py
from pathlib import Path
from save_organizer.core.exceptions import SaveFileIOError
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.models.game_model import Game
from save_organizer.services.game_service import GameRegistry
from save_organizer.services.selection_service import SelectionState
from save_organizer.utils.file_utils import FileUtils
from save_organizer.utils.logger_utils import logger


class FileAttributeController:
    """
    Reads and flips the read-only attribute of a game's live save file.

    The state is queried from disk on every call. The only thing remembered is
    the last value seen by check_external_change(), which is how changes made
    outside the organizer are noticed.
    """

    interests = (EventKind.SAVE_LOCATION_CHANGED,)

    def __init__(self, registry: GameRegistry, selection: SelectionState, hub: EventHub):
        self.registry = registry
        self.selection = selection
        self.hub = hub
        self._last_observed: dict[str, bool | None] = {}
        self.hub.subscribe(self)

    def on_event(self, event: Event):
        # The baseline belonged to the previous file
        self._last_observed.pop(event.payload.key, None)

    def save_file(self, game: Game) -> Path | None:
        return self.registry.resolve_save_location(game)

    def is_writable(self, game: Game) -> bool | None:
        """True/False for an existing save file, None when there is no file."""
        path = self.save_file(game)
        if path is None or not path.is_file():
            return None
        try:
            return FileUtils.is_writable(path)
        except OSError as e:
            logger.warning(f"Could not read attributes of '{path}': {e}")
            return None

    def toggle_writable(self, game: Game) -> bool | None:
        """
        Flips the save file between writable and read-only and returns the new
        state. Does nothing (and returns None) for games without read-only
        support or without a save file.
        """
        if not self.registry.supports_read_only(game):
            logger.debug(f"'{game.caption}' does not support read-only. Toggle ignored.")
            return None

        with self.selection.lock:
            path = self.save_file(game)
            current = self.is_writable(game)
            if path is None or current is None:
                logger.debug(f"No save file for '{game.caption}'. Toggle ignored.")
                return None

            try:
                FileUtils.set_writable(path, not current)
            except OSError as e:
                logger.error(f"Failed to change attributes of '{path}': {e}")
                raise SaveFileIOError(f"Could not change the read-only state: {e}", path) from e

            new_state = self.is_writable(game)
            self._last_observed[game.key] = new_state
            logger.info(f"Save file of '{game.caption}' is now {'writable' if new_state else 'read-only'}.")
            self.hub.publish(EventKind.GAME_FILE_WRITABLE_STATE_CHANGED, new_state)
        return new_state

    def check_external_change(self, game: Game) -> bool:
        """
        Compares the current state with the last observed one and publishes
        `game_file_writable_state_changed` if something else changed it.
        The first call for a game only records a baseline.
        """
        with self.selection.lock:
            current = self.is_writable(game)
            had_baseline = game.key in self._last_observed
            previous = self._last_observed.get(game.key)
            self._last_observed[game.key] = current

            if not had_baseline or current == previous or current is None:
                return False
            logger.info(f"Read-only state of '{game.caption}' changed outside the organizer.")
            self.hub.publish(EventKind.GAME_FILE_WRITABLE_STATE_CHANGED, current)
        return True
