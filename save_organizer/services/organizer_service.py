# save_organizer/services/organizer_service.py
from pathlib import Path
from typing import Any, Iterable
from save_organizer.core.constants import SETTING_LAST_GAME
from save_organizer.core.exceptions import ConfigSaveError, NotFoundError
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.models.game_model import Game
from save_organizer.services.config_service import ConfigService
from save_organizer.services.file_attribute_service import FileAttributeController
from save_organizer.services.game_service import DEFAULT_GAMES, GameRegistry
from save_organizer.services.profile_service import ProfileStore
from save_organizer.services.save_entry_service import SaveEntryCatalog
from save_organizer.services.selection_service import SelectionState
from save_organizer.services.watcher_service import SaveFolderWatcher
from save_organizer.utils.logger_utils import logger
from save_organizer.utils.system_utils import SystemUtils


class Organizer:
    """
    Owns one complete organizer: the event hub, the selection and every
    service that reads or changes them. Everything lives as long as this
    object; close() disconnects all listeners and forgets the selection.
    """

    def __init__(
        self,
        config_service: ConfigService,
        games: Iterable[Game] = DEFAULT_GAMES,
        registry: GameRegistry | None = None,
        system_utils: SystemUtils | None = None,
        watch_filesystem: bool = False,
    ):
        self.config_service = config_service
        self.system_utils = system_utils or SystemUtils()

        # --- Wiring, leaves first ---
        self.hub = EventHub()
        self.registry = registry or GameRegistry(config_service, games)
        self.selection = SelectionState(self.registry, self.hub)
        self.profiles = ProfileStore(
            self.registry, config_service, self.selection, self.hub, self.system_utils
        )
        # The catalog subscribes first so it invalidates before any view rescans
        self.catalog = SaveEntryCatalog(self.registry, self.selection, self.hub, self.system_utils)
        self.attributes = FileAttributeController(self.registry, self.selection, self.hub)
        self.watcher: SaveFolderWatcher | None = None
        if watch_filesystem:
            self.watcher = SaveFolderWatcher(
                self.selection, self.profiles, self.catalog, self.attributes, self.hub
            )

        self.hub.subscribe(
            self._remember_selection,
            kinds=(EventKind.CHANGED_TO_GAME, EventKind.CHANGED_TO_PROFILE),
        )
        self._closed = False
        logger.info(f"Organizer initialized with {len(self.registry.list_games())} game(s).")

    # --- Lifecycle ---

    def start(self):
        """Selects the game and profile of the last session, or the first game."""
        config = self.config_service.current
        games = self.registry.list_games()
        if not games:
            logger.warning("No games registered. Nothing to select.")
            return

        game = games[0]
        if config.last_game_key:
            try:
                game = self.registry.get_game(config.last_game_key)
            except NotFoundError:
                logger.warning(f"Last used game '{config.last_game_key}' is unknown. Using '{game.caption}'.")
        self.selection.switch_to_game(game)

        last_profile = config.for_game(game.key).last_profile
        if last_profile and last_profile != self.selection.profile.name:
            try:
                self.selection.switch_to_profile(self.profiles.get_profile(game, last_profile))
            except NotFoundError:
                logger.info(f"Last used profile '{last_profile}' no longer exists.")

    def close(self):
        if self._closed:
            return
        if self.watcher is not None:
            self.watcher.stop()
        self.hub.clear()
        self.selection.reset()
        self._closed = True
        logger.info("Organizer closed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # --- Settings ---

    @property
    def compact_mode(self) -> bool:
        return self.config_service.current.compact_mode

    @property
    def check_for_updates(self) -> bool:
        return self.config_service.current.check_for_updates

    def change_setting(self, key: str, value: Any):
        """Persists a setting and announces the key through `setting_changed`."""
        self.config_service.update_setting(key, value)
        self.hub.publish(EventKind.SETTING_CHANGED, key)

    # --- Save location ---

    def set_save_location(self, game: Game, path: Path | None):
        """
        Overrides where the game's live save is found (None restores the
        automatic search) and announces it through `save_location_changed`.
        """
        with self.selection.lock:
            self.registry.set_save_location(game, path)
            self.hub.publish(EventKind.SAVE_LOCATION_CHANGED, game)

    # --- Listener ---

    def _remember_selection(self, event: Event):
        try:
            if event.kind is EventKind.CHANGED_TO_GAME:
                self.config_service.update_setting(SETTING_LAST_GAME, event.payload.key)
            elif not event.payload.is_placeholder:
                self.config_service.update_game_config(
                    event.payload.game.key, last_profile=event.payload.name
                )
        except ConfigSaveError as e:
            logger.warning(f"Could not remember the current selection: {e}")
