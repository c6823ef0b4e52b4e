# save_organizer/services/watcher_service.py
from pathlib import Path
from PyQt6.QtCore import QObject, QFileSystemWatcher
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.services.file_attribute_service import FileAttributeController
from save_organizer.services.profile_service import ProfileStore
from save_organizer.services.save_entry_service import SaveEntryCatalog
from save_organizer.services.selection_service import SelectionState
from save_organizer.utils.logger_utils import logger


class SaveFolderWatcher(QObject):
    """
    Watches the selected profile's directory, the game's profiles directory
    and the live save file, so that changes made outside the organizer
    trigger a rescan or an attribute check.
    """

    interests = (
        EventKind.CHANGED_TO_GAME,
        EventKind.CHANGED_TO_PROFILE,
        EventKind.PROFILE_DIRECTORY_CHANGED,
        EventKind.SAVE_LOCATION_CHANGED,
        EventKind.SAVE_LOAD_FINISHED,
    )

    def __init__(
        self,
        selection: SelectionState,
        profiles: ProfileStore,
        catalog: SaveEntryCatalog,
        attributes: FileAttributeController,
        hub: EventHub,
    ):
        super().__init__()
        self.selection = selection
        self.profiles = profiles
        self.catalog = catalog
        self.attributes = attributes
        self.hub = hub

        self._watcher = QFileSystemWatcher(self)
        self._watcher.directoryChanged.connect(self.on_directory_changed)
        self._watcher.fileChanged.connect(self.on_file_changed)
        self.hub.subscribe(self)

    def on_event(self, event: Event):
        # The live file is replaced on load, which drops it from the watch list
        self.rewatch()

    def watched_paths(self) -> list[str]:
        return self._watcher.directories() + self._watcher.files()

    def rewatch(self):
        """Points the watcher at whatever is selected now."""
        current = self.watched_paths()
        if current:
            self._watcher.removePaths(current)

        game = self.selection.game
        if game is None:
            return

        paths: list[Path] = []
        profiles_directory = self.profiles.profiles_directory(game)
        if profiles_directory is not None and profiles_directory.is_dir():
            paths.append(profiles_directory)
        profile = self.selection.profile
        if profile is not None and profile.directory is not None and profile.directory.is_dir():
            paths.append(profile.directory)
        save_file = self.attributes.save_file(game)
        if save_file is not None and save_file.is_file():
            paths.append(save_file)

        if paths:
            failed = self._watcher.addPaths([str(p) for p in dict.fromkeys(paths)])
            if failed:
                logger.warning(f"Could not watch: {failed}")
        self.attributes.check_external_change(game)

    def stop(self):
        current = self.watched_paths()
        if current:
            self._watcher.removePaths(current)
        self.hub.unsubscribe(self)

    # --- Slots ---

    def on_directory_changed(self, path: str):
        game = self.selection.game
        if game is None:
            return
        changed = Path(path)
        profile = self.selection.profile
        if profile is not None and profile.directory is not None and changed == profile.directory:
            logger.debug(f"Profile directory changed on disk: {changed}")
            self.catalog.refresh(profile, notify=True)
        if changed == self.profiles.profiles_directory(game):
            logger.debug(f"Profiles directory changed on disk: {changed}")
            self.profiles.refresh(game)

    def on_file_changed(self, path: str):
        game = self.selection.game
        if game is None:
            return
        self.attributes.check_external_change(game)
        if Path(path).exists() and path not in self._watcher.files():
            self._watcher.addPath(path)
