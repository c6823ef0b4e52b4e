# save_organizer/viewmodels/main_window_vm.py
from pathlib import Path
from PyQt6.QtCore import QObject, pyqtSignal
from save_organizer.core.constants import DELETE_SUCCESSFUL_MESSAGE
from save_organizer.core.exceptions import OrganizerError
from save_organizer.core.signals import Event, EventKind
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile
from save_organizer.services.organizer_service import Organizer
from save_organizer.utils.logger_utils import logger


class MainWindowViewModel(QObject):
    """
    State behind the game and profile pickers. Follows the organizer's
    events and turns user choices into organizer operations.
    """

    # ---Signals for the Game Picker ---
    game_list_updated = pyqtSignal(list)  # list[Game]
    active_game_changed = pyqtSignal(object)  # Game

    # ---Signals for the Profile Picker ---
    profile_list_updated = pyqtSignal(list, object)  # list[Profile], selected Profile
    active_profile_changed = pyqtSignal(object)  # Profile

    # ---Signals for Global UI Feedback ---
    toast_requested = pyqtSignal(str, str)  # message, level
    error_occurred = pyqtSignal(str, str)  # title, message

    interests = (
        EventKind.CHANGED_TO_GAME,
        EventKind.CHANGED_TO_PROFILE,
        EventKind.PROFILE_CREATED,
        EventKind.PROFILE_RENAMED,
        EventKind.PROFILE_DELETED,
        EventKind.PROFILE_DIRECTORY_CHANGED,
    )

    def __init__(self, organizer: Organizer):
        super().__init__()
        self.organizer = organizer
        self.games: list[Game] = organizer.registry.list_games()
        self.profiles: list[Profile] = []
        self.organizer.hub.subscribe(self)

    # ---Initialization ---

    def start(self):
        """Publishes the game list, then restores the last session's selection."""
        self.game_list_updated.emit(self.games)
        self.organizer.start()

    # ---Public Methods (API for the View) ---

    @property
    def active_game(self) -> Game | None:
        return self.organizer.selection.game

    @property
    def active_profile(self) -> Profile | None:
        return self.organizer.selection.profile

    def select_game(self, game_key: str):
        try:
            game = self.organizer.registry.get_game(game_key)
            self.organizer.selection.switch_to_game(game)
        except OrganizerError as e:
            self._report("Game Selection Failed", e)

    def select_profile(self, name: str):
        game = self.active_game
        if game is None:
            return
        try:
            if name == "":
                profile = self.organizer.profiles.placeholder(game)
            else:
                profile = self.organizer.profiles.get_profile(game, name)
            self.organizer.selection.switch_to_profile(profile)
        except OrganizerError as e:
            self._report("Profile Selection Failed", e)

    def create_profile(self, name: str) -> Profile | None:
        game = self.active_game
        if game is None:
            return None
        try:
            profile = self.organizer.profiles.create_profile(game, name)
        except OrganizerError as e:
            self._report("Could Not Create Profile", e)
            return None
        self.toast_requested.emit(f"Profile '{name}' created.", "success")
        return profile

    def rename_profile(self, name: str, new_name: str) -> Profile | None:
        game = self.active_game
        if game is None:
            return None
        try:
            profile = self.organizer.profiles.get_profile(game, name)
            return self.organizer.profiles.rename_profile(profile, new_name)
        except OrganizerError as e:
            self._report("Could Not Rename Profile", e)
            return None

    def delete_profile(self, name: str, delete_files: bool = False) -> bool:
        game = self.active_game
        if game is None:
            return False
        try:
            profile = self.organizer.profiles.get_profile(game, name)
            self.organizer.profiles.delete_profile(profile, delete_files=delete_files)
        except OrganizerError as e:
            self._report("Could Not Delete Profile", e)
            return False
        self.toast_requested.emit(DELETE_SUCCESSFUL_MESSAGE, "success")
        return True

    def set_profiles_directory(self, directory: Path):
        game = self.active_game
        if game is None:
            return
        try:
            self.organizer.profiles.set_profile_directory(game, directory)
        except OrganizerError as e:
            self._report("Could Not Change Profiles Directory", e)

    def set_save_file_location(self, path: Path | None):
        game = self.active_game
        if game is None:
            return
        try:
            self.organizer.set_save_location(game, path)
        except OrganizerError as e:
            self._report("Could Not Change Save File Location", e)

    # ---Event Handling ---

    def on_event(self, event: Event):
        game = self.active_game
        if event.kind is EventKind.CHANGED_TO_GAME:
            self.active_game_changed.emit(event.payload)
            self._refill(event.payload)
        elif event.kind is EventKind.CHANGED_TO_PROFILE:
            self.active_profile_changed.emit(event.payload)
            self._refill(event.payload.game)
        elif event.kind is EventKind.PROFILE_RENAMED:
            _previous, renamed = event.payload
            if game is not None and renamed.game == game:
                self._refill(game)
        elif event.kind is EventKind.PROFILE_DELETED:
            if game is not None and event.payload.game == game:
                self.profiles = [p for p in self.profiles if p != event.payload]
                self.profile_list_updated.emit(list(self.profiles), self.active_profile)
        elif event.kind in (EventKind.PROFILE_CREATED, EventKind.PROFILE_DIRECTORY_CHANGED):
            changed_game = event.payload.game if isinstance(event.payload, Profile) else event.payload
            if game is not None and changed_game == game:
                self._refill(game)

    def _refill(self, game: Game):
        self.profiles = self.organizer.profiles.list_profiles(game)
        logger.debug(f"Profile list for '{game.caption}' refilled with {len(self.profiles)} item(s).")
        self.profile_list_updated.emit(list(self.profiles), self.active_profile)

    def _report(self, title: str, error: Exception):
        logger.error(f"{title}: {error}")
        self.error_occurred.emit(title, str(error))
