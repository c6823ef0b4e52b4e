# save_organizer/services/profile_service.py
from __future__ import annotations

import os
from pathlib import Path

from save_organizer.core.exceptions import (
    DuplicateNameError,
    InvalidNameError,
    NotFoundError,
    ProfileDirectoryNotSetError,
    SaveFileIOError,
)
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile
from save_organizer.services.config_service import ConfigService
from save_organizer.services.game_service import GameRegistry
from save_organizer.services.selection_service import SelectionState
from save_organizer.utils.file_utils import FileUtils
from save_organizer.utils.logger_utils import logger
from save_organizer.utils.system_utils import SystemUtils


def validate_name(name: str, what: str = "name") -> str:
    """Rejects names that are empty or would not stay a single path component."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError(f"The {what} must not be empty.")
    if name != name.strip():
        raise InvalidNameError(f"The {what} '{name}' must not start or end with whitespace.")
    if name in (".", "..") or "/" in name or "\\" in name or os.sep in name:
        raise InvalidNameError(f"The {what} '{name}' is not a valid file name.")
    if FileUtils.is_temp_artifact(name):
        raise InvalidNameError(f"The {what} '{name}' uses a reserved suffix.")
    return name


class ProfileStore:
    """
    Keeps each game's ordered list of profiles in step with the game's
    profiles directory, where every subdirectory is one profile.
    """

    def __init__(
        self,
        registry: GameRegistry,
        config_service: ConfigService,
        selection: SelectionState,
        hub: EventHub,
        system_utils: SystemUtils | None = None,
    ):
        self.registry = registry
        self.config_service = config_service
        self.selection = selection
        self.hub = hub
        self.system_utils = system_utils or SystemUtils()

        # game key -> profiles in creation order
        self._profiles: dict[str, list[Profile]] = {}
        self.selection.bind_profile_source(self.list_profiles)

    # --- Queries ---

    def profiles_directory(self, game: Game) -> Path | None:
        return self.config_service.current.for_game(game.key).profiles_directory

    def list_profiles(self, game: Game) -> list[Profile]:
        """
        Profiles in creation order. Profiles found on the first scan are
        ordered by name; profiles created later are appended.
        """
        if game.key not in self._profiles:
            self._profiles[game.key] = self._scan(game)
        return list(self._profiles[game.key])

    def get_profile(self, game: Game, name: str) -> Profile:
        for profile in self.list_profiles(game):
            if profile.name == name:
                return profile
        raise NotFoundError(f"No profile named '{name}' for '{game.caption}'.")

    def placeholder(self, game: Game) -> Profile:
        return Profile(game, "")

    # --- Mutations ---

    def create_profile(self, game: Game, name: str, directory: Path | None = None) -> Profile:
        """Creates a profile and its directory. The selection is left alone."""
        validate_name(name, "profile name")
        with self.selection.lock:
            profiles = self._stored(game)
            self._check_unique(profiles, name)

            if directory is None:
                base = self.profiles_directory(game)
                if base is None:
                    raise ProfileDirectoryNotSetError(
                        f"No profiles directory is set for '{game.caption}'."
                    )
                directory = base / name
            directory = Path(directory)

            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create profile directory '{directory}': {e}")
                raise SaveFileIOError(f"Could not create profile directory: {e}", directory) from e

            profile = Profile(game, name, directory)
            profiles.append(profile)
            logger.info(f"Created profile '{name}' for '{game.caption}' at: {directory}")
            self.hub.publish(EventKind.PROFILE_CREATED, profile)
        return profile

    def delete_profile(self, profile: Profile, delete_files: bool = False):
        """
        Removes a profile from the catalog. Its directory stays on disk unless
        delete_files is set, in which case it goes to the recycle bin.
        If the profile was selected, the first remaining profile (or the
        placeholder) is selected instead.
        """
        with self.selection.lock:
            profiles = self._stored(profile.game)
            stored = self._find(profiles, profile)

            if delete_files and stored.directory is not None and stored.directory.exists():
                logger.info(f"Moving profile directory to recycle bin: {stored.directory}")
                if not self.system_utils.move_to_recycle_bin(stored.directory):
                    raise SaveFileIOError(
                        f"Could not move '{stored.directory}' to the recycle bin.", stored.directory
                    )

            profiles.remove(stored)
            logger.info(f"Deleted profile '{stored.name}' of '{stored.game.caption}'.")

            events = [Event(EventKind.PROFILE_DELETED, stored)]
            if self.selection.profile == stored:
                events += self.selection.stage_profile(self.selection.default_profile(stored.game))
            self.hub.publish_all(events)

    def rename_profile(self, profile: Profile, new_name: str) -> Profile:
        """
        Renames a profile. A directory named after the profile is renamed with
        it. A selected profile is re-selected so views show the new name.
        """
        validate_name(new_name, "profile name")
        with self.selection.lock:
            profiles = self._stored(profile.game)
            stored = self._find(profiles, profile)
            if new_name == stored.name:
                return stored
            self._check_unique([p for p in profiles if p is not stored], new_name)

            new_directory = stored.directory
            if stored.directory is not None and stored.directory.name == stored.name:
                new_directory = stored.directory.with_name(new_name)
                if new_directory.exists() and not self._same_file(stored.directory, new_directory):
                    raise DuplicateNameError(f"A folder named '{new_name}' already exists.")
                try:
                    os.rename(stored.directory, new_directory)
                except OSError as e:
                    logger.error(f"Failed to rename profile directory '{stored.directory}': {e}")
                    raise SaveFileIOError(f"Could not rename profile directory: {e}", stored.directory) from e

            renamed = Profile(stored.game, new_name, new_directory)
            profiles[profiles.index(stored)] = renamed
            logger.info(f"Renamed profile '{stored.name}' to '{new_name}'.")

            # Payload: (previous, renamed); listeners drop state kept under the old name
            events: list[Event] = [Event(EventKind.PROFILE_RENAMED, (stored, renamed))]
            if self.selection.profile == stored:
                events += self.selection.stage_profile(renamed)
            self.hub.publish_all(events)
        return renamed

    def set_profile_directory(self, game: Game, directory: Path | None):
        """
        Rebinds where a game's profiles are read from. The game's profiles are
        rescanned and, if the game is selected, the selection moves to a
        profile that exists in the new directory.
        """
        with self.selection.lock:
            self.config_service.update_game_config(
                game.key, profiles_directory=Path(directory) if directory else None
            )
            self._profiles[game.key] = self._scan(game)
            logger.info(f"Profiles directory for '{game.caption}' set to: {directory}")

            events = [Event(EventKind.PROFILE_DIRECTORY_CHANGED, game)]
            events += self._stage_selection_repair(game)
            self.hub.publish_all(events)

    def refresh(self, game: Game) -> list[Profile]:
        """
        Rescans the profiles directory after outside changes. Surviving
        profiles keep their order and new folders are appended by name.
        """
        with self.selection.lock:
            previous = self._profiles.get(game.key, [])
            scanned = {p.name: p for p in self._scan(game)}
            merged = [
                p for p in previous
                if p.name in scanned or (p.directory is not None and p.directory.is_dir())
            ]
            known = {p.name for p in merged}
            merged += [p for name, p in scanned.items() if name not in known]
            changed = merged != previous
            self._profiles[game.key] = merged

            if changed:
                logger.info(f"Profiles of '{game.caption}' changed on disk. Rescanned.")
                events = [Event(EventKind.PROFILE_DIRECTORY_CHANGED, game)]
                events += self._stage_selection_repair(game)
                self.hub.publish_all(events)
        return list(merged)

    # --- Helpers ---

    def _stored(self, game: Game) -> list[Profile]:
        """The mutable stored list for a game, scanned on first use."""
        self.list_profiles(game)
        return self._profiles[game.key]

    def _scan(self, game: Game) -> list[Profile]:
        directory = self.profiles_directory(game)
        if directory is None or not directory.is_dir():
            return []
        try:
            folders = [
                p for p in directory.iterdir()
                if p.is_dir() and not p.name.startswith(".") and not FileUtils.is_temp_artifact(p.name)
            ]
        except OSError as e:
            logger.warning(f"Could not scan profiles directory '{directory}': {e}")
            return []
        folders.sort(key=lambda p: p.name.casefold())
        logger.debug(f"Found {len(folders)} profile(s) for '{game.caption}' in '{directory}'.")
        return [Profile(game, folder.name, folder) for folder in folders]

    def _stage_selection_repair(self, game: Game) -> list[Event]:
        """Keeps the selected profile if it still exists, else falls back."""
        if self.selection.game != game:
            return []
        current = self.selection.profile
        for profile in self._profiles.get(game.key, []):
            if profile == current and profile.directory == current.directory:
                return []
            if profile == current:
                return self.selection.stage_profile(profile)
        if current is not None and current.is_placeholder and not self._profiles.get(game.key):
            return []
        return self.selection.stage_profile(self.selection.default_profile(game))

    @staticmethod
    def _find(profiles: list[Profile], profile: Profile) -> Profile:
        for stored in profiles:
            if stored == profile:
                return stored
        raise NotFoundError(f"Profile '{profile.name}' no longer exists for '{profile.game.caption}'.")

    @staticmethod
    def _check_unique(profiles: list[Profile], name: str):
        if any(p.name.casefold() == name.casefold() for p in profiles):
            raise DuplicateNameError(f"A profile named '{name}' already exists.")

    @staticmethod
    def _same_file(a: Path, b: Path) -> bool:
        # Case-only renames on case-insensitive filesystems
        try:
            return os.path.samefile(a, b)
        except OSError:
            return False
