# save_organizer/services/save_entry_service.py
from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path

from save_organizer.core.exceptions import (
    InvalidSelectionError,
    NameCollisionError,
    NotFoundError,
    SaveFileIOError,
)
from save_organizer.core.signals import Event, EventHub, EventKind
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile
from save_organizer.models.save_entry_model import EntryKind, SaveEntry
from save_organizer.services.game_service import GameRegistry
from save_organizer.services.profile_service import validate_name
from save_organizer.services.selection_service import SelectionState
from save_organizer.utils.file_utils import FileUtils
from save_organizer.utils.logger_utils import logger
from save_organizer.utils.system_utils import SystemUtils


class SaveEntryCatalog:
    """
    The save snapshots of each profile, derived from a listing of the
    profile's directory. Entries are identified by their path relative to the
    profile directory and listed by name, case-insensitively.

    Copies that touch a profile (create, load, delete) hold that profile's
    I/O lock, so two of them never interleave. The I/O lock is taken before
    the selection lock and is released before any event is published.
    """

    interests = (
        EventKind.PROFILE_DIRECTORY_CHANGED,
        EventKind.PROFILE_RENAMED,
        EventKind.PROFILE_DELETED,
    )

    def __init__(
        self,
        registry: GameRegistry,
        selection: SelectionState,
        hub: EventHub,
        system_utils: SystemUtils | None = None,
    ):
        self.registry = registry
        self.selection = selection
        self.hub = hub
        self.system_utils = system_utils or SystemUtils()

        # profile identity -> entries sorted by name
        self._entries: dict[tuple[str, str], list[SaveEntry]] = {}
        self._io_locks: dict[tuple[str, str], threading.Lock] = {}
        self._io_locks_guard = threading.Lock()
        self._loading: set[tuple[str, str]] = set()

        self.hub.subscribe(self)

    # --- Listener ---

    def on_event(self, event: Event):
        if event.kind is EventKind.PROFILE_DIRECTORY_CHANGED:
            self.invalidate(event.payload)
        elif event.kind is EventKind.PROFILE_RENAMED:
            previous, _renamed = event.payload
            self.forget(previous)
        elif event.kind is EventKind.PROFILE_DELETED:
            self.forget(event.payload)

    # --- Queries ---

    def list_entries(self, profile: Profile) -> list[SaveEntry]:
        """Entries of the profile; empty for a missing or unreadable directory."""
        if profile.is_placeholder or profile.directory is None:
            return []
        if profile.identity not in self._entries:
            self._entries[profile.identity] = self._scan(profile)
        return list(self._entries[profile.identity])

    def get_entry(self, profile: Profile, name: str) -> SaveEntry:
        for entry in self.list_entries(profile):
            if entry.name == name:
                return entry
        raise NotFoundError(f"No save named '{name}' in profile '{profile.name}'.")

    def is_loading(self, profile: Profile) -> bool:
        return profile.identity in self._loading

    def refresh(self, profile: Profile, notify: bool = False) -> list[SaveEntry]:
        """
        Rescans the profile directory. A selected entry that disappeared is
        deselected. With notify, `entries_refreshed` is published.
        """
        with self.selection.lock:
            entries = self._scan(profile) if not profile.is_placeholder else []
            self._entries[profile.identity] = entries

            if self.selection.entry is not None and self.selection.entry.profile == profile:
                if self.selection.entry not in entries:
                    logger.info(f"Selected save '{self.selection.entry.name}' disappeared from disk.")
                    self.selection.stage_clear_entry()
            if notify:
                self.hub.publish(EventKind.ENTRIES_REFRESHED, profile)
        return list(entries)

    def invalidate(self, game: Game | None = None):
        """Drops cached listings so the next query rescans."""
        with self.selection.lock:
            if game is None:
                self._entries.clear()
            else:
                for identity in [i for i in self._entries if i[0] == game.key]:
                    del self._entries[identity]
        logger.debug(f"Invalidated save listings for {game.caption if game else 'all games'}.")

    def forget(self, profile: Profile):
        """
        Drops everything kept for a profile that no longer exists under its
        name. A lock still held by a running copy is kept until a later call.
        """
        with self.selection.lock:
            self._entries.pop(profile.identity, None)
        with self._io_locks_guard:
            lock = self._io_locks.get(profile.identity)
            if lock is not None and not lock.locked():
                del self._io_locks[profile.identity]

    # --- Mutations ---

    def create_entry(self, profile: Profile, name: str, source: Path | None = None) -> SaveEntry:
        """
        Copies the live save (or `source`) into the profile directory as `name`.
        A failed copy leaves nothing behind.
        """
        validate_name(name, "save name")
        directory = self._require_directory(profile)
        if source is None:
            source = self._live_snapshot_source(profile)
        if source is None or not source.exists():
            raise SaveFileIOError(f"No save file found for '{profile.game.caption}'.", source)

        target = directory / name
        with self._io_lock(profile):
            self._check_name_free(profile, name)
            logger.info(f"Creating save '{name}' in profile '{profile.name}' from: {source}")
            try:
                FileUtils.copy_to_new(source, target)
            except OSError as e:
                logger.error(f"Failed to copy '{source}' to '{target}': {e}")
                raise SaveFileIOError(f"Could not create save '{name}': {e}", target) from e

            with self.selection.lock:
                entries = self.refresh(profile)
                entry = self._find_in(entries, Path(name))
                if entry is None:
                    raise NotFoundError(f"Save '{name}' vanished right after it was created.")

        self._publish([Event(EventKind.ENTRY_CREATED, entry)])
        return entry

    def rename_entry(self, entry: SaveEntry, new_name: str) -> SaveEntry:
        validate_name(new_name, "save name")
        with self._io_lock(entry.profile), self.selection.lock:
            current = self._require_entry(entry)
            if new_name == current.name:
                return current
            self._check_name_free(entry.profile, new_name, ignore=current)

            target = current.path.with_name(new_name)
            try:
                os.rename(current.path, target)
            except OSError as e:
                logger.error(f"Failed to rename '{current.path}' to '{target}': {e}")
                raise SaveFileIOError(f"Could not rename save '{current.name}': {e}", current.path) from e

            was_selected = self.selection.entry == current
            entries = self.refresh(entry.profile)
            renamed = self._find_in(entries, current.relative_path.with_name(new_name))
            if renamed is None:
                raise NotFoundError(f"Save '{new_name}' vanished right after it was renamed.")
            if was_selected:
                self.selection.retarget_entry(renamed)
            logger.info(f"Renamed save '{current.name}' to '{new_name}'.")

        self._publish([Event(EventKind.ENTRY_RENAMED, renamed)])
        return renamed

    def delete_entry(self, entry: SaveEntry, to_recycle_bin: bool = False):
        with self._io_lock(entry.profile), self.selection.lock:
            current = self._require_entry(entry)
            if to_recycle_bin:
                if not self.system_utils.move_to_recycle_bin(current.path):
                    raise SaveFileIOError(
                        f"Could not move save '{current.name}' to the recycle bin.", current.path
                    )
            else:
                try:
                    FileUtils.remove_path(current.path)
                except OSError as e:
                    logger.error(f"Failed to delete save '{current.path}': {e}")
                    raise SaveFileIOError(f"Could not delete save '{current.name}': {e}", current.path) from e

            events: list[Event] = []
            if self.selection.entry == current:
                events += self.selection.stage_clear_entry()
            self.refresh(entry.profile)
            logger.info(f"Deleted save '{current.name}' from profile '{current.profile.name}'.")
            events.append(Event(EventKind.ENTRY_DELETED, current))

        self._publish(events)

    def clear_selection(self):
        """Deselects the selected entry, if any. Views are told by their own caller."""
        with self.selection.lock:
            self.selection.stage_clear_entry()

    def select_entry(self, entry: SaveEntry):
        """
        Selects an entry of the selected profile. Entries of a game that is not
        selected are ignored.
        """
        with self.selection.lock:
            if self.selection.game is None or entry.profile.game != self.selection.game:
                logger.debug(f"Ignoring selection of '{entry.name}': its game is not selected.")
                return
            if entry.profile != self.selection.profile:
                raise InvalidSelectionError(
                    f"Save '{entry.name}' belongs to profile '{entry.profile.name}', "
                    f"not the selected profile."
                )
            current = self._require_entry(entry)
            self.hub.publish_all(self.selection.stage_entry(current))

    # --- Loading ---

    def load_entry(self, entry: SaveEntry):
        """
        Copies the entry onto the live save location. `save_load_started` and
        `save_load_finished` bracket the copy, also when it fails.
        """
        current = self.begin_load(entry)
        try:
            self.restore_entry(current)
        finally:
            self.end_load(current)

    def begin_load(self, entry: SaveEntry) -> SaveEntry:
        with self.selection.lock:
            current = self._require_entry(entry)
            self._loading.add(current.profile.identity)
            logger.info(f"Loading save '{current.name}' of profile '{current.profile.name}'.")
            self.hub.publish(EventKind.SAVE_LOAD_STARTED, current)
        return current

    def restore_entry(self, entry: SaveEntry):
        """
        The copy step of a load. It only touches the filesystem, so it may run
        on a worker thread. The live save is replaced atomically and keeps its
        read-only state; on failure it is left as it was.
        """
        game = entry.profile.game
        live_file = self.registry.resolve_save_location(game, entry.profile)
        if live_file is None:
            raise SaveFileIOError(f"No live save location found for '{game.caption}'.")
        target = live_file.parent if game.snapshot_directory else live_file

        if entry.is_directory != game.snapshot_directory:
            raise SaveFileIOError(
                f"Save '{entry.name}' is a {entry.kind.value}, which '{game.caption}' cannot load.",
                entry.path,
            )

        with self._io_lock(entry.profile):
            if not entry.path.exists():
                raise NotFoundError(f"Save '{entry.name}' no longer exists on disk.")
            try:
                FileUtils.replace_with_copy(entry.path, target)
            except OSError as e:
                logger.error(f"Failed to load '{entry.path}' onto '{target}': {e}")
                raise SaveFileIOError(f"Could not load save '{entry.name}': {e}", target) from e
        logger.info(f"Loaded save '{entry.name}' onto: {target}")

    def end_load(self, entry: SaveEntry):
        with self.selection.lock:
            self._loading.discard(entry.profile.identity)
            self.hub.publish(EventKind.SAVE_LOAD_FINISHED, entry)

    # --- Helpers ---

    def _scan(self, profile: Profile) -> list[SaveEntry]:
        directory = profile.directory
        if directory is None:
            return []
        entries: list[SaveEntry] = []
        try:
            with os.scandir(directory) as it:
                for item in it:
                    if FileUtils.is_temp_artifact(item.name):
                        continue
                    kind = EntryKind.DIRECTORY if item.is_dir() else EntryKind.FILE
                    entries.append(
                        SaveEntry(
                            profile=profile,
                            relative_path=Path(item.name),
                            kind=kind,
                            modified=datetime.fromtimestamp(item.stat().st_mtime),
                        )
                    )
        except FileNotFoundError:
            logger.debug(f"Profile directory does not exist: {directory}")
            return []
        except OSError as e:
            logger.warning(f"Could not scan profile directory '{directory}': {e}")
            return []
        entries.sort(key=lambda e: e.name.casefold())
        return entries

    def _require_directory(self, profile: Profile) -> Path:
        if profile.is_placeholder or profile.directory is None:
            raise InvalidSelectionError("The placeholder profile cannot hold saves.")
        return profile.directory

    def _require_entry(self, entry: SaveEntry) -> SaveEntry:
        """The catalog's own object for `entry`, rescanning once if it is missing."""
        found = self._find_in(self.list_entries(entry.profile), entry.relative_path)
        if found is None or not found.path.exists():
            found = self._find_in(self.refresh(entry.profile), entry.relative_path)
        if found is None:
            raise NotFoundError(f"Save '{entry.name}' no longer exists in profile '{entry.profile.name}'.")
        return found

    def _check_name_free(self, profile: Profile, name: str, ignore: SaveEntry | None = None):
        for existing in self.refresh(profile):
            if existing == ignore:
                continue
            if existing.name.casefold() == name.casefold():
                raise NameCollisionError(f"A save named '{name}' already exists.")
        if ignore is None and (profile.directory / name).exists():
            raise NameCollisionError(f"A file named '{name}' already exists.")

    def _live_snapshot_source(self, profile: Profile) -> Path | None:
        live_file = self.registry.resolve_save_location(profile.game, profile)
        if live_file is None:
            return None
        return live_file.parent if profile.game.snapshot_directory else live_file

    def _publish(self, events: list[Event]):
        # No lock is held here, so listeners may call back into the catalog
        self.hub.publish_all(events)

    def _io_lock(self, profile: Profile) -> threading.Lock:
        with self._io_locks_guard:
            return self._io_locks.setdefault(profile.identity, threading.Lock())

    @staticmethod
    def _find_in(entries: list[SaveEntry], relative_path: Path) -> SaveEntry | None:
        for entry in entries:
            if entry.relative_path == relative_path:
                return entry
        return None
