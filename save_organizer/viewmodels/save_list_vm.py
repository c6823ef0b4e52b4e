# save_organizer/viewmodels/save_list_vm.py
from pathlib import Path
from PyQt6.QtCore import QObject, pyqtSignal, QThreadPool
from save_organizer.core.constants import DELETE_SUCCESSFUL_MESSAGE
from save_organizer.core.exceptions import OrganizerError
from save_organizer.core.signals import Event, EventKind
from save_organizer.models.save_entry_model import SaveEntry
from save_organizer.services.organizer_service import Organizer
from save_organizer.utils.async_utils import Worker, start_worker
from save_organizer.utils.logger_utils import logger


class SaveListViewModel(QObject):
    """
    State behind the list of saves of the selected profile.

    Loads run on a worker thread. While one is running the view model is
    busy and refuses further loads, creates and deletes.
    """

    # ---Signals for the Save List ---
    entries_updated = pyqtSignal(list)  # list[SaveEntry]
    selected_entry_changed = pyqtSignal(object)  # SaveEntry or None
    busy_changed = pyqtSignal(bool)
    load_completed = pyqtSignal(object, bool)  # SaveEntry, success

    # ---Signals for Global UI Feedback ---
    toast_requested = pyqtSignal(str, str)  # message, level
    error_occurred = pyqtSignal(str, str)  # title, message

    interests = (
        EventKind.CHANGED_TO_GAME,
        EventKind.CHANGED_TO_PROFILE,
        EventKind.PROFILE_DIRECTORY_CHANGED,
        EventKind.ENTRY_CREATED,
        EventKind.ENTRY_RENAMED,
        EventKind.ENTRY_DELETED,
        EventKind.ENTRIES_REFRESHED,
        EventKind.ENTRY_SELECTED,
        EventKind.SAVE_LOAD_STARTED,
        EventKind.SAVE_LOAD_FINISHED,
    )

    def __init__(self, organizer: Organizer, thread_pool: QThreadPool | None = None):
        super().__init__()
        self.organizer = organizer
        self.catalog = organizer.catalog
        self.thread_pool = thread_pool

        # ---Internal State ---
        self.entries: list[SaveEntry] = []
        self.is_busy: bool = False
        self._pending_load: SaveEntry | None = None
        self._pending_load_failed: bool = False

        self.organizer.hub.subscribe(self)

    # ---Public Methods (API for the View) ---

    @property
    def selected_entry(self) -> SaveEntry | None:
        return self.organizer.selection.entry

    def refresh(self):
        """Rescans the selected profile's directory."""
        profile = self.organizer.selection.profile
        if profile is None:
            self._set_entries([])
            return
        self.catalog.refresh(profile, notify=True)

    def select(self, name: str | None):
        profile = self.organizer.selection.profile
        if profile is None:
            return
        try:
            if name is None:
                self.catalog.clear_selection()
                self.selected_entry_changed.emit(None)
                return
            self.catalog.select_entry(self.catalog.get_entry(profile, name))
        except OrganizerError as e:
            self._report("Could Not Select Save", e)

    def create(self, name: str) -> SaveEntry | None:
        """Imports the current live save into the selected profile."""
        profile = self.organizer.selection.profile
        if profile is None or self._refuse_while_busy():
            return None
        try:
            return self.catalog.create_entry(profile, name)
        except OrganizerError as e:
            self._report("Could Not Import Save", e)
            return None

    def rename(self, name: str, new_name: str) -> SaveEntry | None:
        profile = self.organizer.selection.profile
        if profile is None:
            return None
        try:
            return self.catalog.rename_entry(self.catalog.get_entry(profile, name), new_name)
        except OrganizerError as e:
            self._report("Could Not Rename Save", e)
            return None

    def delete(self, name: str, to_recycle_bin: bool = False) -> bool:
        profile = self.organizer.selection.profile
        if profile is None or self._refuse_while_busy():
            return False
        try:
            self.catalog.delete_entry(self.catalog.get_entry(profile, name), to_recycle_bin)
        except OrganizerError as e:
            self._report("Could Not Delete Save", e)
            return False
        self.toast_requested.emit(DELETE_SUCCESSFUL_MESSAGE, "success")
        return True

    def load_selected(self) -> bool:
        """Loads the selected save on the calling thread."""
        entry = self.selected_entry
        if entry is None or self._refuse_while_busy():
            return False
        try:
            self.catalog.load_entry(entry)
        except OrganizerError as e:
            self._report("Could Not Load Save", e)
            self.load_completed.emit(entry, False)
            return False
        self.load_completed.emit(entry, True)
        return True

    def load_selected_async(self) -> bool:
        """
        Loads the selected save on a worker thread. `save_load_started` is
        published now and `save_load_finished` once the worker is done.
        """
        entry = self.selected_entry
        if entry is None or self._refuse_while_busy():
            return False
        try:
            entry = self.catalog.begin_load(entry)
        except OrganizerError as e:
            self._report("Could Not Load Save", e)
            return False

        self._pending_load = entry
        self._pending_load_failed = False
        worker = Worker(self.catalog.restore_entry, entry)
        worker.signals.error.connect(self._on_load_error)
        worker.signals.finished.connect(self._on_load_finished)
        if not start_worker(worker, self.thread_pool):
            self._pending_load_failed = True
            self._on_load_finished()
            return False
        return True

    def open_profile_folder(self) -> bool:
        profile = self.organizer.selection.profile
        if profile is None or profile.directory is None:
            return False
        return self.organizer.system_utils.open_path_in_explorer(Path(profile.directory))

    # ---Private Slots (for Async/Signal Handling) ---

    def _on_load_error(self, error_info: tuple):
        exctype, value, tb = error_info
        self._pending_load_failed = True
        logger.error(f"Loading save failed in worker: {value}\n{tb}")
        self.error_occurred.emit("Could Not Load Save", str(value))

    def _on_load_finished(self):
        entry = self._pending_load
        if entry is None:
            return
        self._pending_load = None
        self.catalog.end_load(entry)
        self.load_completed.emit(entry, not self._pending_load_failed)

    # ---Event Handling ---

    def on_event(self, event: Event):
        kind = event.kind
        if kind is EventKind.SAVE_LOAD_STARTED:
            self._set_busy(True)
        elif kind is EventKind.SAVE_LOAD_FINISHED:
            self._set_busy(False)
        elif kind is EventKind.ENTRY_SELECTED:
            self.selected_entry_changed.emit(event.payload)
        elif kind in (EventKind.CHANGED_TO_GAME, EventKind.CHANGED_TO_PROFILE):
            self._reload()
            self.selected_entry_changed.emit(None)
        else:
            self._reload()
            if kind is EventKind.ENTRY_DELETED or self.selected_entry is None:
                self.selected_entry_changed.emit(self.selected_entry)

    def _reload(self):
        profile = self.organizer.selection.profile
        self._set_entries(self.catalog.list_entries(profile) if profile is not None else [])

    def _set_entries(self, entries: list[SaveEntry]):
        self.entries = entries
        self.entries_updated.emit(list(entries))

    def _set_busy(self, busy: bool):
        if self.is_busy != busy:
            self.is_busy = busy
            self.busy_changed.emit(busy)

    def _refuse_while_busy(self) -> bool:
        if self.is_busy:
            logger.warning("A save is being loaded. Request ignored.")
            self.toast_requested.emit("Please wait until the current load is finished.", "warning")
        return self.is_busy

    def _report(self, title: str, error: Exception):
        logger.error(f"{title}: {error}")
        self.error_occurred.emit(title, str(error))
