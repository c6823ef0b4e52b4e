# save_organizer/viewmodels/settings_vm.py
from PyQt6.QtCore import QObject, pyqtSignal
from save_organizer.core.constants import SETTING_CHECK_FOR_UPDATES, SETTING_COMPACT_MODE
from save_organizer.core.exceptions import ConfigSaveError
from save_organizer.services.organizer_service import Organizer
from save_organizer.utils.logger_utils import logger


class SettingsViewModel(QObject):
    """Manages the state and logic for the settings dialog."""

    settings_loaded = pyqtSignal(bool, bool)  # compact_mode, check_for_updates
    error_occurred = pyqtSignal(str, str)

    def __init__(self, organizer: Organizer):
        super().__init__()
        self.organizer = organizer

    def load(self):
        self.settings_loaded.emit(self.organizer.compact_mode, self.organizer.check_for_updates)

    def set_compact_mode(self, enabled: bool) -> bool:
        return self._change(SETTING_COMPACT_MODE, bool(enabled))

    def set_check_for_updates(self, enabled: bool) -> bool:
        return self._change(SETTING_CHECK_FOR_UPDATES, bool(enabled))

    def _change(self, key: str, value: bool) -> bool:
        try:
            self.organizer.change_setting(key, value)
        except ConfigSaveError as e:
            logger.error(f"Failed to save setting '{key}': {e}")
            self.error_occurred.emit("Settings Not Saved", str(e))
            return False
        return True
