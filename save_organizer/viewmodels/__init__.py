from .main_window_vm import MainWindowViewModel
from .read_only_vm import ReadOnlyAppearance, ReadOnlyButtonViewModel
from .save_list_vm import SaveListViewModel
from .settings_vm import SettingsViewModel

__all__ = [
    "MainWindowViewModel",
    "ReadOnlyAppearance",
    "ReadOnlyButtonViewModel",
    "SaveListViewModel",
    "SettingsViewModel",
]
