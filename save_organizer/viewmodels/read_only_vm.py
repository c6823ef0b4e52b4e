# save_organizer/viewmodels/read_only_vm.py
from dataclasses import dataclass
from typing import Callable
from PyQt6.QtCore import QObject, pyqtSignal
from save_organizer.core.constants import (
    APPEARANCE_SETTING_KEYS,
    READ_ONLY_TEXT,
    READ_ONLY_TOOLTIP,
    WRITABLE_TEXT,
    WRITABLE_TOOLTIP,
)
from save_organizer.core.exceptions import OrganizerError
from save_organizer.core.signals import Event, EventKind
from save_organizer.services.organizer_service import Organizer
from save_organizer.utils.logger_utils import logger


@dataclass(frozen=True)
class ReadOnlyAppearance:
    """Everything the view needs to draw the read-only button."""

    visible: bool
    writable: bool = True
    # None hides the label (compact mode or an update banner needs the room)
    text: str | None = None
    icon_key: str = "writable"
    tooltip: str = WRITABLE_TOOLTIP


HIDDEN = ReadOnlyAppearance(visible=False)


class ReadOnlyButtonViewModel(QObject):
    """
    State behind the button that toggles the read-only flag of the selected
    game's save file.
    """

    appearance_changed = pyqtSignal(object)  # ReadOnlyAppearance
    error_occurred = pyqtSignal(str, str)  # title, message

    interests = (
        EventKind.CHANGED_TO_GAME,
        EventKind.CHANGED_TO_PROFILE,
        EventKind.PROFILE_DIRECTORY_CHANGED,
        EventKind.SAVE_LOCATION_CHANGED,
        EventKind.SAVE_LOAD_FINISHED,
        EventKind.GAME_FILE_WRITABLE_STATE_CHANGED,
        EventKind.SETTING_CHANGED,
    )

    def __init__(self, organizer: Organizer, is_version_outdated: Callable[[], bool] | None = None):
        super().__init__()
        self.organizer = organizer
        self.is_version_outdated = is_version_outdated or (lambda: False)
        self.hovering = False
        self.appearance: ReadOnlyAppearance = HIDDEN
        self.organizer.hub.subscribe(self)
        self.refresh()

    # ---Public Methods (API for the View) ---

    def click(self) -> bool | None:
        """Toggles the attribute. Returns the new writable state, or None."""
        game = self.organizer.selection.game
        if game is None or not self.appearance.visible:
            return None
        try:
            return self.organizer.attributes.toggle_writable(game)
        except OrganizerError as e:
            logger.error(f"Toggling read-only failed: {e}")
            self.error_occurred.emit("Could Not Change Read-Only State", str(e))
            self.refresh()
            return None

    def set_hovering(self, hovering: bool):
        if hovering != self.hovering:
            self.hovering = hovering
            self.refresh()

    def refresh(self):
        appearance = self._compute()
        if appearance != self.appearance:
            self.appearance = appearance
            self.appearance_changed.emit(appearance)

    # ---Event Handling ---

    def on_event(self, event: Event):
        if event.kind is EventKind.SETTING_CHANGED and event.payload not in APPEARANCE_SETTING_KEYS:
            return
        self.refresh()

    def _compute(self) -> ReadOnlyAppearance:
        selection = self.organizer.selection
        game = selection.game
        if game is None or not selection.is_profile_selected():
            return HIDDEN
        if not self.organizer.registry.supports_read_only(game):
            return HIDDEN
        writable = self.organizer.attributes.is_writable(game)
        if writable is None:
            return HIDDEN

        if self.organizer.compact_mode or self.is_version_outdated():
            text = None
        else:
            text = WRITABLE_TEXT if writable else READ_ONLY_TEXT

        icon_key = "writable" if writable else "read_only"
        if self.hovering:
            icon_key += "_hover"

        return ReadOnlyAppearance(
            visible=True,
            writable=writable,
            text=text,
            icon_key=icon_key,
            tooltip=WRITABLE_TOOLTIP if writable else READ_ONLY_TOOLTIP,
        )
