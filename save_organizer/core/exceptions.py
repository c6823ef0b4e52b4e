"""
core/exceptions.py – Exception hierarchy for the save organizer.

All service-level errors derive from OrganizerError so callers can catch
broadly or specifically depending on context.
"""


class OrganizerError(Exception):
    """Base class for all organizer exceptions."""


class DuplicateNameError(OrganizerError):
    """Raised when a profile name is already used for the same game."""


class NameCollisionError(DuplicateNameError):
    """Raised when a save entry name is already used inside a profile."""


class InvalidNameError(OrganizerError):
    """Raised for empty names or names that would escape their directory."""


class InvalidSelectionError(OrganizerError):
    """
    Raised when a selection would break the game/profile/entry ownership chain.
    This indicates a programming error in the caller.
    """


class NotFoundError(OrganizerError):
    """Raised when a game, profile or entry is no longer present."""


class ProfileDirectoryNotSetError(OrganizerError):
    """Raised when a profile needs a default directory but the game has none."""


class SaveFileIOError(OrganizerError, OSError):
    """
    Raised when copying, reading, writing or changing attributes fails.

    Attributes
    ----------
    path : The file or directory the failed operation was working on.
    """

    def __init__(self, message: str, path=None) -> None:
        self.path = path
        super().__init__(message)


class ConfigSaveError(OrganizerError, OSError):
    """Raised when the configuration file cannot be written."""
