# save_organizer/utils/system_utils.py
import os
import sys
import subprocess
from pathlib import Path
from send2trash import send2trash
from save_organizer.utils.logger_utils import logger


class SystemUtils:
    """A collection of static utility functions for OS-level interactions."""

    @staticmethod
    def open_path_in_explorer(path: Path) -> bool:
        """
        Opens a file or directory in the system file explorer.
        Returns False if the path is missing or no explorer could be started.
        """
        if not path or not path.exists():
            logger.error(f"Path does not exist: {path}")
            return False

        logger.info(f"Opening path: {path}")
        try:
            if sys.platform == "win32":
                os.startfile(path)
            elif sys.platform == "darwin":
                subprocess.Popen(["open", str(path)])
            else:
                subprocess.Popen(["xdg-open", str(path)])
            return True
        except OSError as e:
            logger.critical(f"Failed to open path '{path}' in file explorer. Reason: {e}", exc_info=True)
            return False

    @staticmethod
    def move_to_recycle_bin(path: Path) -> bool:
        """
        Moves a file or folder to the system's recycle bin.
        Returns True on success, False on failure; the caller adds context.
        """
        if not path.exists():
            return False
        try:
            send2trash(str(path))
            return True
        except OSError as e:
            logger.error(f"Error moving '{path}' to recycle bin: {e}")
            return False
