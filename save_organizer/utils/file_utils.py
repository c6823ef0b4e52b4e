# save_organizer/utils/file_utils.py
import os
import shutil
import stat
import uuid
from pathlib import Path
from save_organizer.core.constants import TEMP_SUFFIX, BACKUP_SUFFIX
from save_organizer.utils.logger_utils import logger


class FileUtils:
    """Static helpers for copying save files without leaving partial results behind."""

    @staticmethod
    def is_temp_artifact(name: str) -> bool:
        """True for the organizer's own temporary files, which listings must hide."""
        return name.endswith(TEMP_SUFFIX) or name.endswith(BACKUP_SUFFIX)

    @staticmethod
    def sibling_path(path: Path, suffix: str = TEMP_SUFFIX) -> Path:
        """A unique hidden path next to `path`, on the same filesystem."""
        return path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}{suffix}")

    @staticmethod
    def copy_path(source: Path, destination: Path):
        """Copies a file (with metadata) or a whole directory tree."""
        if source.is_dir():
            shutil.copytree(source, destination)
        else:
            shutil.copy2(source, destination)

    @staticmethod
    def remove_path(path: Path):
        """Deletes a file or directory tree. Missing paths are ignored."""
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()

    @staticmethod
    def discard(path: Path):
        """Best-effort cleanup of a temporary path after a failed operation."""
        try:
            FileUtils.remove_path(path)
        except OSError as e:
            logger.warning(f"Could not clean up temporary path '{path}': {e}")

    @staticmethod
    def copy_to_new(source: Path, destination: Path):
        """
        Copies `source` to a destination that must not exist yet. The data is
        written to a temporary sibling first and renamed into place, so a
        failure never leaves a partial `destination`.
        """
        temp_path = FileUtils.sibling_path(destination)
        try:
            FileUtils.copy_path(source, temp_path)
            FileUtils.make_tree_writable(temp_path)
            os.rename(temp_path, destination)
        except OSError:
            FileUtils.discard(temp_path)
            raise

    @staticmethod
    def replace_with_copy(source: Path, destination: Path, keep_mode: bool = True):
        """
        Replaces `destination` with a copy of `source`.

        Files are staged to a temporary sibling and swapped in with os.replace,
        which is atomic on the same filesystem. Directories are swapped with two
        renames and the old tree is restored if the second rename fails.
        If `keep_mode` is set, a replaced file keeps its previous permission bits.
        """
        temp_path = FileUtils.sibling_path(destination)
        try:
            FileUtils.copy_path(source, temp_path)
        except OSError:
            FileUtils.discard(temp_path)
            raise

        if temp_path.is_dir():
            FileUtils._swap_directory(temp_path, destination)
            return

        try:
            if keep_mode and destination.is_file():
                os.chmod(temp_path, stat.S_IMODE(destination.stat().st_mode))
            else:
                FileUtils.set_writable(temp_path, True)
            os.replace(temp_path, destination)
        except OSError:
            FileUtils.discard(temp_path)
            raise

    @staticmethod
    def _swap_directory(new_tree: Path, destination: Path):
        backup_path = None
        try:
            if destination.exists():
                backup_path = FileUtils.sibling_path(destination, BACKUP_SUFFIX)
                os.rename(destination, backup_path)
            try:
                os.rename(new_tree, destination)
            except OSError:
                if backup_path is not None:
                    os.rename(backup_path, destination)
                    backup_path = None
                raise
        except OSError:
            FileUtils.discard(new_tree)
            raise
        if backup_path is not None:
            FileUtils.discard(backup_path)

    # --- Attributes ---

    @staticmethod
    def is_writable(path: Path) -> bool:
        """Reads the owner write bit, which is what the read-only toggle flips."""
        return bool(path.stat().st_mode & stat.S_IWUSR)

    @staticmethod
    def set_writable(path: Path, writable: bool):
        mode = stat.S_IMODE(path.stat().st_mode)
        new_mode = mode | stat.S_IWUSR if writable else mode & ~(stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH)
        os.chmod(path, new_mode)

    @staticmethod
    def make_tree_writable(path: Path):
        """Snapshots must stay deletable even if the live save was read-only."""
        FileUtils.set_writable(path, True)
        if path.is_dir():
            for root, dirs, files in os.walk(path):
                for name in dirs + files:
                    FileUtils.set_writable(Path(root) / name, True)
