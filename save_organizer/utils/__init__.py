from .system_utils import SystemUtils
from .file_utils import FileUtils

__all__ = ["SystemUtils", "FileUtils"]
