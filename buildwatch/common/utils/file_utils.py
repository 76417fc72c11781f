import os
import shutil
from pathlib import Path
from typing import Optional, List, Union


def alias_path(path: Union[str, Path], home: Optional[str] = None) -> str:
    """Render ``path`` with the user's home directory collapsed to ``~``."""
    home = home or os.path.expanduser("~")
    text = str(path)
    if not home or home == os.sep:
        return text

    home = home.rstrip("/\\")
    if text == home:
        return "~"
    for sep in ("/", "\\"):
        if text.startswith(home + sep):
            return "~" + text[len(home):]
    return text


def resolve_against(path: str, base_dir: Optional[Union[str, Path]]) -> str:
    """Resolve a possibly relative path against ``base_dir`` without touching the filesystem."""
    if os.path.isabs(path) or _is_windows_absolute(path) or not base_dir:
        return path
    return os.path.normpath(os.path.join(str(base_dir), path))


def _is_windows_absolute(path: str) -> bool:
    return len(path) > 2 and path[1] == ":" and path[2] in ("/", "\\")


def split_search_path(value: Optional[str], separator: str = os.pathsep) -> List[str]:
    if not value:
        return []
    return [entry for entry in value.split(separator) if entry]


def prepend_search_path(entries: List[str], value: Optional[str], separator: str = os.pathsep) -> str:
    """Put ``entries`` in front of ``value`` leaving the existing text untouched.

    Empty elements are kept; on POSIX they stand for the working directory.
    """
    head = separator.join(entries)
    if not value:
        return head
    return head + separator + value


def find_executable(name: str, directories: List[str]) -> Optional[str]:
    if not directories:
        return None
    return shutil.which(name, path=os.pathsep.join(directories))
