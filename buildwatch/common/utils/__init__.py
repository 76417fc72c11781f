from buildwatch.common.utils.file_utils import (
    alias_path,
    resolve_against,
    split_search_path,
    prepend_search_path,
    find_executable,
)
from buildwatch.common.utils.time_utils import (
    utc_now,
    format_duration,
    Timer,
)

__all__ = [
    "alias_path",
    "resolve_against",
    "split_search_path",
    "prepend_search_path",
    "find_executable",
    "utc_now",
    "format_duration",
    "Timer",
]
