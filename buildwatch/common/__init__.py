from buildwatch.common import config
from buildwatch.common import dto
from buildwatch.common import exceptions
from buildwatch.common import utils

__all__ = [
    "config",
    "dto",
    "exceptions",
    "utils",
]
