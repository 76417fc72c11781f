from buildwatch import common
from buildwatch import builder
from buildwatch import notification
from buildwatch import orchestrator

__version__ = "1.0.0"
__all__ = [
    "common",
    "builder",
    "notification",
    "orchestrator",
]
