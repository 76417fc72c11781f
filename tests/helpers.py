"""Test doubles shared across the suite."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from buildwatch.builder.environment_manager import ToolchainLocation
from buildwatch.common.config.constants import EventType
from buildwatch.common.dto.build import ClientEvent
from buildwatch.common.exceptions.build_exceptions import ToolchainNotFoundError

TEST_DELAY = 0.01


class StaticLocator:
    """Locator returning fixed entries, or raising when ``missing`` is set."""

    def __init__(self, entries: Optional[List[str]] = None, missing: bool = False):
        self.entries = entries or []
        self.missing = missing
        self.calls = 0

    def locate(self, current_value: Optional[str]) -> ToolchainLocation:
        self.calls += 1
        if self.missing:
            raise ToolchainNotFoundError("WARNING: toolchain missing\n", missing_executables=["gcc"])
        return ToolchainLocation(entries=list(self.entries))


class RecordingListener:
    def __init__(self) -> None:
        self.events: List[ClientEvent] = []
        self._completed: Optional[asyncio.Event] = None

    def __call__(self, event: ClientEvent) -> None:
        self.events.append(event)
        if event.type == EventType.BUILD_COMPLETED:
            self._event().set()

    def _event(self) -> asyncio.Event:
        if self._completed is None:
            self._completed = asyncio.Event()
        return self._completed

    def of_type(self, event_type: EventType) -> List[ClientEvent]:
        return [e for e in self.events if e.type == event_type]

    @property
    def completed(self) -> List[ClientEvent]:
        return self.of_type(EventType.BUILD_COMPLETED)

    @property
    def started(self) -> List[ClientEvent]:
        return self.of_type(EventType.BUILD_STARTED)

    async def wait_completed(self, timeout: float = 2.0) -> ClientEvent:
        await asyncio.wait_for(self._event().wait(), timeout)
        self._event().clear()
        return self.completed[-1]
