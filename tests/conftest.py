"""Shared test fixtures."""

from __future__ import annotations

from typing import Dict

import pytest

from buildwatch.builder.console_capture import ConsoleOutputStream
from buildwatch.builder.environment_manager import EnvironmentPatcher
from buildwatch.notification.notification_manager import EventNotifier
from buildwatch.orchestrator.session import BuildSession
from tests.helpers import TEST_DELAY, RecordingListener, StaticLocator


@pytest.fixture
def environ() -> Dict[str, str]:
    return {"PATH": "/usr/bin:/bin"}


@pytest.fixture
def stream() -> ConsoleOutputStream:
    return ConsoleOutputStream()


@pytest.fixture
def recorder() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def locator() -> StaticLocator:
    return StaticLocator(entries=["/opt/toolchain/bin"])


@pytest.fixture
def make_session(environ, stream, recorder, locator):
    """Build a session wired to in-memory collaborators."""

    def factory(**kwargs) -> BuildSession:
        patcher = kwargs.pop("patcher", None)
        if patcher is None:
            patcher = EnvironmentPatcher(
                locator=kwargs.pop("locator", locator), environ=environ, separator=":"
            )
        kwargs.setdefault("completion_delay", TEST_DELAY)
        return BuildSession(
            patcher=patcher,
            stream=stream,
            notifier=EventNotifier([recorder]),
            **kwargs,
        )

    return factory
