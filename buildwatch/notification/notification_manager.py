from typing import Optional, Any, List, Callable, Protocol, Set
import asyncio
import inspect

from buildwatch.common.dto.build import BuildResult, ClientEvent
from buildwatch.common.config.constants import EventType
from buildwatch.common.config.logging_config import get_logger


logger = get_logger(__name__)


EventListener = Callable[[ClientEvent], Any]


class BuildNotifier(Protocol):
    def started(self, target_file: str) -> None:
        ...

    def completed(self, result: BuildResult) -> None:
        ...


class EventNotifier:
    """Fans build events out to listeners without waiting on them.

    Listeners may be plain callables or coroutine functions; coroutines are
    scheduled as tasks on the running loop. A failing listener is logged and
    never affects the build or the other listeners.
    """

    def __init__(self, listeners: Optional[List[EventListener]] = None):
        self._listeners: List[EventListener] = list(listeners or [])
        self._sequence = 0
        self._pending: Set[asyncio.Task] = set()

    def add_listener(self, listener: EventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def started(self, target_file: str) -> ClientEvent:
        return self._dispatch(EventType.BUILD_STARTED, {"targetFile": target_file})

    def completed(self, result: BuildResult) -> ClientEvent:
        return self._dispatch(EventType.BUILD_COMPLETED, result.to_payload())

    def _dispatch(self, event_type: EventType, data: dict) -> ClientEvent:
        self._sequence += 1
        event = ClientEvent(type=event_type, sequence=self._sequence, data=data)

        for listener in list(self._listeners):
            try:
                outcome = listener(event)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {event_type.value}")
                continue

            if inspect.isawaitable(outcome):
                self._schedule(outcome, event_type)

        return event

    def _schedule(self, awaitable: Any, event_type: EventType) -> None:
        try:
            task = asyncio.ensure_future(awaitable, loop=asyncio.get_running_loop())
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning(f"No running loop, dropped async listener for {event_type.value}")
            return

        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Async listener failed: {exc}")

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
