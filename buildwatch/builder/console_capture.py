"""Console output stream and the per-build capture that subscribes to it.

The stream is the push source fed by whatever owns the child process. A
capture subscribes for the lifetime of one build and accumulates each chunk
into the buffer for its channel, in delivery order.
"""

import asyncio
from typing import Callable, List, Tuple

from buildwatch.common.config.constants import ConsoleChannel
from buildwatch.common.config.logging_config import get_logger


logger = get_logger(__name__)


ConsoleHandler = Callable[[ConsoleChannel, str], None]


class ConsoleOutputStream:
    def __init__(self):
        self._handlers: List[ConsoleHandler] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def connect(self, handler: ConsoleHandler) -> bool:
        if handler in self._handlers:
            return False
        self._handlers.append(handler)
        return True

    def disconnect(self, handler: ConsoleHandler) -> bool:
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    def publish(self, channel: ConsoleChannel, text: str) -> None:
        for handler in list(self._handlers):
            handler(channel, text)

    def write(self, text: str) -> None:
        self.publish(ConsoleChannel.NORMAL, text)

    def write_error(self, text: str) -> None:
        self.publish(ConsoleChannel.ERROR, text)

    def publish_threadsafe(
        self,
        loop: asyncio.AbstractEventLoop,
        channel: ConsoleChannel,
        text: str,
    ) -> None:
        """Deliver a chunk produced on another thread on ``loop``."""
        loop.call_soon_threadsafe(self.publish, channel, text)


class ConsoleCapture:
    def __init__(self, stream: ConsoleOutputStream, normalize_newlines: bool = False):
        self._stream = stream
        self._normalize_newlines = normalize_newlines
        self._output: List[str] = []
        self._errors: List[str] = []
        self._subscribed = False

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    @property
    def output(self) -> str:
        return "".join(self._output)

    @property
    def error_output(self) -> str:
        return "".join(self._errors)

    def subscribe(self) -> None:
        if self._subscribed:
            return
        self._stream.connect(self.on_output_chunk)
        self._subscribed = True

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        self._stream.disconnect(self.on_output_chunk)
        self._subscribed = False

    def on_output_chunk(self, channel: ConsoleChannel, text: str) -> None:
        if self._normalize_newlines and not text.endswith("\n"):
            text += "\n"

        if channel == ConsoleChannel.NORMAL:
            self._output.append(text)
        else:
            self._errors.append(text)

    def snapshot(self) -> Tuple[str, str]:
        return self.output, self.error_output

    def clear(self) -> None:
        self._output.clear()
        self._errors.clear()

    def __enter__(self) -> "ConsoleCapture":
        self.subscribe()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()
