import asyncio
from typing import Any, Callable, Optional

from buildwatch.common.config.logging_config import get_logger
from buildwatch.common.exceptions.build_exceptions import BuildSessionError


logger = get_logger(__name__)


class DeferredScheduler:
    """Runs callbacks once, after a delay, on the event loop that delivers output."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise BuildSessionError(
                message="Deferred work requires a running event loop",
                cause=e,
            )

    def schedule(
        self,
        delay_seconds: float,
        callback: Callable[..., Any],
        *args: Any,
    ) -> asyncio.TimerHandle:
        handle = self._get_loop().call_later(max(0.0, delay_seconds), callback, *args)
        logger.debug(f"Scheduled {getattr(callback, '__name__', callback)} in {delay_seconds}s")
        return handle

    def cancel(self, handle: Optional[asyncio.TimerHandle]) -> None:
        if handle is not None and not handle.cancelled():
            handle.cancel()
