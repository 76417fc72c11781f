from typing import Optional
import aiohttp

from buildwatch.common.dto.build import ClientEvent
from buildwatch.common.config.logging_config import get_logger


logger = get_logger(__name__)


class WebhookNotifier:
    """Event listener that posts each build event as JSON to a webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._webhook_url = webhook_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session

    async def __call__(self, event: ClientEvent) -> bool:
        return await self.send_event(event)

    async def send_event(self, event: ClientEvent) -> bool:
        if self._session is not None:
            return await self._post(self._session, event)

        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            return await self._post(session, event)

    async def _post(self, session: aiohttp.ClientSession, event: ClientEvent) -> bool:
        try:
            async with session.post(self._webhook_url, json=event.to_payload()) as response:
                if 200 <= response.status < 300:
                    logger.debug(f"Delivered {event.type.value} #{event.sequence} to webhook")
                    return True
                error = await response.text()
                logger.error(f"Webhook delivery failed: {response.status} - {error[:500]}")
                return False
        except aiohttp.ClientError as e:
            logger.error(f"Webhook delivery failed: {e}")
            return False
