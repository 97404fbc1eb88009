"""Operator notifications (Telegram), always delivered off the request path."""

import asyncio
from typing import Protocol

from ett_sdk.utils.http import HttpExecutor, HTTPRequestError
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import format_rfc3339, utcnow

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
TELEGRAM_TIMEOUT = 10.0

# Strong references so pending deliveries are not garbage-collected
_pending: set[asyncio.Task[None]] = set()


class Notifier(Protocol):
    async def notify(self, text: str) -> None: ...


class TelegramNotifier:
    """Sends a message to every configured chat through the Bot API."""

    def __init__(
        self,
        bot_token: str,
        account_ids: list[str],
        function_name: str,
        http: HttpExecutor | None = None,
    ) -> None:
        self.bot_token = bot_token
        self.account_ids = account_ids
        self.function_name = function_name
        self.http = http or HttpExecutor()

    async def notify(self, text: str) -> None:
        message = f"{self.function_name} >>> {format_rfc3339(utcnow())} >>>>> {text}"
        url = f"{TELEGRAM_API_URL}/bot{self.bot_token}/sendMessage"
        for chat_id in self.account_ids:
            response = await self.http.send(
                "GET", url, params={"chat_id": chat_id, "text": message}, timeout=TELEGRAM_TIMEOUT
            )
            if response.status_code != 200:
                raise HTTPRequestError(response.text, response.status_code, response.content)


class LogNotifier:
    """Fallback used when no bot is configured: notifications only go to the log."""

    async def notify(self, text: str) -> None:
        logger.warning("operator_notification", text=text)


async def _deliver(notifier: Notifier, text: str) -> None:
    try:
        await notifier.notify(text)
    except HTTPRequestError as e:
        logger.error("operator_notification_failed", error=str(e), status_code=e.status_code)


def notify_in_background(notifier: Notifier, text: str) -> asyncio.Task[None] | None:
    """Schedule a notification without waiting for it. Returns None outside an event loop."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("operator_notification_dropped", reason="no running event loop", text=text)
        return None

    task = loop.create_task(_deliver(notifier, text))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task
