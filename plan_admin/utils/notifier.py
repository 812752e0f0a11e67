# plan_admin/utils/notifier.py
"""User-facing notifications and confirmation prompts.

Components report outcomes through an injected ``Notifier`` instead of a
global toast queue. Destructive actions ask an injected async ``Confirm``
callable, which resolves to True (confirmed) or False (cancelled).
"""

import logging
from typing import Awaitable, Callable, Literal

from pydantic import BaseModel

_LOGGER = logging.getLogger(__name__)

Level = Literal["success", "error", "warning", "info"]
Confirm = Callable[[str], Awaitable[bool]]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notification(BaseModel):
    level: Level
    message: str


class Notifier:
    def notify(self, level: Level, message: str) -> None:
        raise NotImplementedError

    def success(self, message: str) -> None:
        self.notify("success", message)

    def error(self, message: str) -> None:
        self.notify("error", message)

    def warning(self, message: str) -> None:
        self.notify("warning", message)

    def info(self, message: str) -> None:
        self.notify("info", message)


class LoggingNotifier(Notifier):
    def notify(self, level: Level, message: str) -> None:
        _LOGGER.log(_LOG_LEVELS[level], "[%s] %s", level, message)


class CollectingNotifier(LoggingNotifier):
    """Keeps the notifications of one request so they can be sent back with it."""

    def __init__(self) -> None:
        self.messages: list[Notification] = []

    def notify(self, level: Level, message: str) -> None:
        super().notify(level, message)
        self.messages.append(Notification(level=level, message=message))

    def as_list(self) -> list[dict]:
        return [m.model_dump() for m in self.messages]


def static_confirm(answer: bool) -> Confirm:
    """Confirmation that was already given (or refused) by the caller."""

    async def _confirm(message: str) -> bool:
        _LOGGER.debug("Confirmation %s: %s", "given" if answer else "refused", message)
        return answer

    return _confirm
