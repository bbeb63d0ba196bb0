"""
Background email delivery with exponential backoff.

Delivery never reports failure to the request that triggered it: once the
attempts are exhausted the error is logged and dropped.
"""

import random
import time
from typing import Callable

from fastapi import BackgroundTasks

from ..core.logging import get_logger
from ..domain.interfaces import EmailSenderProtocol, OutgoingEmail

logger = get_logger(__name__)


def deliver_with_retry(
    sender: EmailSenderProtocol,
    message: OutgoingEmail,
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Try to send `message`, backing off between failures.

    Returns True once the sender accepts the message, False when every
    attempt failed.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            sender.send(message.to, message.subject, message.html_body)
            logger.info("Email sent to=%s subject=%r attempt=%s", message.to, message.subject, attempt)
            return True
        except Exception as exc:
            if attempt == attempts:
                logger.error(
                    "Email delivery exhausted to=%s attempts=%s error=%s",
                    message.to,
                    attempt,
                    exc,
                    exc_info=True,
                )
                return False

            delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())
            logger.warning(
                "Email delivery failed, retrying to=%s attempt=%s delay=%.2f error=%s",
                message.to,
                attempt,
                delay,
                exc,
            )
            sleep(delay)
    return False


class BackgroundMailDispatcher:
    """Queues delivery on FastAPI background tasks so it runs after the response."""

    def __init__(
        self,
        background_tasks: BackgroundTasks,
        sender: EmailSenderProtocol,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
    ):
        self.background_tasks = background_tasks
        self.sender = sender
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def __call__(self, message: OutgoingEmail) -> None:
        self.background_tasks.add_task(
            deliver_with_retry,
            self.sender,
            message,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
        )
