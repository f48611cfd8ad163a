from __future__ import annotations

import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)


class LoggingEmailAdapter:
    """Writes outgoing mail to the log instead of delivering it."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, str]] = []

    async def send_mail(self, to: str, subject: str, text: str) -> None:
        self.sent.append((to, subject, text))
        logger.info("[Email] to=%s subject=%s", to, subject)
