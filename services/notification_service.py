"""
Fire-and-forget lead emails.

LeadNotifier.notify() schedules delivery as a detached asyncio task and
returns immediately; the request path never awaits or observes the outcome.
Every failure is logged inside the task.
"""

from __future__ import annotations

import asyncio
from typing import Any

from infrastructure.email.protocol import EmailProvider
from shared.logging import get_logger

log = get_logger(__name__)


class LeadNotifier:
    def __init__(self, provider: EmailProvider, enabled: bool = True) -> None:
        self._provider = provider
        self._enabled = enabled
        # Strong references so pending tasks are not garbage collected
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def notify(self, lead: dict[str, Any]) -> None:
        if not self._enabled:
            log.debug("lead_emails_disabled")
            return
        task = asyncio.create_task(self._deliver(lead))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, lead: dict[str, Any]) -> None:
        for kind, send in (
            ("notification", self._provider.send_lead_notification),
            ("acknowledgement", self._provider.send_lead_acknowledgement),
        ):
            try:
                sent = await send(lead)
            except Exception as e:
                log.error(
                    "lead_email_failed",
                    kind=kind,
                    lead_id=str(lead.get("_id", "")),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            if not sent:
                log.warning("lead_email_not_sent", kind=kind, lead_id=str(lead.get("_id", "")))

    async def drain(self) -> None:
        """Wait for in-flight deliveries; used on shutdown."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
