"""EmailProvider protocol: the lead notifier depends on this, not on ZeptoMail."""

from typing import Any, Protocol


class EmailProvider(Protocol):
    async def send_lead_notification(self, lead: dict[str, Any]) -> bool: ...

    async def send_lead_acknowledgement(self, lead: dict[str, Any]) -> bool: ...
