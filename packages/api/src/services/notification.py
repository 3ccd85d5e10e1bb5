# This project was developed with assistance from AI tools.
"""Fire-and-forget signal that a lead changed and dependent views should refresh."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationHook(Protocol):
    async def on_lead_changed(self, lead_id: int) -> None: ...


class LoggingNotificationHook:
    """Default hook: records the change in the application log."""

    async def on_lead_changed(self, lead_id: int) -> None:
        logger.info("Lead %s changed", lead_id)


async def notify_lead_changed(hook: NotificationHook | None, lead_id: int) -> None:
    """Invoke the hook, never letting its failure reach the caller.

    The mutation has already been committed when this runs.
    """
    if hook is None:
        return
    try:
        await hook.on_lead_changed(lead_id)
    except Exception:
        logger.warning("Lead change notification failed for lead %s", lead_id, exc_info=True)
