from __future__ import annotations

import logging

from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork

logger = logging.getLogger(__name__)

_clock = SystemClock()


async def reap_expired(uow: UnitOfWork, clock: Clock = _clock) -> int:
    """Hard-delete temporary messages whose expiry has passed. Idempotent."""
    removed = await uow.messages_w.delete_expired(clock.now())
    await uow.commit()
    logger.info("Removed %d expired temporary messages", removed)
    return removed
