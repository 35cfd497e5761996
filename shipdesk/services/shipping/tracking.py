"""
Tracking numbers: ``TRK`` + last 6 digits of epoch millis + 6 base-36 chars.

The combination is expected to be unique, not guaranteed, so
``unique_tracking_number`` re-rolls against the shipments table and the
unique constraint on ``shipments.tracking_number`` backs it up.
"""
import logging
import random
import string
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shipdesk.core.exceptions import ConflictError
from shipdesk.models.shipment import Shipment

log = logging.getLogger(__name__)

TRACKING_PREFIX = "TRK"
BASE36 = string.digits + string.ascii_uppercase
MAX_ATTEMPTS = 5


def generate_tracking_number(now_ms: Optional[int] = None, rng: random.Random = None) -> str:
    rng = rng or random
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(rng.choice(BASE36) for _ in range(6))
    return f"{TRACKING_PREFIX}{str(now_ms)[-6:]:0>6}{suffix}"


async def tracking_number_exists(db: AsyncSession, tracking_number: str) -> bool:
    res = await db.execute(
        select(Shipment.id).where(Shipment.tracking_number == tracking_number).limit(1)
    )
    return res.first() is not None


async def unique_tracking_number(db: AsyncSession) -> str:
    for attempt in range(1, MAX_ATTEMPTS + 1):
        candidate = generate_tracking_number()
        if not await tracking_number_exists(db, candidate):
            return candidate
        log.warning("tracking number collision on attempt %s: %s", attempt, candidate)
    raise ConflictError("Could not generate a unique tracking number, please retry")
