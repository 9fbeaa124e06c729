"""Order Number Allocator — race-tolerant YYYYMMDD-CCC-NNNN generation.

Invariants:
    - Sequence is per customer per calendar day, derived from that customer's
      most recently created order inside the day window
    - Every candidate is point-checked against storage before being returned
    - Collisions retry with a random backoff up to max_retries, then fall back to
      a timestamp-suffixed number (degraded format, never an error)
    - Storage errors propagate as-is (not retried)

Design Decisions:
    - The unique constraint on orders.order_number is the real guard; this loop only
      makes collisions rare, it cannot rule them out between check and insert
    - `now` injectable so tests can pin the calendar day
"""

import asyncio
import logging
import random
import time
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.config import get_settings
from orderdesk.core.order_number import (
    customer_code, day_window, fallback_order_number, format_order_number,
    next_sequence,
)
from orderdesk.models.order import Order

logger = logging.getLogger(__name__)


class OrderNumberAllocator:
    """Allocates human-readable order numbers for one customer at a time."""

    def __init__(
        self,
        db: AsyncSession,
        max_retries: int | None = None,
        max_delay_ms: int | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.max_retries = (
            max_retries if max_retries is not None else settings.order_number_max_retries
        )
        self.max_delay_ms = (
            max_delay_ms if max_delay_ms is not None
            else settings.order_number_retry_max_delay_ms
        )

    async def generate_order_number(
        self, customer_id: str, now: datetime | None = None,
    ) -> str:
        now = now or datetime.now(timezone.utc)
        code = customer_code(customer_id)
        start, end = day_window(now)

        for attempt in range(1, self.max_retries + 1):
            last_number = await self._latest_number_in_window(customer_id, start, end)
            candidate = format_order_number(now.date(), code, next_sequence(last_number))

            if not await self._number_taken(candidate):
                return candidate

            logger.info(
                f"Order number {candidate} already taken, retrying",
                extra={"customer_id": customer_id, "attempt": attempt},
            )
            await asyncio.sleep(random.uniform(0, self.max_delay_ms) / 1000)  # nosec B311

        fallback = fallback_order_number(now.date(), code, int(time.time() * 1000))
        logger.warning(
            f"Order number retries exhausted, using fallback {fallback}",
            extra={"customer_id": customer_id, "order_number": fallback},
        )
        return fallback

    async def _latest_number_in_window(
        self, customer_id: str, start: datetime, end: datetime,
    ) -> str | None:
        result = await self.db.execute(
            select(Order.order_number)
            .where(Order.customer_id == customer_id)
            .where(Order.created_at >= start)
            .where(Order.created_at <= end)
            .order_by(Order.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _number_taken(self, order_number: str) -> bool:
        result = await self.db.execute(
            select(Order.id).where(Order.order_number == order_number),
        )
        return result.scalar_one_or_none() is not None
