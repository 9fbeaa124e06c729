"""Unit of Work — all-or-nothing write scope over an AsyncSession.

Invariants:
    - Every write issued inside the block commits together on normal exit
    - Any exception rolls back every write of the block, then propagates
    - Reads issued before entering (on the same session) share the transaction

Design Decisions:
    - Context manager over callback: the caller keeps using the scoped session
      handle directly, no closure plumbing
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Yield the session; commit on success, roll back on failure."""
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        logger.warning("Unit of work rolled back", exc_info=True)
        raise
