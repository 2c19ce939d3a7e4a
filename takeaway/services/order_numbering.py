"""
Order numbering: human-readable sequence numbers such as ``FTP-0001``.

The next number is derived from the most recently created order. Two
concurrent creates can read the same predecessor; the unique index on
``orders.order_number`` rejects the second insert and the caller retries.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.infra.database.repositories.order import OrderRepository

logger = logging.getLogger(__name__)

_COUNTER_PATTERN = re.compile(r"-(\d+)$")


def format_order_number(prefix: str, counter: int) -> str:
    return f"{prefix}-{counter:04d}"


def next_order_number(previous: Optional[str], prefix: str) -> str:
    """Increment the trailing counter of *previous*; start at 1 when there is none."""
    if previous is None:
        return format_order_number(prefix, 1)
    match = _COUNTER_PATTERN.search(previous.strip())
    if match is None:
        logger.warning(
            "OrderNumberSequencer: cannot parse previous order number %r, restarting at 1",
            previous,
        )
        return format_order_number(prefix, 1)
    return format_order_number(prefix, int(match.group(1)) + 1)


class OrderNumberSequencer:
    def __init__(self, session: AsyncSession, prefix: str = "FTP") -> None:
        self._repo = OrderRepository(session)
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    async def next_number(self) -> str:
        previous = await self._repo.latest_order_number()
        number = next_order_number(previous, self._prefix)
        logger.debug("OrderNumberSequencer: %s -> %s", previous, number)
        return number
