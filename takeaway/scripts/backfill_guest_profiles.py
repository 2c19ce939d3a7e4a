#!/usr/bin/env python3
"""Link legacy orders that carry a guest email but no guest reference.

For every distinct (normalized) email among live unlinked orders the
matching live guest profile is reused, or created from the first order's
guest details. The orders are then linked, each link is written to the
change log and each touched guest's rollups are recomputed.

Run:
    BACKFILL_DRY_RUN=1 python -m takeaway.scripts.backfill_guest_profiles

Env: BACKFILL_DRY_RUN (report only, write nothing), BACKFILL_ACTOR (default "backfill").
"""
from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.core.logger import configure, get_logger
from takeaway.domain.types import ChangeType, EntityType, FieldChange, normalize_email
from takeaway.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from takeaway.infra.database.models.order import Order
from takeaway.infra.database.repositories.guest import GuestRepository
from takeaway.infra.database.repositories.order import OrderRepository
from takeaway.services.audit_service import AuditRecorder
from takeaway.services.guest_service import GuestService

logger = get_logger(__name__)


@dataclass
class BackfillReport:
    emails: int = 0
    guests_reused: int = 0
    guests_created: int = 0
    orders_linked: int = 0


def group_orders_by_email(orders: Iterable[Order]) -> Dict[str, List[Order]]:
    """Orders keyed by normalized guest email, first-seen order kept first."""
    groups: Dict[str, List[Order]] = {}
    for order in orders:
        email = normalize_email(order.guest_email)
        if email is None:
            continue
        groups.setdefault(email, []).append(order)
    return groups


async def backfill(session: AsyncSession, actor: str, *, dry_run: bool = False) -> BackfillReport:
    orders = OrderRepository(session)
    profiles = GuestRepository(session)
    audit = AuditRecorder(session)
    guests = GuestService(session, audit=audit)
    report = BackfillReport()

    groups = group_orders_by_email(await orders.list_unlinked_with_email())
    report.emails = len(groups)
    for email, group in groups.items():
        if dry_run:
            logger.info("would link %d order(s) to %s", len(group), email)
            report.orders_linked += len(group)
            continue
        first = group[0]
        existed = await profiles.get_active_by_email(email) is not None
        resolved = await guests.resolve(None, first.guest_details, actor)
        if existed:
            report.guests_reused += 1
        else:
            report.guests_created += 1
        for order in group:
            order.guest_id = resolved.guest_id
            order.last_modified_by = actor
        await orders.flush()
        for order in group:
            await audit.record(
                EntityType.ORDER, order.id, ChangeType.UPDATE, actor,
                changes=[FieldChange("guest_id", None, resolved.guest_id)],
                description=f"Order {order.order_number} linked to guest {resolved.guest_id}",
            )
        await guests.refresh_stats(resolved.guest_id)
        report.orders_linked += len(group)
        logger.info("linked %d order(s) to guest %s (%s)", len(group), resolved.guest_id, email)
    return report


async def main() -> None:
    dry_run = os.environ.get("BACKFILL_DRY_RUN", "").strip().lower() in ("1", "true", "yes")
    actor = os.environ.get("BACKFILL_ACTOR", "backfill").strip() or "backfill"

    configure()
    await ensure_database_exists()
    engine = build_engine(use_null_pool=True)
    session_factory = build_session_factory(engine)
    await init_db()

    async with session_factory() as session:
        report = await backfill(session, actor, dry_run=dry_run)
        if dry_run:
            await session.rollback()
        else:
            await session.commit()

    await close_engine()
    logger.info(
        "Backfill complete: %d email(s), %d guest(s) created, %d reused, %d order(s) linked%s.",
        report.emails, report.guests_created, report.guests_reused, report.orders_linked,
        " (dry run)" if dry_run else "",
    )


if __name__ == "__main__":
    asyncio.run(main())
