"""In-memory stand-ins for the repositories and the AsyncSession used by the service tests."""
from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

from sqlalchemy.exc import IntegrityError

from takeaway.config import AppSettings
from takeaway.domain.pricing import ZERO, to_money
from takeaway.domain.types import GuestRollup, normalize_email
from takeaway.services.enquiry_service import EnquiryService
from takeaway.services.guest_service import GuestService
from takeaway.services.order_service import OrderService

_EPOCH = datetime(2025, 12, 1, 9, 0, tzinfo=timezone.utc)


class FakeSession:
    """Just enough AsyncSession for AuditRecorder: a SAVEPOINT that lets errors through."""

    def __init__(self) -> None:
        self.flush = AsyncMock()
        self.commit = AsyncMock()
        self.rollback = AsyncMock()
        self.savepoints = 0

    @asynccontextmanager
    async def begin_nested(self):
        self.savepoints += 1
        yield self


class Store:
    def __init__(self) -> None:
        self.orders: List[Any] = []
        self.guests: List[Any] = []
        self.logs: List[Any] = []
        self.enquiries: List[Any] = []
        self.fail_audit = False
        self._ticks = 0

    def tick(self) -> datetime:
        self._ticks += 1
        return _EPOCH + timedelta(seconds=self._ticks)

    def logs_for(self, entity_id) -> List[Any]:
        return [log for log in self.logs if log.entity_id == entity_id]


class _Repo:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def flush(self) -> None:
        return None

    async def update(self, instance, data: Dict[str, Any]):
        for attr, value in data.items():
            setattr(instance, attr, value)
        return instance


class FakeOrderRepo(_Repo):
    async def get_by_id(self, id):
        return next((o for o in self.store.orders if o.id == id), None)

    async def get_for_update(self, id):
        return await self.get_by_id(id)

    async def add(self, order):
        if any(o.order_number == order.order_number for o in self.store.orders):
            raise IntegrityError(
                "INSERT INTO orders", {},
                Exception("duplicate key value violates unique constraint \"ix_orders_order_number\""),
            )
        order.created_at = order.updated_at = self.store.tick()
        self.store.orders.append(order)
        return order

    async def latest_order_number(self) -> Optional[str]:
        return self.store.orders[-1].order_number if self.store.orders else None

    async def list_orders(self, *, status=None, collection_date=None, date_from=None, date_to=None,
                          guest_id=None, include_deleted=False, skip=0, limit=100):
        rows = [
            o for o in self.store.orders
            if (include_deleted or not o.is_deleted)
            and (status is None or o.status == status)
            and (collection_date is None or o.collection_date == collection_date)
            and (date_from is None or o.collection_date >= date_from)
            and (date_to is None or o.collection_date <= date_to)
            and (guest_id is None or o.guest_id == guest_id)
        ]
        rows.sort(key=lambda o: (o.collection_date, o.collection_time))
        return rows[skip:skip + limit]

    def _live_for(self, guest_id) -> List[Any]:
        return [o for o in self.store.orders if o.guest_id == guest_id and not o.is_deleted]

    async def list_by_guest(self, guest_id, *, skip=0, limit=100):
        return self._live_for(guest_id)[skip:skip + limit]

    async def count_active_for_guest(self, guest_id) -> int:
        return len(self._live_for(guest_id))

    async def rollup_for_guest(self, guest_id) -> GuestRollup:
        live = self._live_for(guest_id)
        return GuestRollup(
            total_orders=len(live),
            total_spent=to_money(sum((o.total_amount for o in live), ZERO)),
            last_order_date=max((o.collection_date for o in live), default=None),
        )

    async def list_active(self):
        return [o for o in self.store.orders if not o.is_deleted]

    async def list_by_collection_range(self, start, end):
        return [o for o in self.store.orders if not o.is_deleted and start <= o.collection_date <= end]

    async def list_unlinked_with_email(self):
        return [o for o in self.store.orders if o.guest_id is None and o.guest_email and not o.is_deleted]


class FakeGuestRepo(_Repo):
    async def get_by_id(self, id):
        return next((g for g in self.store.guests if g.id == id), None)

    async def get_active_by_email(self, email):
        email = normalize_email(email)
        return next((g for g in self.store.guests if g.email == email and not g.is_deleted), None)

    async def add(self, guest):
        if await self.get_active_by_email(guest.email) is not None:
            raise IntegrityError("INSERT INTO guests", {}, Exception("duplicate key uq_guests_email_active"))
        guest.created_at = guest.updated_at = self.store.tick()
        self.store.guests.append(guest)
        return guest

    def _matching(self, search, include_deleted):
        term = (search or "").lower()
        return [
            g for g in self.store.guests
            if (include_deleted or not g.is_deleted)
            and (not term or any(term in (v or "").lower() for v in (g.name, g.email, g.phone)))
        ]

    async def list_page(self, *, search=None, include_deleted=False, skip=0, limit=20):
        rows = sorted(self._matching(search, include_deleted), key=lambda g: g.created_at, reverse=True)
        return rows[skip:skip + limit]

    async def count_matching(self, *, search=None, include_deleted=False) -> int:
        return len(self._matching(search, include_deleted))

    async def search(self, term, *, limit=10):
        return sorted(self._matching(term, False), key=lambda g: g.name)[:limit]

    async def count_active(self) -> int:
        return await self.count_matching()

    async def apply_rollup(self, guest, rollup: GuestRollup):
        return await self.update(guest, {
            "total_orders": rollup.total_orders,
            "total_spent": rollup.total_spent,
            "last_order_date": rollup.last_order_date,
        })


class FakeChangeLogRepo(_Repo):
    async def append(self, data: Dict[str, Any]):
        if self.store.fail_audit:
            raise RuntimeError("change_logs is unavailable")
        entry = SimpleNamespace(id=uuid.uuid4(), created_at=self.store.tick(), **data)
        self.store.logs.append(entry)
        return entry

    async def list_for_entity(self, entity_type, entity_id, *, skip=0, limit=100):
        rows = [
            log for log in self.store.logs
            if log.entity_type == entity_type and log.entity_id == entity_id
        ]
        rows.reverse()
        return rows[skip:skip + limit]


class FakeEnquiryRepo(_Repo):
    async def get_by_id(self, id):
        return next((e for e in self.store.enquiries if e.id == id), None)

    async def add(self, enquiry):
        enquiry.created_at = enquiry.updated_at = self.store.tick()
        self.store.enquiries.append(enquiry)
        return enquiry

    async def delete(self, id) -> bool:
        before = len(self.store.enquiries)
        self.store.enquiries = [e for e in self.store.enquiries if e.id != id]
        return len(self.store.enquiries) < before

    async def list_all(self, *, status=None, skip=0, limit=100):
        rows = [e for e in self.store.enquiries if status is None or e.status == status]
        return list(reversed(rows))[skip:skip + limit]


# ─── wiring ──────────────────────────────────────────────────────────────────

def wire_guest_service(svc: GuestService, store: Store) -> GuestService:
    svc._repo = FakeGuestRepo(store)
    svc._orders = FakeOrderRepo(store)
    svc._audit._repo = FakeChangeLogRepo(store)
    return svc


def make_guest_service(store: Store) -> GuestService:
    return wire_guest_service(GuestService(FakeSession()), store)


def make_order_service(store: Store, settings: Optional[AppSettings] = None) -> OrderService:
    svc = OrderService(FakeSession(), settings or AppSettings())
    svc._repo = FakeOrderRepo(store)
    svc._sequencer._repo = svc._repo
    wire_guest_service(svc._guests, store)
    return svc


def make_enquiry_service(store: Store, settings: Optional[AppSettings] = None) -> EnquiryService:
    settings = settings or AppSettings()
    svc = EnquiryService(FakeSession(), settings)
    svc._repo = FakeEnquiryRepo(store)
    svc._orders = make_order_service(store, settings)
    svc._audit._repo = FakeChangeLogRepo(store)
    return svc
