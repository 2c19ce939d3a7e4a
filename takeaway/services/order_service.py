"""
OrderService: the order lifecycle engine.

Every mutation validates its whole input before touching the order, works on
a row locked with SELECT ... FOR UPDATE, keeps totals / payment state / status
history consistent, refreshes the linked guest's rollups and finally writes a
change-log entry. The caller owns the transaction (commit or rollback).
"""
from __future__ import annotations

import logging
import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.config import AppSettings, load_app_settings
from takeaway.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from takeaway.domain.pricing import (
    ZERO,
    derive_payment_status,
    ensure_storable,
    line_total,
    order_total,
    to_money,
)
from takeaway.domain.types import (
    ChangeType,
    CollectionPerson,
    EntityType,
    FieldChange,
    GuestDetails,
    ItemStatus,
    OrderCreate,
    OrderItemInput,
    OrderStatus,
    OrderUpdate,
    PaymentMethod,
    PaymentStatus,
    parse_enum,
)
from takeaway.infra.database.models.change_log import ChangeLog
from takeaway.infra.database.models.order import Order, OrderItem, OrderStatusEntry, PaymentRecord
from takeaway.infra.database.repositories.order import OrderRepository
from takeaway.services.audit_service import AuditRecorder
from takeaway.services.guest_service import GuestService, ResolvedGuest
from takeaway.services.order_numbering import OrderNumberSequencer

logger = logging.getLogger(__name__)

DEFAULT_CREATE_NOTE = "Order created"
DEFAULT_DELETE_NOTE = "Order deleted"
# INTEGER column
MAX_QUANTITY = 2**31 - 1

_CLOCK_TIME = re.compile(r"^(\d{1,2})[:.](\d{2})$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_items(inputs: Optional[Sequence[OrderItemInput]]) -> List[OrderItem]:
    """Validate item inputs and turn them into OrderItem rows with line totals."""
    if not inputs:
        raise ValidationError("An order needs at least one item", details={"field": "items"})
    items: List[OrderItem] = []
    for position, entry in enumerate(inputs):
        field = f"items[{position}]"
        if entry.menu_item_id is None:
            raise ValidationError(f"{field}.menu_item_id is required", details={"field": f"{field}.menu_item_id"})
        name = (entry.name or "").strip()
        serving_size = (entry.serving_size or "").strip()
        if not name:
            raise ValidationError(f"{field}.name is required", details={"field": f"{field}.name"})
        if not serving_size:
            raise ValidationError(f"{field}.serving_size is required", details={"field": f"{field}.serving_size"})
        quantity = entry.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= MAX_QUANTITY:
            raise ValidationError(
                f"{field}.quantity must be an integer between 1 and {MAX_QUANTITY}",
                details={"field": f"{field}.quantity"},
            )
        price = to_money(entry.price, f"{field}.price")
        if price < ZERO:
            raise ValidationError(f"{field}.price must not be negative", details={"field": f"{field}.price"})
        status = parse_enum(ItemStatus, entry.status or ItemStatus.PENDING, f"{field}.status")
        items.append(OrderItem(
            id=uuid.uuid4(),
            position=position,
            menu_item_id=entry.menu_item_id,
            name=name,
            serving_size=serving_size,
            quantity=quantity,
            price=price,
            total_price=ensure_storable(line_total(quantity, price), f"{field}.total_price"),
            status=status.value,
            notes=entry.notes,
        ))
    ensure_storable(order_total(items), "total_amount")
    return items


def _require_date(value: Any) -> date:
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValidationError("collection_date must be a calendar date", details={"field": "collection_date"})
    return value


def _require_time(value: Optional[str]) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError("collection_time is required", details={"field": "collection_time"})
    match = _CLOCK_TIME.match(cleaned)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour < 24 and minute < 60:
            return f"{hour:02d}:{minute:02d}"
    return cleaned


def _item_summary(items: Sequence[OrderItem]) -> List[Dict[str, Any]]:
    return [
        {
            "name": i.name,
            "serving_size": i.serving_size,
            "quantity": i.quantity,
            "price": i.price,
            "status": i.status,
            "notes": i.notes,
        }
        for i in items
    ]


def payment_status_for(order: Order) -> str:
    """Derived payment status; a refunded order keeps ``refunded``."""
    if order.status == OrderStatus.REFUNDED.value:
        return PaymentStatus.REFUNDED.value
    return derive_payment_status(order.total_paid, order.total_amount).value


class OrderService:
    def __init__(self, session: AsyncSession, settings: Optional[AppSettings] = None) -> None:
        self._settings = settings or load_app_settings()
        self._repo = OrderRepository(session)
        self._audit = AuditRecorder(session)
        self._guests = GuestService(session, audit=self._audit)
        self._sequencer = OrderNumberSequencer(session, prefix=self._settings.order_number_prefix)

    # ── helpers ───────────────────────────────────────────────────────────

    async def _load_mutable(self, order_id: UUID) -> Order:
        order = await self._repo.get_for_update(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found", details={"order_id": str(order_id)})
        if order.is_deleted:
            raise InvalidStateError(
                f"Order {order.order_number} is deleted and cannot be modified",
                details={"order_id": str(order_id)},
            )
        return order

    def _append_history(self, order: Order, status: OrderStatus, actor: str, notes: Optional[str]) -> None:
        order.status_history.append(OrderStatusEntry(
            id=uuid.uuid4(),
            sequence=len(order.status_history) + 1,
            status=status.value,
            changed_by=actor,
            changed_at=_utcnow(),
            notes=notes,
        ))

    @staticmethod
    def _apply_snapshot(order: Order, snapshot: GuestDetails) -> None:
        order.guest_name = snapshot.name
        order.guest_email = snapshot.email
        order.guest_phone = snapshot.phone
        order.guest_address = snapshot.address

    async def _refresh_guests(self, *guest_ids: Optional[UUID]) -> None:
        seen = set()
        for guest_id in guest_ids:
            if guest_id is None or guest_id in seen:
                continue
            seen.add(guest_id)
            await self._guests.refresh_stats(guest_id)

    # ── create ────────────────────────────────────────────────────────────

    async def create_order(self, data: OrderCreate, actor: str) -> Order:
        items = build_items(data.items)
        collection_date = _require_date(data.collection_date)
        collection_time = _require_time(data.collection_time)
        method = parse_enum(PaymentMethod, data.payment_method, "payment_method")
        if data.guest_id is None and data.guest_details is None:
            raise ValidationError(
                "Either guest_id or guest_details is required", details={"field": "guest_details"},
            )
        if data.collection_person is not None and not (data.collection_person.name or "").strip():
            raise ValidationError("collection_person.name is required", details={"field": "collection_person.name"})

        resolved = await self._guests.resolve(data.guest_id, data.guest_details, actor)
        person = data.collection_person or CollectionPerson(
            name=resolved.snapshot.name,
            email=resolved.snapshot.email,
            phone=resolved.snapshot.phone,
        )
        order_number = await self._sequencer.next_number()

        order = Order(
            id=uuid.uuid4(),
            order_number=order_number,
            guest_id=resolved.guest_id,
            collection_person_name=person.name.strip(),
            collection_person_email=person.email,
            collection_person_phone=person.phone,
            total_amount=order_total(items),
            collection_date=collection_date,
            collection_time=collection_time,
            status=OrderStatus.PENDING.value,
            payment_method=method.value,
            payment_status=PaymentStatus.PENDING.value,
            total_paid=ZERO,
            is_deleted=False,
            created_by=actor,
            last_modified_by=actor,
            items=items,
            status_history=[],
            payment_records=[],
        )
        self._apply_snapshot(order, resolved.snapshot)
        order.payment_status = payment_status_for(order)
        self._append_history(order, OrderStatus.PENDING, actor, data.note or DEFAULT_CREATE_NOTE)

        try:
            await self._repo.add(order)
        except IntegrityError as exc:
            raise self._integrity_error(exc, order_number) from exc

        await self._refresh_guests(order.guest_id)
        await self._audit.record(
            EntityType.ORDER,
            order.id,
            ChangeType.CREATE,
            actor,
            changes=[
                FieldChange("order_number", None, order.order_number),
                FieldChange("guest_id", None, order.guest_id),
                FieldChange("total_amount", None, order.total_amount),
                FieldChange("collection_date", None, order.collection_date),
                FieldChange("status", None, order.status),
            ],
            description=f"Order {order.order_number} created",
        )
        logger.info(
            "OrderService: created order %s (%s) guest=%s total=%s",
            order.order_number, order.id, order.guest_id, order.total_amount,
        )
        return order

    @staticmethod
    def _integrity_error(exc: IntegrityError, order_number: str) -> Exception:
        if "foreign key" in str(exc.orig).lower():
            return NotFoundError(
                "Order references a menu item or guest that does not exist",
                details={"order_number": order_number},
                cause=exc,
            )
        return ConflictError(
            f"Order number {order_number} is already taken, retry the request",
            details={"order_number": order_number},
            cause=exc,
        )

    # ── update ────────────────────────────────────────────────────────────

    async def update_order(self, order_id: UUID, patch: OrderUpdate, actor: str) -> Order:
        """Replace any of guest, collection person, items, schedule and payment method."""
        new_items = build_items(patch.items) if patch.items is not None else None
        new_date = _require_date(patch.collection_date) if patch.collection_date is not None else None
        new_time = _require_time(patch.collection_time) if patch.collection_time is not None else None
        new_method = (
            parse_enum(PaymentMethod, patch.payment_method, "payment_method")
            if patch.payment_method is not None else None
        )
        if patch.collection_person is not None and not (patch.collection_person.name or "").strip():
            raise ValidationError("collection_person.name is required", details={"field": "collection_person.name"})

        order = await self._load_mutable(order_id)
        old_guest_id = order.guest_id
        changes: List[FieldChange] = []

        def _set(field: str, value: Any) -> None:
            old = getattr(order, field)
            if old != value:
                changes.append(FieldChange(field, old, value))
                setattr(order, field, value)

        if patch.touches_guest:
            resolved: ResolvedGuest = await self._guests.resolve(patch.guest_id, patch.guest_details, actor)
            _set("guest_id", resolved.guest_id)
            snapshot = resolved.snapshot
            _set("guest_name", snapshot.name)
            _set("guest_email", snapshot.email)
            _set("guest_phone", snapshot.phone)
            _set("guest_address", snapshot.address)

        if patch.collection_person is not None:
            _set("collection_person_name", patch.collection_person.name.strip())
            _set("collection_person_email", patch.collection_person.email)
            _set("collection_person_phone", patch.collection_person.phone)

        items_changed = False
        if new_items is not None:
            # Lines are rebuilt with fresh ids, so a replacement is always logged
            changes.append(FieldChange("items", _item_summary(order.items), _item_summary(new_items)))
            order.items = new_items
            items_changed = True
            _set("total_amount", order_total(new_items))
            _set("payment_status", payment_status_for(order))

        date_changed = False
        if new_date is not None:
            date_changed = new_date != order.collection_date
            _set("collection_date", new_date)
        if new_time is not None:
            _set("collection_time", new_time)
        if new_method is not None:
            _set("payment_method", new_method.value)

        if not changes:
            return order

        order.last_modified_by = actor
        await self._repo.flush()

        guest_changed = old_guest_id != order.guest_id
        if guest_changed or items_changed or date_changed:
            await self._refresh_guests(old_guest_id, order.guest_id)

        await self._audit.record(
            EntityType.ORDER, order.id, ChangeType.UPDATE, actor,
            changes=changes,
            description=f"Order {order.order_number} updated",
        )
        logger.info(
            "OrderService: updated order %s fields=%s",
            order.order_number, [c.field for c in changes],
        )
        return order

    # ── status ────────────────────────────────────────────────────────────

    async def change_status(
        self,
        order_id: UUID,
        status: Any,
        actor: str,
        notes: Optional[str] = None,
    ) -> Order:
        """Move the order to any defined status; ``deleted`` goes through soft delete."""
        target = parse_enum(OrderStatus, status, "status")
        order = await self._load_mutable(order_id)
        if target is OrderStatus.DELETED:
            return await self._soft_delete(order, actor, notes)

        old_status = order.status
        old_payment_status = order.payment_status
        order.status = target.value
        order.payment_status = payment_status_for(order)
        self._append_history(order, target, actor, notes)
        order.last_modified_by = actor
        await self._repo.flush()

        changes = [FieldChange("status", old_status, order.status)]
        if old_payment_status != order.payment_status:
            changes.append(FieldChange("payment_status", old_payment_status, order.payment_status))
        await self._audit.record(
            EntityType.ORDER, order.id, ChangeType.STATUS_CHANGE, actor,
            changes=changes,
            description=f"Order {order.order_number} status {old_status} -> {order.status}",
        )
        logger.info("OrderService: order %s status %s -> %s", order.order_number, old_status, order.status)
        return order

    # ── payments ──────────────────────────────────────────────────────────

    async def record_payment(
        self,
        order_id: UUID,
        amount: Any,
        method: Any,
        actor: str,
        notes: Optional[str] = None,
    ) -> Order:
        value = to_money(amount, "amount")
        if value <= ZERO:
            raise ValidationError("Payment amount must be greater than zero", details={"field": "amount"})
        payment_method = parse_enum(PaymentMethod, method, "method")

        order = await self._load_mutable(order_id)
        old_paid = order.total_paid
        new_paid = ensure_storable(old_paid + value, "total_paid")
        old_payment_status = order.payment_status
        order.payment_records.append(PaymentRecord(
            id=uuid.uuid4(),
            sequence=len(order.payment_records) + 1,
            amount=value,
            method=payment_method.value,
            received_at=_utcnow(),
            notes=notes,
        ))
        order.total_paid = new_paid
        order.payment_status = payment_status_for(order)
        order.last_modified_by = actor
        await self._repo.flush()

        changes = [FieldChange("total_paid", old_paid, order.total_paid)]
        if old_payment_status != order.payment_status:
            changes.append(FieldChange("payment_status", old_payment_status, order.payment_status))
        await self._audit.record(
            EntityType.ORDER, order.id, ChangeType.PAYMENT_ADD, actor,
            changes=changes,
            description=f"Payment of {value} ({payment_method.value}) on order {order.order_number}",
        )
        logger.info(
            "OrderService: payment %s on order %s, total_paid=%s status=%s",
            value, order.order_number, order.total_paid, order.payment_status,
        )
        return order

    # ── items ─────────────────────────────────────────────────────────────

    async def update_item(
        self,
        order_id: UUID,
        item_id: UUID,
        actor: str,
        *,
        status: Any = None,
        notes: Optional[str] = None,
    ) -> Order:
        """Change one item's fulfillment status and/or notes. Totals are untouched."""
        if status is None and notes is None:
            raise ValidationError("Provide status and/or notes", details={"field": "status"})
        item_status = parse_enum(ItemStatus, status, "status") if status is not None else None

        order = await self._load_mutable(order_id)
        item = order.item_by_id(item_id)
        if item is None:
            raise NotFoundError(
                f"Item {item_id} not found in order {order.order_number}",
                details={"order_id": str(order_id), "item_id": str(item_id)},
            )

        changes: List[FieldChange] = []
        if item_status is not None and item.status != item_status.value:
            changes.append(FieldChange(f"items.{item.position}.status", item.status, item_status.value))
            item.status = item_status.value
        if notes is not None and item.notes != notes:
            changes.append(FieldChange(f"items.{item.position}.notes", item.notes, notes))
            item.notes = notes
        if not changes:
            return order

        order.last_modified_by = actor
        await self._repo.flush()
        await self._audit.record(
            EntityType.ORDER, order.id, ChangeType.ITEM_UPDATE, actor,
            changes=changes,
            description=f"Item {item.name} ({item.serving_size}) updated on order {order.order_number}",
        )
        logger.info("OrderService: item %s updated on order %s", item_id, order.order_number)
        return order

    # ── delete ────────────────────────────────────────────────────────────

    async def delete_order(self, order_id: UUID, actor: str, notes: Optional[str] = None) -> Order:
        """Soft delete. Deleting an already-deleted order returns it unchanged."""
        order = await self._repo.get_for_update(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found", details={"order_id": str(order_id)})
        if order.is_deleted:
            return order
        return await self._soft_delete(order, actor, notes)

    async def _soft_delete(self, order: Order, actor: str, notes: Optional[str]) -> Order:
        old_status = order.status
        order.is_deleted = True
        order.status = OrderStatus.DELETED.value
        self._append_history(order, OrderStatus.DELETED, actor, notes or DEFAULT_DELETE_NOTE)
        order.last_modified_by = actor
        await self._repo.flush()

        await self._refresh_guests(order.guest_id)
        await self._audit.record(
            EntityType.ORDER, order.id, ChangeType.DELETE, actor,
            changes=[
                FieldChange("is_deleted", False, True),
                FieldChange("status", old_status, order.status),
            ],
            description=f"Order {order.order_number} deleted",
        )
        logger.info("OrderService: deleted order %s", order.order_number)
        return order

    # ── reads ─────────────────────────────────────────────────────────────

    async def get_order(self, order_id: UUID, *, include_deleted: bool = False) -> Order:
        order = await self._repo.get_by_id(order_id)
        if order is None or (order.is_deleted and not include_deleted):
            raise NotFoundError(f"Order {order_id} not found", details={"order_id": str(order_id)})
        return order

    async def list_orders(
        self,
        *,
        status: Optional[str] = None,
        collection_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        guest_id: Optional[UUID] = None,
        include_deleted: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Order]:
        if status is not None:
            status = parse_enum(OrderStatus, status, "status").value
        if date_from is not None and date_to is not None and date_from > date_to:
            raise ValidationError("date_from must not be after date_to", details={"field": "date_from"})
        return await self._repo.list_orders(
            status=status,
            collection_date=collection_date,
            date_from=date_from,
            date_to=date_to,
            guest_id=guest_id,
            include_deleted=include_deleted or status == OrderStatus.DELETED.value,
            skip=skip,
            limit=limit,
        )

    async def list_change_logs(self, order_id: UUID, *, skip: int = 0, limit: int = 100) -> List[ChangeLog]:
        """Change history of one order (deleted ones included), newest first."""
        await self.get_order(order_id, include_deleted=True)
        return await self._audit.list_for(EntityType.ORDER, order_id, skip=skip, limit=limit)
