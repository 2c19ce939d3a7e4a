"""
GuestService: guest profiles, email dedup and order rollups.

Orders reference guests weakly (``orders.guest_id``). ``resolve`` decides which
profile an order belongs to; ``refresh_stats`` recomputes the profile's
rollups from its live orders and is the only writer of those columns.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from takeaway.domain.pricing import ZERO
from takeaway.domain.types import (
    ChangeType,
    ContactMethod,
    EntityType,
    FieldChange,
    GuestDetails,
    GuestInput,
    normalize_email,
    parse_enum,
)
from takeaway.infra.database.models.guest import Guest
from takeaway.infra.database.models.order import Order
from takeaway.infra.database.repositories.guest import GuestRepository
from takeaway.infra.database.repositories.order import OrderRepository
from takeaway.services.audit_service import AuditRecorder, diff_fields

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_EDITABLE_FIELDS = (
    "name",
    "email",
    "phone",
    "address",
    "notes",
    "dietary_requirements",
    "preferred_contact_method",
)
_ROLLUP_FIELDS = ("total_orders", "total_spent", "last_order_date")

SEARCH_MIN_CHARS = 2
SEARCH_MAX_RESULTS = 10


@dataclass
class ResolvedGuest:
    """Outcome of reconciliation: the linked profile (if any) and the snapshot to store on the order."""

    guest: Optional[Guest]
    snapshot: GuestDetails

    @property
    def guest_id(self) -> Optional[UUID]:
        return self.guest.id if self.guest is not None else None


def _snapshot_of(guest: Guest) -> GuestDetails:
    return GuestDetails(name=guest.name, email=guest.email, phone=guest.phone, address=guest.address)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require_text(value: Optional[str], field_name: str) -> str:
    cleaned = _clean(value)
    if cleaned is None:
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return cleaned


def _validate_email(email: Optional[str]) -> str:
    normalized = normalize_email(email)
    if normalized is None:
        raise ValidationError("email is required", details={"field": "email"})
    if not _EMAIL_PATTERN.match(normalized):
        raise ValidationError(f"Invalid email address {email!r}", details={"field": "email"})
    return normalized


def _profile_fields(guest: Guest) -> Dict[str, Any]:
    return {name: getattr(guest, name) for name in _EDITABLE_FIELDS}


class GuestService:
    def __init__(self, session: AsyncSession, audit: Optional[AuditRecorder] = None) -> None:
        self._repo = GuestRepository(session)
        self._orders = OrderRepository(session)
        self._audit = audit or AuditRecorder(session)

    # ── reconciliation ────────────────────────────────────────────────────

    async def resolve(
        self,
        guest_id: Optional[UUID],
        details: Optional[GuestDetails],
        actor: str,
    ) -> ResolvedGuest:
        """Map an explicit guest id or raw guest details onto one canonical profile.

        - explicit id: must be a live guest, else NotFoundError
        - email in details: reuse the live guest with that email or create one
        - otherwise: no linkage, the raw details become the snapshot
        """
        if guest_id is not None:
            guest = await self._repo.get_by_id(guest_id)
            if guest is None or guest.is_deleted:
                raise NotFoundError(f"Guest {guest_id} not found", details={"guest_id": str(guest_id)})
            return ResolvedGuest(guest=guest, snapshot=_snapshot_of(guest))

        if details is None:
            raise ValidationError(
                "Either guest_id or guest_details is required",
                details={"field": "guest_details"},
            )
        name = _require_text(details.name, "guest_details.name")
        email = details.normalized_email
        raw = GuestDetails(
            name=name,
            email=email,
            phone=_clean(details.phone),
            address=_clean(details.address),
        )
        if email is None:
            return ResolvedGuest(guest=None, snapshot=raw)

        guest = await self._repo.get_active_by_email(email)
        if guest is not None:
            return ResolvedGuest(guest=guest, snapshot=_snapshot_of(guest))

        guest = await self._insert(
            Guest(
                id=uuid.uuid4(),
                name=raw.name,
                email=email,
                phone=raw.phone,
                address=raw.address,
                preferred_contact_method=ContactMethod.EMAIL.value,
                total_orders=0,
                total_spent=ZERO,
                last_order_date=None,
                is_deleted=False,
                created_by=actor,
                last_modified_by=actor,
            ),
            actor,
            description=f"Guest {raw.name} created from order details",
        )
        return ResolvedGuest(guest=guest, snapshot=_snapshot_of(guest))

    async def refresh_stats(self, guest_id: Optional[UUID]) -> Optional[Guest]:
        """Recompute total_orders / total_spent / last_order_date from the guest's live orders."""
        if guest_id is None:
            return None
        guest = await self._repo.get_by_id(guest_id)
        if guest is None:
            logger.warning("GuestService: rollup skipped, guest %s does not exist", guest_id)
            return None
        if guest.is_deleted:
            return guest
        rollup = await self._orders.rollup_for_guest(guest_id)
        await self._repo.apply_rollup(guest, rollup)
        logger.debug(
            "GuestService: rollup guest=%s orders=%d spent=%s last=%s",
            guest_id, rollup.total_orders, rollup.total_spent, rollup.last_order_date,
        )
        return guest

    # ── profile CRUD ──────────────────────────────────────────────────────

    async def create_guest(self, data: GuestInput, actor: str) -> Guest:
        name = _require_text(data.name, "name")
        email = _validate_email(data.email)
        phone = _require_text(data.phone, "phone")
        address = _require_text(data.address, "address")
        contact = parse_enum(ContactMethod, data.preferred_contact_method or ContactMethod.EMAIL,
                             "preferred_contact_method")

        if await self._repo.get_active_by_email(email) is not None:
            raise ConflictError(
                f"A guest with email {email} already exists", details={"email": email},
            )
        guest = Guest(
            id=uuid.uuid4(),
            name=name,
            email=email,
            phone=phone,
            address=address,
            notes=_clean(data.notes),
            dietary_requirements=_clean(data.dietary_requirements),
            preferred_contact_method=contact.value,
            total_orders=0,
            total_spent=ZERO,
            last_order_date=None,
            is_deleted=False,
            created_by=actor,
            last_modified_by=actor,
        )
        return await self._insert(guest, actor, description=f"Guest {name} created")

    async def _insert(self, guest: Guest, actor: str, *, description: str) -> Guest:
        try:
            await self._repo.add(guest)
        except IntegrityError as exc:
            raise ConflictError(
                f"A guest with email {guest.email} already exists",
                details={"email": guest.email},
                cause=exc,
            ) from exc
        await self._audit.record(
            EntityType.GUEST,
            guest.id,
            ChangeType.CREATE,
            actor,
            changes=[FieldChange(field=k, old_value=None, new_value=v)
                     for k, v in _profile_fields(guest).items() if v is not None],
            description=description,
        )
        logger.info("GuestService: created guest %s (%s)", guest.id, guest.email)
        return guest

    async def update_guest(self, guest_id: UUID, data: Dict[str, Any], actor: str) -> Guest:
        """Partial profile update; rollup fields are rejected."""
        blocked = [k for k in data if k in _ROLLUP_FIELDS]
        if blocked:
            raise ValidationError(
                f"Fields {', '.join(blocked)} are derived from orders and cannot be edited",
                details={"fields": blocked},
            )
        unknown = [k for k in data if k not in _EDITABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Unknown guest fields: {', '.join(unknown)}", details={"fields": unknown})

        patch: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "email":
                patch[key] = _validate_email(value)
            elif key == "preferred_contact_method":
                patch[key] = parse_enum(ContactMethod, value, key).value
            elif key in ("name", "phone", "address"):
                patch[key] = _require_text(value, key)
            else:
                patch[key] = _clean(value)

        guest = await self._get_mutable(guest_id)
        if "email" in patch and patch["email"] != guest.email:
            other = await self._repo.get_active_by_email(patch["email"])
            if other is not None and other.id != guest.id:
                raise ConflictError(
                    f"A guest with email {patch['email']} already exists",
                    details={"email": patch["email"]},
                )

        changes = diff_fields(_profile_fields(guest), patch)
        if not changes:
            return guest
        try:
            await self._repo.update(guest, {**{c.field: c.new_value for c in changes}, "last_modified_by": actor})
        except IntegrityError as exc:
            raise ConflictError(
                f"A guest with email {patch.get('email')} already exists",
                details={"email": patch.get("email")},
                cause=exc,
            ) from exc
        await self._audit.record(
            EntityType.GUEST, guest.id, ChangeType.UPDATE, actor,
            changes=changes, description=f"Guest {guest.name} updated",
        )
        logger.info("GuestService: updated guest %s fields=%s", guest.id, [c.field for c in changes])
        return guest

    async def delete_guest(self, guest_id: UUID, actor: str) -> Guest:
        """Soft-delete a guest that has no live orders."""
        guest = await self._get_mutable(guest_id)
        active = await self._orders.count_active_for_guest(guest_id)
        if active:
            raise InvalidStateError(
                f"Guest {guest_id} still has {active} active order(s)",
                details={"guest_id": str(guest_id), "active_orders": active},
            )
        await self._repo.update(guest, {"is_deleted": True, "last_modified_by": actor})
        await self._audit.record(
            EntityType.GUEST, guest.id, ChangeType.DELETE, actor,
            changes=[FieldChange(field="is_deleted", old_value=False, new_value=True)],
            description=f"Guest {guest.name} deleted",
        )
        logger.info("GuestService: deleted guest %s", guest_id)
        return guest

    async def _get_mutable(self, guest_id: UUID) -> Guest:
        guest = await self._repo.get_by_id(guest_id)
        if guest is None:
            raise NotFoundError(f"Guest {guest_id} not found", details={"guest_id": str(guest_id)})
        if guest.is_deleted:
            raise InvalidStateError(f"Guest {guest_id} is deleted", details={"guest_id": str(guest_id)})
        return guest

    # ── reads ─────────────────────────────────────────────────────────────

    async def get_guest(self, guest_id: UUID, *, include_deleted: bool = False) -> Guest:
        guest = await self._repo.get_by_id(guest_id)
        if guest is None or (guest.is_deleted and not include_deleted):
            raise NotFoundError(f"Guest {guest_id} not found", details={"guest_id": str(guest_id)})
        return guest

    async def list_guests(
        self,
        *,
        search: Optional[str] = None,
        include_deleted: bool = False,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Guest], int]:
        """One page of guests (newest first) plus the total number of matches."""
        search = _clean(search)
        guests = await self._repo.list_page(
            search=search, include_deleted=include_deleted, skip=skip, limit=limit,
        )
        total = await self._repo.count_matching(search=search, include_deleted=include_deleted)
        return guests, total

    async def search_guests(self, term: Optional[str]) -> List[Guest]:
        term = _clean(term)
        if term is None or len(term) < SEARCH_MIN_CHARS:
            raise ValidationError(
                f"Search term must be at least {SEARCH_MIN_CHARS} characters",
                details={"field": "q"},
            )
        return await self._repo.search(term, limit=SEARCH_MAX_RESULTS)

    async def list_guest_orders(self, guest_id: UUID, *, skip: int = 0, limit: int = 100) -> List[Order]:
        await self.get_guest(guest_id, include_deleted=True)
        return await self._orders.list_by_guest(guest_id, skip=skip, limit=limit)

    async def count_guests(self) -> int:
        return await self._repo.count_active()
