"""Unit tests for guest reconciliation, profile CRUD and rollups."""
from __future__ import annotations

import asyncio
import unittest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from takeaway.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from takeaway.domain.types import GuestDetails, GuestInput
from takeaway.tests.fakes import Store, make_guest_service


def _run(coro):
    return asyncio.run(coro)


def _input(**kwargs):
    defaults = dict(name="Jane Doe", email="jane@example.com", phone="0501", address="Villa 1")
    defaults.update(kwargs)
    return GuestInput(**defaults)


def _order(guest_id, total, day, deleted=False):
    return SimpleNamespace(
        id=uuid4(), guest_id=guest_id, total_amount=Decimal(total),
        collection_date=day, is_deleted=deleted,
    )


class _GuestCase(unittest.TestCase):
    def setUp(self):
        self.store = Store()
        self.svc = make_guest_service(self.store)


class TestResolve(_GuestCase):
    def test_creates_profile_for_new_email(self):
        resolved = _run(self.svc.resolve(None, GuestDetails(name="Jane", email=" JANE@example.com "), "staff"))

        self.assertIsNotNone(resolved.guest_id)
        self.assertEqual(resolved.guest.email, "jane@example.com")
        self.assertEqual(resolved.snapshot.email, "jane@example.com")
        self.assertEqual(resolved.guest.total_orders, 0)
        self.assertEqual(len(self.store.logs_for(resolved.guest_id)), 1)

    def test_email_match_is_case_insensitive(self):
        first = _run(self.svc.resolve(None, GuestDetails(name="Jane", email="jane@example.com"), "staff"))
        second = _run(self.svc.resolve(None, GuestDetails(name="J. Doe", email="Jane@Example.COM"), "staff"))

        self.assertEqual(first.guest_id, second.guest_id)
        self.assertEqual(len(self.store.guests), 1)
        self.assertEqual(second.snapshot.name, "Jane")

    def test_no_email_means_no_link(self):
        resolved = _run(self.svc.resolve(None, GuestDetails(name=" Walk In ", phone="0502"), "staff"))
        self.assertIsNone(resolved.guest_id)
        self.assertEqual(resolved.snapshot.name, "Walk In")
        self.assertEqual(self.store.guests, [])

    def test_explicit_id_uses_profile_snapshot(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        resolved = _run(self.svc.resolve(guest.id, GuestDetails(name="Ignored"), "staff"))
        self.assertIs(resolved.guest, guest)
        self.assertEqual(resolved.snapshot.name, "Jane Doe")

    def test_explicit_id_must_exist(self):
        with self.assertRaises(NotFoundError):
            _run(self.svc.resolve(uuid4(), None, "staff"))

    def test_deleted_guest_is_not_reused(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        _run(self.svc.delete_guest(guest.id, "staff"))

        resolved = _run(self.svc.resolve(None, GuestDetails(name="Jane", email="jane@example.com"), "staff"))
        self.assertNotEqual(resolved.guest_id, guest.id)
        with self.assertRaises(NotFoundError):
            _run(self.svc.resolve(guest.id, None, "staff"))

    def test_name_required(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.resolve(None, GuestDetails(name="  ", email="x@example.com"), "staff"))


class TestRefreshStats(_GuestCase):
    def test_rollup_over_live_orders(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        self.store.orders.extend([
            _order(guest.id, "550.00", date(2025, 12, 24)),
            _order(guest.id, "90.00", date(2025, 12, 31)),
            _order(guest.id, "1000.00", date(2026, 1, 5), deleted=True),
            _order(uuid4(), "10.00", date(2026, 1, 6)),
        ])

        _run(self.svc.refresh_stats(guest.id))

        self.assertEqual(guest.total_orders, 2)
        self.assertEqual(guest.total_spent, Decimal("640.00"))
        self.assertEqual(guest.last_order_date, date(2025, 12, 31))

    def test_no_orders(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        _run(self.svc.refresh_stats(guest.id))
        self.assertEqual(guest.total_orders, 0)
        self.assertEqual(guest.total_spent, Decimal("0.00"))
        self.assertIsNone(guest.last_order_date)

    def test_missing_guest_is_skipped(self):
        with self.assertLogs("takeaway.services.guest_service", level="WARNING"):
            self.assertIsNone(_run(self.svc.refresh_stats(uuid4())))

    def test_none_is_noop(self):
        self.assertIsNone(_run(self.svc.refresh_stats(None)))


class TestGuestCrud(_GuestCase):
    def test_create_normalizes_email(self):
        guest = _run(self.svc.create_guest(_input(email=" Jane@Example.com"), "staff"))
        self.assertEqual(guest.email, "jane@example.com")
        self.assertEqual(guest.preferred_contact_method, "email")
        self.assertEqual(guest.created_by, "staff")

    def test_create_duplicate_email_conflicts(self):
        _run(self.svc.create_guest(_input(), "staff"))
        with self.assertRaises(ConflictError):
            _run(self.svc.create_guest(_input(name="Other", email="JANE@example.com"), "staff"))

    def test_create_requires_fields(self):
        for field in ("name", "phone", "address"):
            with self.subTest(field=field), self.assertRaises(ValidationError) as ctx:
                _run(self.svc.create_guest(_input(**{field: " "}), "staff"))
            self.assertEqual(ctx.exception.details["field"], field)

    def test_create_rejects_malformed_email(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.create_guest(_input(email="not-an-email"), "staff"))

    def test_update_records_changes(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        _run(self.svc.update_guest(guest.id, {"phone": "0999", "dietary_requirements": "no nuts"}, "editor"))

        self.assertEqual(guest.phone, "0999")
        self.assertEqual(guest.last_modified_by, "editor")
        log = self.store.logs_for(guest.id)[-1]
        self.assertEqual(log.change_type, "update")
        self.assertIn({"field": "phone", "old_value": "0501", "new_value": "0999"}, log.changes)

    def test_update_rejects_rollup_fields(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        with self.assertRaises(ValidationError):
            _run(self.svc.update_guest(guest.id, {"total_spent": 5}, "editor"))

    def test_update_email_conflict(self):
        _run(self.svc.create_guest(_input(), "staff"))
        bob = _run(self.svc.create_guest(_input(name="Bob", email="bob@example.com"), "staff"))
        with self.assertRaises(ConflictError):
            _run(self.svc.update_guest(bob.id, {"email": "JANE@example.com"}, "editor"))

    def test_delete_blocked_by_live_orders(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        self.store.orders.append(_order(guest.id, "10.00", date(2025, 12, 24)))
        with self.assertRaises(InvalidStateError):
            _run(self.svc.delete_guest(guest.id, "staff"))

    def test_delete_hides_guest(self):
        guest = _run(self.svc.create_guest(_input(), "staff"))
        _run(self.svc.delete_guest(guest.id, "staff"))

        self.assertTrue(guest.is_deleted)
        with self.assertRaises(NotFoundError):
            _run(self.svc.get_guest(guest.id))
        with self.assertRaises(InvalidStateError):
            _run(self.svc.update_guest(guest.id, {"phone": "1"}, "staff"))
        self.assertEqual(_run(self.svc.count_guests()), 0)


class TestGuestQueries(_GuestCase):
    def setUp(self):
        super().setUp()
        _run(self.svc.create_guest(_input(), "staff"))
        _run(self.svc.create_guest(_input(name="Bob Smith", email="bob@example.com", phone="0777"), "staff"))

    def test_list_newest_first_with_total(self):
        guests, total = _run(self.svc.list_guests(limit=1))
        self.assertEqual(total, 2)
        self.assertEqual([g.name for g in guests], ["Bob Smith"])

    def test_search_matches_name_email_phone(self):
        self.assertEqual([g.name for g in _run(self.svc.search_guests("smith"))], ["Bob Smith"])
        self.assertEqual([g.name for g in _run(self.svc.search_guests("0777"))], ["Bob Smith"])
        self.assertEqual(len(_run(self.svc.search_guests("example"))), 2)

    def test_search_term_too_short(self):
        with self.assertRaises(ValidationError):
            _run(self.svc.search_guests("b"))


if __name__ == "__main__":
    unittest.main()
