"""Tests for the change-log recorder."""
from __future__ import annotations

import asyncio
import unittest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from takeaway.domain.types import ChangeType, EntityType, FieldChange, OrderStatus
from takeaway.services.audit_service import AuditRecorder, diff_fields, json_safe
from takeaway.tests.fakes import FakeChangeLogRepo, FakeSession, Store


def _run(coro):
    return asyncio.run(coro)


def _recorder(store):
    session = FakeSession()
    recorder = AuditRecorder(session)
    recorder._repo = FakeChangeLogRepo(store)
    return recorder, session


class TestJsonSafe(unittest.TestCase):
    def test_converts_domain_values(self):
        entity_id = uuid4()
        value = {
            "amount": Decimal("12.50"),
            "day": date(2025, 12, 24),
            "id": entity_id,
            "status": OrderStatus.CONFIRMED,
            "items": ({"qty": 2},),
        }
        self.assertEqual(json_safe(value), {
            "amount": "12.50",
            "day": "2025-12-24",
            "id": str(entity_id),
            "status": "confirmed",
            "items": [{"qty": 2}],
        })


class TestDiffFields(unittest.TestCase):
    def test_only_changed_keys(self):
        changes = diff_fields({"phone": "1", "name": "Jane"}, {"phone": "2", "name": "Jane"})
        self.assertEqual(changes, [FieldChange("phone", "1", "2")])

    def test_new_key_has_no_old_value(self):
        self.assertEqual(diff_fields({}, {"notes": "x"}), [FieldChange("notes", None, "x")])


class TestAuditRecorder(unittest.TestCase):
    def test_records_entry_inside_savepoint(self):
        store = Store()
        recorder, session = _recorder(store)
        order_id = uuid4()

        entry = _run(recorder.record(
            EntityType.ORDER, order_id, ChangeType.PAYMENT_ADD, "staff-1",
            changes=[FieldChange("total_paid", Decimal("0.00"), Decimal("300.00"))],
            description="Payment",
        ))

        self.assertIsNotNone(entry)
        self.assertEqual(session.savepoints, 1)
        self.assertEqual(entry.entity_type, "order")
        self.assertEqual(entry.change_type, "payment_add")
        self.assertEqual(entry.changed_by, "staff-1")
        self.assertEqual(entry.changes, [{"field": "total_paid", "old_value": "0.00", "new_value": "300.00"}])

    def test_failure_is_logged_and_swallowed(self):
        store = Store()
        store.fail_audit = True
        recorder, _ = _recorder(store)

        with self.assertLogs("takeaway.services.audit_service", level="ERROR") as logs:
            result = _run(recorder.record(EntityType.GUEST, uuid4(), ChangeType.UPDATE, "staff-1"))

        self.assertIsNone(result)
        self.assertEqual(store.logs, [])
        self.assertIn("failed to record update on guest", logs.output[0])

    def test_list_for_newest_first(self):
        store = Store()
        recorder, _ = _recorder(store)
        guest_id = uuid4()
        _run(recorder.record(EntityType.GUEST, guest_id, ChangeType.CREATE, "a"))
        _run(recorder.record(EntityType.GUEST, guest_id, ChangeType.UPDATE, "b"))
        _run(recorder.record(EntityType.ORDER, uuid4(), ChangeType.CREATE, "c"))

        entries = _run(recorder.list_for(EntityType.GUEST, guest_id))
        self.assertEqual([e.change_type for e in entries], ["update", "create"])


if __name__ == "__main__":
    unittest.main()
