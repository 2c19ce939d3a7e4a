"""
AuditRecorder: best-effort change log for orders, guests and enquiries.

Each entry is written inside a SAVEPOINT. If the insert fails the savepoint
is rolled back, the failure is logged with its traceback and the caller's
transaction carries on; audit trouble never undoes a business mutation.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from takeaway.domain.types import ChangeType, EntityType, FieldChange
from takeaway.infra.database.models.change_log import ChangeLog
from takeaway.infra.database.repositories.change_log import ChangeLogRepository

logger = logging.getLogger(__name__)


def json_safe(value: Any) -> Any:
    """Convert *value* into something JSONB accepts."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [json_safe(v) for v in value]
    return str(value)


def diff_fields(before: Dict[str, Any], after: Dict[str, Any]) -> List[FieldChange]:
    """FieldChange for every key of *after* whose value differs from *before*."""
    return [
        FieldChange(field=key, old_value=before.get(key), new_value=value)
        for key, value in after.items()
        if before.get(key) != value
    ]


def _serialize_changes(changes: Iterable[FieldChange]) -> List[Dict[str, Any]]:
    return [
        {
            "field": change.field,
            "old_value": json_safe(change.old_value),
            "new_value": json_safe(change.new_value),
        }
        for change in changes
    ]


class AuditRecorder:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo = ChangeLogRepository(session)

    async def record(
        self,
        entity_type: EntityType,
        entity_id: UUID,
        change_type: ChangeType,
        actor: str,
        changes: Sequence[FieldChange] = (),
        description: Optional[str] = None,
    ) -> Optional[ChangeLog]:
        """Append one change-log entry. Returns None when the write failed."""
        data = {
            "entity_type": EntityType(entity_type).value,
            "entity_id": entity_id,
            "change_type": ChangeType(change_type).value,
            "changed_by": actor,
            "changes": _serialize_changes(changes),
            "description": description,
        }
        try:
            async with self._session.begin_nested():
                entry = await self._repo.append(data)
        except Exception:
            logger.exception(
                "AuditRecorder: failed to record %s on %s %s",
                data["change_type"], data["entity_type"], entity_id,
            )
            return None
        logger.debug(
            "AuditRecorder: %s %s %s by %s (%d field(s))",
            data["change_type"], data["entity_type"], entity_id, actor, len(data["changes"]),
        )
        return entry

    async def list_for(
        self,
        entity_type: EntityType,
        entity_id: UUID,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ChangeLog]:
        """Entries for one entity, newest first."""
        return await self._repo.list_for_entity(
            EntityType(entity_type).value, entity_id, skip=skip, limit=limit,
        )
