"""Audit trail service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.models import Audit
from hr_compliance.models.base import Base, json_safe
from hr_compliance.services.crud import Page, paginate

logger = logging.getLogger(__name__)

METHOD_ACTIONS = {
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
}


def action_for_method(method: str) -> str:
    """Infer the audit action from an HTTP verb."""
    return METHOD_ACTIONS.get(method.upper(), "DELETE")


@dataclass
class AuditContext:
    """Table and action stamped onto a request before the handler runs."""

    table_name: str
    action: str
    changed_by: int | None = None


def _snapshot(data: Base | dict[str, Any] | None) -> dict[str, Any] | None:
    if data is None:
        return None
    if isinstance(data, Base):
        return data.snapshot()
    return json_safe(data)


class AuditService:
    """Writes and queries audit records.

    Audit rows join the caller's session, so they commit in the same
    transaction as the change they describe.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        context: AuditContext,
        record_id: int,
        old_data: Base | dict[str, Any] | None = None,
        new_data: Base | dict[str, Any] | None = None,
        action: str | None = None,
    ) -> Audit:
        """Record a change described by ``context``."""
        return await self.record(
            table_name=context.table_name,
            record_id=record_id,
            action=action or context.action,
            changed_by=context.changed_by,
            old_data=old_data,
            new_data=new_data,
        )

    async def record(
        self,
        table_name: str,
        record_id: int,
        action: str,
        changed_by: int | None = None,
        old_data: Base | dict[str, Any] | None = None,
        new_data: Base | dict[str, Any] | None = None,
    ) -> Audit:
        """Record a change to ``table_name``/``record_id``."""
        audit = Audit(
            table_name=table_name,
            record_id=record_id,
            action=action,
            changed_by=changed_by,
            old_data=_snapshot(old_data),
            new_data=_snapshot(new_data),
        )
        self.session.add(audit)
        await self.session.flush()
        logger.debug("Audit %s %s#%s by %s", action, table_name, record_id, changed_by)
        return audit

    async def list_audits(
        self,
        page: int = 1,
        limit: int = 25,
        table_name: str | None = None,
        action: str | None = None,
        record_id: int | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Page[Audit]:
        """List audit records, newest first."""
        query = select(Audit)
        if table_name:
            query = query.where(Audit.table_name == table_name)
        if action:
            query = query.where(Audit.action == action)
        if record_id is not None:
            query = query.where(Audit.record_id == record_id)
        if start_date:
            query = query.where(Audit.changed_at >= start_date)
        if end_date:
            query = query.where(Audit.changed_at <= end_date)
        query = query.order_by(Audit.changed_at.desc(), Audit.id.desc())

        items, total = await paginate(self.session, query, page, limit)
        return Page(items=items, total=total, page=page, limit=limit)

    async def history(self, table_name: str, record_id: int) -> list[Audit]:
        """Full change history of one record, oldest first."""
        result = await self.session.execute(
            select(Audit)
            .where(Audit.table_name == table_name, Audit.record_id == record_id)
            .order_by(Audit.changed_at, Audit.id)
        )
        return list(result.scalars().all())
