"""Audit context dependency for mutating routes."""

from typing import Callable

from fastapi import Request

from hr_compliance.api.security import CurrentIdentity
from hr_compliance.services.audit_service import AuditContext, action_for_method


def audit_context(table_name: str) -> Callable:
    """Build a dependency that stamps ``table_name`` and the verb's action on a request."""

    async def dependency(request: Request, identity: CurrentIdentity) -> AuditContext:
        return AuditContext(
            table_name=table_name,
            action=action_for_method(request.method),
            changed_by=identity.user.id,
        )

    return dependency
