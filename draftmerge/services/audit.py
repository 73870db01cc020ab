"""Audit trail of significant user actions."""
from __future__ import annotations

from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from draftmerge.db.models import AuditLog

MERGE_ACTION = "manuscript.merge"


class AuditLogger:
    """Records actions inside the caller's transaction, so they roll back with it."""

    async def log_action(
        self,
        session: AsyncSession,
        user_id: str,
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        session.add(entry)
        return entry
