"""Audit log repository."""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, select

from jood_api.models.orm.audit_log import AuditLogORM
from jood_api.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditLogORM]):
    """Repository for audit log operations."""

    model = AuditLogORM

    async def log(
        self,
        action: str,
        resource_type: str,
        resource_id: UUID | None = None,
        user_id: UUID | None = None,
        changes: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLogORM:
        """Create an audit log entry.

        Args:
            action: Action performed (create, deactivate, add_permission, etc.)
            resource_type: Type of resource affected
            resource_id: ID of affected resource
            user_id: ID of the user who performed the action
            changes: Dict of changes made
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            Created AuditLogORM
        """
        log_entry = AuditLogORM(
            id=uuid4(),
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=user_id,
            changes=changes,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.session.add(log_entry)
        await self.session.flush()
        return log_entry

    async def get_by_resource(
        self,
        resource_type: str,
        resource_id: UUID,
        limit: int = 50,
    ) -> list[AuditLogORM]:
        """Get audit logs for a specific resource, newest first.

        Args:
            resource_type: Type of resource
            resource_id: ID of resource
            limit: Maximum results

        Returns:
            List of audit logs
        """
        result = await self.session.execute(
            select(AuditLogORM)
            .where(
                and_(
                    AuditLogORM.resource_type == resource_type,
                    AuditLogORM.resource_id == resource_id,
                )
            )
            .order_by(AuditLogORM.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
