"""Bulk grant/revoke processor."""

import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.config import get_settings
from jood_api.constants.permissions import Permissions
from jood_api.exceptions import (
    InactiveTargetError,
    InvalidOperationError,
    JoodAPIError,
    OperationForbiddenError,
    PermissionNotFoundError,
    ProfileNotFoundError,
    RoleNotFoundError,
    ValidationError,
    taxonomy_name,
)
from jood_api.models.domain.grant import BulkReport, GrantAction, GrantOperation
from jood_api.models.domain.profile import ProfileKind
from jood_api.repositories.audit_repository import AuditRepository
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.services.resolution_service import ResolutionService

logger = logging.getLogger(__name__)

ProfilesChangedHook = Callable[[list[UUID]], Awaitable[None]]


@dataclass
class _Entry:
    """One submitted operation on its way through the batch."""

    raw: dict[str, Any]
    key: Hashable | None = None
    profile_id: UUID | None = None
    user_id: UUID | None = None
    action: GrantAction | None = None
    target_id: UUID | None = None
    error: JoodAPIError | None = None


def _parse_uuid(value: Any, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidOperationError(f"Missing or invalid {field}", {"field": field})
    try:
        return UUID(value.strip())
    except ValueError as e:
        raise InvalidOperationError(f"Invalid {field}", {"field": field}) from e


def _parse_action(value: Any) -> GrantAction:
    try:
        return GrantAction(value)
    except ValueError as e:
        raise InvalidOperationError("Unknown action", {"action": str(value)}) from e


def _raw_operation(item: Mapping[str, Any]) -> dict[str, Any]:
    return {
        field: None if item.get(field) is None else str(item.get(field))
        for field in ("user_id", "action", "target_id")
    }


def deduplicate(entries: Sequence[_Entry]) -> tuple[list[_Entry], int]:
    """Keep only the last entry per key, preserving input order.

    Entries without a key (malformed ones) are always kept.

    Returns:
        Tuple of (surviving entries, number of dropped entries)
    """
    last_index: dict[Hashable, int] = {}
    for index, entry in enumerate(entries):
        if entry.key is not None:
            last_index[entry.key] = index

    survivors = [
        entry
        for index, entry in enumerate(entries)
        if entry.key is None or last_index[entry.key] == index
    ]
    return survivors, len(entries) - len(survivors)


class BulkMutationService:
    """Applies batches of grant/revoke operations to profiles.

    Each surviving operation commits in its own transaction. A failing
    operation is rolled back and recorded in the report; it never aborts the
    rest of the batch, and nothing is raised for per-operation failures.
    """

    def __init__(
        self,
        session: AsyncSession,
        on_profiles_changed: ProfilesChangedHook | None = None,
        max_operations: int | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Database session
            on_profiles_changed: Awaited with the IDs of profiles that had at
                least one successful operation
            max_operations: Largest accepted batch; the configured limit when None
        """
        self.session = session
        self.on_profiles_changed = on_profiles_changed
        self.max_operations = max_operations or get_settings().bulk_max_operations
        self.profile_repo = ProfileRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.audit_repo = AuditRepository(session)

    def _check_size(self, count: int) -> None:
        if count > self.max_operations:
            raise ValidationError(
                f"Too many operations (maximum {self.max_operations})",
                {"count": count, "max_operations": self.max_operations},
            )

    async def apply(
        self,
        operations: Sequence[GrantOperation],
        actor_id: UUID | None = None,
    ) -> BulkReport:
        """Apply profile-addressed operations.

        Args:
            operations: Operations in submission order
            actor_id: User performing the batch, for the audit trail

        Returns:
            BulkReport

        Raises:
            ValidationError: If the batch exceeds the maximum size
        """
        self._check_size(len(operations))
        entries = [
            _Entry(
                raw=op.describe(),
                key=op.dedup_key,
                profile_id=op.profile_id,
                action=op.action,
                target_id=op.target_id,
            )
            for op in operations
        ]
        survivors, skipped = deduplicate(entries)

        report = BulkReport(skipped_duplicates=skipped)
        for entry in survivors:
            await self._apply_entry(entry, actor_id, report)
        await self._notify(report)
        return report

    async def apply_user_operations(
        self,
        items: Sequence[Mapping[str, Any]],
        kind: ProfileKind = ProfileKind.ADMIN,
        actor_id: UUID | None = None,
    ) -> BulkReport:
        """Apply loosely typed ``{user_id, action, target_id}`` operations.

        Each user is mapped to their profile of the given kind. Malformed
        entries and users without such a profile become per-operation failures.
        When an actor is given, operations on the actor's own grants, or by an
        actor without ``manage_permissions``, fail with "Permission denied".

        Args:
            items: Raw operations in submission order
            kind: Profile kind the operations address
            actor_id: User performing the batch, checked and audited

        Returns:
            BulkReport

        Raises:
            ValidationError: If the batch exceeds the maximum size
        """
        self._check_size(len(items))

        entries = []
        for item in items:
            entry = _Entry(raw=_raw_operation(item))
            try:
                entry.user_id = _parse_uuid(item.get("user_id"), "user_id")
                entry.target_id = _parse_uuid(item.get("target_id"), "target_id")
                entry.key = (entry.user_id, entry.target_id)
                entry.action = _parse_action(item.get("action"))
            except InvalidOperationError as e:
                entry.error = e
            entries.append(entry)

        survivors, skipped = deduplicate(entries)
        if actor_id is not None:
            await self._authorize(survivors, actor_id)
        profile_ids = await self.profile_repo.get_ids_by_users(
            [e.user_id for e in survivors if e.user_id is not None and e.error is None],
            kind.value,
        )

        report = BulkReport(skipped_duplicates=skipped)
        for entry in survivors:
            if entry.error is None:
                entry.profile_id = profile_ids.get(entry.user_id)
                if entry.profile_id is None:
                    entry.error = ProfileNotFoundError(user_id=str(entry.user_id))
            await self._apply_entry(entry, actor_id, report)
        await self._notify(report)
        return report

    async def _authorize(self, entries: Sequence[_Entry], actor_id: UUID) -> None:
        """Mark the entries the actor may not apply.

        Nobody edits their own grants. Editing anyone else's requires
        ``manage_permissions`` on the actor's admin profile, which super
        admins hold through the legacy wildcard.
        """
        may_manage = await ResolutionService(self.session).user_has_permission(
            actor_id, Permissions.MANAGE_PERMISSIONS
        )
        for entry in entries:
            if entry.error is not None:
                continue
            if entry.user_id == actor_id:
                entry.error = OperationForbiddenError(str(entry.user_id), "own grants")
            elif not may_manage:
                entry.error = OperationForbiddenError(
                    str(entry.user_id), f"missing {Permissions.MANAGE_PERMISSIONS}"
                )

    async def _notify(self, report: BulkReport) -> None:
        logger.info(
            "Bulk update processed %d operations: %d successful, %d failed, %d duplicates skipped",
            report.processed,
            report.successful,
            len(report.failures),
            report.skipped_duplicates,
        )
        if report.changed_profile_ids and self.on_profiles_changed is not None:
            await self.on_profiles_changed(list(report.changed_profile_ids))

    def _fail(self, report: BulkReport, entry: _Entry, exc: Exception, reason: str) -> None:
        logger.warning("Bulk operation %s failed: %s", entry.raw, reason)
        report.record_failure(entry.raw, reason, taxonomy_name(exc))

    async def _apply_entry(
        self,
        entry: _Entry,
        actor_id: UUID | None,
        report: BulkReport,
    ) -> None:
        if entry.error is not None:
            self._fail(report, entry, entry.error, entry.error.message)
            return

        profile_id = entry.profile_id
        try:
            await self._apply_operation(profile_id, entry.action, entry.target_id, actor_id)
            await self.session.commit()
        except JoodAPIError as e:
            await self.session.rollback()
            self._fail(report, entry, e, e.message)
        except IntegrityError as e:
            await self.session.rollback()
            if entry.action.is_grant:
                # A concurrent batch inserted the same grant row first
                report.record_success(profile_id)
            else:
                self._fail(report, entry, e, "Database constraint violated")
        except SQLAlchemyError as e:
            await self.session.rollback()
            self._fail(report, entry, e, "Database error")
        else:
            report.record_success(profile_id)

    async def _apply_operation(
        self,
        profile_id: UUID,
        action: GrantAction,
        target_id: UUID,
        actor_id: UUID | None,
    ) -> None:
        """Validate and apply one operation inside the current transaction.

        Raises:
            ProfileNotFoundError: If the profile does not exist
            PermissionNotFoundError: If a permission action targets an unknown id
            RoleNotFoundError: If a role action targets an unknown id
            InactiveTargetError: If the target is soft-disabled
        """
        if await self.profile_repo.get(profile_id) is None:
            raise ProfileNotFoundError(profile_id=str(profile_id))

        if action.targets_role:
            target = await self.role_repo.get(target_id)
            if target is None:
                raise RoleNotFoundError(role_id=str(target_id))
            if not target.is_active:
                raise InactiveTargetError("Role", str(target_id))
        else:
            target = await self.permission_repo.get(target_id)
            if target is None:
                raise PermissionNotFoundError(str(target_id))
            if not target.is_active:
                raise InactiveTargetError("Permission", str(target_id))
        target_name = target.name

        if action == GrantAction.ADD_PERMISSION:
            changed = await self.profile_repo.add_permission(profile_id, target_id, actor_id)
        elif action == GrantAction.REMOVE_PERMISSION:
            changed = await self.profile_repo.remove_permission(profile_id, target_id)
        elif action == GrantAction.ADD_ROLE:
            changed = await self.profile_repo.add_role(profile_id, target_id, actor_id)
        else:
            changed = await self.profile_repo.remove_role(profile_id, target_id)

        await self.audit_repo.log(
            action=action.value,
            resource_type="profile",
            resource_id=profile_id,
            user_id=actor_id,
            changes={
                "target_id": str(target_id),
                "target_name": target_name,
                "changed": changed,
            },
        )
