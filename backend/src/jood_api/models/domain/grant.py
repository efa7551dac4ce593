"""Grant mutation domain models."""

from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class GrantAction(StrEnum):
    """Grant/revoke actions accepted by the bulk processor."""

    ADD_PERMISSION = "add_permission"
    REMOVE_PERMISSION = "remove_permission"
    ADD_ROLE = "add_role"
    REMOVE_ROLE = "remove_role"

    @property
    def targets_role(self) -> bool:
        """Whether the action targets a role (otherwise a permission)."""
        return self in (GrantAction.ADD_ROLE, GrantAction.REMOVE_ROLE)

    @property
    def is_grant(self) -> bool:
        """Whether the action adds a grant (otherwise revokes one)."""
        return self in (GrantAction.ADD_PERMISSION, GrantAction.ADD_ROLE)


class GrantOperation(BaseModel):
    """Single grant/revoke operation against a profile."""

    profile_id: UUID
    action: GrantAction
    target_id: UUID

    model_config = {"frozen": True}

    @property
    def dedup_key(self) -> tuple[UUID, UUID]:
        """Key under which later operations override earlier ones."""
        return (self.profile_id, self.target_id)

    def describe(self) -> dict[str, Any]:
        """JSON-friendly representation for reports."""
        return {
            "profile_id": str(self.profile_id),
            "action": self.action.value,
            "target_id": str(self.target_id),
        }


class BulkFailure(BaseModel):
    """Failed operation with the reason it failed."""

    operation: dict[str, Any]
    reason: str
    error: str


class BulkReport(BaseModel):
    """Outcome of a bulk mutation batch.

    The report, not the request outcome, is the source of truth for what was
    applied: operations commit one at a time.
    """

    processed: int = 0
    successful: int = 0
    skipped_duplicates: int = 0
    failures: list[BulkFailure] = Field(default_factory=list)
    changed_profile_ids: list[UUID] = Field(default_factory=list)

    def record_success(self, profile_id: UUID) -> None:
        """Count a successful operation for a profile."""
        self.processed += 1
        self.successful += 1
        if profile_id not in self.changed_profile_ids:
            self.changed_profile_ids.append(profile_id)

    def record_failure(self, operation: dict[str, Any], reason: str, error: str) -> None:
        """Count a failed operation."""
        self.processed += 1
        self.failures.append(BulkFailure(operation=operation, reason=reason, error=error))
