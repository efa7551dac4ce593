"""Profile ORM model."""

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jood_api.models.orm.base import Base, TimestampMixin, UUIDMixin


class ProfileORM(Base, UUIDMixin, TimestampMixin):
    """Authorization-bearing profile attached to a user.

    One profile per user per kind (``admin`` or ``kitchen``). Direct grants and
    role memberships live in separate junction tables and are only written
    through the grant store, so both collections are read-only here.
    """

    __tablename__ = "profiles"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Relationships
    user: Mapped["UserORM"] = relationship("UserORM", back_populates="profiles")
    permissions: Mapped[list["PermissionORM"]] = relationship(
        "PermissionORM",
        secondary="profile_permissions",
        viewonly=True,
    )
    roles: Mapped[list["RoleORM"]] = relationship(
        "RoleORM",
        secondary="profile_roles",
        viewonly=True,
    )

    __table_args__ = (UniqueConstraint("user_id", "kind", name="uq_profiles_user_kind"),)
