"""Legacy coarse-role mapping schema."""

from pydantic import BaseModel, Field, field_validator

# Entry value meaning "every active permission in the catalog"
ALL_PERMISSIONS = "*"


def normalize_legacy_tag(tag: str) -> str:
    """Normalize an account-level role string for lookup.

    ``ROLE_SUPER_ADMIN``, ``role_super_admin`` and ``super_admin`` all map
    to ``super_admin``.

    Args:
        tag: Raw role string from the user account

    Returns:
        Normalized tag
    """
    normalized = tag.strip().lower()
    if normalized.startswith("role_"):
        normalized = normalized[len("role_"):]
    return normalized


class LegacyRoleMapping(BaseModel):
    """Versioned table of legacy role tag -> implied permission names."""

    version: str = Field(min_length=1)
    entries: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("entries")
    @classmethod
    def normalize_entries(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        """Normalize tags and drop blank permission names."""
        normalized: dict[str, list[str]] = {}
        for tag, names in value.items():
            key = normalize_legacy_tag(tag)
            if not key:
                raise ValueError("Legacy role tag cannot be empty")
            merged = normalized.setdefault(key, [])
            for name in names:
                name = name.strip()
                if name and name not in merged:
                    merged.append(name)
        return normalized

    def implied_names(self, tag: str) -> list[str]:
        """Get the permission names implied by a legacy tag.

        Args:
            tag: Raw role string from the user account

        Returns:
            Implied permission names (may contain ALL_PERMISSIONS)
        """
        return self.entries.get(normalize_legacy_tag(tag), [])
