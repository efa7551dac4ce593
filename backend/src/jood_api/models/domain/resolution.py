"""Effective permission set with provenance."""

from collections.abc import Iterator

PROVENANCE_DIRECT = "direct"
PROVENANCE_LEGACY = "legacy"
ROLE_PROVENANCE_PREFIX = "role:"


def role_provenance(role_name: str) -> str:
    """Build the provenance tag for a permission inherited from a role."""
    return f"{ROLE_PROVENANCE_PREFIX}{role_name}"


class EffectiveSet:
    """Effective permissions of a profile, each with its provenance tags.

    Membership checks are O(1) once the set has been built, so a caller
    checking many permissions for one profile resolves once and reuses it.
    """

    def __init__(self) -> None:
        self._sources: dict[str, set[str]] = {}

    def add(self, permission_name: str, tag: str) -> None:
        """Record that a permission is granted through a given source."""
        self._sources.setdefault(permission_name, set()).add(tag)

    def __contains__(self, permission_name: object) -> bool:
        return permission_name in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def contains(self, permission_name: str) -> bool:
        """Check whether a permission is effective."""
        return permission_name in self._sources

    def names(self) -> set[str]:
        """Get all effective permission names."""
        return set(self._sources)

    def provenance(self, permission_name: str) -> set[str]:
        """Get the provenance tags of a permission (empty if not granted)."""
        return set(self._sources.get(permission_name, ()))

    def as_dict(self) -> dict[str, list[str]]:
        """Permission name -> sorted provenance tags."""
        return {name: sorted(tags) for name, tags in sorted(self._sources.items())}

    def source_counts(self) -> dict[str, int]:
        """Count effective permissions per source kind.

        A permission granted by several sources is counted once under each.
        """
        direct = from_roles = legacy = 0
        for tags in self._sources.values():
            if PROVENANCE_DIRECT in tags:
                direct += 1
            if any(tag.startswith(ROLE_PROVENANCE_PREFIX) for tag in tags):
                from_roles += 1
            if PROVENANCE_LEGACY in tags:
                legacy += 1
        return {"direct": direct, "from_roles": from_roles, "legacy": legacy}
