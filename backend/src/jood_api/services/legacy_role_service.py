"""Loading of the legacy role mapping table."""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from jood_api.config import get_settings
from jood_api.constants.legacy_roles import LEGACY_ROLE_MAPPING, LEGACY_ROLE_MAPPING_VERSION
from jood_api.exceptions import ValidationError
from jood_api.models.domain.legacy_role import LegacyRoleMapping

logger = logging.getLogger(__name__)


def default_legacy_role_mapping() -> LegacyRoleMapping:
    """Get the built-in legacy role mapping."""
    return LegacyRoleMapping(version=LEGACY_ROLE_MAPPING_VERSION, entries=LEGACY_ROLE_MAPPING)


def load_legacy_role_mapping(path: str | Path | None = None) -> LegacyRoleMapping:
    """Load and validate a legacy role mapping.

    The file is a JSON object ``{"version": "...", "entries": {tag: [names]}}``.

    Args:
        path: JSON file path; the built-in table is used when None

    Returns:
        Validated LegacyRoleMapping

    Raises:
        ValidationError: If the file cannot be read or does not match the schema
    """
    if path is None:
        return default_legacy_role_mapping()

    try:
        raw = Path(path).read_text(encoding="utf-8")
        mapping = LegacyRoleMapping.model_validate(json.loads(raw))
    except OSError as e:
        raise ValidationError("Legacy role mapping file could not be read", {"path": str(path)}) from e
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError("Legacy role mapping file is invalid", {"path": str(path)}) from e

    logger.info(
        "Loaded legacy role mapping version %s with %d tags from %s",
        mapping.version,
        len(mapping.entries),
        path,
    )
    return mapping


@lru_cache
def get_legacy_role_mapping() -> LegacyRoleMapping:
    """Get the configured legacy role mapping (loaded once per process)."""
    return load_legacy_role_mapping(get_settings().legacy_role_mapping_file)
