"""SQL injection prevention tests.

SQLAlchemy parameterizes every query, which is the primary protection. These
tests cover the sanitization applied before search and category filters reach
the repositories.
"""

from uuid import UUID, uuid4

import pytest

from jood_api.services.catalog_service import CatalogService
from jood_api.services.matrix_service import MatrixService
from jood_api.utils.validation import escape_like_wildcards, sanitize_category, sanitize_search

SQL_INJECTION_PAYLOADS = [
    "'; DROP TABLE permissions; --",
    "1' OR '1'='1",
    "1; DELETE FROM profile_permissions WHERE '1'='1",
    "' UNION SELECT * FROM users --",
    "1' AND (SELECT COUNT(*) FROM users) > 0 --",
    "1'; SELECT pg_sleep(5) --",
    "1'; UPDATE permissions SET is_active = false; --",
    "%27%20OR%201%3D1%20--",
    "ʼ OR 1=1 --",
    "1'/**/OR/**/1=1--",
    "$$; DROP TABLE roles; $$",
]


class TestSearchSanitization:
    """Search and filter input sanitization."""

    @pytest.mark.parametrize("payload", SQL_INJECTION_PAYLOADS)
    def test_search_parameter_sanitized(self, payload: str) -> None:
        result = sanitize_search(payload)

        if result is not None:
            assert ";" not in result
            assert "--" not in result
            assert len(result) <= 200

    def test_search_max_length(self) -> None:
        assert len(sanitize_search("A" * 1000)) == 200

    def test_empty_and_none_handling(self) -> None:
        assert sanitize_search(None) is None
        assert sanitize_search("") is None
        assert sanitize_search("   ") is None
        assert sanitize_category(None) is None
        assert sanitize_category("   ") is None

    def test_category_is_truncated(self) -> None:
        assert sanitize_category(" kitchen ") == "kitchen"
        assert len(sanitize_category("k" * 80)) == 50

    def test_like_wildcard_escaping(self) -> None:
        assert escape_like_wildcards("test%value") == r"test\%value"
        assert escape_like_wildcards("view_logs") == r"view\_logs"
        assert escape_like_wildcards("test\\value") == r"test\\value"

        escaped = escape_like_wildcards("test%'; DROP TABLE users; --")
        assert "%" not in escaped.replace(r"\%", "")

    def test_uuid_parameter_validation(self) -> None:
        valid = uuid4()
        assert UUID(str(valid)) == valid

        for invalid in ["'; DROP TABLE users; --", "1 OR 1=1", "not-a-uuid", ""]:
            with pytest.raises(ValueError):
                UUID(invalid)


class TestQueriesWithPayloads:
    """Payloads reaching the database are treated as data."""

    @pytest.mark.parametrize("payload", SQL_INJECTION_PAYLOADS)
    async def test_search_returns_nothing_and_leaves_catalog_intact(
        self, db_session, seeded, payload: str
    ) -> None:
        service = CatalogService(db_session)

        assert await service.search(payload) == []
        assert len(await service.list_active()) == 12

    @pytest.mark.parametrize("payload", SQL_INJECTION_PAYLOADS[:4])
    async def test_category_filter_matches_literally(
        self, db_session, seeded, legacy_mapping, payload: str
    ) -> None:
        matrix = await MatrixService(db_session, legacy_mapping).get_matrix(
            category=sanitize_category(payload)
        )

        assert matrix.available_permissions == []
