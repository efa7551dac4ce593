"""Input validation utilities."""

MAX_SEARCH_LENGTH = 200
MAX_CATEGORY_LENGTH = 50


def sanitize_search(search: str | None, max_length: int = MAX_SEARCH_LENGTH) -> str | None:
    """Sanitize search input.

    Args:
        search: Raw search string
        max_length: Maximum allowed length

    Returns:
        Sanitized search string or None
    """
    if search is None:
        return None

    search = search[:max_length]

    # SQLAlchemy parameterizes queries anyway; strip statement separators too
    search = search.replace(";", "").replace("--", "")

    return search.strip() or None


def sanitize_category(category: str | None, max_length: int = MAX_CATEGORY_LENGTH) -> str | None:
    """Sanitize a permission category filter.

    Args:
        category: Raw category string
        max_length: Maximum allowed length

    Returns:
        Stripped category or None when blank
    """
    if category is None:
        return None
    return category[:max_length].strip() or None


def escape_like_wildcards(value: str) -> str:
    """Escape SQL LIKE wildcards so they match literally.

    Args:
        value: Raw string value to escape

    Returns:
        Escaped string safe for use in LIKE patterns

    Example:
        >>> escape_like_wildcards("view_%")
        'view\\\\_\\\\%'
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
