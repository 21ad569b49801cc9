from __future__ import annotations

import math
from urllib.parse import quote
from typing import Any, Dict, Iterable, List, Sequence, Union


# PUBLIC_INTERFACE
def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed to show `total` items, `page_size` at a time."""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


# PUBLIC_INTERFACE
def pagination_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
    page: int,
    page_size: int,
) -> Dict[str, Any]:
    """
    Build a standard pagination envelope for search endpoints.

    Args:
        items: The list/iterable of items for the current page.
        total: Total number of items that match the query (ignoring pagination).
        page: The 1-based page that was requested.
        page_size: The page size used for slicing.

    Returns:
        Dict with keys: items, total_count, page, page_size, total_pages.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "items": materialized,
        "total_count": int(total),
        "page": int(page),
        "page_size": int(page_size),
        "total_pages": total_pages(int(total), int(page_size)),
    }


# PUBLIC_INTERFACE
def attachment_disposition(filename: str) -> str:
    """
    Content-Disposition value for a download. Names that are not plain
    printable ASCII, or that contain a quote or backslash, are sent
    percent-encoded as filename*=utf-8''... (RFC 6266).
    """
    plain = filename.isascii() and filename.isprintable() and not any(c in filename for c in '"\\')
    if plain:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quote(filename)}"
