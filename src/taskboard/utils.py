from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Sequence, Union


# PUBLIC_INTERFACE
def pagination_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
    page: int,
    per_page: int,
) -> Dict[str, Any]:
    """
    Build a standard pagination envelope for list endpoints.

    Args:
        items: The list/iterable of items for the current page.
        total: Total number of items across all pages.
        page: The 1-based page number that was requested.
        per_page: The fixed page size.

    Returns:
        Dict with keys: items, total, page, per_page, last_page.
        last_page is at least 1, even when there are no items.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    per_page = max(int(per_page), 1)
    return {
        "items": materialized,
        "total": int(total),
        "page": max(int(page), 1),
        "per_page": per_page,
        "last_page": max(math.ceil(int(total) / per_page), 1),
    }
