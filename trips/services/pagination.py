"""
In-memory pagination of an already materialized result list.
"""

from typing import Any, Dict, Sequence


def paginate(items: Sequence[Any], page: int, limit: int) -> Dict[str, Any]:
    """
    Slice ``items`` into a page envelope.

    ``page`` is 1-indexed. ``total`` is always the full length of ``items``,
    whichever page is requested; pages past the end have empty ``data``.
    """
    start = (page - 1) * limit
    return {
        'total': len(items),
        'page': page,
        'limit': limit,
        'data': list(items[start:start + limit]),
    }
