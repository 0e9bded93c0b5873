"""
In-memory pagination helpers.
"""
from typing import List, Sequence, TypeVar

T = TypeVar('T')


def paginate(items: Sequence[T], offset: int, limit: int) -> List[T]:
    """
    Return one page of items.

    Args:
        items: Already filtered and sorted items
        offset: Number of items to skip
        limit: Maximum number of items to return

    Returns:
        The requested slice; empty when offset is past the end
    """
    if offset >= len(items):
        return []
    return list(items[offset:offset + limit])
