"""
Pagination helpers shared by every listing endpoint.

Listings are newest-first (or by the caller's sort) and report
total matches plus pages = ceil(total / limit).
"""

import math
from typing import Any, List, Tuple
from pymongo.collection import Collection

from app.schemas.schemas import Page, Pagination


def fetch_page(
    collection: Collection,
    query: dict,
    page: int,
    limit: int,
    sort: List[Tuple[str, int]],
    projection: dict = None
) -> Tuple[List[dict], int]:
    """Run query for one page. Returns (documents, total matching count)."""
    skip = (page - 1) * limit
    cursor = collection.find(query, projection).sort(sort).skip(skip).limit(limit)
    docs = list(cursor)
    total = collection.count_documents(query)
    return docs, total


def build_page(items: List[Any], total: int, page: int, limit: int) -> Page:
    return Page(
        items=items,
        count=len(items),
        total=total,
        pagination=Pagination(page=page, limit=limit, pages=math.ceil(total / limit))
    )
