"""Pagination metadata for find results.

This is the default metadata collaborator handed to DataStore; hosts can
inject their own callable with the same ``(options, count)`` signature.
"""

import math
from collections.abc import Mapping
from typing import Any, Callable

from pgdocstore.core.config import get_settings
from pgdocstore.core.query.options import QueryOptions

MetadataProvider = Callable[[QueryOptions, int], dict[str, Any]]


def build_metadata(
    options: QueryOptions | Mapping[str, Any] | None,
    count: int,
    default_limit: int | None = None,
) -> dict[str, Any]:
    """Describe where a page of results sits within the full result set.

    Args:
        options: The options the find ran with.
        count: Total number of matching documents.
        default_limit: Page size when no limit was given. Defaults to the
            configured ``default_page_size``.

    Returns:
        Dict with limit, page, offset, totalCount, totalPages and, where they
        exist, nextPage and prevPage.
    """
    options = QueryOptions.from_mapping(options)
    limit = options.limit or default_limit or get_settings().default_page_size
    offset = options.skip or 0
    page = options.page or (offset // limit) + 1

    metadata: dict[str, Any] = {
        "limit": limit,
        "page": page,
        "offset": offset,
        "totalCount": count,
        "totalPages": math.ceil(count / limit),
    }

    if page < metadata["totalPages"]:
        metadata["nextPage"] = page + 1
    if page > 1:
        metadata["prevPage"] = page - 1

    return metadata
