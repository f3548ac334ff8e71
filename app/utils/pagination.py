"""Query-string pagination shared by the list endpoints."""
import math
from typing import Any, Dict, Tuple

from flask import current_app, request


def read_page_args(default_limit: int = None) -> Tuple[int, int]:
    """Read ?page=&limit= from the current request, clamped to sane bounds."""
    if default_limit is None:
        default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 10)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)

    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(query, page: int, limit: int) -> Tuple[list, Dict[str, Any]]:
    """Apply limit/offset to a query and describe the page."""
    total = query.order_by(None).count()
    items = query.limit(limit).offset((page - 1) * limit).all()
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
    }
