"""
Sticker sheet layout.

Splits an ordered sequence of units into A4 pages of `columns x rows`
stickers, each page being a list of row-major rows. Pure and synchronous.
"""
from typing import Any, Dict, List, Sequence

from app.exceptions import BusinessLogicError

DEFAULT_COLUMNS = 5
DEFAULT_ROWS = 5


def _chunk(items: Sequence, size: int) -> List[list]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def page_capacity(columns: int = DEFAULT_COLUMNS, rows: int = DEFAULT_ROWS) -> int:
    if columns < 1 or rows < 1:
        raise BusinessLogicError(f'Invalid sticker grid {columns}x{rows}')
    return columns * rows


def layout_for_print(
    units: Sequence[Any],
    columns: int = DEFAULT_COLUMNS,
    rows: int = DEFAULT_ROWS
) -> List[Dict[str, Any]]:
    """
    Lay units out on pages.

    Returns a list of pages:
        {'page_number': 1, 'rows': [[u1, ..., u5], [u6, ...]], 'total_units': 7}

    Flattening every page's rows gives back `units` in order. No input, no pages.
    """
    capacity = page_capacity(columns, rows)
    units = list(units)

    pages = []
    for index, page_units in enumerate(_chunk(units, capacity), start=1):
        pages.append({
            'page_number': index,
            'rows': _chunk(page_units, columns),
            'total_units': len(page_units),
        })
    return pages

