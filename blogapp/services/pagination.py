"""
Page window arithmetic over a collection ordered newest first.
"""
import math
from typing import NamedTuple, Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 1


class PageWindow(NamedTuple):
    page: int
    page_size: int
    start: int
    end: int  # inclusive, as range queries expect it

    @property
    def stop(self) -> int:
        """Exclusive upper bound, for slicing."""
        return self.end + 1


def _safe_positive_int(value, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(1, math.floor(number))


def compute_page_window(page, page_size, default_page_size: int = DEFAULT_PAGE_SIZE) -> PageWindow:
    safe_page = _safe_positive_int(page, DEFAULT_PAGE)
    safe_page_size = _safe_positive_int(page_size, default_page_size)

    start = (safe_page - 1) * safe_page_size
    return PageWindow(safe_page, safe_page_size, start, start + safe_page_size - 1)


def total_pages(total_count: int, page_size: int) -> int:
    page_size = _safe_positive_int(page_size, DEFAULT_PAGE_SIZE)
    return max(1, math.ceil(max(total_count, 0) / page_size))


def clamp_page(page: Optional[int], total_count: int, page_size: int) -> int:
    """The last valid page when ``page`` runs past the end of the collection."""
    safe_page = _safe_positive_int(page, DEFAULT_PAGE)
    return min(safe_page, total_pages(total_count, page_size))
