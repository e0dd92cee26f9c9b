# services/api/core/sort_index.py
"""
Sort index for annotations.

Format: PPPPP|OOOOOO|YYYYY
    5 digits page index, 6 digits text offset, 5 digits vertical position
    measured from the top of the page. Plain string comparison orders
    annotations by page, then reading position, then height on the page.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from adapters.base import BoundingBoxConverter
from adapters.reader import HighlightAnnotation, ReaderAnnotation
from models.geometry import round_half_away

logger = logging.getLogger(__name__)

PAGE_WIDTH = 5
OFFSET_WIDTH = 6
MIN_Y_WIDTH = 5

MAX_PAGE = 10 ** PAGE_WIDTH - 1
MAX_OFFSET = 10 ** OFFSET_WIDTH - 1
MAX_MIN_Y = 10 ** MIN_Y_WIDTH - 1

SORT_INDEX_LENGTH = PAGE_WIDTH + OFFSET_WIDTH + MIN_Y_WIDTH + 2

_SORT_INDEX_RE = re.compile(r"^(\d{5})\|(\d{6})\|(\d{5})$")


class SortIndexError(ValueError):
    """Raised for values that do not fit the fixed-width fields."""


def _check_field(name: str, value: int, maximum: int) -> None:
    if value < 0 or value > maximum:
        raise SortIndexError(f"{name} must be in [0, {maximum}], got {value}")


def encode(page: int, text_offset: int, min_y: int) -> str:
    """
    Build a sort index from its three fields.

    Raises:
        SortIndexError: if a field is negative or wider than its slot, since
            either would corrupt ordering of the following fields.
    """
    _check_field("page", page, MAX_PAGE)
    _check_field("text_offset", text_offset, MAX_OFFSET)
    _check_field("min_y", min_y, MAX_MIN_Y)
    return f"{page:05d}|{text_offset:06d}|{min_y:05d}"


def decode(sort_index: str) -> Tuple[int, int, int]:
    """Split a sort index back into (page, text_offset, min_y)."""
    match = _SORT_INDEX_RE.match(sort_index or "")
    if not match:
        raise SortIndexError(f"Malformed sort index: {sort_index!r}")
    page, offset, min_y = match.groups()
    return int(page), int(offset), int(min_y)


def _clamp(name: str, value: int, maximum: int, page: int) -> int:
    if 0 <= value <= maximum:
        return value
    clamped = min(max(value, 0), maximum)
    logger.warning(f"Sort index {name} {value} on page {page} out of range, using {clamped}")
    return clamped


def encode_from_annotation(
    annotation: ReaderAnnotation,
    converter: Optional[BoundingBoxConverter],
) -> str:
    """
    Sort index of a reader annotation.

    Highlights are positioned by their first line rect, everything else by
    its bounding box. Unknown collaborator answers count as 0.
    """
    if isinstance(annotation, HighlightAnnotation) and annotation.rects:
        rect = annotation.rects[0]
    else:
        rect = annotation.bounding_box

    page = annotation.page_index
    text_offset = 0
    min_y = 0

    if converter is not None:
        offset_value = converter.text_offset(rect, page)
        if offset_value is not None:
            text_offset = _clamp("text offset", int(offset_value), MAX_OFFSET, page)

        min_y_value = converter.sort_index_min_y(rect, page)
        if min_y_value is not None:
            min_y = _clamp("min y", int(round_half_away(min_y_value)), MAX_MIN_Y, page)

    return encode(page, text_offset, min_y)
