# services/api/core/bounding_box.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from models.geometry import Point, Rect
from models.page import (
    Page,
    pdf_point_to_view,
    pdf_rect_to_view,
    view_point_to_pdf,
    view_rect_to_pdf,
)


class PageBoundingBoxConverter:
    """
    BoundingBoxConverter backed by known page geometry.

    Database space is unrotated PDF user space, reader space is the page as
    displayed (rotation applied). Pages that are not registered are left
    untouched and report no sort position.

    `glyphs` optionally maps a page index to its character boxes in reading
    order; without them text offsets are unknown.
    """

    def __init__(
        self,
        pages: Sequence[Page],
        glyphs: Optional[Dict[int, List[Rect]]] = None,
    ):
        for page in pages:
            page.validate()
        self.pages: Dict[int, Page] = {page.page_index: page for page in pages}
        self.glyphs: Dict[int, List[Rect]] = glyphs or {}

    def convert_from_db(self, rect: Rect, page: int) -> Optional[Rect]:
        info = self.pages.get(page)
        if info is None:
            return None
        return pdf_rect_to_view(rect, info)

    def convert_point_from_db(self, point: Point, page: int) -> Optional[Point]:
        info = self.pages.get(page)
        if info is None:
            return None
        return pdf_point_to_view(point, info)

    def convert_to_db(self, rect: Rect, page: int) -> Optional[Rect]:
        info = self.pages.get(page)
        if info is None:
            return None
        return view_rect_to_pdf(rect, info)

    def convert_point_to_db(self, point: Point, page: int) -> Optional[Point]:
        info = self.pages.get(page)
        if info is None:
            return None
        return view_point_to_pdf(point, info)

    def sort_index_min_y(self, rect: Rect, page: int) -> Optional[float]:
        info = self.pages.get(page)
        if info is None:
            return None
        # Reader rects have a bottom-left origin; sort by distance from the top.
        return max(0.0, info.view_height - rect.max_y)

    def text_offset(self, rect: Rect, page: int) -> Optional[int]:
        glyphs = self.glyphs.get(page)
        if not glyphs:
            return None
        for index, glyph in enumerate(glyphs):
            if glyph.intersects(rect):
                return index
        return None
