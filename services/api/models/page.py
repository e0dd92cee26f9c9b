# services/api/models/page.py

from __future__ import annotations

from dataclasses import dataclass

from .geometry import Point, Rect


@dataclass(frozen=True)
class Page:
    """
    Lightweight page descriptor at domain level.
    """
    page_index: int          # 0-based
    width: float             # in PDF units, unrotated
    height: float
    rotation: int = 0        # 0, 90, 180, 270

    def validate(self) -> None:
        if self.page_index < 0:
            raise ValueError("page_index must be >= 0")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width/height must be > 0")
        if self.rotation % 360 not in (0, 90, 180, 270):
            raise ValueError(f"Unsupported rotation: {self.rotation} (use 0/90/180/270)")

    @property
    def view_height(self) -> float:
        """Height of the page as displayed (after rotation)."""
        return self.width if self.rotation % 180 == 90 else self.height


def pdf_point_to_view(point: Point, page: Page) -> Point:
    """
    Convert a point in unrotated PDF user space (origin bottom-left) to the
    rotated view space of the reader (origin bottom-left of the displayed page).
    Rotation is clockwise, as in the PDF /Rotate entry.
    """
    rot = page.rotation % 360

    if rot == 0:
        return point
    elif rot == 90:
        return Point(point.y, page.width - point.x)
    elif rot == 180:
        return Point(page.width - point.x, page.height - point.y)
    elif rot == 270:
        return Point(page.height - point.y, point.x)

    raise ValueError(f"Unsupported rotation: {page.rotation} (use 0/90/180/270)")


def view_point_to_pdf(point: Point, page: Page) -> Point:
    """
    Reverse of pdf_point_to_view.
    """
    rot = page.rotation % 360

    if rot == 0:
        return point
    elif rot == 90:
        return Point(page.width - point.y, point.x)
    elif rot == 180:
        return Point(page.width - point.x, page.height - point.y)
    elif rot == 270:
        return Point(point.y, page.height - point.x)

    raise ValueError(f"Unsupported rotation: {page.rotation} (use 0/90/180/270)")


def pdf_rect_to_view(rect: Rect, page: Page) -> Rect:
    # Rotating by a multiple of 90° keeps rects axis-aligned, so two corners suffice.
    a = pdf_point_to_view(Point(rect.min_x, rect.min_y), page)
    b = pdf_point_to_view(Point(rect.max_x, rect.max_y), page)
    return Rect.from_corners(a.x, a.y, b.x, b.y)


def view_rect_to_pdf(rect: Rect, page: Page) -> Rect:
    a = view_point_to_pdf(Point(rect.min_x, rect.min_y), page)
    b = view_point_to_pdf(Point(rect.max_x, rect.max_y), page)
    return Rect.from_corners(a.x, a.y, b.x, b.y)
