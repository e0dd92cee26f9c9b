"""
Collaborator interfaces for annotation conversion.
Defines the contracts the host application supplies to the converters.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from adapters.reader import BlendMode
from models.appearance import AppearanceStyle
from models.geometry import Point, Rect


class BoundingBoxConverter(Protocol):
    """
    Protocol for translating geometry between the reader's coordinate
    space and the database (unrotated PDF) space, and for the page-relative
    reading position used by sort indexes.

    Every method may return None when the answer is unknown; callers
    treat an unknown sort value as 0 and an unknown conversion as "keep
    the input unchanged".
    """

    def convert_from_db(self, rect: Rect, page: int) -> Optional[Rect]:
        """
        Map a rect stored in the database to reader coordinates.
        """
        ...

    def convert_point_from_db(self, point: Point, page: int) -> Optional[Point]:
        """
        Map a stored ink point to reader coordinates.
        """
        ...

    def convert_to_db(self, rect: Rect, page: int) -> Optional[Rect]:
        """
        Map a reader rect to database coordinates.
        """
        ...

    def convert_point_to_db(self, point: Point, page: int) -> Optional[Point]:
        ...

    def sort_index_min_y(self, rect: Rect, page: int) -> Optional[float]:
        """
        Vertical position of the rect measured from the top of the page.
        """
        ...

    def text_offset(self, rect: Rect, page: int) -> Optional[int]:
        """
        Character offset of the rect within the page's text, in reading order.
        """
        ...


@dataclass(frozen=True)
class ResolvedColor:
    """Rendering color for one appearance; never persisted."""
    color: str
    alpha: float
    blend_mode: Optional[BlendMode] = None


class ColorResolver(Protocol):
    """
    Protocol for deriving the rendering color of an annotation from its
    stored base color.
    """

    def resolve(self, base_color: str, is_highlight: bool, appearance: AppearanceStyle) -> ResolvedColor:
        """
        Args:
            base_color: Stored hex color, e.g. "#ffd400"
            is_highlight: Highlights are translucent and blended
            appearance: Light or dark interface style

        Returns:
            Color, opacity and optional blend mode for the reader object.
        """
        ...
