"""
Object model of the PDF reader the app renders documents with.

These classes mirror the reader's own annotation objects: coordinates are in
PDF points of the displayed page, colors are resolved for the current
appearance, and app-specific round-trip data travels in `custom_data`.
Only the parts the annotation conversion consults are modelled.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional
from uuid import uuid4

from models.geometry import Point, Rect

# Keys of the side-channel metadata attached in interactive mode.
CUSTOM_DATA_KEY = "key"
CUSTOM_DATA_BASE_COLOR = "baseColor"


class ReaderAnnotationType(str, Enum):
    NOTE = "note"
    HIGHLIGHT = "highlight"
    SQUARE = "square"
    INK = "ink"
    FREE_TEXT = "free_text"
    UNDERLINE = "underline"


class BlendMode(str, Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    LIGHTEN = "lighten"


class BorderStyle(str, Enum):
    NONE = "none"
    SOLID = "solid"
    DASHED = "dashed"


class AnnotationFlags(Flag):
    NONE = 0
    HIDDEN = 1
    READ_ONLY = 2
    LOCKED = 4


DEFAULT_SUPPORTED_TYPES: FrozenSet[ReaderAnnotationType] = frozenset(
    {
        ReaderAnnotationType.NOTE,
        ReaderAnnotationType.HIGHLIGHT,
        ReaderAnnotationType.SQUARE,
        ReaderAnnotationType.INK,
    }
)


@dataclass
class ReaderDocument:
    """
    Document opened in the reader.

    `page_labels` only holds labels the PDF defines explicitly; pages
    without an entry have no label of their own.
    """
    page_count: int
    page_labels: Dict[int, str] = field(default_factory=dict)
    supported_types: FrozenSet[ReaderAnnotationType] = DEFAULT_SUPPORTED_TYPES

    def page_label(self, page_index: int) -> Optional[str]:
        label = self.page_labels.get(page_index)
        return label or None

    def supports(self, annotation_type: ReaderAnnotationType) -> bool:
        return annotation_type in self.supported_types


@dataclass
class ReaderAnnotation:
    annotation_type: ClassVar[ReaderAnnotationType]

    page_index: int = 0
    bounding_box: Rect = field(default_factory=lambda: Rect(0, 0, 0, 0))
    contents: Optional[str] = None
    user: Optional[str] = None
    name: Optional[str] = None
    uuid: str = field(default_factory=lambda: uuid4().hex)

    color: Optional[str] = None
    alpha: float = 1.0
    blend_mode: BlendMode = BlendMode.NORMAL
    flags: AnnotationFlags = AnnotationFlags.NONE

    custom_data: Optional[Dict[str, Any]] = None
    document: Optional[ReaderDocument] = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> Optional[str]:
        """Canonical key carried in the side-channel metadata, if any."""
        if not self.custom_data:
            return None
        return self.custom_data.get(CUSTOM_DATA_KEY)

    @property
    def base_color(self) -> Optional[str]:
        if not self.custom_data:
            return None
        return self.custom_data.get(CUSTOM_DATA_BASE_COLOR)

    @property
    def is_read_only(self) -> bool:
        return bool(self.flags & AnnotationFlags.READ_ONLY)


@dataclass
class NoteAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.NOTE

    border_style: BorderStyle = BorderStyle.NONE


@dataclass
class HighlightAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.HIGHLIGHT

    rects: Optional[List[Rect]] = None
    marked_up_string: str = ""


@dataclass
class SquareAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.SQUARE

    border_color: Optional[str] = None
    line_width: float = 1.0


@dataclass
class InkAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.INK

    lines: List[List[Point]] = field(default_factory=list)
    line_width: float = 1.0


@dataclass
class FreeTextAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.FREE_TEXT

    font_size: float = 12.0


@dataclass
class UnderlineAnnotation(ReaderAnnotation):
    annotation_type: ClassVar[ReaderAnnotationType] = ReaderAnnotationType.UNDERLINE

    rects: Optional[List[Rect]] = None


ANNOTATION_CLASSES = {
    cls.annotation_type: cls
    for cls in (
        NoteAnnotation,
        HighlightAnnotation,
        SquareAnnotation,
        InkAnnotation,
        FreeTextAnnotation,
        UnderlineAnnotation,
    )
}
