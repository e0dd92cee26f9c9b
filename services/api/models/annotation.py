# services/api/models/annotation.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Protocol, Tuple

from .geometry import Point, Rect, bounding_rect_of_points, union_rects

if TYPE_CHECKING:
    from adapters.base import BoundingBoxConverter


_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

UNKNOWN_AUTHOR = "Unknown"


class AnnotationType(str, Enum):
    NOTE = "note"
    HIGHLIGHT = "highlight"
    IMAGE = "image"
    INK = "ink"


class AnnotationEditability(str, Enum):
    NOT_EDITABLE = "notEditable"
    DELETABLE = "deletable"
    EDITABLE = "editable"


class LibraryKind(str, Enum):
    CUSTOM = "custom"    # the user's own library
    GROUP = "group"


@dataclass(frozen=True)
class Library:
    kind: LibraryKind
    library_id: int = 0
    name: str = ""
    metadata_editable: bool = True

    @classmethod
    def personal(cls) -> "Library":
        return cls(kind=LibraryKind.CUSTOM, name="My Library")

    @classmethod
    def group(cls, library_id: int, metadata_editable: bool, name: str = "") -> "Library":
        return cls(kind=LibraryKind.GROUP, library_id=library_id, name=name, metadata_editable=metadata_editable)


@dataclass(frozen=True)
class Tag:
    name: str
    color: str = ""


def is_hex_color(value: str) -> bool:
    return bool(value) and _HEX_COLOR_RE.match(value) is not None


def create_name(display_name: str, username: str, unknown: str = UNKNOWN_AUTHOR) -> str:
    """
    Resolve the name shown for the current user: display name, then
    username, then the unknown placeholder.
    """
    if display_name:
        return display_name
    if username:
        return username
    return unknown


def editability_for(is_author: bool, library: Library) -> AnnotationEditability:
    """
    Personal libraries are always editable. In group libraries nothing is
    editable without metadata permission; with it, authors may edit and
    everyone else may only delete.
    """
    if library.kind == LibraryKind.CUSTOM:
        return AnnotationEditability.EDITABLE
    if not library.metadata_editable:
        return AnnotationEditability.NOT_EDITABLE
    return AnnotationEditability.EDITABLE if is_author else AnnotationEditability.DELETABLE


class Annotation(Protocol):
    """
    Capabilities shared by every annotation representation the converters
    accept, whether loaded from the database or created from the document.
    """

    key: str
    type: AnnotationType
    page: int
    page_label: str
    line_width: Optional[float]
    color: str
    comment: str
    text: Optional[str]
    sort_index: str

    @property
    def tags(self) -> List[Tag]: ...

    @property
    def is_syncable(self) -> bool: ...

    def authored_by(self, current_user_id: int) -> bool: ...

    def author_name(self, display_name: str, username: str) -> str: ...

    def editability(self, current_user_id: int, library: Library) -> AnnotationEditability: ...

    def converted_rects(self, converter: "BoundingBoxConverter") -> List[Rect]: ...

    def converted_paths(self, converter: "BoundingBoxConverter") -> List[List[Point]]: ...


def bounding_box(annotation: Annotation, converter: "BoundingBoxConverter") -> Rect:
    """
    Reader-space rect enclosing the annotation.

    Ink uses its stroke points grown by half the line width; other kinds
    use the union of their rects.
    """
    paths = annotation.converted_paths(converter)
    points = [point for path in paths for point in path]
    if points:
        rect = bounding_rect_of_points(points)
        half_width = (annotation.line_width or 0) / 2
        return rect.inset(-half_width, -half_width)

    rects = annotation.converted_rects(converter)
    if len(rects) == 1:
        return rects[0]
    return union_rects(rects) or Rect(0, 0, 0, 0)


def _validate_geometry(kind: AnnotationType, rects: List[Rect], paths: List[List[Point]]) -> None:
    if kind == AnnotationType.INK:
        if rects:
            raise ValueError("ink annotations must not have rects")
        return
    if paths:
        raise ValueError(f"{kind.value} annotations must not have paths")
    if not rects:
        raise ValueError(f"{kind.value} annotations need at least one rect")
    if kind == AnnotationType.NOTE and len(rects) != 1:
        raise ValueError("note annotations have exactly one rect")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentAnnotation:
    """
    Annotation created from the document opened in the reader.

    Values are kept exactly as converted: rects and paths are already in
    reader coordinates, and authorship was decided at import time.
    """
    key: str
    type: AnnotationType
    page: int
    page_label: str
    rects: Tuple[Rect, ...] = ()
    paths: Tuple[Tuple[Point, ...], ...] = ()
    line_width: Optional[float] = None
    author: str = UNKNOWN_AUTHOR
    is_author: bool = False
    color: str = "#000000"
    comment: str = ""
    text: Optional[str] = None
    sort_index: str = ""
    date_modified: datetime = field(default_factory=_utcnow)

    def validate(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if not is_hex_color(self.color):
            raise ValueError(f"color must be a #rrggbb hex string, got {self.color!r}")
        _validate_geometry(self.type, list(self.rects), [list(p) for p in self.paths])
        if self.text is not None and self.type != AnnotationType.HIGHLIGHT:
            raise ValueError("only highlight annotations carry text")

    @property
    def tags(self) -> List[Tag]:
        return []

    @property
    def is_syncable(self) -> bool:
        return False

    def authored_by(self, current_user_id: int) -> bool:
        return self.is_author

    def author_name(self, display_name: str, username: str) -> str:
        return self.author

    def editability(self, current_user_id: int, library: Library) -> AnnotationEditability:
        return editability_for(self.is_author, library)

    def converted_rects(self, converter: "BoundingBoxConverter") -> List[Rect]:
        return list(self.rects)

    def converted_paths(self, converter: "BoundingBoxConverter") -> List[List[Point]]:
        return [list(path) for path in self.paths]


@dataclass(frozen=True)
class DatabaseAnnotation:
    """
    Annotation persisted in the local database.

    Geometry is stored in unrotated PDF space and converted on read;
    authorship is derived from the creating user.
    """
    key: str
    type: AnnotationType
    page: int
    page_label: str
    rects: Tuple[Rect, ...] = ()
    paths: Tuple[Tuple[Point, ...], ...] = ()
    line_width: Optional[float] = None
    color: str = "#000000"
    comment: str = ""
    text: Optional[str] = None
    sort_index: str = ""
    library_kind: LibraryKind = LibraryKind.CUSTOM
    created_by_id: Optional[int] = None
    created_by_name: str = ""
    created_by_username: str = ""
    stored_author_name: str = ""
    stored_tags: Tuple[Tag, ...] = ()
    date_modified: datetime = field(default_factory=_utcnow)

    def validate(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if not is_hex_color(self.color):
            raise ValueError(f"color must be a #rrggbb hex string, got {self.color!r}")
        _validate_geometry(self.type, list(self.rects), [list(p) for p in self.paths])

    @property
    def tags(self) -> List[Tag]:
        return list(self.stored_tags)

    @property
    def is_syncable(self) -> bool:
        return True

    def authored_by(self, current_user_id: int) -> bool:
        if self.library_kind == LibraryKind.CUSTOM:
            return True
        return self.created_by_id is not None and self.created_by_id == current_user_id

    def author_name(self, display_name: str, username: str) -> str:
        if self.stored_author_name:
            return self.stored_author_name
        if self.created_by_id is not None:
            return self.created_by_name or self.created_by_username
        return create_name(display_name, username)

    def editability(self, current_user_id: int, library: Library) -> AnnotationEditability:
        return editability_for(self.authored_by(current_user_id), library)

    def converted_rects(self, converter: "BoundingBoxConverter") -> List[Rect]:
        return [converter.convert_from_db(rect, self.page) or rect for rect in self.rects]

    def converted_paths(self, converter: "BoundingBoxConverter") -> List[List[Point]]:
        return [
            [converter.convert_point_from_db(point, self.page) or point for point in path]
            for path in self.paths
        ]
