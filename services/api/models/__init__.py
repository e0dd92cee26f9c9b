from __future__ import annotations

from .annotation import (
    Annotation,
    AnnotationEditability,
    AnnotationType,
    DatabaseAnnotation,
    DocumentAnnotation,
    Library,
    LibraryKind,
    Tag,
    bounding_box,
    create_name,
    editability_for,
)
from .appearance import AppearanceMode, AppearanceStyle
from .edit import EditAction, SetColor, SetHighlight, SetLineWidth, SetPageLabel, apply_edit
from .geometry import Point, Rect
from .page import Page

__all__ = [
    "Annotation",
    "AnnotationEditability",
    "AnnotationType",
    "AppearanceMode",
    "AppearanceStyle",
    "DatabaseAnnotation",
    "DocumentAnnotation",
    "EditAction",
    "Library",
    "LibraryKind",
    "Page",
    "Point",
    "Rect",
    "SetColor",
    "SetHighlight",
    "SetLineWidth",
    "SetPageLabel",
    "Tag",
    "apply_edit",
    "bounding_box",
    "create_name",
    "editability_for",
]
