# services/api/core/annotation_converter.py
"""
Conversion between reader annotation objects and app annotations.

Reader -> app: `annotation_from_reader` builds a DocumentAnnotation from an
object the user created or edited in the reader.

App -> reader: `reader_annotation_from` builds the reader object for an
annotation, either for interactive editing (ConversionKind.ZOTERO, keeps the
key and base color so the object can be matched back) or for writing into
an exported file (ConversionKind.EXPORT, no app metadata).

Both directions are stateless; collaborators are passed in on every call.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional
from uuid import uuid4

from adapters.base import BoundingBoxConverter, ColorResolver, ResolvedColor
from adapters.reader import (
    CUSTOM_DATA_BASE_COLOR,
    CUSTOM_DATA_KEY,
    AnnotationFlags,
    BorderStyle,
    HighlightAnnotation,
    InkAnnotation,
    NoteAnnotation,
    ReaderAnnotation,
    SquareAnnotation,
)
from core import sort_index
from core.colors import AnnotationColorGenerator
from core.text import remove_newlines
from models.annotation import (
    Annotation,
    AnnotationEditability,
    AnnotationType,
    DocumentAnnotation,
    Library,
    bounding_box,
    create_name,
)
from models.appearance import AppearanceStyle
from models.geometry import Point, Rect
from settings import AnnotationsConfig

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#ffd400"


class ConversionKind(str, Enum):
    EXPORT = "export"
    ZOTERO = "zotero"


def _config(config: Optional[AnnotationsConfig]) -> AnnotationsConfig:
    return config if config is not None else AnnotationsConfig.from_settings()


# ---------- Reader -> app ----------------------------------------------------

def annotation_from_reader(
    annotation: ReaderAnnotation,
    color: str,
    library: Library,
    username: str,
    display_name: str,
    converter: Optional[BoundingBoxConverter],
    config: Optional[AnnotationsConfig] = None,
) -> Optional[DocumentAnnotation]:
    """
    Create an app annotation from a reader annotation.

    Args:
        annotation: Reader object; must belong to a document.
        color: Base color of the annotation (may differ from `annotation.color`,
            which is adjusted for the current appearance).
        library: Library the annotation is stored in.
        username / display_name: Current user.
        converter: Supplies sort index position; None means unknown.

    Returns:
        DocumentAnnotation, or None when the annotation type is not supported
        or the annotation is not attached to a document.
    """
    cfg = _config(config)
    document = annotation.document
    if document is None or not document.supports(annotation.annotation_type):
        logger.debug(f"Skipping {annotation.annotation_type.value} annotation {annotation.uuid}")
        return None

    page = annotation.page_index
    is_author = annotation.user == display_name or annotation.user == username

    if isinstance(annotation, NoteAnnotation):
        kind = AnnotationType.NOTE
        size = cfg.note_annotation_size
        origin = annotation.bounding_box.origin.rounded(3)
        rects = (Rect(origin.x, origin.y, size, size),)
        text = None
        paths = ()
        line_width = None
    elif isinstance(annotation, HighlightAnnotation):
        kind = AnnotationType.HIGHLIGHT
        source_rects = annotation.rects or [annotation.bounding_box]
        rects = tuple(rect.rounded(3) for rect in source_rects)
        text = remove_newlines(annotation.marked_up_string or "")
        paths = ()
        line_width = None
    elif isinstance(annotation, SquareAnnotation):
        kind = AnnotationType.IMAGE
        rects = (annotation.bounding_box.rounded(3),)
        text = None
        paths = ()
        line_width = None
    elif isinstance(annotation, InkAnnotation):
        kind = AnnotationType.INK
        rects = ()
        text = None
        paths = tuple(tuple(point.rounded(3) for point in line) for line in annotation.lines)
        line_width = annotation.line_width
    else:
        logger.debug(f"No app annotation type for {annotation.annotation_type.value}")
        return None

    if is_author:
        author = create_name(display_name, username, cfg.unknown_author_label)
    else:
        author = annotation.user if annotation.user is not None else cfg.unknown_author_label

    return DocumentAnnotation(
        key=annotation.key or annotation.uuid or uuid4().hex,
        type=kind,
        page=page,
        page_label=document.page_label(page) or str(page + 1),
        rects=rects,
        paths=paths,
        line_width=line_width,
        author=author,
        is_author=is_author,
        color=color,
        comment=(annotation.contents or "").strip(),
        text=text,
        sort_index=sort_index.encode_from_annotation(annotation, converter),
    )


def annotations_from_reader(
    annotations: Iterable[ReaderAnnotation],
    library: Library,
    username: str,
    display_name: str,
    converter: Optional[BoundingBoxConverter],
    default_color: str = DEFAULT_COLOR,
    config: Optional[AnnotationsConfig] = None,
) -> List[DocumentAnnotation]:
    """
    Convert every supported reader annotation, ordered by sort index.

    The base color comes from the side-channel metadata when the object was
    created by this app, otherwise from the object's own color.
    """
    cfg = _config(config)
    result = []
    for annotation in annotations:
        color = annotation.base_color or annotation.color or default_color
        converted = annotation_from_reader(
            annotation,
            color=color.lower(),
            library=library,
            username=username,
            display_name=display_name,
            converter=converter,
            config=cfg,
        )
        if converted is not None:
            result.append(converted)
    return sorted(result, key=lambda a: a.sort_index)


# ---------- App -> reader ----------------------------------------------------

def reader_annotations_from(
    annotations: Iterable[Annotation],
    kind: ConversionKind,
    appearance: AppearanceStyle,
    current_user_id: int,
    library: Library,
    display_name: str,
    username: str,
    converter: BoundingBoxConverter,
    color_resolver: Optional[ColorResolver] = None,
    config: Optional[AnnotationsConfig] = None,
) -> List[ReaderAnnotation]:
    """Convert annotations to reader objects that can be added to a document."""
    cfg = _config(config)
    resolver = color_resolver or AnnotationColorGenerator(cfg)
    return [
        reader_annotation_from(
            annotation,
            kind=kind,
            appearance=appearance,
            current_user_id=current_user_id,
            library=library,
            display_name=display_name,
            username=username,
            converter=converter,
            color_resolver=resolver,
            config=cfg,
        )
        for annotation in annotations
    ]


def reader_annotation_from(
    annotation: Annotation,
    kind: ConversionKind,
    appearance: AppearanceStyle,
    current_user_id: int,
    library: Library,
    display_name: str,
    username: str,
    converter: BoundingBoxConverter,
    color_resolver: Optional[ColorResolver] = None,
    config: Optional[AnnotationsConfig] = None,
) -> ReaderAnnotation:
    cfg = _config(config)
    resolver = color_resolver or AnnotationColorGenerator(cfg)
    resolved = resolver.resolve(
        annotation.color,
        is_highlight=annotation.type == AnnotationType.HIGHLIGHT,
        appearance=appearance,
    )

    if annotation.type == AnnotationType.IMAGE:
        result: ReaderAnnotation = _area_annotation(annotation, resolved, converter, cfg)
    elif annotation.type == AnnotationType.HIGHLIGHT:
        result = _highlight_annotation(annotation, resolved, converter)
    elif annotation.type == AnnotationType.NOTE:
        result = _note_annotation(annotation, resolved, converter, cfg)
    elif annotation.type == AnnotationType.INK:
        result = _ink_annotation(annotation, resolved, converter)
    else:
        raise ValueError(f"Unknown annotation type: {annotation.type}")

    if kind == ConversionKind.EXPORT:
        result.custom_data = None
    elif kind == ConversionKind.ZOTERO:
        result.custom_data = {
            CUSTOM_DATA_BASE_COLOR: annotation.color,
            CUSTOM_DATA_KEY: annotation.key,
        }
        if annotation.editability(current_user_id, library) != AnnotationEditability.EDITABLE:
            result.flags |= AnnotationFlags.READ_ONLY

    if resolved.blend_mode is not None:
        result.blend_mode = resolved.blend_mode

    result.page_index = annotation.page
    result.contents = annotation.comment
    result.user = annotation.author_name(display_name, username)
    result.name = f"{cfg.annotation_name_prefix}-{annotation.key}"

    return result


def _area_annotation(
    annotation: Annotation,
    resolved: ResolvedColor,
    converter: BoundingBoxConverter,
    cfg: AnnotationsConfig,
) -> SquareAnnotation:
    return SquareAnnotation(
        bounding_box=bounding_box(annotation, converter).rounded(3),
        border_color=resolved.color,
        line_width=cfg.image_annotation_line_width,
    )


def _highlight_annotation(
    annotation: Annotation,
    resolved: ResolvedColor,
    converter: BoundingBoxConverter,
) -> HighlightAnnotation:
    return HighlightAnnotation(
        bounding_box=bounding_box(annotation, converter).rounded(3),
        rects=[rect.rounded(3) for rect in annotation.converted_rects(converter)],
        marked_up_string=annotation.text or "",
        color=resolved.color,
        alpha=resolved.alpha,
    )


def _note_annotation(
    annotation: Annotation,
    resolved: ResolvedColor,
    converter: BoundingBoxConverter,
    cfg: AnnotationsConfig,
) -> NoteAnnotation:
    origin = bounding_box(annotation, converter).rounded(3).origin
    size = cfg.note_annotation_size
    return NoteAnnotation(
        contents=annotation.comment,
        bounding_box=Rect(origin.x, origin.y, size, size),
        border_style=BorderStyle.DASHED,
        color=resolved.color,
    )


def _ink_annotation(
    annotation: Annotation,
    resolved: ResolvedColor,
    converter: BoundingBoxConverter,
) -> InkAnnotation:
    lines: List[List[Point]] = annotation.converted_paths(converter)
    return InkAnnotation(
        lines=lines,
        bounding_box=bounding_box(annotation, converter).rounded(3),
        color=resolved.color,
        line_width=annotation.line_width if annotation.line_width is not None else 1.0,
    )
