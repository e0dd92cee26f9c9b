# services/api/routers/annotations.py
from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from core.annotation_converter import annotations_from_reader, reader_annotations_from
from core.bounding_box import PageBoundingBoxConverter
from core import sort_index
from core.validation import (
    coerce_appearance,
    ensure_unique_keys,
    validate_hex_color,
    validate_page_dims,
    validate_page_index,
)
from models.appearance import AppearanceStyle
from models.services import AnnotationService
from schemas.annotation import (
    AnnotationSchema,
    EditRequest,
    EditResponse,
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
    ReaderAnnotationSchema,
    SortIndexOut,
)
from schemas.page import PageDim
from settings import AnnotationsConfig, get_settings

logger = getLogger(__name__)

router = APIRouter(prefix="/annotations", tags=["annotations"])

# Running totals reported by /metrics.
conversion_counts = defaultdict(int)


def _converter_for(pages: List[PageDim]) -> PageBoundingBoxConverter:
    validate_page_dims([p.model_dump() for p in pages])
    glyphs = {p.page_index: p.glyph_rects() for p in pages if p.glyphs}
    return PageBoundingBoxConverter([p.to_page() for p in pages], glyphs=glyphs)


def _default_style() -> AppearanceStyle:
    configured = (get_settings().default_appearance or "").lower().strip()
    if configured == AppearanceStyle.DARK.value:
        return AppearanceStyle.DARK
    return AppearanceStyle.LIGHT


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_200_OK)
def import_annotations(payload: ImportRequest) -> ImportResponse:
    """
    Convert annotations read from a document into app annotations.

    Unsupported reader types are skipped and counted, not rejected.
    The result is ordered by sort index.
    """
    page_count = payload.document.page_count
    for annotation in payload.annotations:
        validate_page_index(annotation.page_index, page_count)

    converter = _converter_for(payload.document.pages)
    document = payload.document.to_document()
    reader_annotations = [a.to_reader(document) for a in payload.annotations]

    try:
        converted = annotations_from_reader(
            reader_annotations,
            library=payload.library.to_library(),
            username=payload.session.username,
            display_name=payload.session.display_name,
            converter=converter,
            config=AnnotationsConfig.from_settings(),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    skipped = len(reader_annotations) - len(converted)
    conversion_counts["imported"] += len(converted)
    conversion_counts["skipped"] += skipped
    if skipped:
        logger.info(f"[import] skipped {skipped} of {len(reader_annotations)} reader annotations")

    return ImportResponse(
        annotations=[AnnotationSchema.from_model(a) for a in converted],
        skipped=skipped,
    )


@router.post("/export", response_model=ExportResponse, status_code=status.HTTP_200_OK)
def export_annotations(payload: ExportRequest) -> ExportResponse:
    """
    Convert app annotations into reader objects.

    kind=zotero keeps key/base color metadata and marks annotations the
    current user may not edit as read-only; kind=export produces clean
    objects for writing into a file.
    """
    ensure_unique_keys([{"key": a.key} for a in payload.annotations])

    try:
        annotations = [a.to_model() for a in payload.annotations]
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    appearance = coerce_appearance(payload.appearance).resolve(_default_style())

    reader_annotations = reader_annotations_from(
        annotations,
        kind=payload.kind,
        appearance=appearance,
        current_user_id=payload.session.user_id,
        library=payload.library.to_library(),
        display_name=payload.session.display_name,
        username=payload.session.username,
        converter=_converter_for(payload.pages),
        config=AnnotationsConfig.from_settings(),
    )

    conversion_counts[f"exported_{payload.kind.value}"] += len(reader_annotations)

    return ExportResponse(
        annotations=[ReaderAnnotationSchema.from_reader(a) for a in reader_annotations],
    )


@router.get("/sort-index", response_model=SortIndexOut)
def get_sort_index(
    page: int = Query(..., description="0-based page index"),
    offset: int = Query(0, description="Text offset on the page"),
    y: int = Query(0, description="Distance from the top of the page"),
) -> SortIndexOut:
    """Encode a sort index; values that do not fit their field are rejected."""
    try:
        value = sort_index.encode(page, offset, y)
    except sort_index.SortIndexError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SortIndexOut(sort_index=value, page=page, text_offset=offset, min_y=y)


@router.post("/edit", response_model=EditResponse)
def edit_annotations(payload: EditRequest) -> EditResponse:
    """Apply one edit action to the annotation with `key`."""
    ensure_unique_keys([{"key": a.key} for a in payload.annotations])
    if payload.edit.action == "set_color":
        validate_hex_color(payload.edit.color)

    try:
        annotations = [a.to_model() for a in payload.annotations]
        updated = AnnotationService.apply_edit(annotations, payload.key, payload.edit.to_action())
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Annotation {payload.key} not found",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    conversion_counts["edited"] += 1

    return EditResponse(annotations=[AnnotationSchema.from_model(a) for a in updated])
