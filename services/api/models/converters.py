from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .annotation import (
    AnnotationType,
    DatabaseAnnotation,
    DocumentAnnotation,
    LibraryKind,
    Tag,
)
from .geometry import Point, Rect

if TYPE_CHECKING:
    from adapters.base import BoundingBoxConverter

logger = logging.getLogger(__name__)


def _int_or_none(v: Any) -> Optional[int]:
    if v is None or str(v).strip() == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _json_field(raw: Any, default: Any) -> Any:
    """
    Stored JSON columns may arrive already decoded (dict/list) or as text.
    """
    if raw is None or raw == "":
        return default
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.error(f"Annotation: invalid JSON value {raw!r}")
        return default


def _parse_date(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if raw:
        try:
            return datetime.fromisoformat(str(raw))
        except ValueError:
            logger.error(f"Annotation: invalid date_modified {raw!r}")
    return datetime.now(timezone.utc)


def _parse_tags(raw: Any) -> Tuple[Tag, ...]:
    if isinstance(raw, str) and raw.strip() and not raw.strip().startswith("["):
        return tuple(Tag(name=t.strip()) for t in raw.split(",") if t.strip())
    tags = _json_field(raw, [])
    result = []
    for t in tags:
        if isinstance(t, dict) and t.get("name"):
            result.append(Tag(name=t["name"], color=t.get("color") or ""))
        elif isinstance(t, str) and t:
            result.append(Tag(name=t))
    return tuple(result)


def _rects_from_position(position: Dict[str, Any]) -> Tuple[Rect, ...]:
    rects = []
    for raw in position.get("rects") or []:
        if len(raw) != 4:
            logger.error(f"Annotation: rect needs 4 values, got {raw!r}")
            continue
        rects.append(Rect.from_corners(*(float(v) for v in raw)))
    return tuple(rects)


def _paths_from_position(position: Dict[str, Any]) -> Tuple[Tuple[Point, ...], ...]:
    paths = []
    for raw in position.get("paths") or []:
        # Flat [x, y, x, y, ...] list; a dangling coordinate is dropped.
        values = [float(v) for v in raw]
        paths.append(tuple(Point(values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)))
    return tuple(paths)


def database_annotation_from_row(row: Dict[str, Any]) -> DatabaseAnnotation:
    """
    Convert a stored annotation row into a DatabaseAnnotation.

    `position` holds the geometry as JSON:
        {"pageIndex": 0, "rects": [[x1, y1, x2, y2], ...],
         "paths": [[x, y, x, y, ...], ...], "width": 2}
    """
    position = _json_field(row.get("position"), {})
    page = _int_or_none(position.get("pageIndex"))
    if page is None:
        page = _int_or_none(row.get("page")) or 0

    width = position.get("width")

    return DatabaseAnnotation(
        key=row.get("key", ""),
        type=AnnotationType(row.get("type", "highlight")),
        page=page,
        page_label=str(row.get("page_label") or page + 1),
        rects=_rects_from_position(position),
        paths=_paths_from_position(position),
        line_width=float(width) if width is not None else None,
        color=(row.get("color") or "#000000").lower(),
        comment=row.get("comment") or "",
        text=row.get("text") or None,
        sort_index=row.get("sort_index") or "",
        library_kind=LibraryKind(row.get("library_kind") or LibraryKind.CUSTOM.value),
        created_by_id=_int_or_none(row.get("created_by_id")),
        created_by_name=row.get("created_by_name") or "",
        created_by_username=row.get("created_by_username") or "",
        stored_author_name=row.get("author_name") or "",
        stored_tags=_parse_tags(row.get("tags")),
        date_modified=_parse_date(row.get("date_modified")),
    )


def _position_json(page: int, rects: List[Rect], paths: List[List[Point]], line_width: Optional[float]) -> str:
    position: Dict[str, Any] = {"pageIndex": page}
    if paths:
        position["paths"] = [[c for point in path for c in point.to_list()] for path in paths]
        if line_width is not None:
            position["width"] = line_width
    else:
        position["rects"] = [rect.to_corners() for rect in rects]
    return json.dumps(position)


def row_from_database_annotation(annotation: DatabaseAnnotation) -> Dict[str, Any]:
    return {
        "key": annotation.key,
        "type": annotation.type.value,
        "page_label": annotation.page_label,
        "sort_index": annotation.sort_index,
        "color": annotation.color,
        "comment": annotation.comment,
        "text": annotation.text or "",
        "position": _position_json(
            annotation.page, list(annotation.rects), [list(p) for p in annotation.paths], annotation.line_width
        ),
        "library_kind": annotation.library_kind.value,
        "created_by_id": annotation.created_by_id,
        "created_by_name": annotation.created_by_name,
        "created_by_username": annotation.created_by_username,
        "author_name": annotation.stored_author_name,
        "tags": json.dumps([{"name": t.name, "color": t.color} for t in annotation.stored_tags]),
        "date_modified": annotation.date_modified.isoformat(),
    }


def row_from_document_annotation(
    annotation: DocumentAnnotation,
    converter: "BoundingBoxConverter",
    library_kind: LibraryKind = LibraryKind.CUSTOM,
    created_by_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Storage row for an annotation imported from the document.

    Reader geometry is converted to database space; values the converter
    cannot map are stored unchanged. Authors other than the current user
    are kept as an explicit author name.
    """
    rects = [converter.convert_to_db(rect, annotation.page) or rect for rect in annotation.rects]
    paths = [
        [converter.convert_point_to_db(point, annotation.page) or point for point in path]
        for path in annotation.paths
    ]
    return {
        "key": annotation.key,
        "type": annotation.type.value,
        "page_label": annotation.page_label,
        "sort_index": annotation.sort_index,
        "color": annotation.color,
        "comment": annotation.comment,
        "text": annotation.text or "",
        "position": _position_json(annotation.page, rects, paths, annotation.line_width),
        "library_kind": library_kind.value,
        "created_by_id": created_by_id if annotation.is_author else None,
        "created_by_name": "",
        "created_by_username": "",
        "author_name": "" if annotation.is_author else annotation.author,
        "tags": "[]",
        "date_modified": annotation.date_modified.isoformat(),
    }
