# services/api/models/edit.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from .annotation import AnnotationType, DocumentAnnotation, is_hex_color


@dataclass(frozen=True)
class SetColor:
    color: str


@dataclass(frozen=True)
class SetLineWidth:
    width: float


@dataclass(frozen=True)
class SetPageLabel:
    label: str
    update_subsequent_pages: bool = False


@dataclass(frozen=True)
class SetHighlight:
    text: str


EditAction = Union[SetColor, SetLineWidth, SetPageLabel, SetHighlight]


def apply_edit(annotation: DocumentAnnotation, action: EditAction) -> DocumentAnnotation:
    """
    Return a copy of `annotation` with the edit applied and a fresh
    modification date. Raises ValueError for edits that do not apply to
    the annotation type.
    """
    now = datetime.now(timezone.utc)

    if isinstance(action, SetColor):
        if not is_hex_color(action.color):
            raise ValueError(f"color must be a #rrggbb hex string, got {action.color!r}")
        return replace(annotation, color=action.color.lower(), date_modified=now)

    if isinstance(action, SetLineWidth):
        if annotation.type != AnnotationType.INK:
            raise ValueError("line width can only be set on ink annotations")
        if action.width <= 0:
            raise ValueError("line width must be > 0")
        return replace(annotation, line_width=action.width, date_modified=now)

    if isinstance(action, SetPageLabel):
        label = action.label.strip()
        if not label:
            raise ValueError("page label must not be empty")
        return replace(annotation, page_label=label, date_modified=now)

    if isinstance(action, SetHighlight):
        if annotation.type != AnnotationType.HIGHLIGHT:
            raise ValueError("highlight text can only be set on highlight annotations")
        return replace(annotation, text=action.text, date_modified=now)

    raise ValueError(f"Unknown edit action: {action!r}")


def _shifted_label(label: str, page_delta: int) -> Optional[str]:
    try:
        number = int(label)
    except ValueError:
        return None
    return str(number + page_delta)


def apply_edit_to_all(
    annotations: Sequence[DocumentAnnotation],
    key: str,
    action: EditAction,
) -> List[DocumentAnnotation]:
    """
    Apply `action` to the annotation with `key`.

    SetPageLabel with update_subsequent_pages also relabels the other
    annotations on the same page and, for numeric labels, those on later
    pages keeping the page distance (label "5" on page 2 makes page 4 read "7").
    """
    target = next((a for a in annotations if a.key == key), None)
    if target is None:
        raise KeyError(key)

    updated = apply_edit(target, action)
    result: List[DocumentAnnotation] = []

    relabel = isinstance(action, SetPageLabel) and action.update_subsequent_pages
    for annotation in annotations:
        if annotation.key == key:
            result.append(updated)
            continue
        if relabel and annotation.page == target.page:
            annotation = replace(annotation, page_label=updated.page_label)
        elif relabel and annotation.page > target.page:
            shifted = _shifted_label(updated.page_label, annotation.page - target.page)
            if shifted is not None:
                annotation = replace(annotation, page_label=shifted)
        result.append(annotation)

    return result
