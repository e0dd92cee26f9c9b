# services/api/models/services.py

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Sequence

from .annotation import Annotation, DatabaseAnnotation, DocumentAnnotation, LibraryKind
from .converters import (
    database_annotation_from_row,
    row_from_database_annotation,
    row_from_document_annotation,
)
from .edit import EditAction, apply_edit_to_all

if TYPE_CHECKING:
    from adapters.base import BoundingBoxConverter


class AnnotationService:
    """
    Business rules that apply to a whole list of annotations:
      - ordering by sort index
      - edits that can touch several annotations
      - storage row mapping
    """

    @staticmethod
    def sorted(annotations: Iterable[Annotation]) -> List[Annotation]:
        # Stable, so equal sort indexes keep their input order.
        return sorted(annotations, key=lambda a: a.sort_index)

    @staticmethod
    def apply_edit(
        annotations: Sequence[DocumentAnnotation],
        key: str,
        action: EditAction,
    ) -> List[DocumentAnnotation]:
        return apply_edit_to_all(annotations, key, action)

    @staticmethod
    def from_storage_rows(rows: Iterable[dict]) -> List[DatabaseAnnotation]:
        annotations = [database_annotation_from_row(row) for row in rows]
        for annotation in annotations:
            annotation.validate()
        return AnnotationService.sorted(annotations)

    @staticmethod
    def to_storage_rows(annotations: Iterable[DatabaseAnnotation]) -> List[dict]:
        return [row_from_database_annotation(a) for a in annotations]

    @staticmethod
    def document_annotations_to_storage_rows(
        annotations: Iterable[DocumentAnnotation],
        converter: "BoundingBoxConverter",
        library_kind: LibraryKind = LibraryKind.CUSTOM,
        current_user_id: int = 0,
    ) -> List[dict]:
        return [
            row_from_document_annotation(a, converter, library_kind=library_kind, created_by_id=current_user_id)
            for a in annotations
        ]
