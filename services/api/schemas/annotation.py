"""
Pydantic schemas for annotation conversion requests.
Reader objects and app annotations travel as JSON; geometry is always
{x, y, width, height} in PDF points.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from adapters.reader import (
    ANNOTATION_CLASSES,
    CUSTOM_DATA_BASE_COLOR,
    AnnotationFlags,
    BlendMode,
    BorderStyle,
    HighlightAnnotation,
    InkAnnotation,
    NoteAnnotation,
    ReaderAnnotation,
    ReaderAnnotationType,
    ReaderDocument,
    SquareAnnotation,
)
from core.annotation_converter import ConversionKind
from models.annotation import (
    AnnotationType,
    DocumentAnnotation,
    Library,
    LibraryKind,
    is_hex_color,
)
from models.edit import EditAction, SetColor, SetHighlight, SetLineWidth, SetPageLabel
from models.geometry import Point, Rect

from .page import PageDim


# ============ Geometry ============


class RectSchema(BaseModel):
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    def to_rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @classmethod
    def from_rect(cls, rect: Rect) -> "RectSchema":
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


class PointSchema(BaseModel):
    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def from_point(cls, point: Point) -> "PointSchema":
        return cls(x=point.x, y=point.y)


# ============ Identity / library ============


class SessionIn(BaseModel):
    """Current user of the app."""
    user_id: int = Field(0, ge=0, description="Numeric user id")
    username: str = Field("", description="Account username")
    display_name: str = Field("", description="Display name, may be empty")


class LibraryIn(BaseModel):
    kind: LibraryKind = Field(LibraryKind.CUSTOM, description="custom (personal) or group")
    library_id: int = Field(0, ge=0)
    metadata_editable: bool = Field(True, description="Group permission to edit metadata")

    def to_library(self) -> Library:
        return Library(kind=self.kind, library_id=self.library_id, metadata_editable=self.metadata_editable)


# ============ Reader objects ============


class ReaderDocumentIn(BaseModel):
    page_count: int = Field(..., gt=0, description="Total number of pages")
    page_labels: Dict[int, str] = Field(default_factory=dict, description="Explicit page labels by index")
    pages: List[PageDim] = Field(default_factory=list, description="Page geometry, optional")

    def to_document(self) -> ReaderDocument:
        return ReaderDocument(page_count=self.page_count, page_labels=dict(self.page_labels))


class ReaderAnnotationSchema(BaseModel):
    """
    A reader annotation object. Type-specific fields are ignored for
    types that do not use them.
    """
    type: ReaderAnnotationType
    page_index: int = Field(0, ge=0)
    bounding_box: RectSchema
    contents: Optional[str] = None
    user: Optional[str] = None
    name: Optional[str] = None
    uuid: Optional[str] = None
    color: Optional[str] = None
    alpha: float = Field(1.0, ge=0.0, le=1.0)
    blend_mode: BlendMode = BlendMode.NORMAL
    read_only: bool = False
    custom_data: Optional[Dict[str, Any]] = None

    # highlight
    rects: Optional[List[RectSchema]] = None
    marked_up_string: Optional[str] = None
    # ink
    lines: Optional[List[List[PointSchema]]] = None
    # ink / square
    line_width: Optional[float] = Field(None, ge=0)
    # square
    border_color: Optional[str] = None
    # note
    border_style: Optional[BorderStyle] = None

    @field_validator("color", "border_color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_hex_color(v):
            raise ValueError(f"color must be a #rrggbb hex string, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_base_color(self) -> "ReaderAnnotationSchema":
        base_color = (self.custom_data or {}).get(CUSTOM_DATA_BASE_COLOR)
        if base_color is not None and not (isinstance(base_color, str) and is_hex_color(base_color)):
            raise ValueError(f"custom_data.{CUSTOM_DATA_BASE_COLOR} must be a #rrggbb hex string, got {base_color!r}")
        return self

    def to_reader(self, document: Optional[ReaderDocument]) -> ReaderAnnotation:
        annotation_cls = ANNOTATION_CLASSES[self.type]
        annotation = annotation_cls(
            page_index=self.page_index,
            bounding_box=self.bounding_box.to_rect(),
            contents=self.contents,
            user=self.user,
            name=self.name,
            color=self.color,
            alpha=self.alpha,
            blend_mode=self.blend_mode,
            flags=AnnotationFlags.READ_ONLY if self.read_only else AnnotationFlags.NONE,
            custom_data=dict(self.custom_data) if self.custom_data else None,
            document=document,
        )
        if self.uuid:
            annotation.uuid = self.uuid

        if isinstance(annotation, HighlightAnnotation):
            if self.rects is not None:
                annotation.rects = [r.to_rect() for r in self.rects]
            annotation.marked_up_string = self.marked_up_string or ""
        elif isinstance(annotation, InkAnnotation):
            annotation.lines = [[p.to_point() for p in line] for line in (self.lines or [])]
            if self.line_width is not None:
                annotation.line_width = self.line_width
        elif isinstance(annotation, SquareAnnotation):
            annotation.border_color = self.border_color
            if self.line_width is not None:
                annotation.line_width = self.line_width
        elif isinstance(annotation, NoteAnnotation) and self.border_style is not None:
            annotation.border_style = self.border_style

        return annotation

    @classmethod
    def from_reader(cls, annotation: ReaderAnnotation) -> "ReaderAnnotationSchema":
        data: Dict[str, Any] = dict(
            type=annotation.annotation_type,
            page_index=annotation.page_index,
            bounding_box=RectSchema.from_rect(annotation.bounding_box),
            contents=annotation.contents,
            user=annotation.user,
            name=annotation.name,
            uuid=annotation.uuid,
            color=annotation.color,
            alpha=annotation.alpha,
            blend_mode=annotation.blend_mode,
            read_only=annotation.is_read_only,
            custom_data=annotation.custom_data,
        )
        if isinstance(annotation, HighlightAnnotation):
            data["rects"] = [RectSchema.from_rect(r) for r in annotation.rects or []]
            data["marked_up_string"] = annotation.marked_up_string
        elif isinstance(annotation, InkAnnotation):
            data["lines"] = [[PointSchema.from_point(p) for p in line] for line in annotation.lines]
            data["line_width"] = annotation.line_width
        elif isinstance(annotation, SquareAnnotation):
            data["border_color"] = annotation.border_color
            data["line_width"] = annotation.line_width
        elif isinstance(annotation, NoteAnnotation):
            data["border_style"] = annotation.border_style
        return cls(**data)


# ============ App annotations ============


class AnnotationSchema(BaseModel):
    key: str = Field(..., min_length=1)
    type: AnnotationType
    page: int = Field(..., ge=0, description="0-based page index")
    page_label: str = Field(..., min_length=1)
    rects: List[RectSchema] = Field(default_factory=list)
    paths: List[List[PointSchema]] = Field(default_factory=list)
    line_width: Optional[float] = Field(None, gt=0)
    author: str = ""
    is_author: bool = False
    color: str = Field(..., description="Base color, #rrggbb")
    comment: str = ""
    text: Optional[str] = None
    sort_index: str = ""
    date_modified: Optional[datetime] = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not is_hex_color(v):
            raise ValueError(f"color must be a #rrggbb hex string, got {v!r}")
        return v.lower()

    def to_model(self) -> DocumentAnnotation:
        extra: Dict[str, Any] = {}
        if self.date_modified is not None:
            extra["date_modified"] = self.date_modified
        annotation = DocumentAnnotation(
            key=self.key,
            type=self.type,
            page=self.page,
            page_label=self.page_label,
            rects=tuple(r.to_rect() for r in self.rects),
            paths=tuple(tuple(p.to_point() for p in path) for path in self.paths),
            line_width=self.line_width,
            author=self.author,
            is_author=self.is_author,
            color=self.color,
            comment=self.comment,
            text=self.text,
            sort_index=self.sort_index,
            **extra,
        )
        annotation.validate()
        return annotation

    @classmethod
    def from_model(cls, annotation: DocumentAnnotation) -> "AnnotationSchema":
        return cls(
            key=annotation.key,
            type=annotation.type,
            page=annotation.page,
            page_label=annotation.page_label,
            rects=[RectSchema.from_rect(r) for r in annotation.rects],
            paths=[[PointSchema.from_point(p) for p in path] for path in annotation.paths],
            line_width=annotation.line_width,
            author=annotation.author,
            is_author=annotation.is_author,
            color=annotation.color,
            comment=annotation.comment,
            text=annotation.text,
            sort_index=annotation.sort_index,
            date_modified=annotation.date_modified,
        )


# ============ Requests / responses ============


class ImportRequest(BaseModel):
    """Reader annotations to convert into app annotations."""
    document: ReaderDocumentIn
    session: SessionIn = Field(default_factory=SessionIn)
    library: LibraryIn = Field(default_factory=LibraryIn)
    annotations: List[ReaderAnnotationSchema] = Field(..., max_length=5000)


class ImportResponse(BaseModel):
    annotations: List[AnnotationSchema]
    skipped: int = Field(0, description="Reader annotations with no app counterpart")


class ExportRequest(BaseModel):
    """App annotations to convert into reader objects."""
    annotations: List[AnnotationSchema] = Field(..., max_length=5000)
    kind: ConversionKind = ConversionKind.ZOTERO
    appearance: Optional[str] = Field("automatic", description="automatic, light or dark")
    session: SessionIn = Field(default_factory=SessionIn)
    library: LibraryIn = Field(default_factory=LibraryIn)
    pages: List[PageDim] = Field(default_factory=list, description="Page geometry, optional")


class ExportResponse(BaseModel):
    annotations: List[ReaderAnnotationSchema]


class SortIndexOut(BaseModel):
    sort_index: str
    page: int
    text_offset: int
    min_y: int


class EditActionIn(BaseModel):
    action: Literal["set_color", "set_line_width", "set_page_label", "set_highlight"]
    color: Optional[str] = None
    width: Optional[float] = None
    label: Optional[str] = None
    update_subsequent_pages: bool = False
    text: Optional[str] = None

    @model_validator(mode="after")
    def validate_payload(self) -> "EditActionIn":
        required = {
            "set_color": "color",
            "set_line_width": "width",
            "set_page_label": "label",
            "set_highlight": "text",
        }[self.action]
        if getattr(self, required) is None:
            raise ValueError(f"{self.action} requires '{required}'")
        return self

    def to_action(self) -> EditAction:
        if self.action == "set_color":
            return SetColor(self.color)
        if self.action == "set_line_width":
            return SetLineWidth(self.width)
        if self.action == "set_page_label":
            return SetPageLabel(self.label, self.update_subsequent_pages)
        return SetHighlight(self.text)


class EditRequest(BaseModel):
    annotations: List[AnnotationSchema] = Field(..., min_length=1, max_length=5000)
    key: str = Field(..., min_length=1, description="Key of the annotation to edit")
    edit: EditActionIn


class EditResponse(BaseModel):
    annotations: List[AnnotationSchema]
