"""
Pydantic schemas for API request/response validation.
"""
from typing import Optional

from pydantic import BaseModel

from .annotation import (
    AnnotationSchema,
    EditActionIn,
    EditRequest,
    EditResponse,
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
    LibraryIn,
    PointSchema,
    ReaderAnnotationSchema,
    ReaderDocumentIn,
    RectSchema,
    SessionIn,
    SortIndexOut,
)
from .page import GlyphRect, PageDim


# ============ Health Check ============


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: Optional[str] = None


# Re-export all
__all__ = [
    "AnnotationSchema",
    "EditActionIn",
    "EditRequest",
    "EditResponse",
    "ExportRequest",
    "ExportResponse",
    "GlyphRect",
    "HealthCheck",
    "ImportRequest",
    "ImportResponse",
    "LibraryIn",
    "PageDim",
    "PointSchema",
    "ReaderAnnotationSchema",
    "ReaderDocumentIn",
    "RectSchema",
    "SessionIn",
    "SortIndexOut",
]
