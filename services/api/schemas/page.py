# services/api/schemas/page.py
from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from typing import List

from models.geometry import Rect
from models.page import Page


class GlyphRect(BaseModel):
    """Character box in reader coordinates (PDF points, origin bottom-left)."""
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class PageDim(BaseModel):
    """Single page geometry in PDF points (1/72 inch)."""
    page_index: int = Field(ge=0, description="Zero-based page index")
    width_pt: float = Field(gt=0, description="Page width in points")
    height_pt: float = Field(gt=0, description="Page height in points")
    rotation_deg: int = Field(default=0, description="Rotation of the page (0/90/180/270)")
    glyphs: List[GlyphRect] = Field(
        default_factory=list,
        description="Character boxes in reading order, used for sort index text offsets",
    )

    @model_validator(mode="after")
    def _rotation_allowed(self):
        if self.rotation_deg not in (0, 90, 180, 270):
            raise ValueError("rotation_deg must be one of 0, 90, 180, 270")
        return self

    def to_page(self) -> Page:
        return Page(
            page_index=self.page_index,
            width=self.width_pt,
            height=self.height_pt,
            rotation=self.rotation_deg,
        )

    def glyph_rects(self) -> List[Rect]:
        return [Rect(g.x, g.y, g.width, g.height) for g in self.glyphs]
