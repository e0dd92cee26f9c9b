# services/api/settings.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Identity placeholder used when neither the annotation nor the
    # current session carries a usable name.
    unknown_author_label: str = "Unknown"

    # Interface style used when a request asks for "automatic" appearance.
    default_appearance: str = Field(
        default="light",
        description="light or dark",
    )

    # ---- Annotation geometry / rendering constants ----

    # Notes are drawn as a fixed-size icon regardless of their stored rect.
    note_annotation_size: float = 22.0

    # Border width of image (area) annotations in the reader.
    image_annotation_line_width: float = 2.0

    highlight_opacity: float = 0.5
    highlight_dark_opacity: float = 0.5

    # Reader objects are named "<prefix>-<key>" for traceability in the viewer.
    annotation_name_prefix: str = "Zotero"

    log_level: str = "INFO"

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@dataclass(frozen=True)
class AnnotationsConfig:
    """
    Constants the annotation converters work with.

    Built from Settings for the running service; tests and embedding
    callers can construct one directly.
    """
    note_annotation_size: float = 22.0
    image_annotation_line_width: float = 2.0
    highlight_opacity: float = 0.5
    highlight_dark_opacity: float = 0.5
    unknown_author_label: str = "Unknown"
    annotation_name_prefix: str = "Zotero"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AnnotationsConfig":
        settings = settings or get_settings()
        return cls(
            note_annotation_size=settings.note_annotation_size,
            image_annotation_line_width=settings.image_annotation_line_width,
            highlight_opacity=settings.highlight_opacity,
            highlight_dark_opacity=settings.highlight_dark_opacity,
            unknown_author_label=settings.unknown_author_label,
            annotation_name_prefix=settings.annotation_name_prefix,
        )


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
