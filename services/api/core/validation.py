"""
Validation utilities for annotation requests.
Ensures data integrity and provides clear error messages.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from models.annotation import is_hex_color
from models.appearance import AppearanceMode


def validate_hex_color(color: str) -> None:
    """
    Raises:
        HTTPException: 400 if color is not a #rrggbb hex string
    """
    if not is_hex_color(color):
        raise HTTPException(
            status_code=400,
            detail=f"color must be a #rrggbb hex string, got {color!r}"
        )


def validate_page_index(page_index: int, page_count: int) -> None:
    """
    Validate that a page index lies inside the document.

    Raises:
        HTTPException: 400 if validation fails
    """
    if not (0 <= page_index < page_count):
        raise HTTPException(
            status_code=400,
            detail=f"page_index must be in range [0, {page_count}), got {page_index}"
        )


def ensure_unique_keys(annotations: List[Dict[str, Any]]) -> None:
    """
    Ensure all annotations in a request have distinct keys.

    Args:
        annotations: List of annotation dictionaries with a 'key' field

    Raises:
        HTTPException: 400 if duplicate keys are found
    """
    seen_keys = set()
    duplicates = []

    for annotation in annotations:
        key = annotation.get("key")
        if key in seen_keys:
            duplicates.append(key)
        seen_keys.add(key)

    if duplicates:
        raise HTTPException(
            status_code=400,
            detail=f"Duplicate annotation keys found: {sorted(set(duplicates))}"
        )


def validate_page_dims(dims: List[Dict[str, Any]]) -> None:
    """
    Validate page dimensions for consistency and correctness.

    Rules:
    - All page indices must be unique
    - Width and height must be positive
    - Rotation must be in {0, 90, 180, 270}

    Args:
        dims: List of page dimension dictionaries

    Raises:
        HTTPException: 400 if validation fails
    """
    seen_indices = set()

    for dim in dims:
        idx = dim.get("page_index")
        width = dim.get("width_pt")
        height = dim.get("height_pt")
        rotation = dim.get("rotation_deg", 0)

        # Check for duplicate indices
        if idx in seen_indices:
            raise HTTPException(
                status_code=400,
                detail=f"Duplicate page index: {idx}"
            )
        seen_indices.add(idx)

        # Validate dimensions
        if width is None or width <= 0:
            raise HTTPException(
                status_code=400,
                detail=f"Page {idx}: width_pt must be positive, got {width}"
            )
        if height is None or height <= 0:
            raise HTTPException(
                status_code=400,
                detail=f"Page {idx}: height_pt must be positive, got {height}"
            )

        # Validate rotation
        if rotation not in (0, 90, 180, 270):
            raise HTTPException(
                status_code=400,
                detail=f"Page {idx}: rotation_deg must be 0, 90, 180, or 270, got {rotation}"
            )


def coerce_appearance(appearance: Optional[str]) -> AppearanceMode:
    """
    Coerce an appearance value to one of the allowed modes.

    Args:
        appearance: Raw appearance value

    Returns:
        AppearanceMode; unknown or missing values become "automatic"
    """
    if not appearance:
        return AppearanceMode.AUTOMATIC

    appearance_lower = appearance.lower().strip()

    for mode in AppearanceMode:
        if mode.value == appearance_lower:
            return mode

    # Default to automatic for invalid values
    return AppearanceMode.AUTOMATIC
