"""
Tests for annotation edit actions.

Run with: pytest tests/test_edit.py -v
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timezone

import pytest

from models.annotation import AnnotationType, DocumentAnnotation
from models.edit import SetColor, SetHighlight, SetLineWidth, SetPageLabel, apply_edit, apply_edit_to_all
from models.geometry import Point, Rect
from models.services import AnnotationService

OLD_DATE = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _annotation(key="K1", page=0, page_label="1", type=AnnotationType.HIGHLIGHT, **kwargs):
    values = dict(
        key=key,
        type=type,
        page=page,
        page_label=page_label,
        rects=(Rect(0, 0, 10, 10),),
        color="#ffd400",
        text="text" if type == AnnotationType.HIGHLIGHT else None,
        date_modified=OLD_DATE,
    )
    if type == AnnotationType.INK:
        values.update(rects=(), paths=((Point(0, 0), Point(1, 1)),), line_width=2.0)
    values.update(kwargs)
    return DocumentAnnotation(**values)


class TestApplyEdit:
    """Single-annotation edits."""

    def test_set_color(self):
        original = _annotation()
        edited = apply_edit(original, SetColor("#2EA8E5"))
        assert edited.color == "#2ea8e5"
        assert edited.date_modified > OLD_DATE
        assert original.color == "#ffd400"

    def test_set_color_invalid(self):
        with pytest.raises(ValueError):
            apply_edit(_annotation(), SetColor("blue"))

    def test_set_line_width(self):
        edited = apply_edit(_annotation(type=AnnotationType.INK), SetLineWidth(5))
        assert edited.line_width == 5

    def test_set_line_width_only_for_ink(self):
        with pytest.raises(ValueError):
            apply_edit(_annotation(), SetLineWidth(5))

    def test_set_line_width_positive(self):
        with pytest.raises(ValueError):
            apply_edit(_annotation(type=AnnotationType.INK), SetLineWidth(0))

    def test_set_page_label(self):
        assert apply_edit(_annotation(), SetPageLabel(" iv ")).page_label == "iv"

    def test_set_page_label_empty(self):
        with pytest.raises(ValueError):
            apply_edit(_annotation(), SetPageLabel("  "))

    def test_set_highlight(self):
        assert apply_edit(_annotation(), SetHighlight("new text")).text == "new text"

    def test_set_highlight_only_for_highlights(self):
        with pytest.raises(ValueError):
            apply_edit(_annotation(type=AnnotationType.IMAGE, text=None), SetHighlight("x"))


class TestApplyEditToAll:
    """Edits applied within a list of annotations."""

    def test_missing_key(self):
        with pytest.raises(KeyError):
            apply_edit_to_all([_annotation()], "nope", SetColor("#000000"))

    def test_only_target_changes(self):
        annotations = [_annotation("A"), _annotation("B")]
        result = apply_edit_to_all(annotations, "B", SetColor("#000000"))
        assert [a.color for a in result] == ["#ffd400", "#000000"]

    def test_page_label_without_update(self):
        annotations = [_annotation("A", page=0), _annotation("B", page=0), _annotation("C", page=1, page_label="2")]
        result = apply_edit_to_all(annotations, "A", SetPageLabel("5"))
        assert [a.page_label for a in result] == ["5", "1", "2"]

    def test_page_label_updates_subsequent_pages(self):
        annotations = [
            _annotation("A", page=0, page_label="1"),
            _annotation("B", page=2, page_label="3"),
            _annotation("C", page=2, page_label="3"),
            _annotation("D", page=4, page_label="5"),
        ]
        result = apply_edit_to_all(annotations, "B", SetPageLabel("10", update_subsequent_pages=True))
        assert [a.page_label for a in result] == ["1", "10", "10", "12"]

    def test_non_numeric_label_leaves_later_pages(self):
        annotations = [_annotation("A", page=0), _annotation("B", page=3, page_label="4")]
        result = apply_edit_to_all(annotations, "A", SetPageLabel("i", update_subsequent_pages=True))
        assert [a.page_label for a in result] == ["i", "4"]

    def test_service_delegates(self):
        result = AnnotationService.apply_edit([_annotation("A")], "A", SetHighlight("edited"))
        assert result[0].text == "edited"


class TestSorting:
    def test_sorted_by_sort_index(self):
        annotations = [
            _annotation("late", sort_index="00003|000000|00010"),
            _annotation("early", sort_index="00000|000005|00100"),
            _annotation("middle", sort_index="00000|000010|00000"),
        ]
        assert [a.key for a in AnnotationService.sorted(annotations)] == ["early", "middle", "late"]
