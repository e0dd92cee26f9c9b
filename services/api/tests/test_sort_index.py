"""
Tests for annotation sort indexes.

Run with: pytest tests/test_sort_index.py -v
"""
import logging
import random

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adapters.reader import HighlightAnnotation, InkAnnotation, NoteAnnotation
from core import sort_index
from core.sort_index import SortIndexError, decode, encode, encode_from_annotation
from models.geometry import Rect


class StubConverter:
    """Answers fixed sort values and records the rects it was asked about."""

    def __init__(self, offset=None, min_y=None):
        self.offset = offset
        self.min_y = min_y
        self.calls = []

    def text_offset(self, rect, page):
        self.calls.append(("offset", rect, page))
        return self.offset

    def sort_index_min_y(self, rect, page):
        self.calls.append(("min_y", rect, page))
        return self.min_y


class TestEncode:
    """Tests for the fixed-width format."""

    def test_format(self):
        assert encode(1, 23, 456) == "00001|000023|00456"
        assert encode(0, 0, 0) == "00000|000000|00000"
        assert encode(99999, 999999, 99999) == "99999|999999|99999"

    def test_length_and_separators(self):
        """Every valid index is 18 chars (5 + 1 + 6 + 1 + 5) with pipes at fixed positions."""
        rng = random.Random(7)
        for _ in range(200):
            page = rng.randrange(100000)
            offset = rng.randrange(1000000)
            y = rng.randrange(100000)
            value = encode(page, offset, y)
            assert len(value) == sort_index.SORT_INDEX_LENGTH == 18
            assert value[5] == "|" and value[12] == "|"
            assert decode(value) == (page, offset, y)

    def test_ordering(self):
        """Page first, then text offset, then vertical position."""
        assert encode(1, 0, 0) < encode(1, 5, 0) < encode(2, 0, 0)
        assert encode(1, 5, 10) < encode(1, 5, 11)
        assert encode(9, 999999, 99999) < encode(10, 0, 0)

    def test_overflow_raises(self):
        """Values wider than their field are rejected."""
        with pytest.raises(SortIndexError):
            encode(100000, 0, 0)
        with pytest.raises(SortIndexError):
            encode(0, 1000000, 0)
        with pytest.raises(SortIndexError):
            encode(0, 0, 100000)

    def test_negative_raises(self):
        with pytest.raises(SortIndexError):
            encode(-1, 0, 0)
        with pytest.raises(ValueError):
            encode(0, 0, -3)


class TestDecode:
    """Tests for parsing sort indexes."""

    def test_malformed(self):
        for value in ("", "1|2|3", "00001-000023-00456", "00001|000023|0045x", "00001|000023|00456|"):
            with pytest.raises(SortIndexError):
                decode(value)


class TestEncodeFromAnnotation:
    """Tests for deriving sort indexes from reader annotations."""

    def test_no_converter_defaults_to_zero(self):
        note = NoteAnnotation(page_index=3, bounding_box=Rect(10, 10, 22, 22))
        assert encode_from_annotation(note, None) == "00003|000000|00000"

    def test_unknown_values_default_to_zero(self):
        note = NoteAnnotation(page_index=2, bounding_box=Rect(10, 10, 22, 22))
        assert encode_from_annotation(note, StubConverter()) == "00002|000000|00000"

    def test_min_y_is_rounded(self):
        note = NoteAnnotation(page_index=0, bounding_box=Rect(10, 10, 22, 22))
        converter = StubConverter(offset=42, min_y=12.6)
        assert encode_from_annotation(note, converter) == "00000|000042|00013"

    def test_min_y_half_rounds_up(self):
        """Exact halves round away from zero, not to the nearest even number."""
        note = NoteAnnotation(page_index=0, bounding_box=Rect(10, 10, 22, 22))
        assert encode_from_annotation(note, StubConverter(min_y=12.5)) == "00000|000000|00013"
        assert encode_from_annotation(note, StubConverter(min_y=11.5)) == "00000|000000|00012"

    def test_highlight_uses_first_rect(self):
        first = Rect(50, 700, 100, 12)
        highlight = HighlightAnnotation(
            page_index=1,
            bounding_box=Rect(50, 600, 300, 112),
            rects=[first, Rect(50, 600, 300, 12)],
        )
        converter = StubConverter(offset=1, min_y=80)
        encode_from_annotation(highlight, converter)
        assert {call[1] for call in converter.calls} == {first}
        assert {call[2] for call in converter.calls} == {1}

    def test_highlight_without_rects_uses_bounding_box(self):
        box = Rect(50, 600, 300, 112)
        highlight = HighlightAnnotation(page_index=1, bounding_box=box, rects=None)
        converter = StubConverter(offset=1, min_y=80)
        encode_from_annotation(highlight, converter)
        assert {call[1] for call in converter.calls} == {box}

    def test_other_kinds_use_bounding_box(self):
        box = Rect(1, 2, 3, 4)
        ink = InkAnnotation(page_index=0, bounding_box=box)
        converter = StubConverter(offset=0, min_y=0)
        encode_from_annotation(ink, converter)
        assert {call[1] for call in converter.calls} == {box}

    def test_collaborator_values_are_clamped(self, caplog):
        """Out-of-range collaborator answers saturate instead of corrupting the index."""
        note = NoteAnnotation(page_index=4, bounding_box=Rect(0, 0, 22, 22))
        converter = StubConverter(offset=5_000_000, min_y=-12.0)
        with caplog.at_level(logging.WARNING, logger="core.sort_index"):
            value = encode_from_annotation(note, converter)
        assert value == "00004|999999|00000"
        assert "out of range" in caplog.text

    def test_page_overflow_raises(self):
        note = NoteAnnotation(page_index=100000, bounding_box=Rect(0, 0, 22, 22))
        with pytest.raises(SortIndexError):
            encode_from_annotation(note, None)
