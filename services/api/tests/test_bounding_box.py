"""
Tests for page geometry and the page-backed bounding box converter.

Run with: pytest tests/test_bounding_box.py -v
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from core.bounding_box import PageBoundingBoxConverter
from models.geometry import Point, Rect, bounding_rect_of_points, round_half_away, union_rects
from models.page import Page, pdf_point_to_view, pdf_rect_to_view, view_point_to_pdf, view_rect_to_pdf


class TestGeometry:
    def test_round_half_away(self):
        assert round_half_away(12.5) == 13
        assert round_half_away(11.5) == 12
        assert round_half_away(-2.5) == -3
        assert round_half_away(1.0625, 3) == 1.063
        assert round_half_away(1.0615, 2) == 1.06

    def test_rounded_rect_halves(self):
        assert Rect(1.0625, 2.0, 0.5, 3.1875).rounded(3) == Rect(1.063, 2.0, 0.5, 3.188)
        assert Point(-1.0625, 0.0625).rounded(3) == Point(-1.063, 0.063)

    def test_from_corners_normalizes(self):
        assert Rect.from_corners(10, 20, 0, 5) == Rect(0, 5, 10, 15)

    def test_intersects_is_inclusive(self):
        assert Rect(0, 0, 10, 10).intersects(Rect(10, 10, 5, 5))
        assert not Rect(0, 0, 10, 10).intersects(Rect(10.5, 0, 5, 5))

    def test_union(self):
        assert union_rects([Rect(0, 0, 1, 1), Rect(4, 5, 1, 1)]) == Rect(0, 0, 5, 6)
        assert union_rects([]) is None

    def test_bounding_rect_of_points(self):
        assert bounding_rect_of_points([Point(3, 1), Point(1, 4)]) == Rect(1, 1, 2, 3)
        assert bounding_rect_of_points([]) is None

    def test_inset(self):
        assert Rect(10, 10, 10, 10).inset(-2, -3) == Rect(8, 7, 14, 16)


class TestPageTransforms:
    """Rotation between unrotated PDF space and the displayed page."""

    @pytest.mark.parametrize("rotation", [0, 90, 180, 270])
    def test_point_round_trip(self, rotation):
        page = Page(page_index=0, width=600, height=800, rotation=rotation)
        point = Point(123, 456)
        assert view_point_to_pdf(pdf_point_to_view(point, page), page) == point

    @pytest.mark.parametrize("rotation", [0, 90, 180, 270])
    def test_rect_round_trip(self, rotation):
        page = Page(page_index=0, width=600, height=800, rotation=rotation)
        rect = Rect(100, 200, 50, 20)
        assert view_rect_to_pdf(pdf_rect_to_view(rect, page), page) == rect

    def test_rotation_90(self):
        page = Page(page_index=0, width=600, height=800, rotation=90)
        assert pdf_point_to_view(Point(0, 0), page) == Point(0, 600)
        assert pdf_rect_to_view(Rect(100, 200, 50, 20), page) == Rect(200, 450, 20, 50)

    def test_rotation_180(self):
        page = Page(page_index=0, width=600, height=800, rotation=180)
        assert pdf_point_to_view(Point(100, 200), page) == Point(500, 600)

    def test_view_height(self):
        assert Page(0, 600, 800, 0).view_height == 800
        assert Page(0, 600, 800, 90).view_height == 600
        assert Page(0, 600, 800, 270).view_height == 600

    def test_invalid_page(self):
        with pytest.raises(ValueError):
            Page(0, 600, 800, 45).validate()
        with pytest.raises(ValueError):
            Page(0, 0, 800, 0).validate()


class TestPageBoundingBoxConverter:
    def test_unknown_page(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800)])
        rect = Rect(1, 2, 3, 4)
        assert converter.convert_from_db(rect, 5) is None
        assert converter.convert_to_db(rect, 5) is None
        assert converter.convert_point_from_db(Point(1, 1), 5) is None
        assert converter.convert_point_to_db(Point(1, 1), 5) is None
        assert converter.sort_index_min_y(rect, 5) is None

    def test_unrotated_is_identity(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800)])
        rect = Rect(1, 2, 3, 4)
        assert converter.convert_from_db(rect, 0) == rect
        assert converter.convert_to_db(rect, 0) == rect

    def test_rotated_round_trip(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800, 270)])
        rect = Rect(100, 200, 50, 20)
        assert converter.convert_to_db(converter.convert_from_db(rect, 0), 0) == rect

    def test_min_y_from_top(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800)])
        assert converter.sort_index_min_y(Rect(0, 700, 10, 20), 0) == 80
        assert converter.sort_index_min_y(Rect(0, 790, 10, 20), 0) == 0

    def test_min_y_on_rotated_page(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800, 90)])
        assert converter.sort_index_min_y(Rect(0, 500, 10, 20), 0) == 80

    def test_text_offset(self):
        glyphs = [Rect(0, 700, 5, 10), Rect(5, 700, 5, 10), Rect(0, 680, 5, 10)]
        converter = PageBoundingBoxConverter([Page(0, 600, 800)], glyphs={0: glyphs})
        assert converter.text_offset(Rect(6, 702, 20, 5), 0) == 1
        assert converter.text_offset(Rect(0, 681, 3, 3), 0) == 2
        assert converter.text_offset(Rect(300, 300, 3, 3), 0) is None

    def test_text_offset_without_glyphs(self):
        converter = PageBoundingBoxConverter([Page(0, 600, 800)])
        assert converter.text_offset(Rect(0, 0, 10, 10), 0) is None

    def test_rejects_invalid_page(self):
        with pytest.raises(ValueError):
            PageBoundingBoxConverter([Page(0, 600, 800, 45)])
