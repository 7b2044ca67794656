import math

import numpy as np
import pytest

from dicomlens.base import PI, Point, Stage
from dicomlens.roi import EllipseItem, RectItem, RoiStats, compute_stats


def _place(item, top_left, bottom_right):
    """Put the crosses so the sampled region starts at the given corners."""
    item.tl.pos = Point(top_left[0] - 5, top_left[1] - 5)
    item.br.pos = Point(bottom_right[0] - 5, bottom_right[1] - 5)


def test_compute_stats_basic():
    stats = compute_stats([4, 9, 2])
    assert stats.count == 3
    assert stats.maximum == 9
    assert stats.minimum == 2
    assert stats.mean == pytest.approx(15 / 3)


def test_compute_stats_constant_has_zero_sd():
    stats = compute_stats([5, 5, 5, 5])
    assert stats.sd == 0
    assert stats.mean == 5


def test_compute_stats_empty():
    stats = compute_stats([])
    assert stats.count == 0
    assert stats.mean == 0
    assert stats.maximum == -(2**63)
    assert stats.minimum == 2**63 - 1


def test_compute_stats_accepts_2d_and_negative():
    stats = compute_stats(np.array([[-3, 1], [7, 0]], dtype=np.int16))
    assert stats.count == 4
    assert stats.minimum == -3
    assert stats.maximum == 7


def test_stats_format():
    text = RoiStats(count=3, mean=2.7, sd=1.5, maximum=5, minimum=-1).format(1.234, "cm")
    assert text == "Mean=2 SD=1.50\nMax=5 Min=-1\nArea=1.23cm^2 (3 px)"


def test_rect_recal_region():
    pixels = np.arange(36, dtype=np.uint16).reshape(6, 6)
    item = RectItem()
    _place(item, (0, 0), (4, 4))
    stats = item.recal_pix_info(pixels)
    assert stats == compute_stats(pixels[0:4, 0:4])
    assert stats.count == 16
    assert stats.maximum == pixels[3, 3]
    assert stats.minimum == pixels[0, 0]
    assert item.pix_info_updated() is True
    assert item.text_item.text == stats.format(item.area, "cm")


def test_rect_recal_clamped_to_image():
    pixels = np.ones((5, 7), dtype=np.int32)
    item = RectItem()
    _place(item, (-10, -10), (100, 100))
    stats = item.recal_pix_info(pixels)
    assert stats.count == pixels.size


def test_recal_without_pixels_does_nothing():
    item = RectItem()
    assert item.recal_pix_info(None) is None
    assert item.pix_info_updated() is False
    assert item.text_item.text == ""


def test_ellipse_excludes_corners_includes_center():
    pixels = np.zeros((10, 10), dtype=np.int16)
    pixels[0, 0] = 99
    pixels[5, 5] = 7
    ellipse = EllipseItem()
    _place(ellipse, (0, 0), (10, 10))
    rect = RectItem()
    _place(rect, (0, 0), (10, 10))
    e_stats = ellipse.recal_pix_info(pixels)
    r_stats = rect.recal_pix_info(pixels)
    assert e_stats.maximum == 7
    assert r_stats.maximum == 99
    assert 0 < e_stats.count < r_stats.count


def test_rect_area_text_after_refresh():
    item = RectItem()
    item.set_pixel_spacing(1.0, 1.0)
    item.set_active_point(Point(10, 20))
    item.refresh()
    assert item.text_item.text == "2.00cm^2"
    assert item.text_item.pos == Point(20, 10)


def test_ellipse_area_relative_to_rect():
    rect = RectItem()
    ellipse = EllipseItem()
    for item in (rect, ellipse):
        item.set_pixel_spacing(0.5, 0.8)
        item.set_active_point(Point(30, 40))
        item.refresh()
    assert ellipse.area / rect.area == pytest.approx(PI / 4)
    assert ellipse.text_item.text.endswith(" cm^2")


def test_no_area_without_spacing():
    item = RectItem()
    item.set_active_point(Point(10, 10))
    item.refresh()
    assert item.text_item.text == ""
    assert item.area == 0


def test_inverted_corner_is_reverted():
    item = RectItem()
    item.set_active_point(Point(10, 10))
    item.refresh()
    item.set_active_point(Point(-5, 20))
    item.refresh()
    assert item.br.pos == Point(10, 20)
    assert item.tl.pos == Point(0, 0)


def test_modification_clears_updated():
    item = EllipseItem()
    item.set_active_point(Point(10, 10))
    item.refresh()
    item.recal_pix_info(np.zeros((4, 4), dtype=np.uint8))
    assert item.pix_info_updated() is True
    item.set_active_point(Point(12, 12))
    item.refresh()
    assert item.pix_info_updated() is False


def test_next_stage_is_final():
    for cls in (RectItem, EllipseItem):
        item = cls()
        item.next_stage()
        assert item.stage is Stage.FINAL


def test_paths():
    rect = RectItem()
    rect.set_active_point(Point(3, 4))
    path = rect.refresh()
    assert path.elements[0] == ("move", Point(0, 0))
    assert ("line", Point(3, 4)) in path.elements
    ellipse = EllipseItem()
    ellipse.set_active_point(Point(3, 4))
    path = ellipse.refresh()
    kind, shape = path.elements[0]
    assert kind == "ellipse"
    assert shape.bottom_right == Point(3, 4)
    assert math.isclose(shape.width, 3)