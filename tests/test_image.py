import numpy as np
import pytest

from dicomlens.base import Rect
from dicomlens.image import ImageInstance, Photometric, Polarity


def _ramp(rows=4, cols=5):
    return np.arange(rows * cols, dtype=np.int16).reshape(rows, cols)


def test_image_without_pixels_is_not_normal():
    image = ImageInstance(tags={"StudyInstanceUID": "1.2.3"})
    assert image.is_normal() is False
    assert image.pixel_spacing() is None
    assert image.image_size() is None
    assert image.render() is None
    assert image.clipped_image(Rect(0, 0, 1, 1)) is None
    assert image.pixel_value(0, 0) == 0
    assert image.study_uid == "1.2.3"
    with pytest.raises(ValueError):
        image.frame_count()


def test_polarity_ignored_when_not_normal():
    image = ImageInstance(np.zeros(5))
    image.set_polarity(Polarity.REVERSE)
    assert image.is_normal() is False
    assert image.polarity is Polarity.NORMAL


def test_uids_and_tag_values():
    tags = {
        "StudyInstanceUID": "1.2",
        "SeriesInstanceUID": "1.2.3",
        "SOPInstanceUID": "1.2.3.4",
        "SOPClassUID": "1.2.840",
        "ImageType": "ORIGINAL\\PRIMARY",
        "PatientName": "张三".encode("gbk"),
    }
    image = ImageInstance(_ramp(), tags, image_file="a.dcm")
    assert image.series_uid == "1.2.3"
    assert image.image_uid == "1.2.3.4"
    assert image.class_uid == "1.2.840"
    assert image.image_file == "a.dcm"
    assert image.tag_value("ImageType") == "ORIGINAL"
    assert image.tag_value("PatientName") == "张三"
    assert image.tag_value("Missing") == ""


def test_pixel_spacing_and_fallback():
    image = ImageInstance(_ramp(), {"PixelSpacing": [0.5, 0.7]})
    assert image.pixel_spacing() == (0.5, 0.7)
    fallback = ImageInstance(_ramp(), {"ImagerPixelSpacing": "0.25\\0.3"})
    assert fallback.pixel_spacing() == (0.25, 0.3)


def test_window_from_tags_delta_and_default():
    image = ImageInstance(_ramp(), {"WindowCenter": "40", "WindowWidth": "400"})
    assert image.window() == (40.0, 400.0)
    image.set_window_delta(10, -100)
    assert image.window() == (50.0, 300.0)
    image.set_default_window()
    assert image.window() == (40.0, 400.0)


def test_default_window_spans_value_range():
    image = ImageInstance(np.array([[0, 9]]))
    assert image.window() == (5.0, 10.0)


def test_full_dynamic_matches_initial_window():
    image = ImageInstance(_ramp())
    initial = image.window()
    image.set_window(1, 2)
    image.set_full_dynamic()
    assert image.window() == initial


def test_roi_window_whole_image_matches_full_dynamic():
    pixels = _ramp()
    image = ImageInstance(pixels)
    image.set_full_dynamic()
    expected = image.window()
    image.set_window(3, 3)
    image.set_roi_window(Rect(0, 0, pixels.shape[1], pixels.shape[0]))
    assert image.window() == expected


def test_roi_window_narrower_region_narrows_window():
    image = ImageInstance(_ramp())
    full = image.window()
    image.set_roi_window(Rect(0, 0, 2, 1))
    assert image.window()[1] < full[1]


def test_roi_window_outside_image_keeps_applied_window():
    image = ImageInstance(_ramp())
    image.set_roi_window(Rect(0, 0, 2, 1))
    roi = image.window()
    image.set_window(7, 8)
    image.set_roi_window(Rect(100, 100, 5, 5))
    assert image.window() == roi


def test_pixel_value_and_bounds():
    pixels = _ramp()
    image = ImageInstance(pixels)
    assert image.pixel_value(2, 3) == pixels[3, 2]
    assert image.pixel_value(5, 0) == 0
    assert image.pixel_value(-1, 0) == 0


def test_rescale_applied():
    image = ImageInstance(np.zeros((2, 2), dtype=np.uint16), {"RescaleIntercept": "-1024"})
    assert image.pixel_value(0, 0) == -1024


def test_size_frames_and_read_only_frame():
    stack = np.stack([_ramp(2, 3), _ramp(2, 3) + 10, _ramp(2, 3) + 20])
    image = ImageInstance(stack)
    assert image.image_size() == (3, 2)
    assert image.frame_count() == 3
    np.testing.assert_array_equal(image.frame(1), stack[1])
    with pytest.raises(IndexError):
        image.frame(3)
    with pytest.raises(ValueError):
        image.frame(0)[0, 0] = 1


def test_render_window_limits_and_polarity():
    pixels = np.array([[0, 50, 100]], dtype=np.int16)
    image = ImageInstance(pixels, {"WindowCenter": 50, "WindowWidth": 20})
    out = image.render()
    assert out.shape == pixels.shape
    assert out[0, 0] == 0
    assert out[0, 2] == 255
    assert 0 < out[0, 1] < 255
    image.set_polarity(Polarity.REVERSE)
    assert image.polarity is Polarity.REVERSE
    np.testing.assert_array_equal(image.render(), 255 - out)


def test_monochrome1_renders_inverted():
    pixels = _ramp()
    tags = {"WindowCenter": 10, "WindowWidth": 10}
    normal = ImageInstance(pixels, tags).render()
    mono1 = ImageInstance(pixels, tags, photometric=Photometric.MONOCHROME1).render()
    np.testing.assert_array_equal(mono1, 255 - normal)


def test_render_coerces_small_width_and_selects_frame():
    stack = np.stack([np.zeros((2, 2)), np.full((2, 2), 100)])
    image = ImageInstance(stack)
    image.set_window(50, 0)
    first = image.render(0)
    assert image.window()[1] == 1.0
    second = image.render(1)
    assert first.max() < second.min()
    assert image.render(2) is None


def test_clipped_image_inside():
    pixels = _ramp()
    image = ImageInstance(pixels, {"SeriesInstanceUID": "9"})
    clipped = image.clipped_image(Rect(1, 1, 3, 2))
    np.testing.assert_array_equal(clipped.frame(0), pixels[1:3, 1:4])
    assert clipped.series_uid == "9"
    assert clipped.image_file == ""


def test_clipped_image_pads_with_minimum_or_maximum():
    pixels = _ramp() + 5
    clipped = ImageInstance(pixels).clipped_image(Rect(-1, 0, 2, 1))
    assert clipped.frame(0)[0, 0] == pixels.min()
    assert clipped.frame(0)[0, 1] == pixels[0, 0]
    mono1 = ImageInstance(pixels, photometric=Photometric.MONOCHROME1)
    assert mono1.clipped_image(Rect(-1, 0, 2, 1)).frame(0)[0, 0] == pixels.max()


def test_clipped_image_zero_size_reaches_border():
    pixels = _ramp()
    clipped = ImageInstance(pixels).clipped_image(Rect(2, 1, 0, 0))
    np.testing.assert_array_equal(clipped.frame(0), pixels[1:, 2:])


def test_clipped_image_rotate_flip_invert():
    pixels = _ramp()
    image = ImageInstance(pixels)
    full = Rect(0, 0, pixels.shape[1], pixels.shape[0])
    rotated = image.clipped_image(full, angle=90)
    np.testing.assert_array_equal(rotated.frame(0), np.rot90(pixels, -1))
    back = image.clipped_image(full, angle=-270)
    np.testing.assert_array_equal(back.frame(0), rotated.frame(0))
    flipped = image.clipped_image(full, hflip=True, vflip=True)
    np.testing.assert_array_equal(flipped.frame(0), pixels[::-1, ::-1])
    assert image.clipped_image(full, angle=45) is None
    assert image.clipped_image(full, inverted=True).polarity is Polarity.REVERSE