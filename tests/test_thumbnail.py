import numpy as np
import pytest

from dicomlens.base import Color, Point
from dicomlens.image import ImageInstance
from dicomlens.series import SeriesInstance
from dicomlens.thumbnail import START_DRAG_DISTANCE, ThumbnailLabel

UID = "1.2.3"


def make_image(number=0, file="a.dcm", shape=(32, 64), uid=UID):
    pixels = np.arange(shape[0] * shape[1], dtype=np.int16).reshape(shape)
    tags = {
        "SeriesInstanceUID": uid,
        "InstanceNumber": str(number),
        "PatientName": "Doe^Jane",
        "Modality": "CT",
        "SeriesNumber": "5",
    }
    return ImageInstance(pixels, tags, image_file=file)


@pytest.fixture
def restore_size():
    original = ThumbnailLabel.label_size()
    yield
    ThumbnailLabel.set_label_size(original)


def test_default_size_hint():
    assert ThumbnailLabel.label_size() == 120
    assert ThumbnailLabel(None).size_hint() == (120, 120)


def test_set_label_size(restore_size):
    ThumbnailLabel.set_label_size(80)
    assert ThumbnailLabel.label_size() == 80
    assert ThumbnailLabel(None).size_hint() == (80, 80)


def test_insert_image_sets_labels_and_pixmap():
    label = ThumbnailLabel(SeriesInstance(UID))
    assert label.insert_image(make_image()) is True
    assert label.pixmap.shape == (59, 118)
    assert label.name_label.text == "Doe^Jane"
    assert label.name_label.pos == Point(4, 4)
    assert label.frame_label.text == "CT: 5-1"


def test_frame_label_anchored_bottom_right():
    label = ThumbnailLabel(SeriesInstance(UID))
    label.insert_image(make_image())
    w, h = label.frame_label.bounding_size()
    pos = label.frame_label.pos
    assert (pos.x + w, pos.y + h) == pytest.approx((120, 120))


def test_hidden_name():
    label = ThumbnailLabel(SeriesInstance(UID), hide_name=True)
    label.insert_image(make_image())
    assert label.name_label.text == "hide name"


def test_insert_wrong_series_refused():
    label = ThumbnailLabel(SeriesInstance(UID))
    assert label.insert_image(make_image(uid="9.9")) is False
    assert label.pixmap is None
    assert label.frame_label.text == ""


def test_insert_without_series():
    assert ThumbnailLabel(None).insert_image(make_image()) is False


def test_multi_frame_count_in_tag():
    label = ThumbnailLabel(SeriesInstance(UID))
    label.insert_image(make_image(1, "a.dcm"))
    label.insert_image(make_image(2, "b.dcm"))
    assert label.frame_label.text.endswith("-2")


def test_has_and_remove_image():
    label = ThumbnailLabel(SeriesInstance(UID))
    label.insert_image(make_image(1, "a.dcm"))
    label.insert_image(make_image(2, "b.dcm"))
    assert label.has_image("b.dcm") is True
    assert label.remove_image("b.dcm") is True
    assert label.has_image("b.dcm") is False
    assert label.remove_image("missing.dcm") is False


def test_without_series_has_nothing():
    label = ThumbnailLabel(None)
    assert label.has_image("a.dcm") is False
    assert label.remove_image("a.dcm") is False
    label.update_thumbnail()
    assert label.pixmap is None


def test_update_thumbnail_follows_window():
    series = SeriesInstance(UID)
    label = ThumbnailLabel(series)
    label.insert_image(make_image())
    series.set_window(-10000, 2)
    label.update_thumbnail()
    assert int(label.pixmap.min()) == 255
    assert label.pixmap.shape == (59, 118)


def test_highlight():
    label = ThumbnailLabel(None)
    label.set_highlight(True)
    assert label.background is Color.GREEN
    label.set_highlight(False)
    assert label.background is Color.BLACK


def test_selection_frame():
    label = ThumbnailLabel(None)
    assert label.selection_frame is None
    label.selected = True
    frame = label.selection_frame
    assert frame.color == (32, 218, 208)
    assert frame.width == 4
    assert frame.size == (120, 120)


def test_press_and_double_click_notify():
    label = ThumbnailLabel(None)
    clicked, doubled = [], []
    label.on_clicked.append(clicked.append)
    label.on_double_clicked.append(doubled.append)
    label.press(Point(1, 1))
    label.double_click()
    assert clicked == [label]
    assert doubled == [label]


def test_drag_starts_past_distance():
    series = SeriesInstance(UID)
    label = ThumbnailLabel(series)
    label.press(Point(0, 0))
    assert label.drag_to(Point(START_DRAG_DISTANCE / 2, START_DRAG_DISTANCE / 2), True) is None
    assert label.drag_to(Point(START_DRAG_DISTANCE, 1), True) == str(id(series))
    assert label.drag_to(Point(START_DRAG_DISTANCE, 1), False) is None