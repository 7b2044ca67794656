"""A thumbnail tile standing for one series in a series list."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from .base import Color, Point, TextItem, ViewType
from .series import SeriesInstance

START_DRAG_DISTANCE = 10
_NAME_LABEL_POS = Point(4, 4)
_NAME_LABEL_SIZE = (110, 13)
_SELECTION_COLOR = (32, 218, 208)
_SELECTION_WIDTH = 4
_HIDDEN_NAME = "hide name"


@dataclass(frozen=True)
class SelectionFrame:
    """The border drawn around a selected thumbnail."""

    color: tuple[int, int, int]
    width: int
    size: tuple[int, int]


def _scaled_size(width: int, height: int, target_w: int, target_h: int) -> tuple[int, int]:
    """Largest size within the target that keeps the aspect ratio."""
    scaled_w = target_h * width // height
    if scaled_w <= target_w:
        return (scaled_w, target_h)
    return (target_w, target_w * height // width)


def _scale_image(image: np.ndarray, target: int) -> np.ndarray:
    """Scale a 2-D image to fit a square of side ``target``, keeping aspect."""
    rows, cols = image.shape[:2]
    new_w, new_h = _scaled_size(cols, rows, target, target)
    new_w, new_h = max(new_w, 1), max(new_h, 1)
    row_idx = ((np.arange(new_h) + 0.5) * rows / new_h).astype(int).clip(0, rows - 1)
    col_idx = ((np.arange(new_w) + 0.5) * cols / new_w).astype(int).clip(0, cols - 1)
    return image[row_idx[:, None], col_idx[None, :]]


class ThumbnailLabel:
    """A square tile showing a series' first image, patient name and frame tag.

    Click and double-click listeners receive the label itself. Dragging with
    the left button past the start distance produces a drag payload naming
    the series.
    """

    _label_size = 120

    def __init__(self, series: SeriesInstance | None, parent=None, hide_name: bool = False):
        self.parent = parent
        self.series = series
        self.hide_name = hide_name
        self.name_label = TextItem(self)
        self.name_label_size = _NAME_LABEL_SIZE
        self.frame_label = TextItem(self)
        self.background = Color.BLACK
        self.text_color = (160, 174, 184)
        self.font_size = 12
        self.line_width = 2
        self.pixmap: np.ndarray | None = None
        self.selected = False
        self.on_clicked: list[Callable[[ThumbnailLabel], None]] = []
        self.on_double_clicked: list[Callable[[ThumbnailLabel], None]] = []
        self._drag_origin = Point()

    @staticmethod
    def label_size() -> int:
        """Side length of every thumbnail."""
        return ThumbnailLabel._label_size

    @staticmethod
    def set_label_size(value: int) -> None:
        ThumbnailLabel._label_size = int(value)

    def size_hint(self) -> tuple[int, int]:
        size = ThumbnailLabel._label_size
        return (size, size)

    def has_image(self, image_file: str) -> bool:
        return self.series is not None and self.series.has_image(image_file)

    def _refresh_pixmap(self) -> None:
        rendered = self.series.render(ViewType.XY_PLANE)
        if rendered is not None:
            self.pixmap = _scale_image(rendered, ThumbnailLabel._label_size - 2)

    def insert_image(self, image) -> bool:
        """Add an image to the series and refresh the tile; False if refused."""
        if self.series is None or not self.series.insert_image(image):
            return False
        size = ThumbnailLabel._label_size
        frames = self.series.frame_count(ViewType.XY_PLANE)
        if frames > 0:
            self._refresh_pixmap()
            name = self.series.tag_value("PatientName")
            self.name_label.text = _HIDDEN_NAME if self.hide_name else name
            self.name_label.pos = _NAME_LABEL_POS
        modality = self.series.tag_value("Modality")
        number = self.series.tag_value("SeriesNumber")
        self.frame_label.text = f"{modality}: {number}-{frames}"
        tag_w, tag_h = self.frame_label.bounding_size()
        self.frame_label.pos = Point(size - tag_w, size - tag_h)
        return True

    def remove_image(self, image_file: str) -> bool:
        return self.series is not None and self.series.remove_image(image_file)

    def set_highlight(self, yes: bool) -> None:
        self.background = Color.GREEN if yes else Color.BLACK

    def update_thumbnail(self) -> None:
        """Re-render the tile from the series' current window and frame."""
        if self.series is not None:
            self._refresh_pixmap()

    @property
    def selection_frame(self) -> SelectionFrame | None:
        """The border to draw when selected, else None."""
        if not self.selected:
            return None
        return SelectionFrame(_SELECTION_COLOR, _SELECTION_WIDTH, self.size_hint())

    def press(self, pos: Point) -> None:
        """A mouse press: notify click listeners and remember the drag origin."""
        for listener in list(self.on_clicked):
            listener(self)
        self._drag_origin = pos

    def double_click(self) -> None:
        for listener in list(self.on_double_clicked):
            listener(self)

    def drag_to(self, pos: Point, left_button: bool) -> str | None:
        """A mouse move; returns the drag payload once a drag starts."""
        if left_button and (pos - self._drag_origin).manhattan_length() > START_DRAG_DISTANCE:
            return str(id(self.series))
        return None