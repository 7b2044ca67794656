"""A series of images sharing a series UID, browsed frame by frame."""

from __future__ import annotations

import math
import re
from datetime import datetime
from enum import Enum, auto

import numpy as np

from .base import Rect, ViewType
from .image import ImageInstance, Polarity

DICOM_DATE_FORMAT = "%Y%m%d"
DICOM_TIME_FORMAT = "%H%M%S"
DICOM_DATETIME_FORMAT = "%Y%m%d%H%M%S"
NORMAL_DATE_FORMAT = "%Y-%m-%d"
NORMAL_TIME_FORMAT = "%H:%M:%S"
NORMAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATE_KEYS = frozenset(
    {
        "PatientBirthDate",
        "StudyDate",
        "SeriesDate",
        "InstanceCreationDate",
        "AcquisitionDate",
        "ContentDate",
    }
)
_TIME_KEYS = frozenset(
    {"StudyTime", "SeriesTime", "InstanceCreationTime", "AcquisitionTime", "ContentTime"}
)


class SeriesPattern(Enum):
    """How the frames of a series are stored."""

    EMPTY_FRAME = auto()
    SINGLE_FRAME = auto()
    MULTI_FRAME = auto()


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _to_float(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _reformat(value: str, digits: int, source: str, target: str) -> str | None:
    """Reformat ``value`` if it is exactly ``digits`` digits in ``source`` form."""
    if not re.fullmatch(rf"\d{{{digits}}}", value):
        return None
    try:
        return datetime.strptime(value, source).strftime(target)
    except ValueError:
        return None


class SeriesInstance:
    """Images of one series keyed by instance number, with a shared window.

    Frames can be browsed in the acquisition plane (XY) and, through the
    stacked volume, in the two orthogonal planes (XZ and YZ).
    """

    def __init__(self, series_uid: str):
        self.series_uid = series_uid
        self._images: dict[int, ImageInstance] = {}
        self._cur = {view: 0 for view in ViewType}
        self.img_width = 0
        self.img_height = 0
        self._win_center = 0.0
        self._win_width = 0.0
        self._def_center = 0.0
        self._def_width = 0.0
        self._polarity = Polarity.NORMAL
        self.pattern = SeriesPattern.SINGLE_FRAME
        self._volume: tuple | None = None

    # -- membership -------------------------------------------------------

    def _ordered(self) -> list[ImageInstance]:
        return list(self._images.values())

    def insert_image(self, image: ImageInstance | None) -> bool:
        """Add an image of this series; False if unusable or a duplicate."""
        if image is None or not image.is_normal() or image.series_uid != self.series_uid:
            return False
        if not self._images:
            self._win_center, self._win_width = image.window()
            self._def_center, self._def_width = image.window()
            self.img_width, self.img_height = image.image_size()
            self._polarity = image.polarity
            self._cur = {view: 0 for view in ViewType}
        number = _to_int(image.tag_value("InstanceNumber"))
        if number in self._images:
            return False
        self._images[number] = image
        self._images = dict(sorted(self._images.items()))
        if len(self._images) == 1:
            self.pattern = SeriesPattern.SINGLE_FRAME
        else:
            self.pattern = SeriesPattern.MULTI_FRAME
        return True

    def remove_image(self, image_file: str) -> bool:
        """Remove an image; a single-frame series removes instance number 0."""
        if self.pattern is SeriesPattern.SINGLE_FRAME:
            return self._images.pop(0, None) is not None
        if self.pattern is SeriesPattern.MULTI_FRAME:
            for number, image in list(self._images.items()):
                if image.image_file == image_file:
                    del self._images[number]
                    return True
        return False

    def is_empty(self) -> bool:
        return not self._images

    def has_image(self, image_file: str) -> bool:
        return any(image.image_file == image_file for image in self._images.values())

    def images(self) -> dict[int, ImageInstance]:
        """The images keyed by instance number, in ascending order."""
        return dict(self._images)

    def _active_image(self) -> ImageInstance | None:
        if not self._images:
            return None
        if self.pattern is SeriesPattern.SINGLE_FRAME:
            return self._ordered()[0]
        if self.pattern is SeriesPattern.MULTI_FRAME:
            return self._ordered()[self._cur[ViewType.XY_PLANE]]
        return None

    def current_image(self, view_type: ViewType) -> ImageInstance | None:
        """The image shown in the XY plane; None for other planes."""
        if view_type is not ViewType.XY_PLANE:
            return None
        return self._active_image()

    # -- tags -------------------------------------------------------------

    def tag_value(self, key: str, view_type: ViewType = ViewType.XY_PLANE) -> str:
        """A tag of the current image, with dates and times made readable."""
        if key == "NumberOfFrames":
            return str(self.frame_count(view_type))
        if key == "InstanceNumber":
            return str(self._cur[view_type] + 1)
        image = self.current_image(ViewType.XY_PLANE)
        if image is None:
            return ""
        value = image.tag_value(key)
        if key in _DATE_KEYS:
            formatted = _reformat(value, 8, DICOM_DATE_FORMAT, NORMAL_DATE_FORMAT)
        elif key in _TIME_KEYS:
            formatted = _reformat(value[:6], 6, DICOM_TIME_FORMAT, NORMAL_TIME_FORMAT)
        elif key == "AcquisitionDateTime":
            formatted = _reformat(
                value[:14], 14, DICOM_DATETIME_FORMAT, NORMAL_DATETIME_FORMAT
            )
        elif key == "KVP":
            formatted = f"{_to_float(value):g}"
        else:
            formatted = None
        return value if formatted is None else formatted

    def image_file(self) -> str:
        """The file of the current image."""
        if not self._images:
            raise ValueError("series is empty")
        ordered = self._ordered()
        if self.pattern is SeriesPattern.SINGLE_FRAME:
            return ordered[0].image_file
        if self.pattern is SeriesPattern.MULTI_FRAME:
            cur = self._cur[ViewType.XY_PLANE]
            return ordered[cur].image_file if cur < len(ordered) else ordered[0].image_file
        return ""

    # -- frames -----------------------------------------------------------

    def frame_count(self, view_type: ViewType = ViewType.XY_PLANE) -> int:
        """Number of frames that can be browsed in a plane."""
        if view_type is ViewType.XZ_PLANE:
            return int(self.img_height)
        if view_type is ViewType.YZ_PLANE:
            return int(self.img_width)
        if self.pattern is SeriesPattern.SINGLE_FRAME:
            if not self._images:
                raise ValueError("series is empty")
            return self._ordered()[0].frame_count()
        if self.pattern is SeriesPattern.MULTI_FRAME:
            return len(self._images)
        return 0

    def next_frame(self, view_type: ViewType) -> None:
        """Step forward, wrapping to the first frame."""
        cur = self._cur[view_type] + 1
        if cur >= self.frame_count(view_type):
            cur = 0
        self._cur[view_type] = cur

    def prev_frame(self, view_type: ViewType) -> None:
        """Step back, wrapping to the last frame."""
        if not self._images:
            return
        cur = self._cur[view_type] - 1
        if cur < 0:
            cur = self.frame_count(view_type) - 1
        self._cur[view_type] = cur

    def goto_frame(self, index: int, view_type: ViewType) -> None:
        """Jump to a frame, clamped to the valid range."""
        count = self.frame_count(view_type)
        if index < 0:
            index = 0
        elif index >= count:
            index = count - 1
        self._cur[view_type] = index

    def current_index(self, view_type: ViewType) -> int:
        return self._cur[view_type]

    # -- volume -----------------------------------------------------------

    def volume(self) -> tuple[tuple[np.ndarray, ...], int, int, int] | None:
        """The first frame of every image as (slices, width, height, count)."""
        if not self._images:
            return None
        if self._volume is None or len(self._images) != len(self._volume):
            self._volume = tuple(image.frame(0) for image in self._ordered())
        return (self._volume, self.img_width, self.img_height, len(self._volume))

    def clear_volume(self) -> None:
        """Drop the cached volume."""
        self._volume = None

    # -- rendering --------------------------------------------------------

    def render(self, view_type: ViewType) -> np.ndarray | None:
        """Render the current frame of a plane to 8-bit gray."""
        if not self._images:
            return None
        if view_type is ViewType.XY_PLANE:
            image = self._active_image()
            if image is None:
                return None
            if self._win_width < 1:
                self._win_width = 1.0
            image.set_window(self._win_center, self._win_width)
            image.set_polarity(self._polarity)
            return image.render(self._cur[ViewType.XY_PLANE])
        return self._render_plane(view_type)

    def _render_plane(self, view_type: ViewType) -> np.ndarray | None:
        vol = self.volume()
        if vol is None:
            return None
        slices, width, height, count = vol
        center, win = self._win_center, self._win_width
        factor = 255 / win if win else math.inf
        lower = center - win / 2
        cur = self._cur[view_type]
        cols = np.arange(width)
        if view_type is ViewType.XZ_PLANE:
            indices = cols * width + cur
        else:
            indices = cur * height + cols
        out = np.zeros((count, width), dtype=np.uint8)
        for row, plane in enumerate(slices):
            values = np.asarray(plane).ravel().astype(np.int16)[indices].astype(np.float64)
            with np.errstate(invalid="ignore", over="ignore"):
                scaled = np.floor((values - lower) * factor)
            out[row] = np.select(
                [values > lower + win, values > lower], [255.0, scaled], 0.0
            ).astype(np.uint8)
        return out

    # -- window and polarity ----------------------------------------------

    def set_window(self, center: float, width: float) -> None:
        self._win_center = float(center)
        self._win_width = float(width)

    def window(self) -> tuple[float, float]:
        """The series window as (center, width)."""
        return (self._win_center, self._win_width)

    def set_window_delta(self, d_center: float, d_width: float) -> None:
        self._win_center += d_center
        self._win_width += d_width

    def set_roi_window(self, rect: Rect) -> None:
        """Take the window from a region of the current image."""
        image = self._active_image()
        if image is None:
            return
        image.set_roi_window(rect)
        self._win_center, self._win_width = image.window()

    def set_default_window(self) -> None:
        self._win_center = self._def_center
        self._win_width = self._def_width

    def set_full_dynamic(self) -> None:
        """Take the window from the full range of the current image."""
        image = self._active_image()
        if image is None:
            return
        image.set_full_dynamic()
        self._win_center, self._win_width = image.window()

    def set_polarity(self, polarity: Polarity) -> None:
        image = self._active_image()
        if image is None:
            return
        image.set_polarity(polarity)
        self._polarity = image.polarity

    @property
    def polarity(self) -> Polarity:
        return self._polarity

    # -- measurement ------------------------------------------------------

    def pixel_value(self, x: int, y: int, view_type: ViewType):
        """The value under (x, y) in a plane; 0 when there is none."""
        if not self._images:
            return 0
        if view_type is ViewType.XY_PLANE:
            image = self._active_image()
            return 0 if image is None else image.pixel_value(x, y)
        ordered = self._ordered()
        if not 0 <= y < len(ordered):
            return 0
        if view_type is ViewType.XZ_PLANE:
            return ordered[y].pixel_value(x, self._cur[ViewType.XZ_PLANE])
        return ordered[y].pixel_value(self._cur[ViewType.YZ_PLANE], x)

    def pixel_spacing(self, view_type: ViewType) -> tuple[float, float] | None:
        """Pixel spacing in a plane; None when it is unknown."""
        if not self._images:
            return None
        first = self._ordered()[0]
        spacing = first.pixel_spacing()
        if spacing is None:
            return None
        sx, sy = spacing
        sz = _to_float(first.tag_value("SliceThickness"))
        if view_type is ViewType.XY_PLANE:
            return (sx, sy)
        if sz <= 0:
            return None
        if view_type is ViewType.XZ_PLANE:
            return (sx, sz)
        return (sy, sz)