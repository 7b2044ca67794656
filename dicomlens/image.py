"""A single DICOM image: its tags, pixel data, window and rendering."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .base import Rect

_TAG_ENCODING = "gbk"


class Polarity(Enum):
    """Output polarity of a rendered image."""

    NORMAL = "normal"
    REVERSE = "reverse"


class Photometric(Enum):
    """Photometric interpretation of grayscale pixel data."""

    MONOCHROME1 = "MONOCHROME1"
    MONOCHROME2 = "MONOCHROME2"


def _values(raw) -> list:
    """Split a tag value into its individual values."""
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode(_TAG_ENCODING, errors="replace")
    if isinstance(raw, str):
        return raw.split("\\")
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return [raw]


def _min_max_window(data: np.ndarray) -> tuple[float, float]:
    """Window (center, width) spanning the full range of ``data``."""
    low = float(data.min())
    high = float(data.max())
    return ((low + high + 1) / 2, high - low + 1)


def _apply_window(data: np.ndarray, center: float, width: float) -> np.ndarray:
    """Map values linearly through a VOI window onto 0..255."""
    if width <= 1:
        return np.where(data < center - 0.5, 0.0, 255.0)
    scaled = ((data - (center - 0.5)) / (width - 1) + 0.5) * 255.0
    return np.clip(scaled, 0.0, 255.0)


class ImageInstance:
    """One image made of pixel frames and a dictionary of tags.

    ``pixels`` is a 2-D array (one frame) or a 3-D array of frames. Tags are
    keyed by DICOM keyword (``"StudyInstanceUID"``, ``"PixelSpacing"``...);
    a value is a string with backslash-separated values, a sequence, a
    number, or bytes in the GBK encoding. Rescale slope and intercept are
    applied to the pixels. Without usable pixel data the image is not normal
    and most queries report nothing.
    """

    def __init__(
        self,
        pixels=None,
        tags=None,
        image_file: str = "",
        photometric: Photometric = Photometric.MONOCHROME2,
    ):
        tags = dict(tags or {})
        self._setup(self._load_frames(pixels, tags), tags, image_file, photometric)

    @classmethod
    def _from_frames(cls, frames: np.ndarray, tags: dict, photometric: Photometric):
        image = cls.__new__(cls)
        frames = np.array(frames)
        frames.flags.writeable = False
        image._setup(frames, dict(tags), "", photometric)
        return image

    def _setup(self, frames, tags: dict, image_file: str, photometric) -> None:
        self.tags = tags
        self.image_file = str(image_file)
        self.photometric = Photometric(photometric)
        self._frames = frames
        self._polarity = Polarity.NORMAL
        self._applied_window: tuple[float, float] | None = None
        self.study_uid = self.tag_value("StudyInstanceUID")
        self.series_uid = self.tag_value("SeriesInstanceUID")
        self.image_uid = self.tag_value("SOPInstanceUID")
        self.class_uid = self.tag_value("SOPClassUID")
        self._pixel_x = 0.0
        self._pixel_y = 0.0
        self._read_spacing("PixelSpacing")
        if self._pixel_x < 0.0001 and self._pixel_y < 0.0001:
            self._read_spacing("ImagerPixelSpacing")
        width = self._float_tag("WindowWidth")
        center = self._float_tag("WindowCenter")
        self._win_width = width if width is not None else 0.0
        self._win_center = center if center is not None else 0.0
        if self.is_normal() and self._win_width < 1:
            self._applied_window = _min_max_window(self._frames[0])
            self._sync_window()
        self._def_center = self._win_center
        self._def_width = self._win_width

    @staticmethod
    def _float_from(tags: dict, key: str, index: int = 0) -> float | None:
        values = _values(tags.get(key))
        if index >= len(values):
            return None
        try:
            return float(str(values[index]).strip())
        except ValueError:
            return None

    def _float_tag(self, key: str, index: int = 0) -> float | None:
        return self._float_from(self.tags, key, index)

    def _read_spacing(self, key: str) -> None:
        x = self._float_tag(key, 0)
        y = self._float_tag(key, 1)
        if x is not None:
            self._pixel_x = x
        if y is not None:
            self._pixel_y = y

    @classmethod
    def _load_frames(cls, pixels, tags: dict) -> np.ndarray | None:
        if pixels is None:
            return None
        data = np.asarray(pixels)
        if data.ndim == 2:
            data = data[np.newaxis]
        if (
            data.ndim != 3
            or data.size == 0
            or data.dtype == np.bool_
            or not np.issubdtype(data.dtype, np.number)
        ):
            return None
        slope = cls._float_from(tags, "RescaleSlope")
        intercept = cls._float_from(tags, "RescaleIntercept")
        slope = 1.0 if slope is None else slope
        intercept = 0.0 if intercept is None else intercept
        if (slope, intercept) != (1.0, 0.0):
            integral = (
                np.issubdtype(data.dtype, np.integer)
                and slope.is_integer()
                and intercept.is_integer()
            )
            data = data.astype(np.float64) * slope + intercept
            if integral:
                data = data.astype(np.int64)
        else:
            data = np.array(data)
        data.flags.writeable = False
        return data

    def _sync_window(self) -> None:
        if self._applied_window is not None:
            self._win_center, self._win_width = self._applied_window

    def is_normal(self) -> bool:
        """True when the image holds usable pixel data."""
        return self._frames is not None

    def set_window(self, center: float, width: float) -> None:
        self._win_center = float(center)
        self._win_width = float(width)

    def window(self) -> tuple[float, float]:
        """The current window as (center, width)."""
        return (self._win_center, self._win_width)

    def set_window_delta(self, d_center: float, d_width: float) -> None:
        self._win_center += d_center
        self._win_width += d_width

    def set_roi_window(self, rect: Rect) -> None:
        """Set the window to the value range inside ``rect`` of the first frame.

        A region outside the image leaves the last applied window in place.
        """
        if not self.is_normal():
            return
        frame = self._frames[0]
        rows, cols = frame.shape
        left = max(0, int(rect.left))
        top = max(0, int(rect.top))
        width = max(0, int(rect.width))
        height = max(0, int(rect.height))
        if left < cols and top < rows and width > 0 and height > 0:
            region = frame[top : top + height, left : left + width]
            self._applied_window = _min_max_window(region)
        self._sync_window()

    def set_default_window(self) -> None:
        self._win_center = self._def_center
        self._win_width = self._def_width

    def set_full_dynamic(self) -> None:
        """Set the window to the full value range of the pixel data."""
        if not self.is_normal():
            return
        self._applied_window = _min_max_window(self._frames)
        self._sync_window()

    def set_polarity(self, polarity: Polarity) -> None:
        if self.is_normal():
            self._polarity = Polarity(polarity)

    @property
    def polarity(self) -> Polarity:
        return self._polarity if self.is_normal() else Polarity.NORMAL

    def tag_value(self, key: str) -> str:
        """The first value of a tag as text, or an empty string."""
        values = _values(self.tags.get(key))
        return str(values[0]) if values else ""

    def pixel_value(self, x: int, y: int):
        """The value of the first frame at column x, row y; 0 outside."""
        if not self.is_normal():
            return 0
        rows, cols = self._frames[0].shape
        if 0 <= x < cols and 0 <= y < rows:
            return self._frames[0][y, x].item()
        return 0

    def pixel_spacing(self) -> tuple[float, float] | None:
        """Pixel spacing as (x, y), or None when the image is not normal."""
        if not self.is_normal():
            return None
        return (self._pixel_x, self._pixel_y)

    def image_size(self) -> tuple[int, int] | None:
        """Size as (width, height), or None when the image is not normal."""
        if not self.is_normal():
            return None
        rows, cols = self._frames.shape[1:]
        return (int(cols), int(rows))

    def frame_count(self) -> int:
        if not self.is_normal():
            raise ValueError("image has no pixel data")
        return int(self._frames.shape[0])

    def frame(self, index: int) -> np.ndarray:
        """The read-only pixel values of one frame, rows first."""
        if not self.is_normal():
            raise ValueError("image has no pixel data")
        if not 0 <= index < self._frames.shape[0]:
            raise IndexError(f"frame {index} out of range")
        return self._frames[index]

    def render(self, frame: int = 0) -> np.ndarray | None:
        """Render a frame through the current window to 8-bit gray.

        A single-frame image ignores ``frame``. Returns None when the image
        is not normal or the frame does not exist.
        """
        if not self.is_normal():
            return None
        if self._win_width < 1:
            self._win_width = 1.0
        self._applied_window = (self._win_center, self._win_width)
        index = frame if self._frames.shape[0] > 1 else 0
        if not 0 <= index < self._frames.shape[0]:
            return None
        data = self._frames[index].astype(np.float64)
        out = _apply_window(data, self._win_center, self._win_width)
        invert = (self._polarity is Polarity.REVERSE) != (
            self.photometric is Photometric.MONOCHROME1
        )
        if invert:
            out = 255.0 - out
        return np.rint(out).astype(np.uint8)

    def clipped_image(
        self,
        rect: Rect,
        angle: int = 0,
        hflip: bool = False,
        vflip: bool = False,
        inverted: bool = False,
    ) -> ImageInstance | None:
        """A new image cut out of this one, then rotated, flipped and inverted.

        Parts of ``rect`` outside the image are filled with the darkest
        value. A width or height of zero reaches to the image border.
        Rotation is clockwise in multiples of 90 degrees; any other angle
        gives None, as does an image that is not normal.
        """
        if not self.is_normal():
            return None
        frames = self._frames
        count, rows, cols = frames.shape
        fill = frames.max() if self.photometric is Photometric.MONOCHROME1 else frames.min()
        left, top = int(rect.left), int(rect.top)
        width = int(rect.width) if int(rect.width) > 0 else cols - left
        height = int(rect.height) if int(rect.height) > 0 else rows - top
        if width <= 0 or height <= 0:
            return None
        clipped = np.full((count, height, width), fill, dtype=frames.dtype)
        x0, x1 = max(left, 0), min(left + width, cols)
        y0, y1 = max(top, 0), min(top + height, rows)
        if x0 < x1 and y0 < y1:
            clipped[:, y0 - top : y1 - top, x0 - left : x1 - left] = frames[:, y0:y1, x0:x1]
        if angle:
            turn = angle % 360
            if turn % 90:
                return None
            clipped = np.rot90(clipped, k=-(turn // 90), axes=(1, 2))
        if hflip:
            clipped = clipped[:, :, ::-1]
        if vflip:
            clipped = clipped[:, ::-1, :]
        image = self._from_frames(clipped, self.tags, self.photometric)
        if inverted:
            image.set_polarity(Polarity.REVERSE)
        return image