"""Rectangle and ellipse regions of interest with pixel statistics."""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass

import numpy as np

from .base import PI, CrossItem, PainterPath, PathItem, Point, Rect, Stage

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _round(value: float) -> int:
    """Round half away from zero, as pixel coordinates are rounded."""
    if value >= 0:
        return math.floor(value + 0.5)
    return math.ceil(value - 0.5)


@dataclass(frozen=True)
class RoiStats:
    """Statistics of the pixel values inside a region."""

    count: int
    mean: float
    sd: float
    maximum: int
    minimum: int

    def format(self, area: float, unit: str) -> str:
        """Render the statistics as the multi-line label text."""
        return (
            f"Mean={int(self.mean)} SD={self.sd:.2f}\n"
            f"Max={self.maximum} Min={self.minimum}\n"
            f"Area={area:.2f}{unit}^2 ({self.count} px)"
        )


def compute_stats(values) -> RoiStats:
    """Count, mean, root of summed squared deviations, max and min of values.

    An empty input gives a count of zero, a mean of zero and the extreme
    64-bit integers as maximum and minimum.
    """
    data = np.asarray(values, dtype=np.int64).ravel()
    count = int(data.size)
    if count == 0:
        return RoiStats(0, 0.0, 0.0, INT64_MIN, INT64_MAX)
    total = int(data.sum())
    mean = total / count
    deviation = float(((data - mean) ** 2).sum())
    return RoiStats(
        count=count,
        mean=mean,
        sd=math.sqrt(deviation),
        maximum=int(data.max()),
        minimum=int(data.min()),
    )


class _RoiItem(PathItem):
    """A region spanned by a top-left and a bottom-right cross."""

    AREA_FACTOR = 0.01
    AREA_TEXT = "{:.2f}cm^2"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.tl = CrossItem(self)
        self.br = CrossItem(self)
        self._prev_tl = Point()
        self._prev_br = Point()
        self._prev_this = Point()
        self.area = 0.0
        self.updated = False

    def _move_corner(self, point: Point) -> None:
        self.br.pos = point

    def _finish(self) -> None:
        self.stage = Stage.FINAL

    @abstractmethod
    def _mask(self, xs: np.ndarray, ys: np.ndarray, top_left: Point, bottom_right: Point):
        """Boolean mask selecting the region's pixels on the given grid."""

    def _recalculate(self, pixels) -> RoiStats | None:
        if pixels is None:
            return None
        data = np.asarray(pixels)
        height, width = data.shape[:2]
        half_tl = Point(self.tl.cross_size()[0] / 2, self.tl.cross_size()[1] / 2)
        half_br = Point(self.br.cross_size()[0] / 2, self.br.cross_size()[1] / 2)
        top_left = self.map_to_parent(self.tl.pos + half_tl)
        bottom_right = self.map_to_parent(self.br.pos + half_br)
        x_start = max(0, _round(top_left.x))
        y_start = max(0, _round(top_left.y))
        x_end = max(x_start, min(width, _round(bottom_right.x)))
        y_end = max(y_start, min(height, _round(bottom_right.y)))
        region = data[y_start:y_end, x_start:x_end]
        ys = np.arange(y_start, y_end, dtype=float)[:, None]
        xs = np.arange(x_start, x_end, dtype=float)[None, :]
        mask = self._mask(xs, ys, top_left, bottom_right)
        stats = compute_stats(region[np.broadcast_to(mask, region.shape)])
        self.updated = True
        self.text_item.text = stats.format(self.area, "cm")
        return stats

    def _is_modified(self) -> bool:
        if self.tl.x >= self.br.x:
            self.tl.pos = Point(self._prev_tl.x, self.tl.y)
            self.br.pos = Point(self._prev_br.x, self.br.y)
        if self.tl.y >= self.br.y:
            self.tl.pos = Point(self.tl.x, self._prev_tl.y)
            self.br.pos = Point(self.br.x, self._prev_br.y)
        if (
            self.tl.pos != self._prev_tl
            or self.br.pos != self._prev_br
            or self.pos != self._prev_this
        ):
            self._prev_tl = self.tl.pos
            self._prev_br = self.br.pos
            self._prev_this = self.pos
            self.updated = False
            return True
        return False

    def _area_scale(self) -> float:
        return self.AREA_FACTOR

    def _update_text_item(self) -> None:
        self.text_item.text = ""
        if self.x_spacing > 0 and self.y_spacing > 0:
            p1 = self.map_to_parent(self.tl.pos)
            p2 = self.map_to_parent(self.br.pos)
            self.area = (
                (p2.x - p1.x) * (p2.y - p1.y) * self.x_spacing * self.y_spacing * self._area_scale()
            )
            if not self.updated:
                self.text_item.text = self.AREA_TEXT.format(self.area)

    def _text_item_pos(self) -> Point:
        return Point(
            self.br.x + self.br.cross_size()[0],
            self.tl.y + (self.br.y - self.tl.y) / 2,
        )


class RectItem(_RoiItem):
    """A rectangular region of interest."""

    def set_active_point(self, point: Point) -> None:
        """Move the bottom-right corner to the point."""
        self._move_corner(point)

    def next_stage(self) -> None:
        """A rectangle is complete after one drag."""
        self._finish()

    def recal_pix_info(self, pixels) -> RoiStats | None:
        """Compute statistics of the rectangle over a 2-D pixel array.

        Returns None and leaves the item untouched when no pixels are given.
        """
        return self._recalculate(pixels)

    def pix_info_updated(self) -> bool:
        """Whether the statistics are current for the present geometry."""
        return self.updated

    def _mask(self, xs, ys, top_left, bottom_right):
        return np.ones((ys.shape[0], xs.shape[1]), dtype=bool)

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        path.add_rect(self.tl.x, self.tl.y, self.br.x - self.tl.x, self.br.y - self.tl.y)
        return path


class EllipseItem(_RoiItem):
    """An elliptical region of interest inscribed in its two crosses."""

    AREA_TEXT = "{:.2f} cm^2"

    def set_active_point(self, point: Point) -> None:
        """Move the bottom-right corner of the bounding box to the point."""
        self._move_corner(point)

    def next_stage(self) -> None:
        """An ellipse is complete after one drag."""
        self._finish()

    def recal_pix_info(self, pixels) -> RoiStats | None:
        """Compute statistics of the ellipse over a 2-D pixel array.

        Returns None and leaves the item untouched when no pixels are given.
        """
        return self._recalculate(pixels)

    def pix_info_updated(self) -> bool:
        """Whether the statistics are current for the present geometry."""
        return self.updated

    def _area_scale(self) -> float:
        # Semi-axes are half the extents: 0.01 / 4.
        return PI * 0.0025

    def _mask(self, xs, ys, top_left, bottom_right):
        cx = (top_left.x + bottom_right.x) / 2
        cy = (top_left.y + bottom_right.y) / 2
        aa = (cx - top_left.x) ** 2
        bb = (cy - top_left.y) ** 2
        return aa * (xs - cx) ** 2 + bb * (ys - cy) ** 2 < aa * bb

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        path.add_ellipse(Rect.from_points(self.tl.pos, self.br.pos))
        return path