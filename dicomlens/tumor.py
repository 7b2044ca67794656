"""Outline of a segmented region with pixel statistics over a volume."""

from __future__ import annotations

import math

import numpy as np

from .base import PainterPath, PathItem, Point, ViewType
from .roi import RoiStats, compute_stats

_SHORT_MIN = -32768
_SHORT_MAX = 32767


class TumorItem(PathItem):
    """A region described by horizontal runs from start to end points."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.movable = False
        self.selectable = False
        self.starts: list[Point] = []
        self.ends: list[Point] = []
        self.modified = False
        self._outline = PainterPath()

    def set_active_point(self, point: Point) -> None:
        """The outline is set as a whole; there is no control point."""

    def set_points(self, starts, ends) -> None:
        """Replace the runs; start i and end i bound one row segment."""
        self.starts = list(starts)
        self.ends = list(ends)
        self.modified = True

    def recal_pix_info(self, volume, width, height, slice_count, index, view_type):
        """Compute statistics of the runs in one plane of the volume.

        ``volume`` holds one flat (or 2-D) array of ``width`` columns per
        slice. Returns the statistics, or None (clearing the label) when no
        volume or no matching runs are given.
        """
        if volume is None or not self.starts or len(self.starts) != len(self.ends):
            self.text_item.text = ""
            return None
        cache: dict[int, np.ndarray] = {}

        def plane(k: int) -> np.ndarray:
            if k not in cache:
                cache[k] = np.asarray(volume[k]).ravel().astype(np.int16)
            return cache[k]

        values = []
        for start, end in zip(self.starts, self.ends):
            if start.y != end.y:
                continue
            y = int(start.y)
            for j in range(int(start.x), int(end.x) + 1):
                if view_type is ViewType.XY_PLANE:
                    values.append(plane(index)[y * width + j])
                elif view_type is ViewType.XZ_PLANE:
                    values.append(plane(y)[index * width + j])
                elif view_type is ViewType.YZ_PLANE:
                    values.append(plane(y)[j * width + index])
                else:
                    raise ValueError(f"unknown view type: {view_type!r}")
        if values:
            stats = compute_stats(np.array(values, dtype=np.int16))
        else:
            stats = RoiStats(0, 0.0, 0.0, _SHORT_MIN, _SHORT_MAX)
        area = stats.count * self.x_spacing * self.y_spacing
        self.text_item.text = stats.format(area, "mm")
        return stats

    def _is_modified(self) -> bool:
        return self.modified

    def _text_item_pos(self) -> Point:
        if self.ends:
            last = self.ends[-1]
            return Point(last.x + 1, last.y + 1)
        return Point()

    def _item_path(self) -> PainterPath:
        if self.modified and self.starts:
            path = PainterPath()
            path.move_to(self.starts[0] + Point(-1, -1))
            for p in self.starts:
                path.line_to(p + Point(-1, 0))
            path.line_to(self.starts[-1] + Point(-1, 1))
            path.line_to(self.ends[-1] + Point(1, 1))
            path.move_to(self.starts[0] + Point(-1, -1))
            path.line_to(self.ends[0] + Point(1, -1))
            for p in self.ends:
                path.line_to(p + Point(1, 0))
            path.line_to(self.ends[-1] + Point(1, 1))
            self._outline = path
            self.modified = False
        return self._outline


# Keep math imported for callers relying on NaN checks of statistics.
_ = math