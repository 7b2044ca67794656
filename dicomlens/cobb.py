"""Cobb angle measurement between two drawn lines."""

from __future__ import annotations

import math

from .base import PI, CrossItem, PainterPath, PathItem, Point, Stage


def _line_angle(v1: Point, v2: Point) -> float:
    """Angle in degrees between two direction vectors, NaN if one is null."""
    modulus = math.sqrt((v1.x * v1.x + v1.y * v1.y) * (v2.x * v2.x + v2.y * v2.y))
    if modulus == 0:
        return math.nan
    cosine = max(-1.0, min(1.0, v1.dot(v2) / modulus))
    return math.acos(cosine) * 180 / PI


class CobbAngleItem(PathItem):
    """The angle between two lines, shown as the acute one.

    A helper line parallel to the second line is drawn from the end of the
    first line that forms the reported angle.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.line1_vertex1 = CrossItem(self)
        self.line1_vertex2 = CrossItem(self)
        self.aux_vertex = CrossItem(self)
        self.line2_vertex1 = CrossItem(self)
        self.line2_vertex2 = CrossItem(self)
        self._prev_l1v1 = Point()
        self._prev_l1v2 = Point()
        self._prev_l2v1 = Point()
        self._prev_l2v2 = Point()
        self.angle_cache = 0.0

    def set_active_point(self, point: Point) -> None:
        if self.stage is Stage.FIRST:
            self.line1_vertex2.pos = point
        elif self.stage is Stage.SECOND:
            self.line2_vertex1.pos = point
            self.line2_vertex2.pos = point
        elif self.stage is Stage.THIRD:
            self.line2_vertex2.pos = point

    def next_stage(self) -> None:
        if self.stage is Stage.FIRST:
            if self.line1_vertex2.pos != self.line1_vertex1.pos:
                self.stage = Stage.SECOND
        elif self.stage is Stage.SECOND:
            self.stage = Stage.THIRD
        elif self.stage is Stage.THIRD:
            if self.line2_vertex2.pos != self.line2_vertex1.pos:
                self.stage = Stage.FINAL

    @property
    def displayed_angle(self) -> float:
        """The acute angle between the two lines, in degrees."""
        if self.angle_cache > 90.0:
            return 180.0 - self.angle_cache
        return self.angle_cache

    def _current(self) -> tuple[Point, Point, Point, Point]:
        return (
            self.line1_vertex1.pos,
            self.line1_vertex2.pos,
            self.line2_vertex1.pos,
            self.line2_vertex2.pos,
        )

    def _is_modified(self) -> bool:
        current = self._current()
        previous = (self._prev_l1v1, self._prev_l1v2, self._prev_l2v1, self._prev_l2v2)
        if self.stage is not Stage.FINAL or current != previous:
            self._prev_l1v1, self._prev_l1v2, self._prev_l2v1, self._prev_l2v2 = current
            return True
        return False

    def _second_line_drawn(self) -> bool:
        return self.line2_vertex1.pos != self.line2_vertex2.pos

    def _update_text_item(self) -> None:
        if not self._second_line_drawn():
            return
        self.text_item.text = f"{self.displayed_angle:.2f} D"

    def _text_item_pos(self) -> Point:
        if not self._second_line_drawn():
            return Point()
        acute = self.angle_cache <= 90.0
        anchor = self.line1_vertex1 if acute else self.line1_vertex2
        other = self.line1_vertex2 if acute else self.line1_vertex1
        v1 = self.aux_vertex.pos - anchor.pos
        v2 = other.pos - anchor.pos
        cross_width = anchor.cross_size()[0]
        text_width, text_height = self.text_item.bounding_size()
        if (v1.x < 0 or v1.y < 0) and (v2.x < 0 or v2.y < 0):
            return Point(anchor.x + cross_width, anchor.y)
        if (v1.x < 0 or v1.y > 0) and (v2.x < 0 or v2.y > 0):
            return Point(anchor.x + cross_width, anchor.y - text_height)
        return Point(anchor.x - (cross_width + text_width), anchor.y)

    def _compute_angle(self) -> None:
        v1 = self.line1_vertex2.pos - self.line1_vertex1.pos
        v2 = self.line2_vertex2.pos - self.line2_vertex1.pos
        self.angle_cache = _line_angle(v1, v2)

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        path.move_to(self.line1_vertex1.pos)
        path.line_to(self.line1_vertex2.pos)
        path.move_to(self.line2_vertex1.pos)
        path.line_to(self.line2_vertex2.pos)
        if self._second_line_drawn():
            self._compute_angle()
            direction = self.line2_vertex2.pos - self.line2_vertex1.pos
            anchor = self.line1_vertex1 if self.angle_cache <= 90.0 else self.line1_vertex2
            self.aux_vertex.pos = anchor.pos + direction
            path.move_to(anchor.pos)
            path.line_to(self.aux_vertex.pos)
        return path