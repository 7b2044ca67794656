"""Line, angle and arrow measurement items."""

from __future__ import annotations

import math

from .base import PI, CrossItem, PainterPath, PathItem, Point, Stage

ARROW_SIZE = 12.0


def _sqrt_or_zero(value: float) -> float:
    return math.sqrt(value) if value >= 0 else 0.0


def _angle_degrees(v1: Point, v2: Point) -> float:
    denom = math.sqrt((v1.x * v1.x + v1.y * v1.y) * (v2.x * v2.x + v2.y * v2.y))
    if denom == 0:
        return math.nan
    cosine = v1.dot(v2) / denom
    if not -1.0 <= cosine <= 1.0:
        return math.nan
    return math.acos(cosine) * 180 / PI


class LineItem(PathItem):
    """A distance measurement between two crosses."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.cross1 = CrossItem(self)
        self.cross2 = CrossItem(self)
        self._prev1 = Point()
        self._prev2 = Point()

    def set_active_point(self, point: Point) -> None:
        self.cross2.pos = point

    def next_stage(self) -> None:
        self.stage = Stage.FINAL

    def _is_modified(self) -> bool:
        if self.cross1.pos != self._prev1 or self.cross2.pos != self._prev2:
            self._prev1 = self.cross1.pos
            self._prev2 = self.cross2.pos
            return True
        return False

    def _update_text_item(self) -> None:
        self.text_item.text = ""
        if self.x_spacing < 0 or self.y_spacing < 0:
            return
        p1 = self.map_to_parent(self.cross1.pos)
        p2 = self.map_to_parent(self.cross2.pos)
        dx = (p1.x - p2.x) * self.x_spacing
        dy = (p1.y - p2.y) * self.y_spacing
        self.text_item.text = f"{math.sqrt(dx * dx + dy * dy):.2f} mm"

    def _text_item_pos(self) -> Point:
        cross = self.cross1 if self.cross1.x > self.cross2.x else self.cross2
        return Point(cross.x + cross.cross_size()[0], cross.y)

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        path.move_to(self.cross1.pos)
        path.line_to(self.cross2.pos)
        return path


class AngleItem(PathItem):
    """An angle measured at a vertex between two arms."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.point_angle = CrossItem(self)
        self.point1 = CrossItem(self)
        self.point2 = CrossItem(self)
        self._prev_angle = Point()
        self._prev1 = Point()
        self._prev2 = Point()

    def set_active_point(self, point: Point) -> None:
        if self.stage is Stage.FIRST:
            self.point1.pos = point
        elif self.stage is Stage.SECOND:
            self.point2.pos = point

    def next_stage(self) -> None:
        vertex = self.point_angle.pos
        if self.stage is Stage.FIRST:
            if vertex != self.point1.pos:
                self.stage = Stage.SECOND
        elif self.stage is Stage.SECOND:
            if self.point2.pos != vertex and self.point2.pos != self.point1.pos:
                self.stage = Stage.FINAL

    def _is_modified(self) -> bool:
        current = (self.point_angle.pos, self.point1.pos, self.point2.pos)
        if current != (self._prev_angle, self._prev1, self._prev2):
            self._prev_angle, self._prev1, self._prev2 = current
            return True
        return False

    def _not_measurable(self) -> bool:
        return self.stage is Stage.FIRST or self.point_angle.pos == self.point2.pos

    def _update_text_item(self) -> None:
        if self._not_measurable():
            return
        v1 = self.point1.pos - self.point_angle.pos
        v2 = self.point2.pos - self.point_angle.pos
        self.text_item.text = f"{_angle_degrees(v1, v2):.2f} D"

    def _text_item_pos(self) -> Point:
        if self._not_measurable():
            return Point()
        vertex = self.point_angle.pos
        v1 = self.point1.pos - vertex
        v2 = self.point2.pos - vertex
        cross_width = self.point_angle.cross_size()[0]
        text_width, text_height = self.text_item.bounding_size()
        if (v1.x < 0 or v1.y < 0) and (v2.x < 0 or v2.y < 0):
            return Point(vertex.x + cross_width, vertex.y)
        if (v1.x < 0 or v1.y > 0) and (v2.x < 0 or v2.y > 0):
            return Point(vertex.x + cross_width, vertex.y - text_height)
        return Point(vertex.x - (cross_width + text_width), vertex.y)

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        path.move_to(self.point_angle.pos)
        path.line_to(self.point1.pos)
        path.move_to(self.point_angle.pos)
        path.line_to(self.point2.pos)
        return path


class ArrowItem(PathItem):
    """An arrow from the active point to the item origin."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.start = Point()
        self.end = Point()

    def set_active_point(self, point: Point) -> None:
        self.start = point

    def next_stage(self) -> None:
        if self.start != self.end:
            self.stage = Stage.FINAL

    def _is_modified(self) -> bool:
        return self.stage is not Stage.FINAL

    def _item_path(self) -> PainterPath:
        path = PainterPath()
        if self.start == self.end:
            return path
        size = ARROW_SIZE * self.zoom_factor
        main = self.start - self.end
        a = main.x * main.x + main.y * main.y
        if a < 1:
            return path
        dot = math.sqrt(a) * size * math.cos(PI / 6)
        m_b = main.y * dot * 2
        c = dot * dot - size * size * main.x * main.x
        delta = m_b * m_b - 4 * a * c
        delta = 0.0 if delta < 0 else math.sqrt(delta)
        heads = []
        for v_y in ((m_b + delta) / (2 * a), (m_b - delta) / (2 * a)):
            v_x = _sqrt_or_zero(size * size - v_y * v_y)
            x = self.end.x + v_x if (dot - main.y * v_y) * main.x > 0 else self.end.x - v_x
            heads.append(Point(x, v_y + self.end.y))
        path.move_to(self.start)
        path.line_to(self.end)
        for head in heads:
            path.move_to(head)
            path.line_to(self.end)
        return path