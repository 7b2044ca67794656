"""A resizable clipping rectangle with eight drag handles."""

from __future__ import annotations

from enum import Enum, IntEnum

from .base import Color, Point, Rect

NODE_SIZE = 32
MIN_CLIP_SIZE = 300
_HALF = NODE_SIZE // 2


class NodeName(IntEnum):
    TOP_LEFT = 0
    TOP_MIDDLE = 1
    TOP_RIGHT = 2
    MIDDLE_RIGHT = 3
    BOTTOM_RIGHT = 4
    BOTTOM_MIDDLE = 5
    BOTTOM_LEFT = 6
    MIDDLE_LEFT = 7


class Cursor(Enum):
    SIZE_F_DIAG = "size_fdiag"
    SIZE_B_DIAG = "size_bdiag"
    SIZE_VER = "size_ver"
    SIZE_HOR = "size_hor"


def _edges(left: float, top: float, right: float, bottom: float) -> Rect:
    return Rect(left, top, right - left, bottom - top)


def _node_positions(rect: Rect) -> dict[NodeName, Point]:
    mid_x = rect.left + (rect.width - NODE_SIZE) / 2
    mid_y = rect.top + (rect.height - NODE_SIZE) / 2
    left = rect.left - _HALF
    right = rect.right - _HALF
    top = rect.top - _HALF
    bottom = rect.bottom - _HALF
    return {
        NodeName.TOP_LEFT: Point(left, top),
        NodeName.TOP_MIDDLE: Point(mid_x, top),
        NodeName.TOP_RIGHT: Point(right, top),
        NodeName.MIDDLE_RIGHT: Point(right, mid_y),
        NodeName.BOTTOM_RIGHT: Point(right, bottom),
        NodeName.BOTTOM_MIDDLE: Point(mid_x, bottom),
        NodeName.BOTTOM_LEFT: Point(left, bottom),
        NodeName.MIDDLE_LEFT: Point(left, mid_y),
    }


class ClipRectItem:
    """A movable rectangle resized by dragging its corner and edge nodes.

    A node that was dragged is applied by :meth:`refresh`, which keeps the
    rectangle at least ``MIN_CLIP_SIZE`` wide and high.
    """

    def __init__(self, rect: Rect | None = None, parent=None):
        self.parent = parent
        self.pos = Point()
        self.movable = True
        self.pen_color = Color.BLACK
        self.corner_cursor = True
        self.middle_cursor = True
        self._rect = rect if rect is not None else Rect()
        self._nodes: dict[NodeName, Point] = {}
        self._cursors: dict[NodeName, Cursor] = {}
        self.node_brushes: dict[NodeName, Color] = {node: Color.BLACK for node in NodeName}
        self._set_corner_cursor()
        self._set_middle_cursor()
        self._reposition_nodes()

    @property
    def rect(self) -> Rect:
        """The rectangle in item coordinates."""
        return self._rect

    def _set_corner_cursor(self) -> None:
        f, b = (
            (Cursor.SIZE_F_DIAG, Cursor.SIZE_B_DIAG)
            if self.corner_cursor
            else (Cursor.SIZE_B_DIAG, Cursor.SIZE_F_DIAG)
        )
        self._cursors[NodeName.TOP_LEFT] = f
        self._cursors[NodeName.TOP_RIGHT] = b
        self._cursors[NodeName.BOTTOM_RIGHT] = f
        self._cursors[NodeName.BOTTOM_LEFT] = b

    def _set_middle_cursor(self) -> None:
        v, h = (
            (Cursor.SIZE_VER, Cursor.SIZE_HOR)
            if self.middle_cursor
            else (Cursor.SIZE_HOR, Cursor.SIZE_VER)
        )
        self._cursors[NodeName.TOP_MIDDLE] = v
        self._cursors[NodeName.MIDDLE_RIGHT] = h
        self._cursors[NodeName.BOTTOM_MIDDLE] = v
        self._cursors[NodeName.MIDDLE_LEFT] = h

    def reverse_corner_cursor(self) -> None:
        self.corner_cursor = not self.corner_cursor
        self._set_corner_cursor()

    def reverse_middle_cursor(self) -> None:
        self.middle_cursor = not self.middle_cursor
        self._set_middle_cursor()

    def _reposition_nodes(self) -> None:
        self._nodes = _node_positions(self._rect)

    def set_rect(self, rect: Rect) -> None:
        """Place the rectangle, given in parent coordinates."""
        origin = rect.top_left - self.pos
        self._rect = Rect(origin.x, origin.y, rect.width, rect.height)
        self._reposition_nodes()

    def _set_rect_private(self, rect: Rect) -> None:
        self._rect = rect
        self._reposition_nodes()

    def set_pen_color(self, color: Color) -> None:
        """Set the outline colour; nodes are filled with it."""
        for node in NodeName:
            self.node_brushes[node] = color
        self.pen_color = color

    def clip_rect(self) -> Rect:
        """The clipping rectangle in parent coordinates, from the corner nodes."""
        offset = Point(_HALF, _HALF)
        top_left = self._nodes[NodeName.TOP_LEFT] + offset + self.pos
        bottom_right = self._nodes[NodeName.BOTTOM_RIGHT] + offset + self.pos
        return Rect.from_points(top_left, bottom_right)

    def node_pos(self, node: NodeName) -> Point:
        return self._nodes[NodeName(node)]

    def node_cursor(self, node: NodeName) -> Cursor:
        return self._cursors[NodeName(node)]

    def move_node(self, node: NodeName, point: Point) -> None:
        """Drag a node to a new position in item coordinates."""
        self._nodes[NodeName(node)] = point

    def _set_x(self, node: NodeName, x: float) -> None:
        self._nodes[node] = Point(x, self._nodes[node].y)

    def _set_y(self, node: NodeName, y: float) -> None:
        self._nodes[node] = Point(self._nodes[node].x, y)

    def refresh(self) -> Rect:
        """Apply the first dragged node to the rectangle and return it."""
        n = self._nodes
        N = NodeName
        rect = self._rect
        expected = _node_positions(rect)
        moved = next((node for node in NodeName if n[node] != expected[node]), None)
        if moved is None:
            return rect
        left, top, right, bottom = rect.left, rect.top, rect.right, rect.bottom

        if moved is N.TOP_LEFT:
            if n[N.TOP_LEFT].x + MIN_CLIP_SIZE > n[N.TOP_RIGHT].x:
                self._set_x(N.TOP_LEFT, n[N.TOP_RIGHT].x - MIN_CLIP_SIZE)
            if n[N.TOP_LEFT].y + MIN_CLIP_SIZE > n[N.BOTTOM_LEFT].y:
                self._set_y(N.TOP_LEFT, n[N.BOTTOM_LEFT].y - MIN_CLIP_SIZE)
            left, top = n[N.TOP_LEFT].x + _HALF, n[N.TOP_LEFT].y + _HALF
        elif moved is N.TOP_MIDDLE:
            if n[N.TOP_MIDDLE].y + MIN_CLIP_SIZE > n[N.BOTTOM_MIDDLE].y:
                self._set_y(N.TOP_MIDDLE, n[N.BOTTOM_MIDDLE].y - MIN_CLIP_SIZE)
            top = n[N.TOP_MIDDLE].y + _HALF
        elif moved is N.TOP_RIGHT:
            if n[N.TOP_LEFT].x + MIN_CLIP_SIZE > n[N.TOP_RIGHT].x:
                self._set_x(N.TOP_RIGHT, n[N.TOP_LEFT].x + MIN_CLIP_SIZE)
            if n[N.TOP_RIGHT].y + MIN_CLIP_SIZE > n[N.BOTTOM_RIGHT].y:
                self._set_y(N.TOP_RIGHT, n[N.BOTTOM_RIGHT].y - MIN_CLIP_SIZE)
            right, top = n[N.TOP_RIGHT].x + _HALF, n[N.TOP_RIGHT].y + _HALF
        elif moved is N.MIDDLE_RIGHT:
            if n[N.MIDDLE_LEFT].x + MIN_CLIP_SIZE > n[N.MIDDLE_RIGHT].x:
                self._set_x(N.MIDDLE_RIGHT, n[N.MIDDLE_LEFT].x + MIN_CLIP_SIZE)
            right = n[N.MIDDLE_RIGHT].x + _HALF
        elif moved is N.BOTTOM_RIGHT:
            if n[N.BOTTOM_LEFT].x + MIN_CLIP_SIZE > n[N.BOTTOM_RIGHT].x:
                self._set_x(N.BOTTOM_RIGHT, n[N.BOTTOM_LEFT].x + MIN_CLIP_SIZE)
            if n[N.TOP_RIGHT].y + MIN_CLIP_SIZE > n[N.BOTTOM_RIGHT].y:
                self._set_y(N.BOTTOM_RIGHT, n[N.TOP_RIGHT].y + MIN_CLIP_SIZE)
            right, bottom = n[N.BOTTOM_RIGHT].x + _HALF, n[N.BOTTOM_RIGHT].y + _HALF
        elif moved is N.BOTTOM_MIDDLE:
            if n[N.TOP_MIDDLE].y + MIN_CLIP_SIZE > n[N.BOTTOM_MIDDLE].y:
                self._set_y(N.BOTTOM_MIDDLE, n[N.TOP_MIDDLE].y + MIN_CLIP_SIZE)
            bottom = n[N.BOTTOM_MIDDLE].y + _HALF
        elif moved is N.BOTTOM_LEFT:
            if n[N.BOTTOM_LEFT].x + MIN_CLIP_SIZE > n[N.BOTTOM_RIGHT].x:
                self._set_x(N.BOTTOM_LEFT, n[N.BOTTOM_RIGHT].x - MIN_CLIP_SIZE)
            if n[N.TOP_LEFT].y + MIN_CLIP_SIZE > n[N.BOTTOM_LEFT].y:
                self._set_y(N.BOTTOM_LEFT, n[N.TOP_LEFT].y + MIN_CLIP_SIZE)
            left, bottom = n[N.BOTTOM_LEFT].x + _HALF, n[N.BOTTOM_LEFT].y + _HALF
        elif moved is N.MIDDLE_LEFT:
            if n[N.MIDDLE_LEFT].x + MIN_CLIP_SIZE > n[N.MIDDLE_RIGHT].x:
                self._set_x(N.MIDDLE_LEFT, n[N.MIDDLE_RIGHT].x - MIN_CLIP_SIZE)
            left = n[N.MIDDLE_LEFT].x + _HALF

        self._set_rect_private(_edges(left, top, right, bottom))
        return self._rect