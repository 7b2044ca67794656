"""Geometry primitives and the base classes shared by all measurement items."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto

PI = 3.1415926
MARGIN = 2


@dataclass(frozen=True)
class Point:
    """A point or vector in item coordinates."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point(self.x - other.x, self.y - other.y)

    def dot(self, other: Point) -> float:
        """Dot product of two vectors."""
        return self.x * other.x + self.y * other.y

    def manhattan_length(self) -> float:
        """Sum of the absolute coordinates."""
        return abs(self.x) + abs(self.y)


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle given by its top-left corner and size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @staticmethod
    def from_points(top_left: Point, bottom_right: Point) -> Rect:
        """Build the rectangle spanned by two corners."""
        return Rect(
            top_left.x,
            top_left.y,
            bottom_right.x - top_left.x,
            bottom_right.y - top_left.y,
        )

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


class Stage(Enum):
    """Construction stage of a measurement item."""

    FIRST = auto()
    SECOND = auto()
    THIRD = auto()
    FOURTH = auto()
    FIFTH = auto()
    FINAL = auto()


class Color(Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    MAGENTA = "magenta"
    BLACK = "black"


class ViewType(Enum):
    """Plane through an image volume."""

    XY_PLANE = auto()
    XZ_PLANE = auto()
    YZ_PLANE = auto()


@dataclass
class PainterPath:
    """A drawing path: a list of (operation, geometry) elements."""

    elements: list = field(default_factory=list)

    def move_to(self, point: Point) -> None:
        self.elements.append(("move", point))

    def line_to(self, point: Point) -> None:
        self.elements.append(("line", point))

    def add_rect(self, x: float, y: float, width: float, height: float) -> None:
        """Append a closed rectangle outline."""
        start = Point(x, y)
        self.move_to(start)
        self.line_to(Point(x + width, y))
        self.line_to(Point(x + width, y + height))
        self.line_to(Point(x, y + height))
        self.line_to(start)

    def add_ellipse(self, rect: Rect) -> None:
        """Append an ellipse inscribed in ``rect``."""
        self.elements.append(("ellipse", rect))

    def is_empty(self) -> bool:
        """True when the path draws nothing."""
        if not self.elements:
            return True
        return len(self.elements) == 1 and self.elements[0][0] == "move"


class CrossItem:
    """A small movable cross marking a control point."""

    NORMAL_COLOR = Color.RED
    HIGHLIGHT_COLOR = Color.YELLOW

    def __init__(self, parent=None, size: float = 10.0):
        self.parent = parent
        self.size = float(size)
        self.pos = Point()
        self.pen_color = self.NORMAL_COLOR
        self.movable = True
        self.ignores_transformations = True
        self.accept_hover = True
        half = self.size / 2
        self.path = PainterPath()
        self.path.move_to(Point(-half, 0))
        self.path.line_to(Point(half, 0))
        self.path.move_to(Point(0, -half))
        self.path.line_to(Point(0, half))

    @property
    def x(self) -> float:
        return self.pos.x

    @property
    def y(self) -> float:
        return self.pos.y

    def set_highlight(self, yes: bool) -> None:
        self.pen_color = self.HIGHLIGHT_COLOR if yes else self.NORMAL_COLOR

    def cross_size(self) -> tuple[float, float]:
        """Width and height of the cross."""
        return (self.size, self.size)


class TextItem:
    """A label attached to a measurement item."""

    NORMAL_COLOR = Color.GREEN
    HIGHLIGHT_COLOR = Color.MAGENTA

    def __init__(self, parent=None, font_size: float = 12.0):
        self.parent = parent
        self.text = ""
        self.pos = Point()
        self.font_size = float(font_size)
        self.color = self.NORMAL_COLOR
        self.ignores_transformations = True
        self.ignores_parent_opacity = False
        self.movable = False
        self.selectable = False

    def set_highlight(self, yes: bool) -> None:
        self.color = self.HIGHLIGHT_COLOR if yes else self.NORMAL_COLOR

    def bounding_size(self) -> tuple[float, float]:
        """Approximate width and height of the rendered text."""
        if not self.text:
            return (0.0, 0.0)
        lines = self.text.split("\n")
        width = max(len(line) for line in lines) * self.font_size * 0.6
        height = len(lines) * self.font_size * 1.2
        return (width, height)


class PathItem(ABC):
    """Base of all measurement items drawn as a path with a text label."""

    NORMAL_COLOR = Color.GREEN
    HIGHLIGHT_COLOR = Color.YELLOW
    SELECTED_COLOR = Color.RED

    def __init__(self, parent=None):
        self.parent = parent
        self.pos = Point()
        self.x_spacing = -1.0
        self.y_spacing = -1.0
        self.zoom_factor = 1.0
        self.hovered = False
        self.selected = False
        self.pen_color = self.NORMAL_COLOR
        self.pen_width = self.zoom_factor
        self.text_item = TextItem(self)
        self.selectable = True
        self.movable = True
        self.clips_to_shape = True
        self.accept_hover = True
        self.stage = Stage.FIRST
        self.path = PainterPath()

    @abstractmethod
    def set_active_point(self, point: Point) -> None:
        """Move the point currently being placed."""

    def next_stage(self) -> None:
        """Advance the construction stage."""

    def set_zoom_factor(self, factor: float) -> None:
        self.zoom_factor = 1 / factor
        self.pen_width = self.zoom_factor

    def set_pixel_spacing(self, x: float, y: float) -> None:
        self.x_spacing = x
        self.y_spacing = y

    def pix_info_updated(self) -> bool:
        return True

    def map_to_parent(self, point: Point) -> Point:
        """Map a point from item coordinates to the parent's."""
        return point + self.pos

    def hover_enter(self) -> None:
        self.hovered = True

    def hover_leave(self) -> None:
        self.hovered = False

    def refresh(self) -> PainterPath:
        """Update colours, and path and label if the geometry changed."""
        if self.selected:
            color, highlight = self.SELECTED_COLOR, True
        elif self.hovered:
            color, highlight = self.HIGHLIGHT_COLOR, True
        else:
            color, highlight = self.NORMAL_COLOR, False
        self.pen_color = color
        self.text_item.set_highlight(highlight)
        if self._is_modified():
            self.path = self._item_path()
            self._update_text_item()
            self.text_item.pos = self._text_item_pos()
        return self.path

    def _update_text_item(self) -> None:
        pass

    def _text_item_pos(self) -> Point:
        return Point()

    def _item_path(self) -> PainterPath:
        return PainterPath()

    def _is_modified(self) -> bool:
        return False


class TextMarkItem(PathItem):
    """A free text annotation; only its label is visible."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.does_not_propagate_opacity = True
        self.ignores_transformations = True
        text = self.text_item
        text.ignores_transformations = False
        text.ignores_parent_opacity = True
        text.movable = True
        text.selectable = True
        self.opacity = 0.0

    def set_label_text(self, text: str) -> None:
        self.text_item.text = text

    def set_active_point(self, point: Point) -> None:
        """Text marks have no control point to move."""

    def _text_item_pos(self) -> Point:
        return Point(0, 0)