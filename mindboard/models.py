"""Task and Category records plus their persisted (camelCase) shape.

Relationships are plain id references: a task never holds another task
object, only its id. The EntityStore is the sole owner of every record.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import CATEGORY_PLACEHOLDER, CATEGORY_STYLE, FREE_STYLE, TASK_PLACEHOLDER, TASK_H, TASK_W, Style
from .errors import BoardImportError


@dataclass
class Point:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def coerce(cls, value: Any) -> "Point":
        """Accept a Point, an ``{"x", "y"}`` mapping or an ``(x, y)`` pair."""
        if isinstance(value, Point):
            return cls(value.x, value.y)
        if isinstance(value, Mapping):
            x, y = value.get("x"), value.get("y")
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            x, y = value
        else:
            raise TypeError(f"not a point: {value!r}")
        for v in (x, y):
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise TypeError(f"not a point: {value!r}")
        return cls(x, y)

    @classmethod
    def from_dict(cls, raw: Any, where: str) -> "Point":
        if not isinstance(raw, Mapping):
            raise BoardImportError(f"{where}: position must be an object")
        return cls(_number(raw.get("x"), f"{where}.x"), _number(raw.get("y"), f"{where}.y"))


@dataclass
class Size:
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, raw: Any, where: str) -> "Size":
        if not isinstance(raw, Mapping):
            raise BoardImportError(f"{where}: size must be an object")
        return cls(_number(raw.get("width"), f"{where}.width"), _number(raw.get("height"), f"{where}.height"))


@dataclass
class Task:
    id: str
    content: str = TASK_PLACEHOLDER
    position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    size: Size = field(default_factory=lambda: Size(TASK_W, TASK_H))
    parent_id: Optional[str] = None
    category_id: Optional[str] = None
    children_ids: List[str] = field(default_factory=list)
    style: Style = field(default_factory=lambda: dict(FREE_STYLE))

    @property
    def state(self) -> str:
        if self.children_ids:
            return "parent"
        if self.parent_id is not None:
            return "child"
        return "free"

    @property
    def bounds(self) -> "Rect":
        return Rect(self.position.x, self.position.y, self.size.width, self.size.height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "position": self.position.to_dict(),
            "size": self.size.to_dict(),
            "parentId": self.parent_id,
            "categoryId": self.category_id,
            "childrenIds": list(self.children_ids),
            "style": dict(self.style),
        }

    @classmethod
    def from_dict(cls, key: str, raw: Any) -> "Task":
        where = f"tasks[{key!r}]"
        if not isinstance(raw, Mapping):
            raise BoardImportError(f"{where} must be an object")
        content = raw.get("content")
        children = raw.get("childrenIds", [])
        if not isinstance(children, list):
            raise BoardImportError(f"{where}.childrenIds must be a list")
        style = raw.get("style")
        return cls(
            id=key,
            content=content if isinstance(content, str) and content.strip() else TASK_PLACEHOLDER,
            position=Point.from_dict(raw.get("position"), where),
            size=Size.from_dict(raw.get("size", {"width": TASK_W, "height": TASK_H}), where),
            parent_id=_optional_id(raw.get("parentId"), f"{where}.parentId"),
            category_id=_optional_id(raw.get("categoryId"), f"{where}.categoryId"),
            children_ids=[c for c in children if isinstance(c, str)],
            style=_style(style, FREE_STYLE),
        )


@dataclass
class Category:
    id: str
    name: str = CATEGORY_PLACEHOLDER
    task_ids: List[str] = field(default_factory=list)
    position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    size: Size = field(default_factory=lambda: Size(0.0, 0.0))
    style: Style = field(default_factory=lambda: dict(CATEGORY_STYLE))

    @property
    def bounds(self) -> "Rect":
        return Rect(self.position.x, self.position.y, self.size.width, self.size.height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "taskIds": list(self.task_ids),
            "position": self.position.to_dict(),
            "size": self.size.to_dict(),
            "style": dict(self.style),
        }

    @classmethod
    def from_dict(cls, key: str, raw: Any) -> "Category":
        where = f"categories[{key!r}]"
        if not isinstance(raw, Mapping):
            raise BoardImportError(f"{where} must be an object")
        name = raw.get("name")
        task_ids = raw.get("taskIds", [])
        if not isinstance(task_ids, list):
            raise BoardImportError(f"{where}.taskIds must be a list")
        return cls(
            id=key,
            name=name if isinstance(name, str) and name.strip() else CATEGORY_PLACEHOLDER,
            task_ids=[t for t in task_ids if isinstance(t, str)],
            position=Point.from_dict(raw.get("position"), where),
            size=Size.from_dict(raw.get("size"), where),
            style=_style(raw.get("style"), CATEGORY_STYLE),
        )


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains_point(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def contains(self, other: "Rect") -> bool:
        return self.x <= other.x and other.right <= self.right and self.y <= other.y and other.bottom <= self.bottom

    def intersects(self, other: "Rect") -> bool:
        return self.x < other.right and other.x < self.right and self.y < other.bottom and other.y < self.bottom

    def inflate(self, amount: float) -> "Rect":
        return Rect(self.x - amount, self.y - amount, self.width + 2 * amount, self.height + 2 * amount)

    def union(self, other: "Rect") -> "Rect":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        return Rect(x0, y0, max(self.right, other.right) - x0, max(self.bottom, other.bottom) - y0)


# ---------- Field normalizers ----------
def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BoardImportError(f"{where} must be a number")
    return value


def _optional_id(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise BoardImportError(f"{where} must be a string or null")
    return value or None


def _style(raw: Any, default: Style) -> Style:
    style = dict(default)
    if isinstance(raw, Mapping):
        for key in default:
            if key in raw and isinstance(raw[key], (str, int, float)) and not isinstance(raw[key], bool):
                style[key] = raw[key]
    return style
