import enum
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union

from .config import (
    CATEGORY_ZONE_MAX,
    CATEGORY_ZONE_MIN,
    CHILD_ZONE_DEPTH,
    CHILD_ZONE_LEFT,
    CHILD_ZONE_RIGHT,
)
from .models import Category, Point, Rect, Task

PointLike = Union[Point, Tuple[float, float], Mapping[str, float]]


class DropAction(enum.Enum):
    MOVE = "MOVE"
    ADD_CHILD = "ADD_CHILD"
    CREATE_CATEGORY = "CREATE_CATEGORY"
    ADD_TO_CATEGORY = "ADD_TO_CATEGORY"


@dataclass(frozen=True)
class DropZone:
    action: DropAction = DropAction.MOVE
    target_id: Optional[str] = None

    @property
    def is_move(self) -> bool:
        return self.action is DropAction.MOVE


MOVE = DropZone()


def _xy(pointer: Optional[PointLike]) -> Optional[Tuple[float, float]]:
    if pointer is None:
        return None
    try:
        point = Point.coerce(pointer)
    except TypeError:
        return None
    return point.x, point.y


def _geometry(entity: object) -> Optional[Tuple[float, float, float, float]]:
    position = getattr(entity, "position", None)
    size = getattr(entity, "size", None)
    if position is None or size is None:
        return None
    width = getattr(size, "width", 0) or 0
    height = getattr(size, "height", 0) or 0
    if width <= 0 or height <= 0:
        return None
    return position.x, position.y, width, height


def detect_drop_zone(dragged: Optional[Task], target: Optional[Task], pointer: Optional[PointLike]) -> DropZone:
    xy = _xy(pointer)
    if dragged is None or target is None or xy is None or dragged.id == target.id:
        return MOVE
    geometry = _geometry(target)
    if geometry is None:
        return MOVE
    tx, ty, tw, th = geometry
    px, py = xy

    below = ty + th < py <= ty + th + CHILD_ZONE_DEPTH
    in_column = tx - tw * CHILD_ZONE_LEFT <= px <= tx + tw * CHILD_ZONE_RIGHT
    if below and in_column:
        if target.parent_id == dragged.id or dragged.parent_id is not None:
            return MOVE
        return DropZone(DropAction.ADD_CHILD, target.id)

    distance_above = ty - py
    horizontal = abs(px - (tx + tw / 2))
    if CATEGORY_ZONE_MIN < distance_above < CATEGORY_ZONE_MAX and horizontal < tw:
        return DropZone(DropAction.CREATE_CATEGORY, target.id)
    return MOVE


def detect_category_drop(dragged: Optional[Task], category: Optional[Category], pointer: Optional[PointLike]) -> DropZone:
    xy = _xy(pointer)
    if dragged is None or category is None or xy is None:
        return MOVE
    geometry = _geometry(category)
    if geometry is None:
        return MOVE
    if Rect(*geometry).contains_point(*xy):
        if dragged.category_id == category.id:
            return MOVE
        return DropZone(DropAction.ADD_TO_CATEGORY, category.id)
    return MOVE


def resolve_drop(
    dragged: Optional[Task],
    tasks: Iterable[Task],
    categories: Iterable[Category],
    pointer: Optional[PointLike],
) -> DropZone:
    """First qualifying candidate wins: every category, then top-level tasks."""
    if dragged is None:
        return MOVE
    for category in categories:
        zone = detect_category_drop(dragged, category, pointer)
        if not zone.is_move:
            return zone
    for target in tasks:
        if target.id == dragged.id or target.parent_id is not None:
            continue
        zone = detect_drop_zone(dragged, target, pointer)
        if not zone.is_move:
            return zone
    return MOVE
