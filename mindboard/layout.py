from typing import Iterable, Optional

from .config import (
    CATEGORY_PAD_BOTTOM,
    CATEGORY_PAD_TOP,
    CATEGORY_PAD_X,
    CHILD_OFFSET_RATIO,
    CHILD_STRIDE,
    CHILD_TOP_GAP,
)
from .models import Point, Rect, Task


def child_position(parent: Task, index: int) -> Point:
    return Point(
        parent.position.x + parent.size.width * CHILD_OFFSET_RATIO,
        parent.position.y + parent.size.height + CHILD_TOP_GAP + index * CHILD_STRIDE,
    )


def category_bounds(tasks: Iterable[Task]) -> Optional[Rect]:
    members = list(tasks)
    if not members:
        return None
    min_x = min(t.position.x for t in members) - CATEGORY_PAD_X
    min_y = min(t.position.y for t in members) - CATEGORY_PAD_TOP
    max_x = max(t.position.x + t.size.width for t in members) + CATEGORY_PAD_X
    max_y = max(t.position.y + t.size.height for t in members) + CATEGORY_PAD_BOTTOM
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def slot_bounds(parent: Task, index: int, child: Task) -> Rect:
    """Parent box united with the box of the child resting at slot ``index``."""
    slot = child_position(parent, index)
    return parent.bounds.union(Rect(slot.x, slot.y, child.size.width, child.size.height))
