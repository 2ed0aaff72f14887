import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import CATEGORY_PLACEHOLDER, CATEGORY_STYLE, TASK_H, TASK_PLACEHOLDER, TASK_STYLES, TASK_W
from .layout import category_bounds, child_position
from .models import Category, Point, Size, Task

logger = logging.getLogger(__name__)

PointLike = Union[Point, Tuple[float, float], Mapping[str, float]]
Snapshot = Dict[str, Dict[str, Dict[str, Any]]]


def _new_id() -> str:
    return uuid.uuid4().hex


class EntityStore:
    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self.tasks: Dict[str, Task] = {}
        self.categories: Dict[str, Category] = {}
        self._id_factory = id_factory or _new_id

    # ---------- Lookup ----------
    def get_task(self, task_id: Optional[str]) -> Optional[Task]:
        if task_id is None:
            return None
        return self.tasks.get(task_id)

    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        if category_id is None:
            return None
        return self.categories.get(category_id)

    def _task_or_warn(self, task_id: Optional[str], action: str) -> Optional[Task]:
        task = self.get_task(task_id)
        if task is None:
            logger.warning("%s: task not found: %s", action, task_id)
        return task

    def _category_or_warn(self, category_id: Optional[str], action: str) -> Optional[Category]:
        category = self.get_category(category_id)
        if category is None:
            logger.warning("%s: category not found: %s", action, category_id)
        return category

    def children_of(self, task_id: str) -> List[Task]:
        task = self.tasks.get(task_id)
        if task is None:
            return []
        return [self.tasks[cid] for cid in task.children_ids if cid in self.tasks]

    def descendants(self, task_id: str) -> List[str]:
        """Ids of every task below ``task_id``, parents before children."""
        task = self.tasks.get(task_id)
        if task is None:
            return []
        collected: List[str] = []
        seen = {task_id}
        stack = list(reversed(task.children_ids))
        while stack:
            cid = stack.pop()
            child = self.tasks.get(cid)
            if child is None or cid in seen:
                continue
            seen.add(cid)
            collected.append(cid)
            stack.extend(reversed(child.children_ids))
        return collected

    def is_descendant(self, candidate_id: str, ancestor_id: str) -> bool:
        return candidate_id in self.descendants(ancestor_id)

    # ---------- Tasks ----------
    def create_task(self, position: PointLike, content: Optional[str] = None) -> str:
        tid = self._id_factory()
        text = content if content is not None and content.strip() else TASK_PLACEHOLDER
        self.tasks[tid] = Task(
            id=tid,
            content=text,
            position=Point.coerce(position),
            size=Size(TASK_W, TASK_H),
            style=dict(TASK_STYLES["free"]),
        )
        logger.debug("Task created: %s", tid)
        return tid

    def update_task_content(self, task_id: str, content: str) -> bool:
        task = self._task_or_warn(task_id, "update_task_content")
        if task is None:
            return False
        task.content = content if content.strip() else TASK_PLACEHOLDER
        return True

    def update_task_position(self, task_id: str, position: PointLike) -> bool:
        task = self._task_or_warn(task_id, "update_task_position")
        if task is None:
            return False
        task.position = Point.coerce(position)
        return True

    def translate_task(self, task_id: str, dx: float, dy: float) -> bool:
        task = self.tasks.get(task_id)
        if task is None:
            return False
        task.position = Point(task.position.x + dx, task.position.y + dy)
        return True

    def delete_task(self, task_id: str) -> bool:
        task = self._task_or_warn(task_id, "delete_task")
        if task is None:
            return False
        doomed = [task_id] + self.descendants(task_id)
        self.detach_from_parent(task_id)
        for tid in doomed:
            self.leave_category(tid)
        for tid in doomed:
            self.tasks.pop(tid, None)
        logger.debug("Task deleted: %s (%d descendant(s))", task_id, len(doomed) - 1)
        return True

    # ---------- Categories ----------
    def create_category(self, task_ids: Iterable[str]) -> Optional[str]:
        members: List[str] = []
        for tid in task_ids:
            if tid in self.tasks and tid not in members:
                members.append(tid)
        if len(members) < 2:
            logger.warning("create_category: need two existing tasks, got %r", members)
            return None
        for tid in members:
            self.detach_from_parent(tid)
            self.leave_category(tid)
        bounds = category_bounds(self.tasks[tid] for tid in members)
        cid = self._id_factory()
        self.categories[cid] = Category(
            id=cid,
            name=CATEGORY_PLACEHOLDER,
            task_ids=members,
            position=Point(bounds.x, bounds.y),
            size=Size(bounds.width, bounds.height),
            style=dict(CATEGORY_STYLE),
        )
        for tid in members:
            self.tasks[tid].category_id = cid
        logger.debug("Category created: %s with %s", cid, members)
        return cid

    def update_category_name(self, category_id: str, name: str) -> bool:
        category = self._category_or_warn(category_id, "update_category_name")
        if category is None:
            return False
        category.name = name if name.strip() else CATEGORY_PLACEHOLDER
        return True

    def update_category_position(self, category_id: str, position: PointLike) -> bool:
        category = self._category_or_warn(category_id, "update_category_position")
        if category is None:
            return False
        target = Point.coerce(position)
        dx = target.x - category.position.x
        dy = target.y - category.position.y
        category.position = target
        for tid in category.task_ids:
            if self.translate_task(tid, dx, dy):
                self.relayout_children(tid)
        return True

    def delete_category(self, category_id: str) -> bool:
        category = self._category_or_warn(category_id, "delete_category")
        if category is None:
            return False
        for tid in category.task_ids:
            task = self.tasks.get(tid)
            if task is not None and task.category_id == category_id:
                task.category_id = None
        del self.categories[category_id]
        logger.debug("Category deleted: %s", category_id)
        return True

    # ---------- Membership primitives ----------
    def detach_from_parent(self, task_id: str) -> Optional[str]:
        """Unlink a task from its parent; the remaining siblings close the gap."""
        task = self.tasks.get(task_id)
        if task is None or task.parent_id is None:
            return None
        parent_id = task.parent_id
        task.parent_id = None
        parent = self.tasks.get(parent_id)
        if parent is not None:
            parent.children_ids = [cid for cid in parent.children_ids if cid != task_id]
            self.relayout_children(parent_id)
            self.restyle(parent_id)
        self.restyle(task_id)
        return parent_id

    def leave_category(self, task_id: str) -> Optional[str]:
        """Drop a task from its category, dissolving the category at one member."""
        task = self.tasks.get(task_id)
        if task is None or task.category_id is None:
            return None
        category_id = task.category_id
        task.category_id = None
        category = self.categories.get(category_id)
        if category is None:
            return category_id
        category.task_ids = [tid for tid in category.task_ids if tid != task_id]
        if len(category.task_ids) <= 1:
            for tid in category.task_ids:
                remaining = self.tasks.get(tid)
                if remaining is not None:
                    remaining.category_id = None
            del self.categories[category_id]
            logger.debug("Category dissolved: %s", category_id)
        return category_id

    def relayout_children(self, parent_id: str) -> None:
        stack = [parent_id]
        seen = set()
        while stack:
            pid = stack.pop()
            if pid in seen:
                continue
            seen.add(pid)
            parent = self.tasks.get(pid)
            if parent is None:
                continue
            for index, cid in enumerate(parent.children_ids):
                child = self.tasks.get(cid)
                if child is None:
                    continue
                child.position = child_position(parent, index)
                stack.append(cid)

    def restyle(self, task_id: str) -> None:
        task = self.tasks.get(task_id)
        if task is not None:
            task.style = dict(TASK_STYLES[task.state])

    # ---------- Whole-state ----------
    def snapshot(self) -> Snapshot:
        return {
            "tasks": {tid: t.to_dict() for tid, t in self.tasks.items()},
            "categories": {cid: c.to_dict() for cid, c in self.categories.items()},
        }

    def restore(self, snapshot: Snapshot) -> None:
        self.tasks = {tid: Task.from_dict(tid, raw) for tid, raw in snapshot.get("tasks", {}).items()}
        self.categories = {
            cid: Category.from_dict(cid, raw) for cid, raw in snapshot.get("categories", {}).items()
        }

    def replace(self, tasks: Dict[str, Task], categories: Dict[str, Category]) -> None:
        self.tasks = tasks
        self.categories = categories

    def clear(self) -> None:
        self.tasks = {}
        self.categories = {}
