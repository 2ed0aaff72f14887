"""Relationship engine: nesting and grouping rules on top of the EntityStore.

Every method leaves the store consistent: ``children_ids`` and ``parent_id``
agree in both directions, a task is never both nested and grouped, no
category is left with a single member and every child sits at its layout
slot.
"""
import logging

from .layout import child_position
from .store import EntityStore

logger = logging.getLogger(__name__)


class RelationshipEngine:
    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def can_nest(self, parent_id: str, child_id: str) -> bool:
        if parent_id == child_id:
            return False
        return not self.store.is_descendant(parent_id, child_id)

    def add_child_relation(self, parent_id: str, child_id: str) -> bool:
        store = self.store
        parent = store.get_task(parent_id)
        child = store.get_task(child_id)
        if parent is None or child is None:
            logger.warning("add_child_relation: unknown task (parent=%s, child=%s)", parent_id, child_id)
            return False
        if child.parent_id == parent_id:
            return False
        if not self.can_nest(parent_id, child_id):
            logger.info("Rejected nesting %s under %s: would create a cycle", child_id, parent_id)
            return False

        store.detach_from_parent(child_id)
        store.leave_category(child_id)

        parent.children_ids.append(child_id)
        child.parent_id = parent_id
        child.category_id = None
        child.position = child_position(parent, len(parent.children_ids) - 1)
        store.relayout_children(child_id)
        store.restyle(parent_id)
        store.restyle(child_id)
        logger.debug("Nested %s under %s at index %d", child_id, parent_id, len(parent.children_ids) - 1)
        return True

    def remove_task_from_parent(self, task_id: str) -> bool:
        task = self.store.get_task(task_id)
        if task is None:
            logger.warning("remove_task_from_parent: task not found: %s", task_id)
            return False
        if task.parent_id is None:
            return False
        self.store.detach_from_parent(task_id)
        logger.debug("Detached %s from its parent", task_id)
        return True

    def remove_task_from_category(self, task_id: str) -> bool:
        task = self.store.get_task(task_id)
        if task is None:
            logger.warning("remove_task_from_category: task not found: %s", task_id)
            return False
        if task.category_id is None:
            return False
        self.store.leave_category(task_id)
        logger.debug("Removed %s from its category", task_id)
        return True

    def add_task_to_category(self, task_id: str, category_id: str) -> bool:
        store = self.store
        task = store.get_task(task_id)
        category = store.get_category(category_id)
        if task is None or category is None:
            logger.warning("add_task_to_category: unknown task or category (%s, %s)", task_id, category_id)
            return False
        if task.category_id == category_id:
            return False
        store.leave_category(task_id)
        store.detach_from_parent(task_id)
        category.task_ids.append(task_id)
        task.category_id = category_id
        logger.debug("Added %s to category %s", task_id, category_id)
        return True
