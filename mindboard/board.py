"""Board session: one store, its relationship engine and its undo history.

Every public mutator here is a discrete user action and commits at most one
history entry. Continuous updates (drag motion, live text preview) go to the
store directly and are folded into the next commit.
"""
import logging
from typing import Any, Optional

from .history import HistoryManager
from .models import Category, Task
from .persistence import parse_state
from .relations import RelationshipEngine
from .store import EntityStore, PointLike, Snapshot

logger = logging.getLogger(__name__)


class Board:
    def __init__(self, store: Optional[EntityStore] = None) -> None:
        self.store = store or EntityStore()
        self.engine = RelationshipEngine(self.store)
        self.history = HistoryManager(self.store.snapshot())

    # ---------- Convenience properties ----------
    @property
    def tasks(self):
        return self.store.tasks

    @property
    def categories(self):
        return self.store.categories

    def task(self, task_id: Optional[str]) -> Optional[Task]:
        return self.store.get_task(task_id)

    def category(self, category_id: Optional[str]) -> Optional[Category]:
        return self.store.get_category(category_id)

    # ---------- History ----------
    def commit(self) -> bool:
        """Record the live state if it differs from the current history entry."""
        snapshot = self.store.snapshot()
        if snapshot == self.history.current():
            return False
        self.history.record(snapshot)
        return True

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.store.restore(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.store.restore(snapshot)
        return True

    def _commit_if(self, applied: bool) -> bool:
        if applied:
            self.commit()
        return applied

    # ---------- Tasks ----------
    def create_task(self, position: PointLike, content: Optional[str] = None) -> str:
        tid = self.store.create_task(position, content)
        self.commit()
        return tid

    def update_task_content(self, task_id: str, content: str) -> bool:
        return self._commit_if(self.store.update_task_content(task_id, content))

    def move_task(self, task_id: str, position: PointLike) -> bool:
        """Committed position change; children follow, children of a parent snap back."""
        if not self.store.update_task_position(task_id, position):
            return False
        task = self.store.tasks[task_id]
        if task.parent_id is not None:
            self.store.relayout_children(task.parent_id)
        self.store.relayout_children(task_id)
        self.commit()
        return True

    def delete_task(self, task_id: str) -> bool:
        return self._commit_if(self.store.delete_task(task_id))

    # ---------- Relationships ----------
    def add_child_relation(self, parent_id: str, child_id: str) -> bool:
        return self._commit_if(self.engine.add_child_relation(parent_id, child_id))

    def remove_task_from_parent(self, task_id: str) -> bool:
        return self._commit_if(self.engine.remove_task_from_parent(task_id))

    def remove_task_from_category(self, task_id: str) -> bool:
        return self._commit_if(self.engine.remove_task_from_category(task_id))

    def add_task_to_category(self, task_id: str, category_id: str) -> bool:
        return self._commit_if(self.engine.add_task_to_category(task_id, category_id))

    # ---------- Categories ----------
    def create_category(self, task_ids) -> Optional[str]:
        cid = self.store.create_category(task_ids)
        if cid is not None:
            self.commit()
        return cid

    def update_category_name(self, category_id: str, name: str) -> bool:
        return self._commit_if(self.store.update_category_name(category_id, name))

    def update_category_position(self, category_id: str, position: PointLike) -> bool:
        return self._commit_if(self.store.update_category_position(category_id, position))

    def delete_category(self, category_id: str) -> bool:
        return self._commit_if(self.store.delete_category(category_id))

    # ---------- Text editing ----------
    def begin_edit(self, task_id: str) -> Optional["EditSession"]:
        task = self.store.get_task(task_id)
        if task is None:
            logger.warning("begin_edit: task not found: %s", task_id)
            return None
        return EditSession(self, task_id, task.content)

    # ---------- Whole-board ----------
    def to_dict(self) -> Snapshot:
        return self.store.snapshot()

    def load(self, data: Any) -> None:
        """Replace the board with validated external data; raises BoardImportError."""
        tasks, categories = parse_state(data)
        self.store.replace(tasks, categories)
        self.history.reset(self.store.snapshot())
        logger.info("Loaded board with %d task(s), %d categor(ies)", len(tasks), len(categories))

    def clear(self) -> None:
        self.store.clear()
        self.history.reset(self.store.snapshot())

    def __str__(self) -> str:
        return f"Board: {len(self.store.tasks)} tasks, {len(self.store.categories)} categories"


class EditSession:
    """In-place text edit that can be previewed, confirmed or cancelled."""

    def __init__(self, board: Board, task_id: str, original: str) -> None:
        self.board = board
        self.task_id = task_id
        self.original = original
        self.closed = False

    def preview(self, content: str) -> None:
        if not self.closed:
            self.board.store.update_task_content(self.task_id, content)

    def confirm(self, content: Optional[str] = None) -> bool:
        if self.closed:
            return False
        if content is not None:
            self.preview(content)
        self.closed = True
        return self.board.commit()

    def cancel(self) -> None:
        if self.closed:
            return
        self.board.store.update_task_content(self.task_id, self.original)
        self.closed = True
