import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .board import Board
from .config import DRAG_THRESHOLD, PARENT_EXIT_TOLERANCE
from .dropzone import MOVE, DropAction, DropZone, resolve_drop
from .layout import slot_bounds
from .models import Point
from .store import PointLike

logger = logging.getLogger(__name__)


@dataclass
class DragResult:
    zone: DropZone = MOVE
    detached_from: Optional[str] = None  # "parent" or "category"
    committed: bool = False


@dataclass
class DragState:
    mode: Optional[str] = None  # "task" or "category"
    id: Optional[str] = None
    start: Point = field(default_factory=lambda: Point(0.0, 0.0))
    peers: List[str] = field(default_factory=list)
    start_positions: Dict[str, Point] = field(default_factory=dict)
    preview: DropZone = MOVE


class DragController:
    def __init__(self, board: Board) -> None:
        self.board = board
        self.state = DragState()

    @property
    def active(self) -> bool:
        return self.state.mode is not None

    @property
    def preview(self) -> DropZone:
        return self.state.preview

    # ---------- Start ----------
    def begin_task(self, task_id: str, pointer: PointLike, selection: Iterable[str] = ()) -> bool:
        store = self.board.store
        if store.get_task(task_id) is None:
            logger.warning("begin_task: task not found: %s", task_id)
            return False
        peers = [tid for tid in selection if tid != task_id and tid in store.tasks]
        moving: Dict[str, Point] = {}
        for root in [task_id] + peers:
            for tid in [root] + store.descendants(root):
                if tid not in moving:
                    pos = store.tasks[tid].position
                    moving[tid] = Point(pos.x, pos.y)
        self.state = DragState(mode="task", id=task_id, start=Point.coerce(pointer), peers=peers, start_positions=moving)
        return True

    def begin_category(self, category_id: str, pointer: PointLike) -> bool:
        category = self.board.store.get_category(category_id)
        if category is None:
            logger.warning("begin_category: category not found: %s", category_id)
            return False
        self.state = DragState(
            mode="category",
            id=category_id,
            start=Point.coerce(pointer),
            start_positions={category_id: Point(category.position.x, category.position.y)},
        )
        return True

    # ---------- Motion ----------
    def move(self, pointer: PointLike) -> DropZone:
        state = self.state
        store = self.board.store
        if state.mode is None:
            return MOVE
        dx, dy = self._delta_from(state, pointer)
        if state.mode == "category":
            origin = state.start_positions[state.id]
            store.update_category_position(state.id, Point(origin.x + dx, origin.y + dy))
            return MOVE
        for tid, origin in state.start_positions.items():
            task = store.get_task(tid)
            if task is not None:
                task.position = Point(origin.x + dx, origin.y + dy)
        dragged = store.get_task(state.id)
        if dragged is None or state.peers:
            state.preview = MOVE
        else:
            state.preview = resolve_drop(dragged, store.tasks.values(), store.categories.values(), pointer)
        return state.preview

    # ---------- Release ----------
    def end(self, pointer: PointLike) -> DragResult:
        if self.state.mode is None:
            return DragResult()
        self.move(pointer)
        state = self.state
        self.state = DragState()
        if state.mode == "category":
            return DragResult(committed=self.board.commit())
        if self.board.store.get_task(state.id) is None:
            # deleted mid-gesture
            return DragResult(committed=self.board.commit())

        dx, dy = self._delta_from(state, pointer)
        if state.peers or math.hypot(dx, dy) <= DRAG_THRESHOLD:
            return self._settle(state, MOVE)

        detached = self._exit_check(state.id)
        if detached is not None:
            return self._settle(state, MOVE, detached)

        zone = resolve_drop(
            self.board.store.tasks[state.id],
            self.board.store.tasks.values(),
            self.board.store.categories.values(),
            pointer,
        )
        engine = self.board.engine
        applied = True
        if zone.action is DropAction.ADD_CHILD:
            applied = engine.add_child_relation(zone.target_id, state.id)
        elif zone.action is DropAction.CREATE_CATEGORY:
            applied = self.board.store.create_category([state.id, zone.target_id]) is not None
        elif zone.action is DropAction.ADD_TO_CATEGORY:
            applied = engine.add_task_to_category(state.id, zone.target_id)
        if not applied:
            zone = MOVE
        logger.debug("Drop of %s resolved to %s", state.id, zone)
        return self._settle(state, zone)

    def cancel(self) -> None:
        """Abort the gesture and put everything back where it started."""
        state = self.state
        self.state = DragState()
        store = self.board.store
        if state.mode == "category":
            store.update_category_position(state.id, state.start_positions[state.id])
        elif state.mode == "task":
            for tid, origin in state.start_positions.items():
                task = store.get_task(tid)
                if task is not None:
                    task.position = origin

    # ---------- Helpers ----------
    @staticmethod
    def _delta_from(state: DragState, pointer: PointLike):
        p = Point.coerce(pointer)
        return p.x - state.start.x, p.y - state.start.y

    def _exit_check(self, task_id: str) -> Optional[str]:
        store = self.board.store
        engine = self.board.engine
        task = store.tasks[task_id]
        dropped = task.bounds
        parent = store.get_task(task.parent_id)
        if parent is not None:
            home = slot_bounds(parent, parent.children_ids.index(task_id), task)
            if not home.inflate(PARENT_EXIT_TOLERANCE).contains(dropped):
                engine.remove_task_from_parent(task_id)
                return "parent"
        category = store.get_category(task.category_id)
        if category is not None and not category.bounds.intersects(dropped):
            engine.remove_task_from_category(task_id)
            return "category"
        return None

    def _settle(self, state: DragState, zone: DropZone, detached: Optional[str] = None) -> DragResult:
        store = self.board.store
        for root in [state.id] + state.peers:
            task = store.get_task(root)
            if task is None:
                continue
            if task.parent_id is not None:
                store.relayout_children(task.parent_id)
            store.relayout_children(root)
        return DragResult(zone=zone, detached_from=detached, committed=self.board.commit())
