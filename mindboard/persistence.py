"""Board (de)serialization: JSON export/import and the autosave sink.

Import never trusts the payload: structure and field types are validated up
front (``BoardImportError`` on failure, nothing loaded) and references are
then repaired so the loaded board satisfies the same invariants as a live one.
"""
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .config import AUTOSAVE_KEY, AUTOSAVE_MAX_AGE_HOURS, DEFAULT_HOME
from .errors import BoardImportError
from .models import Category, Task
from .store import EntityStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------- Validation / repair ----------
def parse_state(data: Any) -> Tuple[Dict[str, Task], Dict[str, Category]]:
    if not isinstance(data, Mapping):
        raise BoardImportError("board data must be an object")
    raw_tasks = data.get("tasks")
    raw_categories = data.get("categories", {})
    if raw_categories is None:
        raw_categories = {}
    if not isinstance(raw_tasks, Mapping):
        raise BoardImportError("board data needs a 'tasks' object")
    if not isinstance(raw_categories, Mapping):
        raise BoardImportError("'categories' must be an object")

    tasks: Dict[str, Task] = {}
    for key, raw in raw_tasks.items():
        if not isinstance(key, str) or not key:
            raise BoardImportError(f"invalid task key: {key!r}")
        tasks[key] = Task.from_dict(key, raw)
    categories: Dict[str, Category] = {}
    for key, raw in raw_categories.items():
        if not isinstance(key, str) or not key:
            raise BoardImportError(f"invalid category key: {key!r}")
        categories[key] = Category.from_dict(key, raw)

    _repair_hierarchy(tasks)
    categories = _repair_categories(tasks, categories)
    _settle_layout(tasks)
    return tasks, categories


def _repair_hierarchy(tasks: Dict[str, Task]) -> None:
    claimed: Dict[str, str] = {}
    dropped = 0
    for task in tasks.values():
        kept: List[str] = []
        for cid in task.children_ids:
            if cid in tasks and cid != task.id and cid not in claimed:
                claimed[cid] = task.id
                kept.append(cid)
            else:
                dropped += 1
        task.children_ids = kept
    for task in tasks.values():
        parent_id = claimed.get(task.id)
        if task.parent_id != parent_id:
            dropped += 1
        task.parent_id = parent_id

    # break any loop by cutting the edge that closes it
    settled: set = set()
    for task in tasks.values():
        path: List[str] = []
        on_path = set()
        current: Optional[str] = task.id
        while current is not None and current not in settled:
            if current in on_path:
                looped = tasks[current]
                tasks[looped.parent_id].children_ids.remove(current)
                looped.parent_id = None
                dropped += 1
                break
            on_path.add(current)
            path.append(current)
            current = tasks[current].parent_id
        settled.update(path)

    if dropped:
        logger.warning("Import repaired %d inconsistent parent/child reference(s)", dropped)


def _repair_categories(tasks: Dict[str, Task], categories: Dict[str, Category]) -> Dict[str, Category]:
    assigned: Dict[str, str] = {}
    kept: Dict[str, Category] = {}
    for category in categories.values():
        members: List[str] = []
        for tid in category.task_ids:
            task = tasks.get(tid)
            if task is None or task.parent_id is not None or tid in assigned or tid in members:
                continue
            members.append(tid)
        if len(members) < 2:
            logger.warning("Import dropped category %s with %d valid member(s)", category.id, len(members))
            continue
        category.task_ids = members
        for tid in members:
            assigned[tid] = category.id
        kept[category.id] = category
    for task in tasks.values():
        category_id = assigned.get(task.id)
        if task.category_id != category_id:
            logger.warning("Import reset category of task %s (%s -> %s)", task.id, task.category_id, category_id)
        task.category_id = category_id
    return kept


def _settle_layout(tasks: Dict[str, Task]) -> None:
    """Put every child back on its layout slot and restyle from the repaired links."""
    store = EntityStore()
    store.tasks = tasks
    for task in tasks.values():
        if task.parent_id is None:
            store.relayout_children(task.id)
        store.restyle(task.id)


# ---------- JSON export / import ----------
def dumps(state: Mapping[str, Any]) -> str:
    return json.dumps(state, indent=2, ensure_ascii=False)


def loads(text: str) -> Tuple[Dict[str, Task], Dict[str, Category]]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise BoardImportError(f"not valid JSON: {exc}") from exc
    return parse_state(data)


def export_json(state: Mapping[str, Any], path: PathLike) -> Path:
    target = Path(path)
    with open(target, "w", encoding="utf-8") as f:
        f.write(dumps(state))
    logger.info("Exported board to %s", target)
    return target


def read_json(path: PathLike) -> Any:
    """Read an exported board file; any read or parse failure is a BoardImportError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise BoardImportError(f"cannot read {path}: {exc}") from exc


# ---------- Autosave ----------
class AutosaveSink:
    """Timestamped local snapshot stored under a fixed key.

    Failures are logged and swallowed: autosave is best effort and must never
    interrupt editing.
    """

    def __init__(
        self,
        directory: PathLike = DEFAULT_HOME,
        key: str = AUTOSAVE_KEY,
        max_age_hours: float = AUTOSAVE_MAX_AGE_HOURS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = Path(directory)
        self.key = key
        self.max_age_hours = max_age_hours
        self.clock = clock

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def save(self, state: Mapping[str, Any]) -> bool:
        record = {"data": state, "timestamp": int(self.clock() * 1000)}
        tmp = self.path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(record, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Autosave failed: %s", exc)
            return False
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                record = json.load(f)
            data = record["data"]
            timestamp = float(record["timestamp"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Could not read autosave %s: %s", self.path, exc)
            return None
        age_hours = (self.clock() * 1000 - timestamp) / (1000 * 60 * 60)
        if age_hours >= self.max_age_hours:
            logger.info("Discarding autosave older than %s hours", self.max_age_hours)
            self.clear()
            return None
        return data

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove autosave %s: %s", self.path, exc)
