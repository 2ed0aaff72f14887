"""mindboard: a mind-mapping board built around a spatial relationship engine."""
from .board import Board, EditSession
from .drag import DragController, DragResult
from .dropzone import DropAction, DropZone, detect_category_drop, detect_drop_zone, resolve_drop
from .errors import BoardImportError, MindboardError
from .history import HistoryManager
from .layout import category_bounds, child_position
from .models import Category, Point, Size, Task
from .persistence import AutosaveSink
from .relations import RelationshipEngine
from .store import EntityStore

__all__ = [
    "AutosaveSink",
    "Board",
    "BoardImportError",
    "Category",
    "DragController",
    "DragResult",
    "DropAction",
    "DropZone",
    "EditSession",
    "EntityStore",
    "HistoryManager",
    "MindboardError",
    "Point",
    "RelationshipEngine",
    "Size",
    "Task",
    "category_bounds",
    "child_position",
    "detect_category_drop",
    "detect_drop_zone",
    "resolve_drop",
]
