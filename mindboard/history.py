import copy
import logging
from typing import List, Optional

from .config import HISTORY_LIMIT
from .store import Snapshot

logger = logging.getLogger(__name__)


class HistoryManager:
    def __init__(self, initial: Optional[Snapshot] = None, limit: int = HISTORY_LIMIT) -> None:
        self.limit = limit
        self._entries: List[Snapshot] = []
        self._index = -1
        self.reset(initial if initial is not None else {"tasks": {}, "categories": {}})

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def reset(self, snapshot: Snapshot) -> None:
        self._entries = [copy.deepcopy(snapshot)]
        self._index = 0

    def record(self, snapshot: Snapshot) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(copy.deepcopy(snapshot))
        if len(self._entries) > self.limit:
            del self._entries[: len(self._entries) - self.limit]
        self._index = len(self._entries) - 1

    def current(self) -> Snapshot:
        return copy.deepcopy(self._entries[self._index])

    def undo(self) -> Optional[Snapshot]:
        if not self.can_undo:
            return None
        self._index -= 1
        logger.debug("Undo to history entry %d", self._index)
        return self.current()

    def redo(self) -> Optional[Snapshot]:
        if not self.can_redo:
            return None
        self._index += 1
        logger.debug("Redo to history entry %d", self._index)
        return self.current()
