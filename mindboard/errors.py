"""Exception types raised by mindboard."""


class MindboardError(Exception):
    """Base class for board errors."""


class BoardImportError(MindboardError, ValueError):
    """A persisted board payload could not be parsed or validated.

    The store is never touched when this is raised; callers are expected to
    tell the user and carry on with the current board.
    """
