"""Exceptions raised for caller contract violations."""


class RailEngineError(Exception):
    """Base class for engine errors."""


class UnknownGridPointError(RailEngineError, KeyError):
    """A referenced grid coordinate does not exist on the map."""

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        super().__init__(f"No grid point at ({row},{col})")

    def __str__(self) -> str:
        return f"No grid point at ({self.row},{self.col})"


class UnbuildableEdgeError(RailEngineError, ValueError):
    """Track may never be built along this edge."""
