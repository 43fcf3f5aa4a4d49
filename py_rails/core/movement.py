"""Validation of explicit train move paths."""

from typing import List, Optional, Sequence, Tuple

import structlog
from pydantic import BaseModel, Field

from .hex_grid import is_hex_adjacent
from .models import CITY_TERRAINS, GridCoord, TRAIN_PROPERTIES, TerrainType
from .reachability import union_graph_for
from .snapshot import WorldSnapshot

logger = structlog.get_logger()

REVERSAL_TERRAINS = CITY_TERRAINS | {TerrainType.FERRY_PORT}


class MovementValidationResult(BaseModel):
    """Outcome of checking one move path."""

    valid: bool = Field(description="Whether the move is legal")
    reason: Optional[str] = Field(default=None, description="Why the move was rejected")
    movement_cost: Optional[int] = Field(default=None, description="Mileposts consumed")


class MovementValidator:
    """Checks a proposed train path against the combined rail network."""

    def __init__(self, snapshot: WorldSnapshot):
        self.snapshot = snapshot
        self.grid = snapshot.grid
        self.graph = union_graph_for(snapshot)

    def city_of(self, coord: GridCoord) -> Optional[str]:
        """Name of the city a milepost belongs to, including major city outposts."""
        point = self.grid.points.get(coord)
        if point is not None and point.city is not None:
            return point.city.name
        return self.snapshot.cluster_lookup.get(coord)

    def validate(self, path: Sequence[Tuple[int, int]]) -> MovementValidationResult:
        """
        Validate a path whose first point is the departure milepost.

        Before initial placement the train has no position; the path must then
        start at a major city and the full train speed is available.

        Args:
            path: Mileposts visited, in order

        Returns:
            MovementValidationResult with the movement cost on success
        """
        if len(path) < 2:
            return MovementValidationResult(
                valid=False, reason="Path must contain at least 2 points (start + destination)"
            )

        steps: List[GridCoord] = [GridCoord(*p) for p in path]
        for coord in steps:
            self.grid.point(coord)

        snapshot = self.snapshot
        if snapshot.position is None:
            if self.grid.terrain(steps[0]) != TerrainType.MAJOR_CITY:
                return MovementValidationResult(
                    valid=False, reason="Initial placement must be at a Major City"
                )
            budget = TRAIN_PROPERTIES[snapshot.train_type].speed
        else:
            if steps[0] != GridCoord(*snapshot.position):
                return MovementValidationResult(
                    valid=False, reason="Path must start at the train's current position"
                )
            budget = snapshot.remaining_movement

        total = 0
        previous: Optional[Tuple[GridCoord, GridCoord]] = None
        for i, (a, b) in enumerate(zip(steps, steps[1:])):
            ferry = self.grid.is_ferry_crossing(a, b)
            if not ferry and not is_hex_adjacent(a, b):
                return MovementValidationResult(
                    valid=False,
                    reason=f"Points are not adjacent at step {i}: {tuple(a)} to {tuple(b)}",
                )

            city_a = self.city_of(a)
            same_city = city_a is not None and city_a == self.city_of(b)

            if not self.graph.has_edge(a, b) and not same_city:
                return MovementValidationResult(
                    valid=False, reason=f"No track connects {tuple(a)} to {tuple(b)}"
                )

            if previous == (b, a) and self.grid.terrain(a) not in REVERSAL_TERRAINS:
                return MovementValidationResult(
                    valid=False, reason="Reversal only allowed at cities or ferry ports"
                )

            if not same_city:
                total += 1
            previous = (a, b)

        if total > budget:
            return MovementValidationResult(
                valid=False,
                reason=f"Path costs {total} movement points but only {budget} remaining",
            )

        logger.debug("Validated move path", player_id=snapshot.player_id, cost=total)
        return MovementValidationResult(valid=True, movement_cost=total)

    @classmethod
    def validate_move_path(
        cls, snapshot: WorldSnapshot, path: Sequence[Tuple[int, int]]
    ) -> MovementValidationResult:
        return cls(snapshot).validate(path)
