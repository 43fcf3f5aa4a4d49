"""Static surcharge table for track edges crossing rivers, lakes and inlets."""

from enum import IntEnum
from typing import Dict, Iterable, Optional, Tuple

from .models import EdgeKey, GridCoord, edge_key


class WaterCrossingType(IntEnum):
    """Extra build cost of a crossing, in ECU millions."""

    NONE = 0
    RIVER = 2
    LAKE = 3  # lakes and ocean inlets


def parse_edge_key(text: str) -> EdgeKey:
    """Parse an ``"r,c|r,c"`` edge string."""
    left, right = text.split("|")
    a = GridCoord(*(int(v) for v in left.split(",")))
    b = GridCoord(*(int(v) for v in right.split(",")))
    return edge_key(a, b)


class WaterCrossings:
    """Direction-independent lookup of crossing surcharges."""

    def __init__(
        self,
        river_edges: Iterable[Tuple[Tuple[int, int], Tuple[int, int]]] = (),
        lake_edges: Iterable[Tuple[Tuple[int, int], Tuple[int, int]]] = (),
    ):
        self._costs: Dict[EdgeKey, WaterCrossingType] = {}
        for a, b in river_edges:
            self._costs[edge_key(a, b)] = WaterCrossingType.RIVER
        # Lake wins if an edge is listed twice
        for a, b in lake_edges:
            self._costs[edge_key(a, b)] = WaterCrossingType.LAKE

    @classmethod
    def from_edge_strings(
        cls,
        river_edges: Iterable[str] = (),
        non_river_water_edges: Iterable[str] = (),
    ) -> "WaterCrossings":
        return cls(
            [parse_edge_key(e) for e in river_edges],
            [parse_edge_key(e) for e in non_river_water_edges],
        )

    def __len__(self) -> int:
        return len(self._costs)

    def crossing_type(self, a: Tuple[int, int], b: Tuple[int, int]) -> WaterCrossingType:
        return self._costs.get(edge_key(a, b), WaterCrossingType.NONE)

    def extra_cost(self, a: Tuple[int, int], b: Tuple[int, int]) -> int:
        return int(self.crossing_type(a, b))


NO_WATER_CROSSINGS = WaterCrossings()


def resolve(crossings: Optional[WaterCrossings]) -> WaterCrossings:
    return crossings if crossings is not None else NO_WATER_CROSSINGS
