"""
Movement-bounded reachability over the combined rail network.

Trains may run on any player's track, so the search walks the union track
graph. Each edge is one hop regardless of terrain or build cost.
"""

from collections import deque
from typing import Dict, List, Optional

import structlog
from pydantic import BaseModel, Field

from .models import GridCoord, TerrainType
from .snapshot import WorldSnapshot
from .track_graph import UnionTrackGraph, build_union_track_graph

logger = structlog.get_logger()


class ReachableCity(BaseModel):
    """A city the train can arrive at this turn."""

    name: str = Field(description="City name")
    row: int = Field(description="Milepost row")
    col: int = Field(description="Milepost column")
    city_type: TerrainType = Field(description="City size")
    distance: int = Field(description="Hops from the train position")

    @property
    def coord(self) -> GridCoord:
        return GridCoord(self.row, self.col)


def union_graph_for(snapshot: WorldSnapshot) -> UnionTrackGraph:
    """Union track graph of the snapshot, including public city and ferry links."""
    return build_union_track_graph(
        snapshot.player_tracks(),
        snapshot.major_city_groups,
        snapshot.ferry_links,
    )


def compute_reachable_cities(
    snapshot: WorldSnapshot,
    max_movement: int,
    graph: Optional[UnionTrackGraph] = None,
) -> List[ReachableCity]:
    """
    List the cities reachable from the train position.

    Args:
        snapshot: Current world view
        max_movement: Hop budget
        graph: Prebuilt union track graph, built from the snapshot when omitted

    Returns:
        Reachable cities ordered by (distance, name). A city spanning several
        mileposts is reported at each milepost reached.
    """
    if snapshot.position is None:
        return []

    start = GridCoord(*snapshot.position)
    if graph is None:
        graph = union_graph_for(snapshot)

    distances: Dict[GridCoord, int] = {start: 0}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        hops = distances[node]
        if hops >= max_movement:
            continue
        for nxt in sorted(graph.neighbors(node)):
            if nxt not in distances:
                distances[nxt] = hops + 1
                queue.append(nxt)

    reachable = []
    points = snapshot.grid.points
    for coord, hops in distances.items():
        point = points.get(coord)
        if point is None or point.city is None:
            continue
        reachable.append(
            ReachableCity(
                name=point.city.name,
                row=coord.row,
                col=coord.col,
                city_type=point.city.type,
                distance=hops,
            )
        )

    reachable.sort(key=lambda c: (c.distance, c.name, c.row, c.col))
    logger.debug(
        "Scanned reachable cities",
        player_id=snapshot.player_id,
        max_movement=max_movement,
        visited=len(distances),
        cities=len(reachable),
    )
    return reachable


def reachable_city_names(
    snapshot: WorldSnapshot, max_movement: int, graph: Optional[UnionTrackGraph] = None
) -> Dict[str, int]:
    """Closest hop distance per reachable city name."""
    names: Dict[str, int] = {}
    for city in compute_reachable_cities(snapshot, max_movement, graph):
        names.setdefault(city.name, city.distance)
    return names
