"""
Track pricing rules.

The price of an edge depends on the destination milepost's terrain, with
these special cases:

1. The first edge a player builds into a major city cluster costs a flat
   amount whatever the terrain; later connections use terrain pricing.
2. Building into a ferry port pays the ferry connection cost once. Once any
   player has track at either port of the route, further connections to
   either port are free, as is the crossing between the two ports.
3. An edge the player already owns costs nothing, in either direction.
4. Edges listed in the water crossing table carry a river or lake surcharge.

Water is never buildable, and neither is an edge between two mileposts of the
same major city.
"""

from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

import structlog

from ..config import settings
from .errors import UnbuildableEdgeError
from .hex_grid import HexGrid
from .major_cities import build_cluster_lookup, get_major_city_groups
from .models import (
    GridCoord,
    GridPoint,
    TerrainType,
    TrackSegment,
    edge_key,
    segment_edges,
    segment_nodes,
)
from .water_crossings import WaterCrossings, resolve

logger = structlog.get_logger()

TERRAIN_BUILD_COSTS: Dict[TerrainType, int] = {
    TerrainType.CLEAR: 1,
    TerrainType.MOUNTAIN: 2,
    TerrainType.ALPINE: 5,
    TerrainType.SMALL_CITY: 3,
    TerrainType.MEDIUM_CITY: 3,
    TerrainType.MAJOR_CITY: 5,
    TerrainType.FERRY_PORT: 1,  # ports without a connection record
}


class TerrainCostModel:
    """Prices edges for one player against a fixed view of the world."""

    def __init__(
        self,
        grid: HexGrid,
        own_segments: Iterable[TrackSegment] = (),
        all_segments: Iterable[TrackSegment] = (),
        cluster_lookup: Optional[Dict[GridCoord, str]] = None,
        water_crossings: Optional[WaterCrossings] = None,
        major_city_connection_cost: Optional[int] = None,
    ) -> None:
        """
        Bind the pricing context.

        Args:
            grid: Map adjacency
            own_segments: Track of the player paying for construction
            all_segments: Track of every player, used to settle ferry tolls
            cluster_lookup: Milepost to major city name, derived from the map
                when omitted
            water_crossings: Surcharge table
            major_city_connection_cost: Flat first-connection price, defaults
                to ``settings.major_city_connection_cost``
        """
        own_segments = list(own_segments)
        self.grid = grid
        self.own_edges = segment_edges(own_segments)
        self.own_nodes = segment_nodes(own_segments)
        self.touched_nodes: Set[GridCoord] = segment_nodes(all_segments) | self.own_nodes

        if cluster_lookup is None:
            cluster_lookup = build_cluster_lookup(get_major_city_groups(grid.points.values()))
        self.cluster_lookup = cluster_lookup
        self.connected_cities = {
            cluster_lookup[node] for node in self.own_nodes if node in cluster_lookup
        }

        self.water_crossings = resolve(water_crossings)
        self.major_city_connection_cost = (
            major_city_connection_cost
            if major_city_connection_cost is not None
            else settings.major_city_connection_cost
        )

    @classmethod
    def for_player(
        cls,
        grid: HexGrid,
        player_id: str,
        player_tracks: Mapping[str, Iterable[TrackSegment]],
        own_segments: Optional[Iterable[TrackSegment]] = None,
        **kwargs,
    ) -> "TerrainCostModel":
        """
        Build the model for one player out of every player's track.

        Args:
            grid: Map adjacency
            player_id: Player paying for construction
            player_tracks: Player id to segments, for every player
            own_segments: Overrides the player's own entry in player_tracks
            **kwargs: Passed through to the constructor
        """
        if own_segments is None:
            own_segments = player_tracks.get(player_id, [])
        own_segments = list(own_segments)
        all_segments = [seg for segments in player_tracks.values() for seg in segments]
        model = cls(grid, own_segments=own_segments, all_segments=all_segments + own_segments, **kwargs)
        logger.debug(
            "Built cost model",
            player_id=player_id,
            own_edges=len(model.own_edges),
            connected_cities=sorted(model.connected_cities),
        )
        return model

    def owns_edge(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        return edge_key(a, b) in self.own_edges

    def is_buildable(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """Whether track can run along a -> b at all."""
        if not self.grid.is_adjacent(a, b):
            return False
        city = self.cluster_lookup.get(GridCoord(*a))
        return city is None or city != self.cluster_lookup.get(GridCoord(*b))

    def edge_cost(self, a: Tuple[int, int], b: Tuple[int, int]) -> int:
        """
        Price of the edge a -> b for this player.

        Raises:
            UnbuildableEdgeError: the edge is not adjacent, touches water, or
                lies inside one major city
        """
        a = GridCoord(*a)
        b = GridCoord(*b)
        if not self.is_buildable(a, b):
            raise UnbuildableEdgeError(f"Track cannot be built from {tuple(a)} to {tuple(b)}")

        if self.owns_edge(a, b):
            return 0
        if self.grid.is_ferry_crossing(a, b):
            return 0

        destination = self.grid.point(b)
        return self._destination_cost(destination) + self.water_crossings.extra_cost(a, b)

    def _destination_cost(self, destination: GridPoint) -> int:
        city = self.cluster_lookup.get(destination.coord)
        if city is not None and city not in self.connected_cities:
            return self.major_city_connection_cost

        ferry = destination.ferry_connection
        if destination.terrain == TerrainType.FERRY_PORT and ferry is not None:
            if any(GridCoord(*port) in self.touched_nodes for port in ferry.endpoints):
                return 0
            return ferry.cost

        return TERRAIN_BUILD_COSTS[destination.terrain]
