"""
Budget-bounded track construction search.

Finds the cheapest new track from a player's existing network (or, before the
first build, from the train's city) to a target milepost or major city.
Distances are construction costs priced by ``TerrainCostModel``. Search
fronts are settled in (cost, row, col) order so equal-cost alternatives
always resolve the same way.
"""

import heapq
from typing import Dict, List, Optional, Set

import structlog

from .errors import UnknownGridPointError
from .models import EdgeKey, GridCoord, Milepost, TrackSegment, edge_key, segment_edges, segment_nodes
from .snapshot import WorldSnapshot
from .terrain_costs import TerrainCostModel

logger = structlog.get_logger()


def _foreign_edges(snapshot: WorldSnapshot, own_edges: Set[EdgeKey]) -> Set[EdgeKey]:
    """Edges built by other players and not by the current one."""
    foreign: Set[EdgeKey] = set()
    for player_id, segments in snapshot.player_tracks().items():
        if player_id == snapshot.player_id:
            continue
        foreign |= segment_edges(segments)
    return foreign - own_edges


def compute_build_segments(
    snapshot: WorldSnapshot,
    target_row: int,
    target_col: int,
    budget: int,
    cost_model: Optional[TerrainCostModel] = None,
) -> List[TrackSegment]:
    """
    Propose the cheapest new track reaching a target milepost.

    Every node of the player's network is a source at cost 0. With an empty
    network the train position is the source, widened to every milepost of its
    major city. A major city target counts as reached at any of its mileposts.
    Edges owned only by other players are not buildable and edges already
    owned cost nothing.

    The returned segments form one contiguous run. Ferry crossings are public
    and are not emitted; an edge into a ferry port whose route is already in
    use is emitted at cost 0.

    Args:
        snapshot: Current world view
        target_row: Target milepost row
        target_col: Target milepost column
        budget: Most the returned segments may cost in total
        cost_model: Pricing context, built for the current player when omitted

    Returns:
        New segments in traversal order from the network towards the target,
        empty when the target is already connected or cannot be reached
        within budget

    Raises:
        UnknownGridPointError: the target is not on the map
    """
    grid = snapshot.grid
    target = GridCoord(target_row, target_col)
    if target not in grid:
        raise UnknownGridPointError(target_row, target_col)

    targets = _cluster_of(snapshot, target)
    own_segments = snapshot.track_segments
    own_nodes = segment_nodes(own_segments)
    if own_nodes & targets:
        return []

    if own_nodes:
        sources = own_nodes
    elif snapshot.position is not None and snapshot.position in grid:
        sources = _cluster_of(snapshot, GridCoord(*snapshot.position))
    else:
        logger.debug("No build origin", player_id=snapshot.player_id)
        return []

    if sources & targets:
        return []

    if cost_model is None:
        cost_model = TerrainCostModel.for_player(
            grid,
            snapshot.player_id,
            snapshot.player_tracks(),
            cluster_lookup=snapshot.cluster_lookup,
            water_crossings=snapshot.water_crossings,
        )
    blocked = _foreign_edges(snapshot, cost_model.own_edges)

    dist: Dict[GridCoord, int] = {}
    parent: Dict[GridCoord, GridCoord] = {}
    settled: Set[GridCoord] = set()
    heap = []
    for source in sorted(sources):
        if grid.is_water(source):
            continue
        dist[source] = 0
        heapq.heappush(heap, (0, source.row, source.col))

    found: Optional[GridCoord] = None
    while heap:
        cost, row, col = heapq.heappop(heap)
        node = GridCoord(row, col)
        if node in settled:
            continue
        settled.add(node)
        if node in targets:
            found = node
            break

        for nxt in grid.neighbors(node):
            if nxt in settled:
                continue
            if edge_key(node, nxt) in blocked:
                continue
            if not cost_model.is_buildable(node, nxt):
                continue

            new_cost = cost + cost_model.edge_cost(node, nxt)
            if new_cost > budget:
                continue
            if new_cost < dist.get(nxt, budget + 1):
                dist[nxt] = new_cost
                parent[nxt] = node
                heapq.heappush(heap, (new_cost, nxt.row, nxt.col))

    if found is None:
        logger.debug(
            "Target not reachable within budget",
            player_id=snapshot.player_id,
            target=target,
            budget=budget,
            explored=len(settled),
        )
        return []

    nodes = [found]
    while nodes[-1] in parent:
        nodes.append(parent[nodes[-1]])
    nodes.reverse()

    segments = []
    for a, b in zip(nodes, nodes[1:]):
        if cost_model.owns_edge(a, b):
            # Owned track after new segments ends the run
            if segments:
                break
            continue
        if grid.is_ferry_crossing(a, b):
            continue
        segments.append(
            TrackSegment(
                from_=_milepost(snapshot, a),
                to=_milepost(snapshot, b),
                cost=cost_model.edge_cost(a, b),
            )
        )

    logger.debug(
        "Computed build segments",
        player_id=snapshot.player_id,
        target=target,
        reached=found,
        segments=len(segments),
        cost=dist[found],
    )
    return segments


def _cluster_of(snapshot: WorldSnapshot, coord: GridCoord) -> Set[GridCoord]:
    """Every milepost of the major city at coord, or just coord."""
    city = snapshot.cluster_lookup.get(coord)
    if city is None:
        return {coord}
    return {c for c, name in snapshot.cluster_lookup.items() if name == city}


def _milepost(snapshot: WorldSnapshot, coord: GridCoord) -> Milepost:
    return snapshot.grid.point(coord).to_milepost()
