"""
Union track graph and track usage fees.

Movement may use any player's rails, so movement questions are answered on
the union of every player's track. Major city internals (centre to each
outpost) and ferry crossings are public edges with no owner. Building rights
are never derived from this graph.
"""

import heapq
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

import structlog
from pydantic import BaseModel, Field

from ..config import settings
from .major_cities import FerryLink, MajorCityGroup
from .models import EdgeKey, GridCoord, TrackSegment, edge_key

logger = structlog.get_logger()


@dataclass
class UnionTrackGraph:
    """Adjacency of the merged network plus the owners of each edge."""

    adjacency: Dict[GridCoord, Set[GridCoord]] = field(default_factory=dict)
    edge_owners: Dict[EdgeKey, Set[str]] = field(default_factory=dict)

    def add_edge(self, a: GridCoord, b: GridCoord, owner: Optional[str] = None) -> None:
        self.adjacency.setdefault(a, set()).add(b)
        self.adjacency.setdefault(b, set()).add(a)
        if owner is not None:
            self.edge_owners.setdefault(edge_key(a, b), set()).add(owner)

    def neighbors(self, node: Tuple[int, int]) -> Set[GridCoord]:
        return self.adjacency.get(GridCoord(*node), set())

    def has_edge(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        return GridCoord(*b) in self.neighbors(a)

    def owners(self, a: Tuple[int, int], b: Tuple[int, int]) -> Set[str]:
        return self.edge_owners.get(edge_key(a, b), set())


def build_union_track_graph(
    player_tracks: Mapping[str, Iterable[TrackSegment]],
    major_city_groups: Iterable[MajorCityGroup] = (),
    ferry_links: Iterable[FerryLink] = (),
) -> UnionTrackGraph:
    """
    Merge every player's track into one undirected graph.

    Args:
        player_tracks: Player id to that player's segments
        major_city_groups: Clusters whose internal links are public
        ferry_links: Ferry routes, public once on the graph

    Returns:
        UnionTrackGraph with ownership per edge
    """
    graph = UnionTrackGraph()
    for player_id, segments in player_tracks.items():
        for seg in segments:
            graph.add_edge(seg.from_.coord, seg.to.coord, owner=player_id)

    for group in major_city_groups:
        for outpost in group.outposts:
            graph.add_edge(group.center, outpost)

    for ferry in ferry_links:
        graph.add_edge(ferry.point_a, ferry.point_b)

    return graph


class PathEdge(BaseModel):
    """One step of a move and the players owning its track."""

    start: GridCoord
    end: GridCoord
    owner_player_ids: List[str] = Field(default_factory=list)


class TrackUsage(BaseModel):
    """Route of a move over the union graph and the fees it incurs."""

    valid: bool = Field(description="Whether a route exists")
    error: Optional[str] = Field(default=None, description="Reason when invalid")
    path: List[PathEdge] = Field(default_factory=list, description="Edges of the route")
    owners_used: Set[str] = Field(default_factory=set, description="Opponents whose track is used")
    fee: int = Field(default=0, description="Total usage fee owed")


def compute_track_usage_for_move(
    graph: UnionTrackGraph,
    start: Tuple[int, int],
    goal: Tuple[int, int],
    player_id: str,
    fee_per_owner: Optional[int] = None,
) -> TrackUsage:
    """
    Route a move preferring own and public track over opponents' track.

    Own-track and public edges cost 0 and opponent-only edges cost 1, so a
    longer route on the player's own rails beats a shorter one that would
    incur usage fees.

    Args:
        graph: Union track graph
        start: Departure milepost
        goal: Arrival milepost
        player_id: Moving player
        fee_per_owner: Fee per opponent used, defaults to
            ``settings.track_usage_fee``

    Returns:
        TrackUsage with the chosen route and fee
    """
    fee_per_owner = settings.track_usage_fee if fee_per_owner is None else fee_per_owner
    start = GridCoord(*start)
    goal = GridCoord(*goal)

    if start == goal:
        return TrackUsage(valid=True)

    dist = {start: 0}
    parent: Dict[GridCoord, GridCoord] = {}
    heap = [(0, start)]
    found = False

    while heap:
        cost, node = heapq.heappop(heap)
        if cost > dist.get(node, float("inf")):
            continue
        if node == goal:
            found = True
            break

        for nxt in sorted(graph.neighbors(node)):
            owners = graph.owners(node, nxt)
            step = 1 if owners and player_id not in owners else 0
            new_cost = cost + step
            if new_cost < dist.get(nxt, float("inf")):
                dist[nxt] = new_cost
                parent[nxt] = node
                heapq.heappush(heap, (new_cost, nxt))

    if not found:
        return TrackUsage(valid=False, error="No valid path found on union track graph")

    nodes = [goal]
    while nodes[-1] in parent:
        nodes.append(parent[nodes[-1]])
    nodes.reverse()

    edges = []
    owners_used: Set[str] = set()
    for a, b in zip(nodes, nodes[1:]):
        owners = sorted(graph.owners(a, b))
        owners_used.update(o for o in owners if o != player_id)
        edges.append(PathEdge(start=a, end=b, owner_player_ids=owners))

    fee = fee_per_owner * len(owners_used)
    logger.debug("Routed move", player_id=player_id, steps=len(edges), fee=fee)
    return TrackUsage(valid=True, path=edges, owners_used=owners_used, fee=fee)
