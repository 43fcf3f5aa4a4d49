"""
Major city clusters and ferry links derived from map data.

A major city occupies its centre milepost plus a ring of outposts. The
cluster counts as one connectivity target: the first edge a player builds
into any of its mileposts gets a flat price, movement inside a cluster is
public, and track is never built between two mileposts of the same cluster.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from .models import GridCoord, GridPoint, TerrainType, TrackSegment


class MajorCityGroup(BaseModel):
    """Centre and outposts of one major city."""

    model_config = ConfigDict(frozen=True)

    city_name: str = Field(description="City name")
    center: GridCoord = Field(description="Centre milepost")
    outposts: List[GridCoord] = Field(default_factory=list, description="Outpost mileposts")

    @property
    def mileposts(self) -> List[GridCoord]:
        return [self.center, *self.outposts]


class FerryLink(BaseModel):
    """A ferry connection as an edge between its two ports."""

    model_config = ConfigDict(frozen=True)

    name: str
    point_a: GridCoord
    point_b: GridCoord
    cost: int


def get_major_city_groups(points: Iterable[GridPoint]) -> List[MajorCityGroup]:
    """Collect every major city of the map, ordered by city name."""
    points = list(points)
    listed_outposts = {
        GridCoord(*o) for p in points if p.city is not None for o in p.city.outposts
    }

    groups = []
    for point in points:
        city = point.city
        if city is None or city.type != TerrainType.MAJOR_CITY:
            continue
        # Outpost points may repeat the city record; only the centre lists outposts
        if point.coord in listed_outposts:
            continue
        if city.outposts or point.terrain == TerrainType.MAJOR_CITY:
            groups.append(
                MajorCityGroup(
                    city_name=city.name,
                    center=point.coord,
                    outposts=[GridCoord(*o) for o in city.outposts],
                )
            )

    by_name: Dict[str, MajorCityGroup] = {}
    for group in groups:
        current = by_name.get(group.city_name)
        if current is None or len(group.outposts) > len(current.outposts):
            by_name[group.city_name] = group
    return [by_name[name] for name in sorted(by_name)]


def build_cluster_lookup(groups: Iterable[MajorCityGroup]) -> Dict[GridCoord, str]:
    """Map every major city milepost to its city name."""
    lookup: Dict[GridCoord, str] = {}
    for group in groups:
        for coord in group.mileposts:
            lookup[coord] = group.city_name
    return lookup


def get_ferry_links(points: Iterable[GridPoint]) -> List[FerryLink]:
    """One link per ferry connection record, deduplicated across both ports."""
    seen: Set[tuple] = set()
    links = []
    for point in points:
        ferry = point.ferry_connection
        if ferry is None:
            continue
        a, b = sorted(GridCoord(*e) for e in ferry.endpoints)
        if (a, b) in seen:
            continue
        seen.add((a, b))
        links.append(FerryLink(name=ferry.name, point_a=a, point_b=b, cost=ferry.cost))
    return links


def count_connected_major_cities(
    segments: Iterable[TrackSegment],
    groups: List[MajorCityGroup],
    ferry_links: Optional[List[FerryLink]] = None,
) -> int:
    """
    Count the major cities joined by one continuous line of a player's track.

    Mileposts of the same major city are treated as linked, and a ferry
    route counts as linked once the player has track at both ports. Only the
    largest connected component is counted, which is the victory measure.

    Args:
        segments: The player's track
        groups: Major city clusters of the map
        ferry_links: Ferry connections of the map

    Returns:
        Number of distinct major cities in the best component
    """
    graph: Dict[GridCoord, Set[GridCoord]] = {}

    def link(a: GridCoord, b: GridCoord) -> None:
        graph.setdefault(a, set()).add(b)
        graph.setdefault(b, set()).add(a)

    for seg in segments:
        link(seg.from_.coord, seg.to.coord)

    if not graph:
        return 0

    for group in groups:
        present = [c for c in group.mileposts if c in graph]
        for other in present[1:]:
            link(present[0], other)

    for ferry in ferry_links or []:
        if ferry.point_a in graph and ferry.point_b in graph:
            link(ferry.point_a, ferry.point_b)

    best = 0
    visited: Set[GridCoord] = set()
    for start in graph:
        if start in visited:
            continue
        component = {start}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            for nxt in graph[node]:
                if nxt not in component:
                    component.add(nxt)
                    queue.append(nxt)
        visited |= component

        cities = sum(1 for g in groups if any(c in component for c in g.mileposts))
        best = max(best, cities)

    return best
