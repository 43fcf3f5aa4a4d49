"""
Game data model shared by every engine component.

Map data (grid points, cities, ferry connections) is immutable for the
lifetime of a game. Track segments are undirected edges between two
mileposts whose cost is fixed when the segment is built. Graph algorithms key
nodes by ``GridCoord`` tuples and edges by ``edge_key`` so that ``(A, B)`` and
``(B, A)`` are the same edge.
"""

from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field


class GridCoord(NamedTuple):
    """Row/column position of a milepost."""
    row: int
    col: int


EdgeKey = Tuple[GridCoord, GridCoord]


def edge_key(a: Tuple[int, int], b: Tuple[int, int]) -> EdgeKey:
    """Direction-independent key for the edge between two coordinates."""
    a = GridCoord(*a)
    b = GridCoord(*b)
    return (a, b) if a <= b else (b, a)


class TerrainType(str, Enum):
    """Terrain of a milepost."""

    CLEAR = "Clear"
    MOUNTAIN = "Mountain"
    ALPINE = "Alpine"
    SMALL_CITY = "SmallCity"
    MEDIUM_CITY = "MediumCity"
    MAJOR_CITY = "MajorCity"
    WATER = "Water"
    FERRY_PORT = "FerryPort"


CITY_TERRAINS = frozenset(
    {TerrainType.SMALL_CITY, TerrainType.MEDIUM_CITY, TerrainType.MAJOR_CITY}
)


class CityInfo(BaseModel):
    """City located on a grid point."""

    model_config = ConfigDict(frozen=True)

    type: TerrainType = Field(description="City size (Small, Medium or Major city)")
    name: str = Field(description="City name")
    outposts: List[GridCoord] = Field(
        default_factory=list, description="Outpost mileposts of a major city"
    )


class FerryConnection(BaseModel):
    """Ferry route joining two ferry ports, shared by every player."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Ferry route name")
    endpoints: Tuple[GridCoord, GridCoord] = Field(description="The two ferry ports")
    cost: int = Field(description="One-time cost paid by the first player to connect")

    def partner_of(self, coord: Tuple[int, int]) -> Optional[GridCoord]:
        """Return the opposite endpoint, or None if coord is not an endpoint."""
        a, b = self.endpoints
        if coord == a:
            return b
        if coord == b:
            return a
        return None


class GridPoint(BaseModel):
    """One milepost of the game map."""

    model_config = ConfigDict(frozen=True)

    row: int = Field(description="Grid row")
    col: int = Field(description="Grid column")
    x: float = Field(default=0.0, description="Map x coordinate")
    y: float = Field(default=0.0, description="Map y coordinate")
    terrain: TerrainType = Field(default=TerrainType.CLEAR, description="Terrain type")
    city: Optional[CityInfo] = Field(default=None, description="City on this milepost")
    ferry_connection: Optional[FerryConnection] = Field(
        default=None, description="Ferry route served by this port"
    )

    @property
    def coord(self) -> GridCoord:
        return GridCoord(self.row, self.col)

    @property
    def is_water(self) -> bool:
        return self.terrain == TerrainType.WATER

    def to_milepost(self) -> "Milepost":
        return Milepost(row=self.row, col=self.col, x=self.x, y=self.y, terrain=self.terrain)


class Milepost(BaseModel):
    """Endpoint of a track segment."""

    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    x: float = 0.0
    y: float = 0.0
    terrain: Optional[TerrainType] = None

    @property
    def coord(self) -> GridCoord:
        return GridCoord(self.row, self.col)


class TrackSegment(BaseModel):
    """Undirected track edge with the cost paid when it was built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: Milepost = Field(alias="from", description="One endpoint")
    to: Milepost = Field(description="Other endpoint")
    cost: int = Field(description="Build cost in ECU millions")

    @property
    def key(self) -> EdgeKey:
        return edge_key(self.from_.coord, self.to.coord)

    def touches(self, coord: Tuple[int, int]) -> bool:
        return coord == self.from_.coord or coord == self.to.coord


def segment_nodes(segments: Iterable[TrackSegment]) -> Set[GridCoord]:
    """All coordinates that appear as a segment endpoint."""
    nodes: Set[GridCoord] = set()
    for seg in segments:
        nodes.add(seg.from_.coord)
        nodes.add(seg.to.coord)
    return nodes


def segment_edges(segments: Iterable[TrackSegment]) -> Set[EdgeKey]:
    return {seg.key for seg in segments}


def total_cost(segments: Iterable[TrackSegment]) -> int:
    return sum(seg.cost for seg in segments)


class PlayerNetwork(BaseModel):
    """Track owned by one player plus its spend counters."""

    player_id: str = Field(description="Owning player")
    segments: List[TrackSegment] = Field(default_factory=list, description="Built track")
    turn_build_cost: int = Field(default=0, description="Spent on building this turn")
    total_cost: int = Field(default=0, description="Spent on building over the game")

    def nodes(self) -> Set[GridCoord]:
        return segment_nodes(self.segments)

    def edges(self) -> Set[EdgeKey]:
        return segment_edges(self.segments)

    def has_edge(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        return edge_key(a, b) in self.edges()

    def start_turn(self) -> None:
        """Reset the per-turn spend counter."""
        self.turn_build_cost = 0

    def add_segments(self, segments: Iterable[TrackSegment]) -> int:
        """
        Append segments, ignoring edges the player already owns.

        Returns:
            Cost charged for the segments actually added
        """
        existing = self.edges()
        added = 0
        for seg in segments:
            if seg.key in existing:
                continue
            self.segments.append(seg)
            existing.add(seg.key)
            added += seg.cost
        self.turn_build_cost += added
        self.total_cost += added
        return added


class TrainType(str, Enum):
    """Train models, differing in speed and cargo capacity."""

    FREIGHT = "Freight"
    FAST_FREIGHT = "FastFreight"
    HEAVY_FREIGHT = "HeavyFreight"
    SUPERFREIGHT = "Superfreight"


class TrainProperties(NamedTuple):
    speed: int  # mileposts per turn
    capacity: int  # cargo slots


TRAIN_PROPERTIES: Dict[TrainType, TrainProperties] = {
    TrainType.FREIGHT: TrainProperties(speed=9, capacity=2),
    TrainType.FAST_FREIGHT: TrainProperties(speed=12, capacity=2),
    TrainType.HEAVY_FREIGHT: TrainProperties(speed=9, capacity=3),
    TrainType.SUPERFREIGHT: TrainProperties(speed=12, capacity=3),
}


class Demand(BaseModel):
    """One line of a demand card: deliver resource to city for payment."""

    model_config = ConfigDict(frozen=True)

    city: str = Field(description="Destination city")
    resource: str = Field(description="Cargo type wanted")
    payment: int = Field(default=0, description="Payout in ECU millions")


class DemandCard(BaseModel):
    """Demand card held in a player's hand."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Card identifier")
    demands: List[Demand] = Field(default_factory=list, description="Demand lines")
