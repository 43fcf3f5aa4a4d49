"""Point-in-time world view handed to the engine by the game-state service."""

from functools import cached_property
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .hex_grid import HexGrid
from .major_cities import (
    FerryLink,
    MajorCityGroup,
    build_cluster_lookup,
    get_ferry_links,
    get_major_city_groups,
)
from .models import (
    DemandCard,
    GridCoord,
    GridPoint,
    TRAIN_PROPERTIES,
    TrackSegment,
    TrainType,
)
from .water_crossings import WaterCrossings


class WorldSnapshot(BaseModel):
    """
    Immutable state of one player's turn.

    ``track_segments`` is the current player's network, ``all_player_tracks``
    holds every player's network (the current player's entry may be absent).
    Derived map indexes are computed lazily and cached per snapshot.
    """

    model_config = ConfigDict(frozen=True)

    game_id: str = Field(default="", description="Game identifier")
    player_id: str = Field(description="Player whose turn this is")
    position: Optional[GridCoord] = Field(default=None, description="Train milepost")
    remaining_movement: int = Field(default=0, description="Movement left this turn, in hops")
    money: int = Field(default=0, description="Cash in ECU millions")
    carried_cargo: List[str] = Field(default_factory=list, description="Loads on the train")
    train_type: TrainType = Field(default=TrainType.FREIGHT, description="Current train")
    demand_cards: List[DemandCard] = Field(default_factory=list, description="Cards in hand")
    map_points: List[GridPoint] = Field(default_factory=list, description="Every milepost")
    track_segments: List[TrackSegment] = Field(default_factory=list, description="Own track")
    all_player_tracks: Dict[str, List[TrackSegment]] = Field(
        default_factory=dict, description="Track of every player"
    )
    city_supply: Dict[str, List[str]] = Field(
        default_factory=dict, description="Standing loads available per city"
    )
    dropped_cargo: Dict[str, List[str]] = Field(
        default_factory=dict, description="Loads dropped at each city"
    )
    turn_build_cost_so_far: int = Field(default=0, description="Build spend this turn")
    crossgrade_spend_mark: Optional[int] = Field(
        default=None, description="Turn spend right after a crossgrade, if one happened"
    )
    river_crossings: List[str] = Field(default_factory=list, description='River edges "r,c|r,c"')
    lake_crossings: List[str] = Field(
        default_factory=list, description='Lake and inlet edges "r,c|r,c"'
    )

    @cached_property
    def grid(self) -> HexGrid:
        return HexGrid(self.map_points)

    @cached_property
    def major_city_groups(self) -> List[MajorCityGroup]:
        return get_major_city_groups(self.map_points)

    @cached_property
    def cluster_lookup(self) -> Dict[GridCoord, str]:
        return build_cluster_lookup(self.major_city_groups)

    @cached_property
    def ferry_links(self) -> List[FerryLink]:
        return get_ferry_links(self.map_points)

    @cached_property
    def water_crossings(self) -> WaterCrossings:
        return WaterCrossings.from_edge_strings(self.river_crossings, self.lake_crossings)

    @property
    def capacity(self) -> int:
        return TRAIN_PROPERTIES[self.train_type].capacity

    def player_tracks(self) -> Dict[str, List[TrackSegment]]:
        """Every player's track with the current player's entry taken from ``track_segments``."""
        tracks = {pid: segs for pid, segs in self.all_player_tracks.items() if pid != self.player_id}
        tracks[self.player_id] = self.track_segments
        return tracks

    def find_demand_card(self, card_id: int) -> Optional[DemandCard]:
        for card in self.demand_cards:
            if card.id == card_id:
                return card
        return None
