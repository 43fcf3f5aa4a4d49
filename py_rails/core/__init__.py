"""
Core track pricing, adjacency and search functionality.
"""

from .errors import RailEngineError, UnbuildableEdgeError, UnknownGridPointError
from .hex_grid import HexGrid
from .models import GridCoord, GridPoint, PlayerNetwork, TerrainType, TrackSegment, TrainType
from .snapshot import WorldSnapshot
from .terrain_costs import TerrainCostModel
from .pathfinding import compute_build_segments
from .reachability import ReachableCity, compute_reachable_cities
from .track_graph import build_union_track_graph, compute_track_usage_for_move
from .major_cities import count_connected_major_cities, get_major_city_groups
from .movement import MovementValidator
from .track_builder import MoneyLedger, TrackBuildService, remaining_turn_budget

__all__ = ['RailEngineError', 'UnbuildableEdgeError', 'UnknownGridPointError',
           'HexGrid', 'GridCoord', 'GridPoint', 'PlayerNetwork', 'TerrainType', 'TrackSegment',
           'TrainType', 'WorldSnapshot', 'TerrainCostModel', 'compute_build_segments',
           'ReachableCity', 'compute_reachable_cities', 'build_union_track_graph',
           'compute_track_usage_for_move', 'count_connected_major_cities',
           'get_major_city_groups', 'MovementValidator', 'MoneyLedger', 'TrackBuildService',
           'remaining_turn_budget']
