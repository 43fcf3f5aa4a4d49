"""
Tests for track pricing.
"""

import pytest

from py_rails.core.errors import UnbuildableEdgeError
from py_rails.core.hex_grid import HexGrid
from py_rails.core.models import TerrainType
from py_rails.core.terrain_costs import TERRAIN_BUILD_COSTS, TerrainCostModel
from py_rails.core.water_crossings import WaterCrossings, WaterCrossingType, parse_edge_key

from map_factories import chain, ferry, major_city, make_points, seg, water


class TestBaseCosts:
    """Test terrain pricing without special cases."""

    @pytest.mark.parametrize(
        "terrain,expected",
        [
            (TerrainType.CLEAR, 1),
            (TerrainType.MOUNTAIN, 2),
            (TerrainType.ALPINE, 5),
            (TerrainType.SMALL_CITY, 3),
            (TerrainType.MEDIUM_CITY, 3),
            (TerrainType.FERRY_PORT, 1),
        ],
    )
    def test_destination_terrain_cost(self, terrain, expected):
        """Price is set by the terrain being built into."""
        grid = HexGrid(make_points(1, 2, {(0, 1): {"terrain": terrain}}))
        model = TerrainCostModel(grid)
        assert model.edge_cost((0, 0), (0, 1)) == expected

    def test_major_city_terrain_cost(self):
        """Major city terrain is priced at 5."""
        assert TERRAIN_BUILD_COSTS[TerrainType.MAJOR_CITY] == 5

    def test_water_is_unbuildable(self):
        """Edges into water are rejected."""
        grid = HexGrid(make_points(1, 2, water((0, 1))))
        model = TerrainCostModel(grid)
        assert not model.is_buildable((0, 0), (0, 1))
        with pytest.raises(UnbuildableEdgeError):
            model.edge_cost((0, 0), (0, 1))

    def test_non_adjacent_is_unbuildable(self):
        """Edges must join neighbouring mileposts."""
        grid = HexGrid(make_points(1, 4))
        model = TerrainCostModel(grid)
        with pytest.raises(UnbuildableEdgeError):
            model.edge_cost((0, 0), (0, 2))


class TestReuse:
    """Test free reuse of owned track."""

    def test_owned_edge_costs_nothing_in_both_directions(self):
        """Direction of an owned edge does not matter."""
        grid = HexGrid(make_points(1, 3, {(0, 1): {"terrain": TerrainType.ALPINE}}))
        model = TerrainCostModel(grid, own_segments=[seg((0, 0), (0, 1), cost=5)])
        assert model.edge_cost((0, 0), (0, 1)) == 0
        assert model.edge_cost((0, 1), (0, 0)) == 0
        assert model.edge_cost((0, 1), (0, 2)) == 1

    def test_reuse_dominates_surcharge(self):
        """An owned edge stays free even across a river."""
        grid = HexGrid(make_points(1, 2))
        crossings = WaterCrossings(river_edges=[((0, 0), (0, 1))])
        model = TerrainCostModel(
            grid, own_segments=[seg((0, 1), (0, 0), cost=3)], water_crossings=crossings
        )
        assert model.edge_cost((0, 0), (0, 1)) == 0

    def test_opponent_edge_is_not_free(self):
        """Another player's track gives no discount."""
        grid = HexGrid(make_points(1, 2))
        model = TerrainCostModel(grid, all_segments=[seg((0, 0), (0, 1))])
        assert model.edge_cost((0, 0), (0, 1)) == 1


class TestMajorCityConnection:
    """Test the flat first connection price of major cities."""

    def setup_method(self):
        """Berlin centred at (2,2) with Clear outposts at (2,3) and (1,2)."""
        overrides = major_city(
            "Berlin", (2, 2), outposts=[(2, 3), (1, 2)], outpost_terrain=TerrainType.CLEAR
        )
        self.grid = HexGrid(make_points(5, 6, overrides))

    def test_first_connection_is_flat(self):
        """The first edge into the cluster costs 5 whatever the terrain."""
        model = TerrainCostModel(self.grid)
        assert model.edge_cost((2, 4), (2, 3)) == 5
        assert model.edge_cost((1, 1), (1, 2)) == 5

    def test_second_connection_uses_terrain(self):
        """Once connected, other cluster mileposts use terrain pricing."""
        model = TerrainCostModel(self.grid, own_segments=[seg((2, 4), (2, 3), cost=5)])
        assert model.edge_cost((1, 1), (1, 2)) == 1
        assert model.edge_cost((2, 1), (2, 2)) == 5

    def test_intra_city_edge_is_unbuildable(self):
        """Track is never built between two mileposts of one city."""
        model = TerrainCostModel(self.grid)
        assert not model.is_buildable((2, 2), (2, 3))
        with pytest.raises(UnbuildableEdgeError):
            model.edge_cost((2, 3), (2, 2))

    def test_connection_by_opponent_does_not_count(self):
        """Another player's link to the city leaves the flat price in place."""
        model = TerrainCostModel(self.grid, all_segments=[seg((2, 4), (2, 3), cost=5)])
        assert model.edge_cost((1, 1), (1, 2)) == 5

    def test_flat_price_adds_water_surcharge(self):
        """A river into the city still charges its surcharge."""
        crossings = WaterCrossings(river_edges=[((2, 4), (2, 3))])
        model = TerrainCostModel(self.grid, water_crossings=crossings)
        assert model.edge_cost((2, 4), (2, 3)) == 7


class TestFerryCost:
    """Test the shared one-time ferry toll."""

    def setup_method(self):
        """Ports at (1,2) and (1,6) with a toll of 8, water between them."""
        overrides = water((1, 3), (1, 4), (1, 5))
        overrides.update(ferry((1, 2), (1, 6), cost=8))
        self.grid = HexGrid(make_points(3, 8, overrides))

    def test_first_touch_pays_toll(self):
        """The first player to reach either port pays the toll."""
        model = TerrainCostModel(self.grid)
        assert model.edge_cost((1, 1), (1, 2)) == 8
        assert model.edge_cost((1, 7), (1, 6)) == 8

    def test_crossing_is_free(self):
        """Moving between the two ports is never charged."""
        model = TerrainCostModel(self.grid)
        assert model.edge_cost((1, 2), (1, 6)) == 0
        assert model.edge_cost((1, 6), (1, 2)) == 0

    def test_later_connections_are_free_for_everyone(self):
        """Once one player touched a port, both ports are free to all."""
        paid = [seg((1, 1), (1, 2), cost=8)]
        same_player = TerrainCostModel(self.grid, own_segments=paid)
        other_player = TerrainCostModel(self.grid, all_segments=paid)

        assert same_player.edge_cost((0, 2), (1, 2)) == 0
        assert same_player.edge_cost((1, 7), (1, 6)) == 0
        assert other_player.edge_cost((0, 2), (1, 2)) == 0
        assert other_player.edge_cost((1, 7), (1, 6)) == 0

    def test_toll_paid_once_across_players(self):
        """Of two players connecting in turn, only the first pays."""
        first = TerrainCostModel.for_player(self.grid, "p1", {"p1": [], "p2": []})
        assert first.edge_cost((1, 1), (1, 2)) == 8

        tracks = {"p1": [seg((1, 1), (1, 2), cost=8)], "p2": []}
        second = TerrainCostModel.for_player(self.grid, "p2", tracks)
        assert second.edge_cost((1, 7), (1, 6)) == 0


class TestWaterCrossings:
    """Test the static crossing surcharge table."""

    def test_river_and_lake_surcharges(self):
        """Rivers add 2 and lakes add 3, in either direction."""
        grid = HexGrid(make_points(1, 3))
        crossings = WaterCrossings.from_edge_strings(["0,0|0,1"], ["0,2|0,1"])
        model = TerrainCostModel(grid, water_crossings=crossings)
        assert model.edge_cost((0, 0), (0, 1)) == 3
        assert model.edge_cost((0, 1), (0, 0)) == 3
        assert model.edge_cost((0, 1), (0, 2)) == 4

    def test_lake_wins_over_river(self):
        """An edge listed in both tables is a lake crossing."""
        crossings = WaterCrossings.from_edge_strings(["0,0|0,1"], ["0,1|0,0"])
        assert crossings.crossing_type((0, 0), (0, 1)) == WaterCrossingType.LAKE
        assert len(crossings) == 1

    def test_parse_edge_key_is_direction_independent(self):
        """Edge strings normalise to one key."""
        assert parse_edge_key("3,4|2,5") == parse_edge_key("2,5|3,4")


class TestForPlayer:
    """Test building a model from every player's track."""

    def test_own_and_all_segments(self):
        """The player's own entry drives reuse, every entry drives tolls."""
        grid = HexGrid(make_points(1, 4))
        tracks = {"p1": chain((0, 0), (0, 1)), "p2": chain((0, 2), (0, 3))}
        model = TerrainCostModel.for_player(grid, "p1", tracks)
        assert model.edge_cost((0, 0), (0, 1)) == 0
        assert model.edge_cost((0, 2), (0, 3)) == 1
        assert (0, 3) in model.touched_nodes
