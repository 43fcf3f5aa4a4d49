"""
Tests for reading map configuration files.
"""

import json

from py_rails.core.models import GridCoord, TerrainType
from py_rails.core.snapshot import WorldSnapshot
from py_rails.core.water_crossings import WaterCrossingType
from py_rails.data.map_loader import (
    grid_to_pixel,
    load_grid_points,
    load_water_crossing_edges,
    load_water_crossings,
    parse_grid_points,
)

RAW_POINTS = [
    {"Id": "m1", "GridX": 1, "GridY": 1, "Type": "Major City", "Name": "Madrid"},
    {"Id": "m2", "GridX": 2, "GridY": 1, "Type": "Major City Outpost", "Name": "Madrid"},
    {"Id": "m3", "GridX": 0, "GridY": 1, "Type": "Major City Outpost", "Name": "Madrid"},
    {"Id": "c1", "GridX": 3, "GridY": 0, "Type": "Small City", "Name": "Toledo"},
    {"Id": "c2", "GridX": 4, "GridY": 0, "Type": "Medium City", "Name": "Sevilla"},
    {"Id": "a1", "GridX": 3, "GridY": 2, "Type": "Alpine"},
    {"Id": "f1", "GridX": 5, "GridY": 2, "Type": "Ferry Port"},
    {"Id": "f2", "GridX": 8, "GridY": 2, "Type": "Ferry Port"},
    {"Id": "w1", "GridX": 6, "GridY": 2, "Type": "Water"},
    {"Id": "x1", "GridX": "bad", "GridY": 2, "Type": "Clear"},
    {"Id": "x2", "GridX": 9, "GridY": 2, "Type": "Unknown"},
]

RAW_FERRIES = [
    {"Name": "Estrecho", "connections": ["f1", "f2"], "cost": 6},
    {"Name": "Lost", "connections": ["f1", "zz"], "cost": 4},
]


class TestParseGridPoints:
    """Test conversion of raw milepost records."""

    def setup_method(self):
        self.points = parse_grid_points(RAW_POINTS, RAW_FERRIES)
        self.by_coord = {p.coord: p for p in self.points}

    def test_invalid_records_skipped(self):
        assert len(self.points) == len(RAW_POINTS) - 1

    def test_grid_x_is_column(self):
        toledo = self.by_coord[GridCoord(0, 3)]
        assert toledo.city.name == "Toledo"
        assert toledo.terrain == TerrainType.SMALL_CITY
        assert self.by_coord[GridCoord(0, 4)].city.type == TerrainType.MEDIUM_CITY

    def test_terrain_mapping(self):
        assert self.by_coord[GridCoord(2, 3)].terrain == TerrainType.ALPINE
        assert self.by_coord[GridCoord(2, 6)].terrain == TerrainType.WATER
        assert self.by_coord[GridCoord(2, 9)].terrain == TerrainType.CLEAR
        assert self.by_coord[GridCoord(2, 3)].city is None

    def test_outposts_attached_to_centre(self):
        madrid = self.by_coord[GridCoord(1, 1)]
        assert madrid.city.type == TerrainType.MAJOR_CITY
        assert madrid.city.outposts == [GridCoord(1, 2), GridCoord(1, 0)]
        outpost = self.by_coord[GridCoord(1, 2)]
        assert outpost.terrain == TerrainType.MAJOR_CITY
        assert outpost.city.name == "Madrid"
        assert outpost.city.outposts == []

    def test_ferry_attached_to_both_ports(self):
        a = self.by_coord[GridCoord(2, 5)].ferry_connection
        b = self.by_coord[GridCoord(2, 8)].ferry_connection
        assert a is not None and a == b
        assert a.cost == 6
        assert a.partner_of((2, 5)) == GridCoord(2, 8)

    def test_pixel_positions(self):
        """Odd rows are shifted half a column."""
        assert grid_to_pixel(0, 0) == (120, 120)
        assert grid_to_pixel(1, 0) == (145.0, 165)
        assert (self.by_coord[GridCoord(1, 1)].x, self.by_coord[GridCoord(1, 1)].y) == (195.0, 165)

    def test_groups_from_loaded_points(self):
        snapshot = WorldSnapshot(player_id="p1", map_points=self.points)
        groups = snapshot.major_city_groups
        assert [g.city_name for g in groups] == ["Madrid"]
        assert groups[0].center == GridCoord(1, 1)


class TestLoadFiles:
    """Test reading the JSON files from disk."""

    def test_load_points_and_ferries(self, tmp_path):
        points_file = tmp_path / "gridPoints.json"
        ferries_file = tmp_path / "ferryPoints.json"
        points_file.write_text(json.dumps(RAW_POINTS))
        ferries_file.write_text(json.dumps({"ferryPoints": RAW_FERRIES}))

        points = load_grid_points(points_file, ferries_file)
        ports = [p for p in points if p.ferry_connection is not None]
        assert len(points) == 10
        assert len(ports) == 2

    def test_load_points_without_ferries(self, tmp_path):
        points_file = tmp_path / "gridPoints.json"
        points_file.write_text(json.dumps(RAW_POINTS))
        points = load_grid_points(str(points_file))
        assert all(p.ferry_connection is None for p in points)

    def test_load_water_crossings(self, tmp_path):
        crossings_file = tmp_path / "waterCrossings.json"
        crossings_file.write_text(
            json.dumps({"riverEdges": ["1,1|1,2"], "nonRiverWaterEdges": ["2,2|2,3", "3,3|3,4"]})
        )
        crossings = load_water_crossings(crossings_file)
        assert len(crossings) == 3
        assert crossings.crossing_type((1, 2), (1, 1)) == WaterCrossingType.RIVER
        assert crossings.extra_cost((2, 3), (2, 2)) == 3

        fields = load_water_crossing_edges(crossings_file)
        snapshot = WorldSnapshot(player_id="p1", **fields)
        assert snapshot.water_crossings.extra_cost((1, 1), (1, 2)) == 2
