"""
Loaders for the map configuration files.

These run on the caller side, before a snapshot is assembled; the engine
itself never reads files.
"""

import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog

from ..core.models import CityInfo, FerryConnection, GridCoord, GridPoint, TerrainType
from ..core.water_crossings import WaterCrossings

logger = structlog.get_logger()

HORIZONTAL_SPACING = 50
VERTICAL_SPACING = 45
GRID_MARGIN = 120

MILEPOST_TYPES: Dict[str, TerrainType] = {
    "Clear": TerrainType.CLEAR,
    "Milepost": TerrainType.CLEAR,
    "Mountain": TerrainType.MOUNTAIN,
    "Alpine": TerrainType.ALPINE,
    "Small City": TerrainType.SMALL_CITY,
    "Medium City": TerrainType.MEDIUM_CITY,
    "Major City": TerrainType.MAJOR_CITY,
    "Major City Outpost": TerrainType.MAJOR_CITY,
    "Ferry Port": TerrainType.FERRY_PORT,
    "Water": TerrainType.WATER,
}

PathLike = Union[str, Path]


def grid_to_pixel(row: int, col: int) -> tuple:
    """Screen position of a milepost, odd rows shifted half a column right."""
    offset = HORIZONTAL_SPACING / 2 if row % 2 == 1 else 0
    x = col * HORIZONTAL_SPACING + GRID_MARGIN + offset
    y = row * VERTICAL_SPACING + GRID_MARGIN
    return x, y


def parse_grid_points(raw_points: List[dict], raw_ferries: Optional[List[dict]] = None) -> List[GridPoint]:
    """
    Convert raw milepost records into grid points.

    Args:
        raw_points: Records with ``GridX`` (column), ``GridY`` (row), ``Type``
            and optional ``Name`` and ``Id``
        raw_ferries: Records with ``Name``, ``connections`` (two milepost ids)
            and ``cost``

    Returns:
        Grid points in input order, with major city outposts attached to
        their centre and ferry connections attached to both ports
    """
    records = []
    outposts: Dict[str, List[GridCoord]] = defaultdict(list)
    for raw in raw_points:
        if not isinstance(raw.get("GridX"), int) or not isinstance(raw.get("GridY"), int):
            continue
        kind = str(raw.get("Type", ""))
        name = raw.get("Name") or None
        coord = GridCoord(raw["GridY"], raw["GridX"])
        if kind == "Major City Outpost" and name:
            outposts[name].append(coord)
        records.append((raw.get("Id"), coord, kind, name))

    ferry_by_id: Dict[str, FerryConnection] = {}
    if raw_ferries:
        coords_by_id = {rid: coord for rid, coord, _, _ in records if rid is not None}
        for ferry in raw_ferries:
            ids = ferry.get("connections", [])
            if len(ids) != 2 or ids[0] not in coords_by_id or ids[1] not in coords_by_id:
                logger.warning("Skipping ferry with unknown ports", ferry=ferry.get("Name"))
                continue
            connection = FerryConnection(
                name=ferry.get("Name", ""),
                endpoints=(coords_by_id[ids[0]], coords_by_id[ids[1]]),
                cost=int(ferry["cost"]),
            )
            ferry_by_id[ids[0]] = connection
            ferry_by_id[ids[1]] = connection

    points = []
    for rid, coord, kind, name in records:
        terrain = MILEPOST_TYPES.get(kind, TerrainType.CLEAR)
        city = None
        if name and kind in ("Small City", "Medium City"):
            city = CityInfo(type=terrain, name=name)
        elif name and kind == "Major City":
            city = CityInfo(type=TerrainType.MAJOR_CITY, name=name, outposts=outposts.get(name, []))
        elif name and kind == "Major City Outpost":
            city = CityInfo(type=TerrainType.MAJOR_CITY, name=name)

        x, y = grid_to_pixel(coord.row, coord.col)
        points.append(
            GridPoint(
                row=coord.row,
                col=coord.col,
                x=x,
                y=y,
                terrain=terrain,
                city=city,
                ferry_connection=ferry_by_id.get(rid),
            )
        )
    return points


def load_grid_points(path: PathLike, ferry_path: Optional[PathLike] = None) -> List[GridPoint]:
    """
    Read the milepost file and, optionally, the ferry file.

    Args:
        path: JSON array of milepost records
        ferry_path: JSON object with a ``ferryPoints`` array

    Returns:
        Grid points of the map
    """
    raw_points = json.loads(Path(path).read_text(encoding="utf-8"))
    raw_ferries = None
    if ferry_path is not None:
        raw_ferries = json.loads(Path(ferry_path).read_text(encoding="utf-8")).get("ferryPoints", [])

    points = parse_grid_points(raw_points, raw_ferries)
    logger.info("Loaded map", path=str(path), points=len(points))
    return points


def load_water_crossing_edges(path: PathLike) -> Dict[str, List[str]]:
    """
    Read the crossings file as snapshot fields.

    Returns:
        ``river_crossings`` and ``lake_crossings`` edge strings, ready to be
        passed to ``WorldSnapshot``
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return {
        "river_crossings": list(data.get("riverEdges", [])),
        "lake_crossings": list(data.get("nonRiverWaterEdges", [])),
    }


def load_water_crossings(path: PathLike) -> WaterCrossings:
    """Read ``riverEdges`` and ``nonRiverWaterEdges`` from the crossings file."""
    edges = load_water_crossing_edges(path)
    crossings = WaterCrossings.from_edge_strings(edges["river_crossings"], edges["lake_crossings"])
    logger.info("Loaded water crossings", path=str(path), edges=len(crossings))
    return crossings
