"""
Hex grid adjacency for the offset milepost grid.

Rows are offset alternately: odd rows connect to (row±1, col) and
(row±1, col+1), even rows connect to (row±1, col-1) and (row±1, col). Water
mileposts take no part in adjacency. Ferry ports are only adjacent to each
other through their own ferry connection, which also links the two ports of a
route even though they are not hex neighbours.
"""

from typing import Dict, Iterable, List, Tuple

import numpy as np
import structlog

from .errors import UnknownGridPointError
from .models import GridCoord, GridPoint, TerrainType

logger = structlog.get_logger()

TERRAIN_CODES: Dict[TerrainType, int] = {t: i for i, t in enumerate(TerrainType)}
NO_POINT = -1

_ODD_ROW_OFFSETS = ((0, -1), (0, 1), (-1, 0), (-1, 1), (1, 0), (1, 1))
_EVEN_ROW_OFFSETS = ((0, -1), (0, 1), (-1, -1), (-1, 0), (1, -1), (1, 0))


def hex_offsets(row: int) -> Tuple[Tuple[int, int], ...]:
    """Neighbour offsets (row delta, col delta) for a milepost on this row."""
    return _ODD_ROW_OFFSETS if row % 2 == 1 else _EVEN_ROW_OFFSETS


def is_hex_adjacent(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    """Pure geometric adjacency, ignoring terrain."""
    delta = (b[0] - a[0], b[1] - a[1])
    return delta in hex_offsets(a[0])


class HexGrid:
    """Indexed view of a game map answering adjacency queries."""

    def __init__(self, points: Iterable[GridPoint]):
        """
        Index the map.

        Args:
            points: Every milepost of the map. Rows and columns must be
                non-negative.
        """
        self.points: Dict[GridCoord, GridPoint] = {}
        for point in points:
            if point.row < 0 or point.col < 0:
                raise ValueError(f"Negative grid coordinate ({point.row},{point.col})")
            self.points[point.coord] = point

        self.rows = max((c.row for c in self.points), default=-1) + 1
        self.cols = max((c.col for c in self.points), default=-1) + 1

        # Terrain code per (row, col), NO_POINT where the map has a hole
        self.terrain_codes = np.full((self.rows, self.cols), NO_POINT, dtype=np.int8)
        for coord, point in self.points.items():
            self.terrain_codes[coord.row, coord.col] = TERRAIN_CODES[point.terrain]

        self.ferry_partners: Dict[GridCoord, GridCoord] = {}
        for coord, point in self.points.items():
            if point.terrain != TerrainType.FERRY_PORT or point.ferry_connection is None:
                continue
            partner = point.ferry_connection.partner_of(coord)
            if partner is None or partner not in self.points or self.points[partner].is_water:
                continue
            self.ferry_partners[coord] = partner
            self.ferry_partners[partner] = coord

        logger.debug(
            "Indexed hex grid",
            points=len(self.points),
            rows=self.rows,
            cols=self.cols,
            ferry_ports=len(self.ferry_partners),
        )

    def __contains__(self, coord: Tuple[int, int]) -> bool:
        row, col = coord
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            return False
        return self.terrain_codes[row, col] != NO_POINT

    def point(self, coord: Tuple[int, int]) -> GridPoint:
        """Return the grid point at coord, raising if the map has none."""
        try:
            return self.points[GridCoord(*coord)]
        except KeyError:
            raise UnknownGridPointError(coord[0], coord[1]) from None

    def terrain(self, coord: Tuple[int, int]) -> TerrainType:
        return self.point(coord).terrain

    def is_water(self, coord: Tuple[int, int]) -> bool:
        return (
            coord in self
            and self.terrain_codes[coord[0], coord[1]] == TERRAIN_CODES[TerrainType.WATER]
        )

    def is_ferry_port(self, coord: Tuple[int, int]) -> bool:
        return (
            coord in self
            and self.terrain_codes[coord[0], coord[1]] == TERRAIN_CODES[TerrainType.FERRY_PORT]
        )

    def is_ferry_crossing(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """True when a and b are the two ports of one ferry connection."""
        return self.ferry_partners.get(GridCoord(*a)) == b

    def neighbors(self, coord: Tuple[int, int]) -> List[GridCoord]:
        """
        Mileposts adjacent to coord.

        Raises:
            UnknownGridPointError: coord is not on the map
        """
        point = self.point(coord)
        if point.is_water:
            return []

        row, col = point.row, point.col
        result: List[GridCoord] = []
        for d_row, d_col in hex_offsets(row):
            candidate = GridCoord(row + d_row, col + d_col)
            if self._linkable(point.coord, candidate):
                result.append(candidate)

        partner = self.ferry_partners.get(point.coord)
        if partner is not None and partner not in result:
            result.append(partner)
        return result

    def is_adjacent(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """Symmetric adjacency predicate agreeing with ``neighbors``."""
        a = GridCoord(*a)
        b = GridCoord(*b)
        if a == b or a not in self or b not in self:
            return False
        if self.is_water(a) or self.is_water(b):
            return False
        if self.is_ferry_crossing(a, b):
            return True
        return is_hex_adjacent(a, b) and self._linkable(a, b)

    def _linkable(self, a: GridCoord, b: GridCoord) -> bool:
        # a is known to be a non-water point of the map
        if b not in self or self.is_water(b):
            return False
        if self.is_ferry_port(a) and self.is_ferry_port(b):
            return self.is_ferry_crossing(a, b)
        return True
