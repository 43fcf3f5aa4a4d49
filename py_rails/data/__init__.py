"""
Map configuration loaders.
"""

from .map_loader import (
    load_grid_points,
    load_water_crossing_edges,
    load_water_crossings,
    parse_grid_points,
)

__all__ = ['load_grid_points', 'load_water_crossing_edges', 'load_water_crossings',
           'parse_grid_points']
