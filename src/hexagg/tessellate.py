import logging
from typing import Iterable

import h3
from shapely.geometry import Polygon

from hexagg.exceptions import TessellationError

logger = logging.getLogger(__name__)

FINE_RESOLUTION = 10


def cell_footprint(x: float, y: float, size: float) -> Polygon:
    r"""
    Get the square footprint of a grid cell.

    Parameters
    ----------
    x : float
        Longitude of the upper-left corner.
    y : float
        Latitude of the upper-left corner.
    size : float
        Edge length of the cell in degrees.

    Returns
    -------
    Polygon
        Closed, clockwise ring without holes.
    """
    return Polygon(
        [(x, y), (x + size, y), (x + size, y - size), (x, y - size), (x, y)]
    )


def polygon_to_cells(polygon: Polygon, resolution: int = FINE_RESOLUTION) -> set[str]:
    r"""
    Get the H3 cells whose centers lie inside a polygon.

    Parameters
    ----------
    polygon : Polygon
        Polygon in lon/lat coordinates.
    resolution : int, default 10
        H3 resolution of the returned cells.

    Returns
    -------
    set[str]
        H3 cell ids. Empty if the polygon is too small to hold a cell center.
    """
    try:
        return set(h3.geo_to_cells(polygon, resolution))
    except (h3.H3BaseException, ValueError) as err:
        raise TessellationError(
            f"Cannot tessellate {polygon.wkt} at resolution {resolution}: {err}"
        ) from err


def rasterize(cells: Iterable, resolution: int = FINE_RESOLUTION) -> dict[str, float]:
    r"""
    Map grid cells onto H3 cells.

    Every H3 cell covered by a grid cell's footprint receives the grid cell's
    value. Where footprints share an H3 cell, the later grid cell wins.

    Parameters
    ----------
    cells : Iterable[GridCell]
        Grid cells holding a value, e.g. from :func:`hexagg.ascii_grid.iter_cells`.
    resolution : int, default 10
        H3 resolution to tessellate at.

    Returns
    -------
    dict[str, float]
        Value per H3 cell.
    """
    fine_map = {}
    for cell in cells:
        for hex_cell in polygon_to_cells(cell.footprint(), resolution):
            fine_map[hex_cell] = cell.value
    logger.debug(f"Rasterized grid onto {len(fine_map)} cells at resolution {resolution}.")
    return fine_map
