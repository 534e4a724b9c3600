from collections import defaultdict
from typing import Iterable

import geopandas as gpd
import h3
import pandas as pd
from shapely.geometry import Polygon


def merge_hex_maps(hex_maps: Iterable[dict]) -> dict:
    r"""
    Merge hex maps into one. On shared cells the later map wins.

    Parameters
    ----------
    hex_maps : Iterable[dict]
        Maps from H3 cell to value, e.g. one per converted file.

    Returns
    -------
    dict
        Union of all maps.
    """
    merged = {}
    for hex_map in hex_maps:
        merged.update(hex_map)
    return merged


def compact_hex_map(hex_map: dict) -> dict:
    r"""
    Replace complete sets of sibling cells with equal values by their parent.

    Repeats until no set of siblings can be merged, so uniform areas end up
    as few, coarse cells.

    Parameters
    ----------
    hex_map : dict
        Map from H3 cell to value.

    Returns
    -------
    dict
        Compacted map, covering the same area with the same values.
    """
    compacted = dict(hex_map)
    while True:
        siblings = defaultdict(list)
        for cell in compacted:
            resolution = h3.get_resolution(cell)
            if resolution > 0:
                siblings[h3.cell_to_parent(cell, resolution - 1)].append(cell)

        merged = False
        for parent, children in siblings.items():
            if parent in compacted:
                continue
            child_resolution = h3.get_resolution(children[0])
            if len(children) != h3.cell_to_children_size(parent, child_resolution):
                continue
            values = {compacted[child] for child in children}
            if len(values) != 1:
                continue
            for child in children:
                del compacted[child]
            compacted[parent] = values.pop()
            merged = True

        if not merged:
            return compacted


def hex_map_to_geodataframe(
    hex_map: dict, column: str = "population_density"
) -> gpd.GeoDataFrame:
    r"""
    Convert a hex map to a GeoDataFrame of hexagons.

    Parameters
    ----------
    hex_map : dict
        Map from H3 cell to value.
    column : str, default "population_density"
        Name of the value column.

    Returns
    -------
    gpd.GeoDataFrame
        One row per cell, indexed by ``h3_cell``, in EPSG:4326.
    """
    cells = list(hex_map)
    # h3 boundaries are (lat, lng)
    geometry = [
        Polygon([(lng, lat) for lat, lng in h3.cell_to_boundary(cell)]) for cell in cells
    ]
    return gpd.GeoDataFrame(
        {column: [hex_map[cell] for cell in cells]},
        index=pd.Index(cells, name="h3_cell"),
        geometry=geometry,
        crs="EPSG:4326",
    )
