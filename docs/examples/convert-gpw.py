# %% [markdown]
# # Population density on hexagons
# This example demonstrates how to convert gridded population density to H3 hexagons using `hexagg`.
# The Gridded Population of the World (GPW v4) dataset is distributed as ESRI ASCII grids with 30 arc-second cells, split into eight tiles.
# Place the tiles in `data/` before running the example.

# %%
import logging
from pathlib import Path

import hexagg

logging.basicConfig(level=logging.INFO)

# %%
PATH_DATA = Path(".") / "data"
tiles = sorted(PATH_DATA.glob("gpw_v4_population_density_rev11_2020_30_sec_*.asc"))

# %% [markdown]
# A single tile can be converted directly. The result maps resolution-8 cells to their mean population density.

# %%
header = hexagg.ascii_grid.read_header(tiles[0])
header

# %%
hex_map = hexagg.ascii_grid_to_hex(tiles[0])
len(hex_map)

# %% [markdown]
# The tiles are independent of each other, so they can be converted in parallel and merged afterwards.
# Uniform areas collapse into coarser cells when compacting.

# %%
results = hexagg.convert_files(tiles)
hex_map = hexagg.hexmap.merge_hex_maps(result.hex_map for result in results if result.ok)
hex_map = hexagg.hexmap.compact_hex_map(hex_map)

# %%
population = hexagg.hexmap.hex_map_to_geodataframe(hex_map)
population.to_file(PATH_DATA / "population_density.gpkg")
