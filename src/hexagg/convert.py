import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import dask

from hexagg.aggregate import COARSE_RESOLUTION, aggregate_to_parents
from hexagg.ascii_grid import iter_cells
from hexagg.exceptions import HexaggError
from hexagg.tessellate import FINE_RESOLUTION, rasterize

logger = logging.getLogger(__name__)


def ascii_grid_to_hex(
    source: str | Path | Iterable[str],
    resolution: int = COARSE_RESOLUTION,
    fine_resolution: int = FINE_RESOLUTION,
) -> dict[str, int]:
    r"""
    Convert an ASCII grid to H3 cells.

    The grid is streamed line by line and tessellated at `fine_resolution`,
    then averaged up to `resolution`. Tessellating finer than the output
    absorbs small offsets between grids covering the same area.

    Parameters
    ----------
    source : str | Path | Iterable[str]
        Path to the ``.asc`` file or its lines.
    resolution : int, default 8
        H3 resolution of the result.
    fine_resolution : int, default 10
        H3 resolution to tessellate the grid cells at.

    Returns
    -------
    dict[str, int]
        Mean value per H3 cell at `resolution`.
    """
    fine_map = rasterize(iter_cells(source), fine_resolution)
    hex_map = aggregate_to_parents(fine_map, resolution)
    name = source if isinstance(source, (str, Path)) else "grid"
    logger.info(
        f"Converted {name} to {len(hex_map)} cells at resolution {resolution} "
        f"({len(fine_map)} cells at resolution {fine_resolution})."
    )
    return hex_map


@dataclass
class FileResult:
    """Outcome of converting one file."""

    source: str | Path
    hex_map: dict[str, int] | None = None
    error: HexaggError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _convert_file(source, resolution, fine_resolution) -> FileResult:
    try:
        hex_map = ascii_grid_to_hex(source, resolution, fine_resolution)
    except HexaggError as err:
        logger.error(f"Failed to convert {source}: {err}")
        return FileResult(source=source, error=err)
    return FileResult(source=source, hex_map=hex_map)


def convert_files(
    sources: Iterable[str | Path],
    resolution: int = COARSE_RESOLUTION,
    fine_resolution: int = FINE_RESOLUTION,
    scheduler: str = "processes",
) -> list[FileResult]:
    r"""
    Convert several ASCII grids independently of each other.

    Parameters
    ----------
    sources : Iterable[str | Path]
        Paths to the ``.asc`` files.
    resolution : int, default 8
        H3 resolution of the results.
    fine_resolution : int, default 10
        H3 resolution to tessellate the grid cells at.
    scheduler : str, default "processes"
        dask scheduler to run the conversions on.

    Returns
    -------
    list[FileResult]
        One result per source, in the order of `sources`. A file that fails
        carries its error and no hex map, the other files are unaffected.
    """
    tasks = [
        dask.delayed(_convert_file)(source, resolution, fine_resolution)
        for source in sources
    ]
    return list(dask.compute(*tasks, scheduler=scheduler))
