from pathlib import Path

import h3
import pytest

FILES = Path(__file__).parent / "_files"


@pytest.fixture
def small_grid():
    return FILES / "small.asc"


@pytest.fixture
def wrapped_grid():
    return FILES / "wrapped.asc"


@pytest.fixture
def malformed_grid():
    return FILES / "malformed.asc"


@pytest.fixture
def missing_grid(tmp_path):
    return tmp_path / "missing.asc"


@pytest.fixture
def hexagon_parent():
    return h3.latlng_to_cell(10.0, 0.5, 8)


@pytest.fixture
def pentagon_parent():
    return h3.get_pentagons(8)[0]


def grid_lines(ncols, nrows, xllcorner, yllcorner, cellsize, body, nodata="-1"):
    return [
        f"ncols {ncols}",
        f"nrows {nrows}",
        f"xllcorner {xllcorner}",
        f"yllcorner {yllcorner}",
        f"cellsize {cellsize}",
        f"NODATA_value {nodata}",
        *body,
    ]


class UnreadableLines:
    """Lines of a source whose storage fails after the first line."""

    def __iter__(self):
        yield "ncols 1"
        raise OSError("device not ready")
