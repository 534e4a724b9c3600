import h3
import pytest

from hexagg.aggregate import COARSE_RESOLUTION, aggregate_to_parents
from hexagg.ascii_grid import iter_cells
from hexagg.convert import ascii_grid_to_hex, convert_files
from hexagg.exceptions import GridReadError, ParseError
from hexagg.tessellate import FINE_RESOLUTION, polygon_to_cells, rasterize
from fixtures import UnreadableLines, grid_lines, malformed_grid, missing_grid, small_grid, wrapped_grid


def test_ascii_grid_to_hex(small_grid):
    hex_map = ascii_grid_to_hex(small_grid)

    fine_cells = set()
    for cell in iter_cells(small_grid):
        fine_cells |= polygon_to_cells(cell.footprint())
    assert set(hex_map) == {h3.cell_to_parent(cell, COARSE_RESOLUTION) for cell in fine_cells}
    assert all(h3.get_resolution(cell) == COARSE_RESOLUTION for cell in hex_map)
    assert all(isinstance(value, int) for value in hex_map.values())
    assert max(hex_map.values()) <= 250
    assert hex_map == aggregate_to_parents(rasterize(iter_cells(small_grid)))


def test_line_wrapping_does_not_matter(small_grid, wrapped_grid):
    assert ascii_grid_to_hex(small_grid) == ascii_grid_to_hex(wrapped_grid)


def test_single_cell_single_parent():
    parent = h3.latlng_to_cell(10.0, 0.5, COARSE_RESOLUTION)
    lat, lng = h3.cell_to_latlng(h3.cell_to_center_child(parent, FINE_RESOLUTION))
    size = 0.0005
    lines = grid_lines(1, 1, lng - size / 2, lat - size / 2, size, ["4900"])

    assert ascii_grid_to_hex(lines) == {parent: 100}


def test_empty_grid():
    assert ascii_grid_to_hex(grid_lines(2, 2, 0, 10, 0.01, ["0 -1", "-1 0"])) == {}


def test_malformed_grid(malformed_grid):
    with pytest.raises(ParseError):
        ascii_grid_to_hex(malformed_grid)


def test_missing_grid(missing_grid):
    with pytest.raises(GridReadError):
        ascii_grid_to_hex(missing_grid)


def test_convert_files(small_grid, malformed_grid, missing_grid):
    results = convert_files([small_grid, malformed_grid, missing_grid], scheduler="synchronous")

    assert [result.source for result in results] == [small_grid, malformed_grid, missing_grid]
    assert [result.ok for result in results] == [True, False, False]
    assert results[0].hex_map == ascii_grid_to_hex(small_grid)
    assert isinstance(results[1].error, ParseError)
    assert isinstance(results[2].error, GridReadError)
    assert results[1].hex_map is None


def test_convert_files_threads(small_grid, wrapped_grid):
    results = convert_files([small_grid, wrapped_grid], scheduler="threads")

    assert all(result.ok for result in results)
    assert results[0].hex_map == results[1].hex_map


def test_convert_files_read_error_stays_with_its_file(small_grid):
    unreadable = UnreadableLines()

    results = convert_files([unreadable, small_grid], scheduler="synchronous")

    assert isinstance(results[0].error, GridReadError)
    assert results[1].ok
    assert results[1].hex_map == ascii_grid_to_hex(small_grid)
