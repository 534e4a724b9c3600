import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from shapely.geometry import Polygon

from hexagg.exceptions import GridReadError, ParseError
from hexagg.tessellate import cell_footprint

logger = logging.getLogger(__name__)

DEFAULT_NODATA = "-1"
NODATA_KEY = "NODATA_value"
COUNT_KEYS = ("ncols", "nrows")
COORDINATE_KEYS = ("xllcorner", "yllcorner", "cellsize")
HEADER_KEYS = COUNT_KEYS + COORDINATE_KEYS + (NODATA_KEY,)

# Skipped like the nodata token.
ZERO_TOKEN = "0"


@dataclass
class GridHeader:
    """Header of an ESRI ASCII grid. Absent keys keep their defaults."""

    ncols: int = 0
    nrows: int = 0
    xllcorner: float = 0.0
    yllcorner: float = 0.0
    cellsize: float = 0.0
    nodata_value: str = DEFAULT_NODATA

    @property
    def origin(self) -> tuple[float, float]:
        """Upper-left corner of the grid, where the first data row starts."""
        return self.xllcorner, self.yllcorner + self.cellsize * self.nrows


@dataclass(frozen=True)
class GridCell:
    """A retained grid value and the upper-left corner of its cell."""

    row: int
    col: int
    x: float
    y: float
    size: float
    value: float

    def footprint(self) -> Polygon:
        return cell_footprint(self.x, self.y, self.size)


@dataclass
class ParsingHeader:
    header: GridHeader = field(default_factory=GridHeader)


@dataclass
class ParsingBody:
    header: GridHeader
    x: float
    y: float
    row: int = 0
    col: int = 0

    @classmethod
    def start(cls, header: GridHeader) -> "ParsingBody":
        x, y = header.origin
        return cls(header=header, x=x, y=y)

    def advance(self):
        self.col += 1
        self.x += self.header.cellsize
        if self.col >= self.header.ncols:
            self.col = 0
            self.row += 1
            self.x = self.header.xllcorner
            self.y -= self.header.cellsize


class AsciiGridParser:
    r"""
    Line driven parser for ESRI ASCII grids.

    The parser starts in the :class:`ParsingHeader` state and switches to
    :class:`ParsingBody` on the ``NODATA_value`` line. Body values are
    counted against ``ncols`` to place each one on the grid, so rows may be
    wrapped over any number of lines.
    """

    def __init__(self):
        self.state: ParsingHeader | ParsingBody = ParsingHeader()
        self.lineno = 0
        self.consumed = 0

    @property
    def header(self) -> GridHeader:
        return self.state.header

    @property
    def header_done(self) -> bool:
        return isinstance(self.state, ParsingBody)

    def feed(self, line: str) -> list[GridCell]:
        r"""
        Parse one line of the source.

        Parameters
        ----------
        line : str
            Raw line of text.

        Returns
        -------
        list[GridCell]
            Cells holding a value on this line. Header lines and lines made
            up of nodata or zero tokens return an empty list.
        """
        self.lineno += 1
        tokens = line.split()
        if isinstance(self.state, ParsingHeader):
            self._feed_header(tokens)
            return []
        return self._feed_body(tokens)

    def finish(self):
        """Report on a source that has been read to the end."""
        if not self.header_done:
            logger.warning(
                f"Grid ended after {self.lineno} lines without a {NODATA_KEY} line, no values were read."
            )
            return
        expected = self.header.ncols * self.header.nrows
        if self.consumed != expected:
            logger.warning(
                f"Grid holds {self.consumed} values, header announces {expected} "
                f"({self.header.ncols} x {self.header.nrows})."
            )

    def _feed_header(self, tokens: list[str]):
        if not tokens:
            return
        key = tokens[0]
        if key not in HEADER_KEYS:
            logger.debug(f"Ignoring header line {self.lineno} starting with {key!r}.")
            return
        if len(tokens) < 2:
            raise ParseError(f"Header key {key!r} on line {self.lineno} has no value.")

        header = self.state.header
        value = tokens[1]
        if key in COUNT_KEYS:
            setattr(header, key, self._parse_count(key, value))
        elif key in COORDINATE_KEYS:
            setattr(header, key, self._parse_float(key, value))
        else:
            header.nodata_value = value
            self.state = ParsingBody.start(header)
            logger.info(f"Header complete, start is {self.state.x, self.state.y}.")

    def _feed_body(self, tokens: list[str]) -> list[GridCell]:
        body = self.state
        nodata = body.header.nodata_value
        cells = []
        for token in tokens:
            if token != nodata and token != ZERO_TOKEN:
                cells.append(
                    GridCell(
                        row=body.row,
                        col=body.col,
                        x=body.x,
                        y=body.y,
                        size=body.header.cellsize,
                        value=self._parse_float("value", token),
                    )
                )
            body.advance()
            self.consumed += 1
        return cells

    def _parse_count(self, key: str, token: str) -> int:
        try:
            count = int(token)
        except ValueError as err:
            raise ParseError(
                f"Invalid {key} {token!r} on line {self.lineno}, expected an integer."
            ) from err
        if count < 0:
            raise ParseError(f"Invalid {key} {token!r} on line {self.lineno}, must not be negative.")
        return count

    def _parse_float(self, key: str, token: str) -> float:
        try:
            return float(token)
        except ValueError as err:
            raise ParseError(
                f"Invalid {key} {token!r} on line {self.lineno}, expected a number."
            ) from err


@contextmanager
def open_source(source: str | Path | Iterable[str]) -> Iterator[Iterable[str]]:
    r"""
    Provide the lines of a grid source.

    Paths are opened as text and closed on exit. Open streams and other
    iterables of lines are passed through and left open.
    """
    if isinstance(source, (str, Path)):
        try:
            stream = open(source, encoding="utf-8")
        except OSError as err:
            raise GridReadError(f"Cannot open grid file {source}.") from err
        with stream:
            yield _read_lines(stream, source)
    else:
        yield _read_lines(source, "grid")


def _read_lines(lines: Iterable[str], name) -> Iterator[str]:
    # Only errors raised while reading are translated, not those of the consumer.
    lineno = 0
    iterator = iter(lines)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except UnicodeDecodeError as err:
            raise ParseError(f"Cannot decode line {lineno + 1} of {name}: {err}") from err
        except OSError as err:
            raise GridReadError(f"Cannot read line {lineno + 1} of {name}: {err}") from err
        lineno += 1
        yield line


def read_header(source: str | Path | Iterable[str]) -> GridHeader:
    r"""
    Read the header of an ASCII grid without touching its values.

    Parameters
    ----------
    source : str | Path | Iterable[str]
        Path to the grid file or its lines.

    Returns
    -------
    GridHeader
        Parsed header. Keys missing from the source keep their defaults.
    """
    parser = AsciiGridParser()
    with open_source(source) as lines:
        for line in lines:
            parser.feed(line)
            if parser.header_done:
                break
    return parser.header


def iter_cells(source: str | Path | Iterable[str]) -> Iterator[GridCell]:
    r"""
    Stream the cells of an ASCII grid that hold a value.

    Cells whose token is the nodata token or ``0`` are skipped, but still
    take up their place on the grid.

    Parameters
    ----------
    source : str | Path | Iterable[str]
        Path to the grid file or its lines.

    Yields
    ------
    GridCell
        Cells in row-major order, top row first.
    """
    parser = AsciiGridParser()
    with open_source(source) as lines:
        for line in lines:
            yield from parser.feed(line)
    parser.finish()
