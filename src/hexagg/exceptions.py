class HexaggError(Exception):
    """Base class for errors raised while converting a grid file."""


class GridReadError(HexaggError, OSError):
    """The grid source could not be opened or read."""


class ParseError(HexaggError, ValueError):
    """A header or body token of the grid could not be parsed."""


class TessellationError(HexaggError, ValueError):
    """An H3 operation failed on a footprint or cell."""


class NarrowingError(HexaggError, OverflowError):
    """An aggregated value does not fit into an unsigned 16-bit integer."""
