import logging

import h3
import numpy as np

from hexagg.exceptions import NarrowingError, TessellationError

logger = logging.getLogger(__name__)

COARSE_RESOLUTION = 8

U16 = np.iinfo(np.uint16)


def narrow_to_u16(value: float) -> int:
    r"""
    Truncate a value toward zero and check that it fits into a uint16.

    Parameters
    ----------
    value : float
        Aggregated value.

    Returns
    -------
    int
        Truncated value in ``0..65535``.

    Raises
    ------
    NarrowingError
        If the value is not finite or out of range after truncation.
    """
    if not np.isfinite(value):
        raise NarrowingError(f"Cannot narrow {value} to uint16.")
    truncated = int(np.trunc(value))
    if not U16.min <= truncated <= U16.max:
        raise NarrowingError(
            f"Value {value} is out of the uint16 range {U16.min}..{U16.max}."
        )
    return truncated


def aggregate_to_parents(
    fine_map: dict[str, float], resolution: int = COARSE_RESOLUTION
) -> dict[str, int]:
    r"""
    Aggregate fine H3 cells to their parents by averaging over all children.

    The mean is taken over every child of a parent at the fine resolution,
    so children missing from `fine_map` count as zero. Each parent is
    expanded once, however many of its children are present.

    Parameters
    ----------
    fine_map : dict[str, float]
        Value per fine H3 cell.
    resolution : int, default 8
        H3 resolution of the parents.

    Returns
    -------
    dict[str, int]
        Mean value per parent, truncated to uint16. Holds exactly the
        parents of the keys of `fine_map`.
    """
    coarse_map = {}
    for cell in fine_map:
        try:
            parent = h3.cell_to_parent(cell, resolution)
        except (h3.H3BaseException, ValueError) as err:
            raise TessellationError(
                f"Cannot get parent of {cell} at resolution {resolution}: {err}"
            ) from err
        if parent in coarse_map:
            continue

        children = h3.cell_to_children(parent, h3.get_resolution(cell))
        total = sum(fine_map.get(child, 0.0) for child in children)
        coarse_map[parent] = narrow_to_u16(total / len(children))

    logger.debug(
        f"Aggregated {len(fine_map)} cells to {len(coarse_map)} cells at resolution {resolution}."
    )
    return coarse_map
