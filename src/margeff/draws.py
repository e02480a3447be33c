"""Access to the replicate draws attached by inferences()."""

import numpy as np
import pandas as pd

from .estimates import EstimateTable
from .exceptions import ConfigurationError, PreconditionError

SHAPES = ("long", "DxP", "PxD")


def posterior_draws(table: EstimateTable, shape: str = "long") -> pd.DataFrame:
    """
    Replicate draws of an inference-augmented table.

    Args:
        table: Table returned by inferences()
        shape: Layout:
               - 'long': the table's columns plus `drawid` and `draw`, one
                 row per (estimate row, replicate), replicate-major
               - 'DxP': replicates in rows, estimate rows in columns
               - 'PxD': estimate rows in rows, replicates in columns

    Returns:
        New DataFrame; the stored draws are not modified
    """
    if not isinstance(table, EstimateTable) or table.draws is None:
        raise PreconditionError("No replicate draws found; call inferences() first")
    if shape not in SHAPES:
        raise ConfigurationError(f"Unknown shape: {shape}. Available: {list(SHAPES)}")

    draws = np.array(table.draws, dtype=np.float64, copy=True)
    K, R = draws.shape
    ids = list(range(R)) if table.inferences is None else table.inferences.replicate_ids
    drawid = pd.Index(ids, name="drawid")

    if shape == "PxD":
        return pd.DataFrame(draws, columns=drawid)
    if shape == "DxP":
        return pd.DataFrame(draws.T, index=drawid)

    frame = table.to_frame()
    out = frame.iloc[np.tile(np.arange(K), R)].reset_index(drop=True)
    out.insert(0, "drawid", np.repeat(ids, K))
    out.insert(1, "draw", draws.T.ravel())
    return out
