"""
Replicate evaluation and alignment.

Each replicate reruns the table's EstimateCall against a perturbed model.
Failures are isolated per replicate: the exception is wrapped in a
RefitError, recorded, and the loop moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

import numpy as np
import pandas as pd
from tqdm import tqdm

from .._typing import Float64Array
from ..exceptions import RefitError
from .base import ResamplingBackend

if TYPE_CHECKING:
    from ..estimates import EstimateTable


@dataclass
class ReplicateSet:
    """
    Record of a resampling run.

    Attributes:
        method: Backend name ("simulation", "boot", "rsample" or "fwb")
        R: Number of requested replicates
        samples: Backend record (coefficient draws, row indices, splits or weights)
        tables: Estimate frames of the successful replicates, by replicate index
        failures: RefitError of each failed replicate, by replicate index
    """

    method: str
    R: int
    samples: Any
    tables: Dict[int, pd.DataFrame] = field(default_factory=dict)
    failures: Dict[int, RefitError] = field(default_factory=dict)

    @property
    def n_success(self) -> int:
        return len(self.tables)

    @property
    def n_failed(self) -> int:
        return len(self.failures)

    @property
    def replicate_ids(self) -> List[int]:
        """Indices of the successful replicates, in run order."""
        return sorted(self.tables)

    def __repr__(self) -> str:
        return f"<ReplicateSet: method={self.method}, R={self.R}, failed={self.n_failed}>"


def run_replicates(
    table: "EstimateTable",
    backend: ResamplingBackend,
    samples: Any,
    R: int,
    verbose: bool = False,
) -> ReplicateSet:
    """
    Evaluate the table's call once per replicate.

    Args:
        table: Estimate table carrying the model and call
        backend: Backend that produced `samples`
        samples: Perturbation record from `backend.draw`
        R: Number of replicates
        verbose: Show a progress bar

    Returns:
        ReplicateSet with per-replicate frames and failures
    """
    out = ReplicateSet(method=backend.name, R=R, samples=samples)
    iterator = range(R)
    if verbose:
        iterator = tqdm(iterator, desc=f"Replicates ({backend.name})", ncols=80)

    for i in iterator:
        try:
            out.tables[i] = evaluate_replicate(table, backend, samples, i)
        except RefitError as err:
            out.failures[i] = err
    return out


def evaluate_replicate(
    table: "EstimateTable",
    backend: ResamplingBackend,
    samples: Any,
    i: int,
) -> pd.DataFrame:
    """Estimates of replicate `i`; any failure is raised as RefitError."""
    try:
        model = backend.replicate_model(table.model, samples, i)
        return table.call.evaluate(model)
    except Exception as e:
        raise RefitError(f"Replicate {i} failed: {e}", replicate=i) from e


def align(table: "EstimateTable", replicates: ReplicateSet) -> Float64Array:
    """
    Stack replicate estimates into a (K, R_ok) matrix matching the table rows.

    Rows are matched on the table's key columns. Without usable keys
    (none, or not unique) rows are matched by position. Rows missing from
    a replicate are NaN.
    """
    keys = table.key_columns
    reference = table.to_frame()
    K = len(reference)
    ids = replicates.replicate_ids
    draws = np.full((K, len(ids)), np.nan)

    by_key = bool(keys) and not reference.duplicated(subset=keys).any()
    if by_key:
        index = pd.MultiIndex.from_frame(reference[keys])

    for j, i in enumerate(ids):
        frame = replicates.tables[i]
        if by_key and all(k in frame.columns for k in keys) and not frame.duplicated(subset=keys).any():
            values = pd.Series(frame["estimate"].to_numpy(), index=pd.MultiIndex.from_frame(frame[keys]))
            draws[:, j] = values.reindex(index).to_numpy(dtype=np.float64)
        else:
            m = min(K, len(frame))
            draws[:m, j] = frame["estimate"].to_numpy(dtype=np.float64)[:m]
    return draws
