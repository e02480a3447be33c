"""
Estimate tables and their provenance.

An EstimateTable is a pandas DataFrame of point estimates plus the metadata
needed to recompute it: the fitted model and the exact call (estimator name
and resolved keyword arguments) that produced it.

Estimators register a core function with `register_estimator`. The core
returns point estimates only; `build_table` adds delta-method inference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from .._typing import VcovType
from ..exceptions import ConfigurationError
from ..utils.formatting import format_estimate_table
from .delta import delta_method

if TYPE_CHECKING:
    from ..models import FittedModel
    from ..engine.replicate import ReplicateSet

ESTIMATORS: Dict[str, Callable[..., pd.DataFrame]] = {}

KIND_BY_ESTIMATOR = {
    "predictions": "predictions",
    "comparisons": "comparisons",
    "slopes": "slopes",
    "hypotheses": "hypotheses",
}

INFERENCE_COLUMNS = ["std_error", "statistic", "p_value", "conf_low", "conf_high"]


def register_estimator(name: str):
    """Register the core function of an estimator under `name`."""

    def decorator(fn):
        ESTIMATORS[name] = fn
        return fn

    return decorator


@dataclass(frozen=True)
class EstimateCall:
    """
    The exact computation that produced an estimate table.

    `evaluate()` reruns it against another fitted model (a refit, or a copy
    with swapped coefficients); nothing else changes.
    """

    function: str
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def evaluate(self, model: "FittedModel") -> pd.DataFrame:
        if self.function not in ESTIMATORS:
            raise ConfigurationError(
                f"Unknown estimator: {self.function}. Available: {list(ESTIMATORS.keys())}"
            )
        return ESTIMATORS[self.function](model, **self.kwargs)

    def by_columns(self) -> List[str]:
        by = self.kwargs.get("by")
        if by is None or by is True:
            return []
        return [by] if isinstance(by, str) else list(by)


class EstimateTable:
    """
    Table of estimates with provenance.

    Attributes:
        kind: "predictions", "comparisons", "slopes" or "hypotheses"
        model: Originating fitted model
        call: EstimateCall that recomputes the point estimates
        vcov: Covariance specification the table was built with
        conf_level: Confidence level of the interval columns
        inferences: ReplicateSet attached by `inferences()`, else None
        draws: (K, R) replicate estimates attached by `inferences()`, else None
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        kind: str,
        model: "FittedModel",
        call: EstimateCall,
        vcov: VcovType = True,
        conf_level: float = 0.95,
        inferences: Optional["ReplicateSet"] = None,
        draws: Optional[np.ndarray] = None,
    ):
        self._frame = frame.reset_index(drop=True)
        self.kind = kind
        self.model = model
        self.call = call
        self.vcov = vcov
        self.conf_level = conf_level
        self.inferences = inferences
        self.draws = draws

    # =========================================================================
    # Frame access
    # =========================================================================

    @property
    def key_columns(self) -> List[str]:
        """Columns that identify a row across refits."""
        keys = [c for c in ("rowid", "term", "contrast") if c in self._frame.columns]
        return keys + [c for c in self.call.by_columns() if c not in keys]

    @property
    def columns(self) -> pd.Index:
        return self._frame.columns

    @property
    def estimate(self) -> np.ndarray:
        return self._frame["estimate"].to_numpy()

    @property
    def std_error(self) -> np.ndarray:
        return self._frame["std_error"].to_numpy()

    @property
    def conf_low(self) -> np.ndarray:
        return self._frame["conf_low"].to_numpy()

    @property
    def conf_high(self) -> np.ndarray:
        return self._frame["conf_high"].to_numpy()

    def to_frame(self) -> pd.DataFrame:
        """Copy of the underlying DataFrame."""
        return self._frame.copy()

    def head(self, n: int = 5) -> "EstimateTable":
        """First `n` rows, keeping kind and provenance."""
        draws = None if self.draws is None else self.draws[:n]
        return self._with_frame(self._frame.head(n), draws=draws)

    def _with_frame(self, frame: pd.DataFrame, **changes) -> "EstimateTable":
        attrs = dict(
            kind=self.kind,
            model=self.model,
            call=self.call,
            vcov=self.vcov,
            conf_level=self.conf_level,
            inferences=self.inferences,
            draws=self.draws,
        )
        attrs.update(changes)
        return EstimateTable(frame, **attrs)

    def __getitem__(self, key):
        return self._frame[key]

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return self.summary()

    def summary(self, max_rows: int = 20) -> str:
        """Tabulated estimates with a short provenance header."""
        method = None if self.inferences is None else self.inferences.method
        return format_estimate_table(
            frame=self._frame,
            kind=self.kind,
            key_columns=self.key_columns,
            conf_level=self.conf_level,
            family=self.model.family,
            n_obs=self.model.n_obs,
            method=method,
            max_rows=max_rows,
        )


def aggregate(
    frame: pd.DataFrame,
    keys: List[str],
    weights: Optional[np.ndarray] = None,
) -> pd.DataFrame:
    """
    (Weighted) mean of `estimate` within groups.

    Args:
        frame: Unit-level rows with an "estimate" column
        keys: Grouping columns; empty for an overall mean
        weights: Optional (n,) weights aligned with `frame`

    Returns:
        One row per group, ordered by first appearance
    """
    w = np.ones(len(frame)) if weights is None else np.asarray(weights, dtype=np.float64)
    work = pd.DataFrame({
        "_wx": frame["estimate"].to_numpy() * w,
        "_w": w,
    })
    if not keys:
        return pd.DataFrame({"estimate": [work["_wx"].sum() / work["_w"].sum()]})
    for key in keys:
        work[key] = frame[key].to_numpy()
    grouped = work.groupby(keys, sort=False, observed=True)[["_wx", "_w"]].sum()
    out = grouped.reset_index()
    out["estimate"] = out["_wx"] / out["_w"]
    return out.drop(columns=["_wx", "_w"])


def resolve_weights(newdata: pd.DataFrame, wts: Optional[str]) -> Optional[np.ndarray]:
    if wts is None:
        return None
    if wts not in newdata.columns:
        raise ConfigurationError(f"wts column not found in newdata: {wts}")
    return newdata[wts].to_numpy(dtype=np.float64)


def build_table(
    function: str,
    model: "FittedModel",
    kwargs: Dict[str, Any],
    vcov: VcovType = True,
    conf_level: float = 0.95,
) -> EstimateTable:
    """
    Evaluate an estimator and attach delta-method inference.

    Args:
        function: Registered estimator name
        model: Fitted model
        kwargs: Resolved keyword arguments of the core function
        vcov: Covariance specification (see FittedModel.vcov)
        conf_level: Confidence level for the intervals

    Returns:
        EstimateTable with estimate, std_error, statistic, p_value,
        conf_low and conf_high columns
    """
    if not 0 < conf_level < 1:
        raise ConfigurationError(f"conf_level must be in (0, 1), got {conf_level}")

    call = EstimateCall(function=function, kwargs=kwargs)
    frame = call.evaluate(model)
    V = model.vcov(vcov)

    if V is None:
        inference = {col: np.full(len(frame), np.nan) for col in INFERENCE_COLUMNS}
    else:
        inference = delta_method(
            lambda m: call.evaluate(m)["estimate"].to_numpy(),
            model,
            V,
            frame["estimate"].to_numpy(),
            conf_level=conf_level,
        )

    frame = order_columns(frame.assign(**inference), call.by_columns())
    return EstimateTable(
        frame,
        kind=KIND_BY_ESTIMATOR[function],
        model=model,
        call=call,
        vcov=vcov,
        conf_level=conf_level,
    )


def order_columns(frame: pd.DataFrame, by_cols: List[str]) -> pd.DataFrame:
    """Keys and groups first, then estimate and inference columns, then covariates."""
    leading = [c for c in ("rowid", "term", "contrast") if c in frame.columns]
    leading += [c for c in by_cols if c in frame.columns and c not in leading]
    stats_cols = ["estimate"] + [c for c in INFERENCE_COLUMNS if c in frame.columns]
    rest = [c for c in frame.columns if c not in leading and c not in stats_cols]
    return frame[leading + stats_cols + rest]


def replace_inference(table: EstimateTable, values: Dict[str, np.ndarray], **changes) -> EstimateTable:
    """New table with the inference columns overwritten."""
    frame = table.to_frame()
    for col, vals in values.items():
        frame[col] = vals
    return table._with_frame(frame, **changes)
