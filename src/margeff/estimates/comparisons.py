"""
Comparisons and slopes.

A comparison evaluates predictions at two counterfactual versions of
`newdata` ("hi" and "lo") and combines them with a comparison function:

    numeric x:      lo = x - v/2,  hi = x + v/2
    categorical x:  lo = reference level,  hi = other level
    slope (dY/dX):  (pred(x + ε/2) - pred(x - ε/2)) / ε,  ε = 1e-4 × range(x)
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .._typing import ComparisonFn, Float64Array, VcovType
from ..exceptions import ConfigurationError
from .predictions import ByType, check_by, check_type, group_keys, resolve_newdata
from .table import EstimateTable, aggregate, build_table, register_estimator, resolve_weights

if TYPE_CHECKING:
    from ..models import FittedModel

COMPARISONS: Dict[str, Callable[[Float64Array, Float64Array], Float64Array]] = {
    "difference": lambda hi, lo: hi - lo,
    "ratio": lambda hi, lo: hi / lo,
    "lnratio": lambda hi, lo: np.log(hi / lo),
}

CATEGORICAL_CONTRASTS = ("reference", "sequential")

SLOPE_STEP = 1e-4


@dataclass(frozen=True)
class Contrast:
    """Resolved counterfactual for one variable."""

    variable: str
    kind: str  # "numeric", "dydx", "reference" or "sequential"
    value: Any = None
    levels: Tuple = ()


def _levels(column: pd.Series) -> list:
    if isinstance(column.dtype, pd.CategoricalDtype):
        return list(column.cat.categories)
    return sorted(column.dropna().unique().tolist())


def resolve_variables(
    model: "FittedModel",
    variables: Union[None, str, Sequence[str], Dict[str, Any]],
    slopes: bool = False,
) -> List[Contrast]:
    """
    Turn the `variables` argument into a list of Contrast.

    Args:
        model: Fitted model (levels and ranges come from its fitting frame)
        variables: None for all regressors, a name, a list of names, or a
                   {name: value} mapping (numeric step, or "reference" /
                   "sequential" for factors)
        slopes: Numeric variables get derivatives instead of contrasts

    Returns:
        List of Contrast
    """
    if variables is None:
        variables = {name: None for name in model.regressors}
    elif isinstance(variables, str):
        variables = {variables: None}
    elif not isinstance(variables, dict):
        variables = {name: None for name in variables}

    contrasts = []
    for name, value in variables.items():
        if name not in model.regressors:
            raise ConfigurationError(
                f"Unknown variable: {name}. Available: {model.regressors}"
            )
        column = model.data[name]
        if model.is_categorical(name):
            value = "reference" if value is None else value
            if value not in CATEGORICAL_CONTRASTS:
                raise ConfigurationError(
                    f"Unknown contrast for factor {name}: {value}. "
                    f"Available: {list(CATEGORICAL_CONTRASTS)}"
                )
            contrasts.append(Contrast(name, value, levels=tuple(_levels(column))))
        elif slopes:
            span = float(column.max() - column.min())
            eps = SLOPE_STEP * span if span > 0 else SLOPE_STEP
            contrasts.append(Contrast(name, "dydx", value=eps))
        else:
            value = 1 if value is None else value
            if not np.isscalar(value) or isinstance(value, str):
                raise ConfigurationError(f"Numeric contrast for {name} must be a number, got {value!r}")
            contrasts.append(Contrast(name, "numeric", value=value))
    return contrasts


def resolve_comparison(comparison: Union[str, ComparisonFn]) -> Union[str, ComparisonFn]:
    if callable(comparison):
        return comparison
    if comparison not in COMPARISONS:
        raise ConfigurationError(
            f"Unknown comparison: {comparison}. Available: {list(COMPARISONS.keys())} or a callable"
        )
    return comparison


def apply_comparison(
    comparison: Union[str, ComparisonFn], hi: Float64Array, lo: Float64Array
) -> Float64Array:
    """Combine hi/lo predictions; callables must return a matching numeric sequence."""
    if not callable(comparison):
        return COMPARISONS[comparison](hi, lo)
    try:
        out = np.asarray(comparison(hi, lo), dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"comparison function must return numbers: {e}") from e
    if out.shape != hi.shape:
        raise ConfigurationError(
            f"comparison function must return {hi.shape[0]} values, got shape {out.shape}"
        )
    return out


def _set_column(frame: pd.DataFrame, name: str, value: Any) -> pd.DataFrame:
    out = frame.copy()
    out[name] = pd.Series([value] * len(frame), index=frame.index, dtype=frame[name].dtype)
    return out


def _counterfactuals(
    newdata: pd.DataFrame, contrast: Contrast
) -> List[Tuple[str, pd.DataFrame, pd.DataFrame]]:
    """(label, lo, hi) frames for one contrast."""
    name = contrast.variable
    if contrast.kind in ("numeric", "dydx"):
        half = contrast.value / 2
        x = newdata[name].astype(np.float64)
        label = "dY/dX" if contrast.kind == "dydx" else f"+{contrast.value:g}"
        return [(label, newdata.assign(**{name: x - half}), newdata.assign(**{name: x + half}))]

    levels = contrast.levels
    if contrast.kind == "reference":
        pairs = [(levels[0], level) for level in levels[1:]]
    else:
        pairs = list(zip(levels[:-1], levels[1:]))
    return [
        (f"{hi} - {lo}", _set_column(newdata, name, lo), _set_column(newdata, name, hi))
        for lo, hi in pairs
    ]


@register_estimator("comparisons")
def _comparisons(
    model: "FittedModel",
    newdata: pd.DataFrame,
    contrasts: List[Contrast],
    comparison: Union[str, ComparisonFn] = "difference",
    by: ByType = None,
    type: str = "response",
    wts: Optional[str] = None,
    cross: bool = False,
) -> pd.DataFrame:
    pieces = []
    if cross:
        pieces.extend(_crossed(newdata, contrasts))
    else:
        for contrast in contrasts:
            for label, lo, hi in _counterfactuals(newdata, contrast):
                pieces.append((contrast, contrast.variable, label, {}, lo, hi))

    frames = []
    for contrast, term, label, labels, lo, hi in pieces:
        p_lo = model.predict(lo, type=type)
        p_hi = model.predict(hi, type=type)
        if contrast is not None and contrast.kind == "dydx":
            estimate = (p_hi - p_lo) / contrast.value
        else:
            estimate = apply_comparison(comparison, p_hi, p_lo)
        piece = newdata.copy()
        piece.insert(0, "rowid", np.arange(len(newdata)))
        piece.insert(1, "term", term)
        piece.insert(2, "contrast", label)
        for offset, (column, value) in enumerate(labels.items()):
            piece.insert(3 + offset, column, value)
        piece.insert(3 + len(labels), "estimate", estimate)
        frames.append(piece)

    frame = pd.concat(frames, ignore_index=True)
    if by is None:
        return frame

    weights = resolve_weights(newdata, wts)
    if weights is not None:
        weights = np.tile(weights, len(frames))
    per_variable = [f"contrast_{c.variable}" for c in contrasts] if cross else []
    return aggregate(frame, ["term", "contrast"] + per_variable + group_keys(by), weights)


def _crossed(newdata: pd.DataFrame, contrasts: List[Contrast]):
    """Joint counterfactuals: every combination of the per-variable contrasts."""
    options = [_counterfactuals(newdata, contrast) for contrast in contrasts]
    for combo in itertools.product(*options):
        lo = newdata.copy()
        hi = newdata.copy()
        labels = {}
        for contrast, (label, lo_one, hi_one) in zip(contrasts, combo):
            lo[contrast.variable] = lo_one[contrast.variable]
            hi[contrast.variable] = hi_one[contrast.variable]
            labels[f"contrast_{contrast.variable}"] = label
        yield None, "cross", ", ".join(labels.values()), labels, lo, hi


def comparisons(
    model: "FittedModel",
    variables: Union[None, str, Sequence[str], Dict[str, Any]] = None,
    comparison: Union[str, ComparisonFn] = "difference",
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = None,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
    cross: bool = False,
) -> EstimateTable:
    """
    Compare predictions between counterfactual values of the regressors.

    Args:
        model: Fitted model
        variables: Variables to vary (default: all regressors). A mapping
                   sets the numeric step or the factor contrast type.
        comparison: "difference", "ratio", "lnratio", or f(hi, lo) -> array
                    returning one value per row
        newdata: Frame of covariate values (default: the fitting frame)
        by: None for unit-level rows, True for averages, or group columns
        type: "response" or "link"
        vcov: Covariance for delta-method errors
        conf_level: Confidence level
        wts: Column of newdata with weights for the averages
        cross: Change all `variables` at once instead of one at a time;
               one row per combination of their contrasts, labelled in
               `contrast` and in a `contrast_<variable>` column each

    Returns:
        EstimateTable of kind "comparisons"

    Examples:
        cmp = comparisons(model, variables="x1")
        cmp = comparisons(model, variables={"x1": 10}, comparison="ratio")
        cmp = comparisons(model, comparison=lambda hi, lo: (hi - lo) / lo)
        cmp = avg_comparisons(model, variables={"x1": 1, "g": "reference"}, cross=True)
    """
    return _contrast_table(
        "comparisons", model, resolve_variables(model, variables), comparison,
        newdata, by, type, vcov, conf_level, wts, cross=cross,
    )


def avg_comparisons(
    model: "FittedModel",
    variables: Union[None, str, Sequence[str], Dict[str, Any]] = None,
    comparison: Union[str, ComparisonFn] = "difference",
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = True,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
    cross: bool = False,
) -> EstimateTable:
    """Average comparisons; `comparisons` with `by=True` by default."""
    return comparisons(
        model, variables=variables, comparison=comparison, newdata=newdata,
        by=True if by is None else by, type=type, vcov=vcov,
        conf_level=conf_level, wts=wts, cross=cross,
    )


def slopes(
    model: "FittedModel",
    variables: Union[None, str, Sequence[str]] = None,
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = None,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
) -> EstimateTable:
    """
    Partial derivatives of the prediction (marginal effects).

    Numeric regressors get finite-difference derivatives; factors fall back
    to contrasts against the reference level.

    Returns:
        EstimateTable of kind "slopes"
    """
    contrasts = resolve_variables(model, variables, slopes=True)
    return _contrast_table(
        "slopes", model, contrasts, "difference",
        newdata, by, type, vcov, conf_level, wts,
    )


def avg_slopes(
    model: "FittedModel",
    variables: Union[None, str, Sequence[str]] = None,
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = True,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
) -> EstimateTable:
    """Average slopes; `slopes` with `by=True` by default."""
    return slopes(
        model, variables=variables, newdata=newdata,
        by=True if by is None else by, type=type, vcov=vcov,
        conf_level=conf_level, wts=wts,
    )


@register_estimator("slopes")
def _slopes(model: "FittedModel", **kwargs) -> pd.DataFrame:
    return _comparisons(model, **kwargs)


def _contrast_table(
    function: str,
    model: "FittedModel",
    contrasts: List[Contrast],
    comparison: Union[str, ComparisonFn],
    newdata: Optional[pd.DataFrame],
    by: ByType,
    type: str,
    vcov: VcovType,
    conf_level: float,
    wts: Optional[str],
    cross: bool = False,
) -> EstimateTable:
    if not contrasts:
        raise ConfigurationError("No variables to compare")
    newdata = resolve_newdata(model, newdata)
    resolve_weights(newdata, wts)
    kwargs = dict(
        newdata=newdata,
        contrasts=contrasts,
        comparison=resolve_comparison(comparison),
        by=check_by(newdata, by),
        type=check_type(type),
        wts=wts,
        cross=cross,
    )
    return build_table(function, model, kwargs, vcov=vcov, conf_level=conf_level)
