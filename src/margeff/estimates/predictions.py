"""
Adjusted predictions.

Unit-level predictions for every row of `newdata`, or (weighted) averages
within `by` groups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Union

import numpy as np
import pandas as pd

from .._typing import VcovType
from ..exceptions import ConfigurationError
from ..models import PREDICTION_TYPES
from .table import EstimateTable, aggregate, build_table, register_estimator, resolve_weights

if TYPE_CHECKING:
    from ..models import FittedModel

ByType = Union[bool, str, List[str], None]


def resolve_newdata(model: "FittedModel", newdata: Optional[pd.DataFrame]) -> pd.DataFrame:
    """Default to the fitting frame; always return a fresh, 0-indexed copy."""
    if newdata is None:
        newdata = model.data
    if not isinstance(newdata, pd.DataFrame):
        raise ConfigurationError("newdata must be a pandas DataFrame")
    missing = [c for c in model.regressors if c not in newdata.columns]
    if missing:
        raise ConfigurationError(f"newdata is missing regressor columns: {missing}")
    return newdata.reset_index(drop=True).copy()


def check_by(newdata: pd.DataFrame, by: ByType) -> ByType:
    if by is None or by is True:
        return by
    if by is False:
        return None
    cols = [by] if isinstance(by, str) else list(by)
    missing = [c for c in cols if c not in newdata.columns]
    if missing:
        raise ConfigurationError(f"by columns not found in newdata: {missing}")
    return by


def check_type(type: str) -> str:
    if type not in PREDICTION_TYPES:
        raise ConfigurationError(
            f"Unknown prediction type: {type}. Available: {list(PREDICTION_TYPES)}"
        )
    return type


def group_keys(by: ByType) -> List[str]:
    if by is None or by is True:
        return []
    return [by] if isinstance(by, str) else list(by)


@register_estimator("predictions")
def _predictions(
    model: "FittedModel",
    newdata: pd.DataFrame,
    by: ByType = None,
    type: str = "response",
    wts: Optional[str] = None,
) -> pd.DataFrame:
    estimate = model.predict(newdata, type=type)

    if by is None:
        frame = newdata.copy()
        frame.insert(0, "rowid", np.arange(len(newdata)))
        frame.insert(1, "estimate", estimate)
        return frame

    unit = newdata.assign(estimate=estimate)
    return aggregate(unit, group_keys(by), resolve_weights(newdata, wts))


def predictions(
    model: "FittedModel",
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = None,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
) -> EstimateTable:
    """
    Adjusted predictions.

    Args:
        model: Fitted model
        newdata: Frame of covariate values (default: the fitting frame)
        by: None for one row per newdata row, True for the overall mean,
            or column name(s) to average within groups
        type: "response" or "link"
        vcov: Covariance for delta-method errors (True, False, "HC0".."HC3", matrix)
        conf_level: Confidence level
        wts: Column of newdata with weights for the averages

    Returns:
        EstimateTable of kind "predictions"

    Examples:
        p = predictions(model)
        p = predictions(model, by="cyl")
        p = predictions(model, newdata=datagrid(model, x1=[0, 1]))
    """
    newdata = resolve_newdata(model, newdata)
    kwargs = dict(
        newdata=newdata,
        by=check_by(newdata, by),
        type=check_type(type),
        wts=wts,
    )
    resolve_weights(newdata, wts)
    return build_table("predictions", model, kwargs, vcov=vcov, conf_level=conf_level)


def avg_predictions(
    model: "FittedModel",
    newdata: Optional[pd.DataFrame] = None,
    by: ByType = True,
    type: str = "response",
    vcov: VcovType = True,
    conf_level: float = 0.95,
    wts: Optional[str] = None,
) -> EstimateTable:
    """Average adjusted predictions; `predictions` with `by=True` by default."""
    return predictions(
        model,
        newdata=newdata,
        by=True if by is None else by,
        type=type,
        vcov=vcov,
        conf_level=conf_level,
        wts=wts,
    )
