"""Data grids of representative covariate values."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any, Optional

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..models import FittedModel


def range_of(x: pd.Series) -> list:
    """Minimum and maximum."""
    return [x.min(), x.max()]


def unique_of(x: pd.Series) -> list:
    """Sorted unique values."""
    if isinstance(x.dtype, pd.CategoricalDtype):
        return list(x.cat.categories)
    return sorted(x.dropna().unique().tolist())


def _typical(x: pd.Series) -> Any:
    if pd.api.types.is_numeric_dtype(x) and not pd.api.types.is_bool_dtype(x):
        return x.mean()
    return x.mode(dropna=True).iloc[0]


def datagrid(
    model: Optional["FittedModel"] = None,
    newdata: Optional[pd.DataFrame] = None,
    **values: Any,
) -> pd.DataFrame:
    """
    Cartesian grid of covariate values.

    Columns named in `values` take the given values (a callable receives the
    column and returns the values). All other columns are held at their mean
    (numeric) or mode (categorical).

    Args:
        model: Fitted model; its regressors and fitting frame define the grid
        newdata: Frame to take columns and typical values from
        **values: column=value(s) or column=callable

    Returns:
        DataFrame with one row per combination

    Examples:
        datagrid(model, x1=range_of)
        datagrid(model, g=["a", "b"], x2=[0, 1])
    """
    if model is None and newdata is None:
        raise ConfigurationError("datagrid needs a model or newdata")
    base = newdata if newdata is not None else model.data
    columns = list(base.columns) if model is None else list(model.regressors)
    for name in values:
        if name not in base.columns:
            raise ConfigurationError(f"Unknown column: {name}")
        if name not in columns:
            columns.append(name)

    axes = []
    for name in columns:
        if name in values:
            value = values[name]
            if callable(value):
                value = value(base[name])
            axes.append(list(np.atleast_1d(np.asarray(value, dtype=object))))
        else:
            axes.append([_typical(base[name])])

    grid = pd.DataFrame(list(itertools.product(*axes)), columns=columns)
    for name in columns:
        dtype = base[name].dtype
        if isinstance(dtype, pd.CategoricalDtype):
            grid[name] = pd.Categorical(grid[name], categories=dtype.categories)
        elif pd.api.types.is_numeric_dtype(dtype) and not pd.api.types.is_bool_dtype(dtype):
            grid[name] = pd.to_numeric(grid[name])
        else:
            grid[name] = grid[name].astype(dtype)
    return grid
