"""Fitted models with refit and predict capabilities."""

from typing import Optional, Union

import pandas as pd

from .._typing import ArrayLike
from ..exceptions import ConfigurationError
from .base import FittedModel, Fittable, Predictable, HC_TYPES, PREDICTION_TYPES
from .linear import OLSModel, OLS
from .glm import GLMModel, LogitModel, Logit, ProbitModel, Probit, PoissonModel, Poisson

MODEL_REGISTRY = {
    "ols": OLSModel,
    "logit": LogitModel,
    "probit": ProbitModel,
    "poisson": PoissonModel,
}


def get_model(name: str) -> type:
    """
    Get a model class by family tag.

    Args:
        name: Family tag. Available:
              - 'ols': linear regression (WLS when weighted)
              - 'logit': binary logistic regression
              - 'probit': binary probit regression
              - 'poisson': Poisson regression with log link

    Returns:
        FittedModel subclass
    """
    if name not in MODEL_REGISTRY:
        raise ConfigurationError(f"Unknown family: {name}. Available: {list(MODEL_REGISTRY.keys())}")
    return MODEL_REGISTRY[name]


def fit_model(
    formula: str,
    data: pd.DataFrame,
    family: str = "ols",
    weights: Optional[Union[str, ArrayLike]] = None,
) -> FittedModel:
    """
    Fit a regression model.

    Args:
        formula: Wilkinson formula, e.g. "y ~ x1 * x2"
        data: Fitting frame
        family: Registry tag (see `get_model`)
        weights: Optional column name (or array) of case weights

    Returns:
        Fitted model supporting refit() and predict()

    Examples:
        model = fit_model("y ~ x1 * x2", df)
        model = fit_model("am ~ mpg + hp", df, family="logit")
    """
    return get_model(family)(formula, data, weights=weights)


__all__ = [
    # Protocols
    "Fittable",
    "Predictable",
    # Base
    "FittedModel",
    "GLMModel",
    # Built-in models
    "OLSModel",
    "OLS",
    "LogitModel",
    "Logit",
    "ProbitModel",
    "Probit",
    "PoissonModel",
    "Poisson",
    # Registry
    "MODEL_REGISTRY",
    "get_model",
    "fit_model",
    "HC_TYPES",
    "PREDICTION_TYPES",
]
