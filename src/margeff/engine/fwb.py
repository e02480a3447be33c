"""
Fractional weighted bootstrap.

Instead of resampling rows, each replicate draws a vector of case weights
with mean one and refits the model with those weights. Every row stays in
every replicate, which keeps small categories and rare levels estimable.

Weight types:
- exp: w ~ Exp(1) (the Bayesian bootstrap, default)
- poisson: w ~ Poisson(1)
- multinom: w ~ Multinomial(n, 1/n) (the ordinary bootstrap as weights)
- mammen: w = 1 + v, v two-point with mean 0 and variance 1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .._typing import Float64Array
from ..exceptions import ConfigurationError
from .base import ResamplingBackend

if TYPE_CHECKING:
    from ..estimates import EstimateCall, EstimateTable
    from ..models import FittedModel

WEIGHT_TYPES = ("exp", "poisson", "multinom", "mammen")

_SQRT5 = np.sqrt(5.0)


@dataclass
class FWBWeights:
    """Case weights of a fractional weighted bootstrap.

    Attributes:
        weights: (R, n) weights, each row with mean one
        wtype: Weight distribution
    """

    weights: Float64Array
    wtype: str


def draw_weights(n: int, R: int, wtype: str, random_state: np.random.RandomState) -> Float64Array:
    """(R, n) weights rescaled to mean one per replicate."""
    if wtype == "exp":
        w = random_state.exponential(1.0, size=(R, n))
    elif wtype == "poisson":
        w = random_state.poisson(1.0, size=(R, n)).astype(np.float64)
    elif wtype == "multinom":
        w = random_state.multinomial(n, np.full(n, 1.0 / n), size=R).astype(np.float64)
    elif wtype == "mammen":
        p = (_SQRT5 + 1) / (2 * _SQRT5)
        low = random_state.random_sample(size=(R, n)) < p
        w = 1 + np.where(low, -(_SQRT5 - 1) / 2, (_SQRT5 + 1) / 2)
    else:
        raise ConfigurationError(f"Unknown wtype: {wtype}. Available: {list(WEIGHT_TYPES)}")
    return w / w.mean(axis=1, keepdims=True)


def _uses_wts(call: "EstimateCall") -> bool:
    if call.kwargs.get("wts") is not None:
        return True
    source = call.kwargs.get("source")
    return source is not None and _uses_wts(source)


class FWBBackend(ResamplingBackend):
    """Fractional weighted bootstrap backend."""

    name = "fwb"

    def __init__(self, wtype: str = "exp"):
        if wtype not in WEIGHT_TYPES:
            raise ConfigurationError(f"Unknown wtype: {wtype}. Available: {list(WEIGHT_TYPES)}")
        self.wtype = wtype

    def validate(self, table: "EstimateTable") -> None:
        if table.model.has_weights or _uses_wts(table.call):
            raise ConfigurationError(
                "method='fwb' cannot be combined with user-supplied weights: the model "
                "was fit with case weights or the estimates use `wts`. Refit without "
                "weights, drop `wts`, or use method='boot'."
            )

    def draw(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> FWBWeights:
        return FWBWeights(weights=draw_weights(model.n_obs, R, self.wtype, random_state), wtype=self.wtype)

    def replicate_model(self, model: "FittedModel", samples: FWBWeights, i: int) -> "FittedModel":
        return model.refit(model.data, weights=samples.weights[i])
