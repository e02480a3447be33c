"""
Simulation-based inference.

Draws coefficient vectors from the asymptotic sampling distribution

    b* ~ N(b̂, V̂)

and recomputes the estimates with each draw, holding the data fixed. V̂ is
the covariance the estimate table was built with (e.g. vcov="HC3").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from .._typing import Float64Array
from ..exceptions import ConfigurationError
from .base import ResamplingBackend

if TYPE_CHECKING:
    from ..estimates import EstimateTable
    from ..models import FittedModel


@dataclass
class SimulationDraws:
    """Coefficient draws.

    Attributes:
        coefficients: (R, p) simulated coefficient vectors
        mean: (p,) fitted coefficients
        vcov: (p, p) covariance used for the draws
    """

    coefficients: Float64Array
    mean: Float64Array
    vcov: Float64Array


class SimulationBackend(ResamplingBackend):
    """Multivariate normal coefficient simulation."""

    name = "simulation"

    def __init__(self):
        self._vcov: Optional[Float64Array] = None

    def validate(self, table: "EstimateTable") -> None:
        V = table.model.vcov(table.vcov)
        if V is None:
            raise ConfigurationError(
                "method='simulation' needs a coefficient covariance, "
                "but the estimates were computed with vcov=False"
            )
        self._vcov = V

    def draw(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> SimulationDraws:
        V = self._vcov if self._vcov is not None else model.vcov(True)
        mean = model.params.to_numpy()
        coefficients = random_state.multivariate_normal(mean, V, size=R)
        return SimulationDraws(coefficients=coefficients, mean=mean, vcov=V)

    def replicate_model(self, model: "FittedModel", samples: SimulationDraws, i: int) -> "FittedModel":
        return model.set_coef(samples.coefficients[i])
