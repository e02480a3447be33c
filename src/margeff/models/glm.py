"""
Generalized linear models.

g(E[Y|X]) = X'b

- Logit:   Y ~ Bernoulli(sigmoid(X'b))
- Probit:  Y ~ Bernoulli(Phi(X'b))
- Poisson: Y ~ Poisson(exp(X'b))

Case weights enter as variance weights, so fractional weights are allowed.
"""

from typing import Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm

from .._typing import Float64Array
from .base import FittedModel


class GLMModel(FittedModel):
    """Base class for statsmodels GLM families."""

    def _sm_family(self) -> sm.families.Family:
        raise NotImplementedError("Subclasses must implement _sm_family()")

    def _build(self, endog: Float64Array, exog: pd.DataFrame, weights: Optional[Float64Array]):
        self._glm_family = self._sm_family()
        return sm.GLM(endog, exog, family=self._glm_family, var_weights=weights)

    def _inverse_link(self, eta: Float64Array) -> Float64Array:
        return np.asarray(self._glm_family.link.inverse(eta), dtype=np.float64)


class LogitModel(GLMModel):
    """Binary logistic regression."""

    family = "logit"

    def _sm_family(self) -> sm.families.Family:
        return sm.families.Binomial()


class ProbitModel(GLMModel):
    """Binary probit regression."""

    family = "probit"

    def _sm_family(self) -> sm.families.Family:
        return sm.families.Binomial(link=sm.families.links.Probit())


class PoissonModel(GLMModel):
    """Poisson count regression with log link."""

    family = "poisson"

    def _sm_family(self) -> sm.families.Family:
        return sm.families.Poisson()


# Convenience aliases
Logit = LogitModel
Probit = ProbitModel
Poisson = PoissonModel
