"""
Linear regression model.

E[Y|X] = X'b

Fit by ordinary least squares, or weighted least squares when case weights
are supplied (user weights or fractional bootstrap weights).
"""

from typing import Optional

import pandas as pd
import statsmodels.api as sm

from .._typing import Float64Array
from .base import FittedModel


class OLSModel(FittedModel):
    """
    Linear regression fit with statsmodels.

    Predictions on the "response" and "link" scales coincide.
    """

    family = "ols"

    def _build(self, endog: Float64Array, exog: pd.DataFrame, weights: Optional[Float64Array]):
        if weights is None:
            return sm.OLS(endog, exog)
        return sm.WLS(endog, exog, weights=weights)


# Convenience alias
OLS = OLSModel
