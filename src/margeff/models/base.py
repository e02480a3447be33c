"""
Base protocols and classes for fitted models.

A fitted model exposes two capabilities to the estimation and inference layers:

- Fittable: can be refit on a new dataset (resampled rows or new case weights)
- Predictable: can produce predictions for new data, optionally with a
  swapped coefficient vector

Design matrices are built with formulaic; estimation is delegated to statsmodels.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Optional, Protocol, Union, runtime_checkable

import numpy as np
import pandas as pd
import formulaic

from .._typing import ArrayLike, Float64Array, VcovType
from ..exceptions import ConfigurationError

HC_TYPES = ("HC0", "HC1", "HC2", "HC3")
PREDICTION_TYPES = ("response", "link")
WEIGHTS_COLUMN = "(weights)"


@runtime_checkable
class Fittable(Protocol):
    """Protocol for models that can be re-estimated on new data."""

    def refit(
        self, data: pd.DataFrame, weights: Optional[ArrayLike] = None
    ) -> "Fittable":
        """
        Re-estimate the same specification on new data.

        Args:
            data: Fitting frame with the same columns as the original
            weights: Optional (n,) case weights, overriding stored weights

        Returns:
            New fitted model of the same family and formula
        """
        ...


@runtime_checkable
class Predictable(Protocol):
    """Protocol for models that can predict the quantity of interest."""

    def predict(
        self,
        newdata: pd.DataFrame,
        params: Optional[Float64Array] = None,
        type: str = "response",
    ) -> Float64Array:
        """
        Predict for new data.

        Args:
            newdata: Frame with the regressor columns
            params: Coefficient vector to use instead of the fitted one
            type: "response" (inverse link applied) or "link"

        Returns:
            (m,) predictions
        """
        ...


class FittedModel:
    """
    Base class for fitted regression models.

    Subclasses set `family` (the registry tag) and implement `_build()`,
    which returns an unfitted statsmodels model, and `_inverse_link()`.
    """

    family: str = "base"

    def __init__(
        self,
        formula: str,
        data: pd.DataFrame,
        weights: Optional[Union[str, ArrayLike]] = None,
    ):
        """
        Fit a model.

        Args:
            formula: Wilkinson formula, e.g. "y ~ x1 * x2 + C(g)"
            data: Fitting frame
            weights: Column name of case weights, or an (n,) array aligned
                     with `data` after incomplete rows are dropped. Arrays
                     are stored as the WEIGHTS_COLUMN of `self.data` so
                     that resampled rows keep their weights on refit
        """
        if not isinstance(data, pd.DataFrame):
            raise ConfigurationError("data must be a pandas DataFrame")

        matrices = formulaic.model_matrix(formula, data)
        rhs = matrices.rhs
        lhs = matrices.lhs

        self.formula = formula
        self.data = data.loc[rhs.index]
        self._spec = rhs.model_spec
        self._exog = rhs
        self._endog = lhs.iloc[:, 0].to_numpy(dtype=np.float64)
        self.response = str(lhs.columns[0])

        self._weight_values = self._resolve_weights(weights)
        if weights is None or isinstance(weights, str):
            self.weights = weights
        else:
            self.data = self.data.assign(**{WEIGHTS_COLUMN: self._weight_values})
            self.weights = WEIGHTS_COLUMN

        self._sm_model = self._build(self._endog, self._exog, self._weight_values)
        self._results = self._sm_model.fit()
        self._params = np.asarray(self._results.params, dtype=np.float64)
        self._vcov_cache: dict = {}

    # =========================================================================
    # Subclass hooks
    # =========================================================================

    def _build(self, endog: Float64Array, exog: pd.DataFrame, weights: Optional[Float64Array]):
        """Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement _build()")

    def _inverse_link(self, eta: Float64Array) -> Float64Array:
        """Identity by default."""
        return eta

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def params(self) -> pd.Series:
        """Coefficients named by design column."""
        return pd.Series(self._params, index=self.coef_names)

    @property
    def coef_names(self) -> list[str]:
        return [str(c) for c in self._exog.columns]

    @property
    def n_obs(self) -> int:
        return len(self._endog)

    @property
    def has_weights(self) -> bool:
        """True if the user fit this model with explicit case weights."""
        return self._weight_values is not None

    @property
    def regressors(self) -> list[str]:
        """Data columns used on the right-hand side, in frame order."""
        used = set(str(v) for v in self._spec.variables_by_source.get("data", set()))
        return [c for c in self.data.columns if c in used and c != self.response]

    def is_categorical(self, variable: str) -> bool:
        """Whether a regressor is treated as a factor."""
        column = self.data[variable]
        # C(x) or C(x, ...) wrapping the bare column, not C(x2) or C(x > 0)
        if re.search(rf"\bC\(\s*{re.escape(variable)}\s*[,)]", self.formula):
            return True
        return not (
            pd.api.types.is_numeric_dtype(column)
            and not pd.api.types.is_bool_dtype(column)
        )

    # =========================================================================
    # Capabilities
    # =========================================================================

    def design(self, newdata: pd.DataFrame) -> Float64Array:
        """Model matrix for new data, reusing the fitted encoding."""
        matrix = self._spec.get_model_matrix(newdata, na_action="ignore")
        return np.asarray(matrix, dtype=np.float64)

    def predict(
        self,
        newdata: pd.DataFrame,
        params: Optional[Float64Array] = None,
        type: str = "response",
    ) -> Float64Array:
        if type not in PREDICTION_TYPES:
            raise ConfigurationError(
                f"Unknown prediction type: {type}. Available: {list(PREDICTION_TYPES)}"
            )
        beta = self._params if params is None else np.asarray(params, dtype=np.float64)
        eta = self.design(newdata) @ beta
        if type == "link":
            return eta
        return self._inverse_link(eta)

    def refit(
        self, data: pd.DataFrame, weights: Optional[ArrayLike] = None
    ) -> "FittedModel":
        if weights is None:
            weights = self.weights
        return self.__class__(self.formula, data, weights=weights)

    def set_coef(self, params: ArrayLike) -> "FittedModel":
        """Copy of this model with substituted coefficients."""
        params = np.asarray(params, dtype=np.float64)
        if params.shape != self._params.shape:
            raise ConfigurationError(
                f"Expected {self._params.shape[0]} coefficients, got {params.shape}"
            )
        out = copy.copy(self)
        out._params = params
        return out

    def vcov(self, kind: VcovType = True) -> Optional[Float64Array]:
        """
        Variance-covariance matrix of the coefficients.

        Args:
            kind: True/None for the classical matrix, "HC0".."HC3" for
                  heteroskedasticity-consistent versions, False for none,
                  or a (p, p) matrix which is validated and returned

        Returns:
            (p, p) matrix, or None when kind is False
        """
        if kind is False:
            return None
        p = len(self._params)
        if isinstance(kind, np.ndarray):
            if kind.shape != (p, p):
                raise ConfigurationError(f"vcov matrix must have shape {(p, p)}, got {kind.shape}")
            return kind.astype(np.float64)
        if kind is None or kind is True:
            kind = "classical"
        if kind != "classical" and kind not in HC_TYPES:
            raise ConfigurationError(
                f"Unknown vcov type: {kind}. Available: True, False, {list(HC_TYPES)}"
            )
        if kind not in self._vcov_cache:
            if kind == "classical":
                results = self._results
            else:
                results = self._sm_model.fit(cov_type=kind)
            self._vcov_cache[kind] = np.asarray(results.cov_params(), dtype=np.float64)
        return self._vcov_cache[kind]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_weights(self, weights: Any) -> Optional[Float64Array]:
        if weights is None:
            return None
        if isinstance(weights, str):
            if weights not in self.data.columns:
                raise ConfigurationError(f"Weights column not found: {weights}")
            values = self.data[weights].to_numpy(dtype=np.float64)
        else:
            values = np.asarray(weights, dtype=np.float64).ravel()
            if values.shape[0] != len(self.data):
                raise ConfigurationError(
                    f"weights and data have inconsistent samples: {values.shape[0]} vs {len(self.data)}"
                )
        if np.any(values < 0):
            raise ConfigurationError("weights must be non-negative")
        return values

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.formula}, n={self.n_obs}>"
