"""
Delta-method inference for estimate tables.

Jacobian (forward differences in the coefficients):
    J[:, j] = (g(b + h_j e_j) - g(b)) / h_j

Standard errors:
    SE = √diag(J V J')
"""

from typing import TYPE_CHECKING, Callable, Dict

import numpy as np
from scipy import stats

from .._typing import Float64Array

if TYPE_CHECKING:
    from ..models import FittedModel


def jacobian(
    fn: Callable[["FittedModel"], Float64Array],
    model: "FittedModel",
    baseline: Float64Array,
    step: float = 1e-7,
) -> Float64Array:
    """
    Numerical Jacobian of an estimate vector in the model coefficients.

    Args:
        fn: Maps a fitted model to the (K,) estimate vector
        model: Fitted model at which to differentiate
        baseline: fn(model), already computed
        step: Relative step size

    Returns:
        (K, p) Jacobian
    """
    params = model.params.to_numpy()
    J = np.zeros((baseline.shape[0], params.shape[0]))
    for j in range(params.shape[0]):
        h = step * max(abs(params[j]), 1.0)
        shifted = params.copy()
        shifted[j] += h
        J[:, j] = (fn(model.set_coef(shifted)) - baseline) / h
    return J


def normal_inference(
    estimate: Float64Array,
    se: Float64Array,
    conf_level: float = 0.95,
) -> Dict[str, Float64Array]:
    """
    z statistics, two-sided p-values and normal intervals.

    CI = [est - z_{α/2} × SE, est + z_{α/2} × SE]

    Args:
        estimate: (K,) point estimates
        se: (K,) standard errors
        conf_level: Confidence level

    Returns:
        Dictionary with std_error, statistic, p_value, conf_low, conf_high
    """
    estimate = np.asarray(estimate, dtype=np.float64)
    se = np.asarray(se, dtype=np.float64)
    z = stats.norm.ppf(1 - (1 - conf_level) / 2)

    with np.errstate(divide="ignore", invalid="ignore"):
        statistic = np.where(se > 0, estimate / se, np.nan)
    p_value = 2 * stats.norm.sf(np.abs(statistic))

    return {
        "std_error": se,
        "statistic": statistic,
        "p_value": p_value,
        "conf_low": estimate - z * se,
        "conf_high": estimate + z * se,
    }


def delta_method(
    fn: Callable[["FittedModel"], Float64Array],
    model: "FittedModel",
    V: Float64Array,
    estimate: Float64Array,
    conf_level: float = 0.95,
) -> Dict[str, Float64Array]:
    """
    Delta-method inference for the estimates produced by `fn`.

    Args:
        fn: Maps a fitted model to the (K,) estimate vector
        model: Fitted model
        V: (p, p) coefficient covariance
        estimate: (K,) point estimates, fn(model)
        conf_level: Confidence level

    Returns:
        Dictionary of (K,) inference columns
    """
    J = jacobian(fn, model, estimate)
    variance = np.einsum("kp,pq,kq->k", J, V, J)
    se = np.sqrt(np.clip(variance, 0.0, None))
    return normal_inference(estimate, se, conf_level)
