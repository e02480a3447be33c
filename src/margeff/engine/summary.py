"""
Summaries of replicate draws.

Standard errors are the sample standard deviation of the replicates
(ddof=1). Intervals, with α = 1 - conf_level and q_p the p-quantile of the
replicates:

    perc:   [q_{α/2}, q_{1-α/2}]
    norm:   estimate ± z_{1-α/2} × SE
    basic:  [2 × estimate - q_{1-α/2}, 2 × estimate - q_{α/2}]
    hdi:    shortest interval holding a conf_level share of the replicates

The point estimate is never replaced; z statistics and p-values are
recomputed from the replicate SE.
"""

import warnings
from typing import Dict

import numpy as np
from scipy import stats

from .._typing import Float64Array
from ..estimates.delta import normal_inference
from .options import InferenceOptions


def replicate_se(draws: Float64Array) -> Float64Array:
    """(K,) standard deviation over the non-missing replicates of each row."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        return np.nanstd(draws, axis=1, ddof=1)


def _quantiles(draws: Float64Array, conf_level: float):
    alpha = 1 - conf_level
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        low = np.nanquantile(draws, alpha / 2, axis=1)
        high = np.nanquantile(draws, 1 - alpha / 2, axis=1)
    return low, high


def hdi_interval(x: Float64Array, conf_level: float):
    """Shortest interval covering ceil(conf_level × n) of the values in x."""
    x = np.sort(x[~np.isnan(x)])
    n = x.shape[0]
    if n == 0:
        return np.nan, np.nan
    m = min(max(int(np.ceil(conf_level * n)), 1), n)
    widths = x[m - 1:] - x[: n - m + 1]
    start = int(np.argmin(widths))
    return x[start], x[start + m - 1]


def interval(
    estimate: Float64Array,
    draws: Float64Array,
    se: Float64Array,
    options: InferenceOptions,
):
    """(conf_low, conf_high) of the requested interval type."""
    if options.conf_type == "perc":
        return _quantiles(draws, options.conf_level)
    if options.conf_type == "basic":
        low, high = _quantiles(draws, options.conf_level)
        return 2 * estimate - high, 2 * estimate - low
    if options.conf_type == "norm":
        z = stats.norm.ppf(1 - (1 - options.conf_level) / 2)
        return estimate - z * se, estimate + z * se
    bounds = np.array([hdi_interval(row, options.conf_level) for row in draws]).reshape(-1, 2)
    return bounds[:, 0], bounds[:, 1]


def summarize(
    estimate: Float64Array,
    draws: Float64Array,
    options: InferenceOptions,
) -> Dict[str, Float64Array]:
    """
    Inference columns from replicate draws.

    Args:
        estimate: (K,) point estimates of the original table
        draws: (K, R_ok) aligned replicate estimates
        options: Interval settings

    Returns:
        Dictionary with std_error, statistic, p_value, conf_low, conf_high
    """
    estimate = np.asarray(estimate, dtype=np.float64)
    se = replicate_se(draws)
    out = normal_inference(estimate, se, options.conf_level)
    out["conf_low"], out["conf_high"] = interval(estimate, draws, se, options)
    return out
