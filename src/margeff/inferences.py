"""
Resampling-based inference for estimate tables.

inferences() reruns the exact call behind an EstimateTable on R perturbed
versions of its model and replaces the delta-method uncertainty with
replicate-based standard errors and intervals:

1. Validate the table, method and backend options (nothing is computed
   if anything is wrong)
2. Draw all R perturbations up front from one seeded RandomState
3. Evaluate the call per replicate; failures are isolated per replicate
4. Align replicate rows to the original rows by key columns
5. Summarize per row; the point estimates are never touched
"""

from __future__ import annotations

import warnings
from typing import Optional, Union

import numpy as np
from sklearn.utils import check_random_state

from .engine import InferenceOptions, align, get_backend, run_replicates, summarize
from .estimates import EstimateTable, replace_inference
from .exceptions import ConfigurationError, PreconditionError, RefitError, ReplicateFailureWarning


def inferences(
    estimate: EstimateTable,
    method: str,
    R: int = 1000,
    conf_level: Optional[float] = None,
    conf_type: str = "perc",
    options: Optional[InferenceOptions] = None,
    random_state: Optional[Union[int, np.random.RandomState]] = None,
    verbose: bool = False,
    **backend_kwargs,
) -> EstimateTable:
    """
    Replicate-based inference for an estimate table.

    Args:
        estimate: Table returned by predictions(), comparisons(), slopes(),
                  hypotheses() or their avg_ variants
        method: Resampling method:
                - 'simulation': coefficients drawn from N(b, V), data fixed
                - 'boot': rows resampled with replacement, model refit
                - 'rsample': bootstrap splits with out-of-bag sets, model refit
                - 'fwb': fractional weighted bootstrap, model refit with weights
        R: Number of replicates
        conf_level: Confidence level (default: the table's level)
        conf_type: Interval type: 'perc', 'norm', 'basic' or 'hdi'
        options: InferenceOptions; overrides conf_level and conf_type
        random_state: Seed or RandomState for reproducible replicates
        verbose: Show a progress bar over replicates
        **backend_kwargs: Backend options (strata= for boot/rsample,
                          wtype= for fwb)

    Returns:
        New EstimateTable with the same rows and point estimates, replicate
        std_error/statistic/p_value/conf_low/conf_high, and the attributes
        `inferences` (ReplicateSet) and `draws` ((K, R_ok) matrix)

    Raises:
        PreconditionError: `estimate` is not an EstimateTable
        ConfigurationError: Unknown method, bad R or options, or fwb with
                            user-supplied weights
        RefitError: Fewer than options.min_replicates replicates succeeded

    Examples:
        cmp = avg_comparisons(model)
        cmp = inferences(cmp, method="boot", R=500, random_state=42)
        cmp = inferences(cmp, method="fwb", R=500, wtype="mammen")
    """
    if not isinstance(estimate, EstimateTable):
        raise PreconditionError(
            f"inferences() needs an EstimateTable with provenance, got {type(estimate).__name__}"
        )
    backend = get_backend(method, **backend_kwargs)
    if options is None:
        options = InferenceOptions(
            conf_level=estimate.conf_level if conf_level is None else conf_level,
            conf_type=conf_type,
        )
    if isinstance(R, bool) or not isinstance(R, (int, np.integer)) or R < 1:
        raise ConfigurationError(f"R must be a positive integer, got {R!r}")
    if R < options.min_replicates:
        raise ConfigurationError(
            f"R={R} is below min_replicates={options.min_replicates}; no summary is possible"
        )
    backend.validate(estimate)

    rng = check_random_state(random_state)
    samples = backend.draw(estimate.model, R, rng)
    replicates = run_replicates(estimate, backend, samples, R, verbose=verbose)

    if replicates.n_failed:
        first = replicates.failures[min(replicates.failures)]
        warnings.warn(
            f"{replicates.n_failed} of {R} replicates failed and were dropped "
            f"(method='{method}'). First failure: {first}",
            ReplicateFailureWarning,
        )
    if replicates.n_success < options.min_replicates:
        raise RefitError(
            f"Only {replicates.n_success} of {R} replicates succeeded; "
            f"at least {options.min_replicates} are needed for a summary"
        )

    draws = align(estimate, replicates)
    values = summarize(estimate.estimate, draws, options)
    return replace_inference(
        estimate,
        values,
        conf_level=options.conf_level,
        inferences=replicates,
        draws=draws,
    )
