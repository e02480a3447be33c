"""
margeff: Predictions, Comparisons and Slopes with Resampling Inference

Adjusted predictions, comparisons and marginal effects for regression
models, with delta-method standard errors by default and bootstrap,
simulation or fractional weighted bootstrap inference on request.

Usage:
    from margeff import fit_model, avg_comparisons, inferences, posterior_draws

    model = fit_model("y ~ x1 * x2", df)
    cmp = avg_comparisons(model, variables="x1")

    # Replace delta-method uncertainty with a bootstrap
    cmp = inferences(cmp, method="boot", R=500, random_state=42)
    print(cmp)

    # Replicate draws, one row per (estimate, replicate)
    draws = posterior_draws(cmp)
"""

from .exceptions import (
    MargeffError,
    ConfigurationError,
    RefitError,
    PreconditionError,
    ReplicateFailureWarning,
)
from .models import fit_model, get_model, MODEL_REGISTRY, FittedModel, Fittable, Predictable
from .estimates import (
    EstimateTable,
    EstimateCall,
    predictions,
    avg_predictions,
    comparisons,
    avg_comparisons,
    slopes,
    avg_slopes,
    hypotheses,
    datagrid,
    range_of,
    unique_of,
)
from .engine import BACKEND_REGISTRY, InferenceOptions, ReplicateSet, get_backend
from .inferences import inferences
from .draws import posterior_draws

__version__ = "0.1.0"

__all__ = [
    # Models
    "fit_model",
    "get_model",
    "MODEL_REGISTRY",
    "FittedModel",
    "Fittable",
    "Predictable",
    # Estimates
    "EstimateTable",
    "EstimateCall",
    "predictions",
    "avg_predictions",
    "comparisons",
    "avg_comparisons",
    "slopes",
    "avg_slopes",
    "hypotheses",
    "datagrid",
    "range_of",
    "unique_of",
    # Inference
    "inferences",
    "posterior_draws",
    "InferenceOptions",
    "ReplicateSet",
    "BACKEND_REGISTRY",
    "get_backend",
    # Errors
    "MargeffError",
    "ConfigurationError",
    "RefitError",
    "PreconditionError",
    "ReplicateFailureWarning",
]
