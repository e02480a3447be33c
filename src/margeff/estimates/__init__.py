"""
Estimation layer: predictions, comparisons, slopes and hypotheses.

Every function returns an EstimateTable that records the exact call that
produced it, so the estimates can be recomputed on a refit model or with
swapped coefficients.
"""

from .table import (
    EstimateCall,
    EstimateTable,
    ESTIMATORS,
    INFERENCE_COLUMNS,
    build_table,
    register_estimator,
    replace_inference,
)
from .delta import delta_method, jacobian, normal_inference
from .grid import datagrid, range_of, unique_of
from .predictions import predictions, avg_predictions
from .comparisons import (
    COMPARISONS,
    Contrast,
    comparisons,
    avg_comparisons,
    slopes,
    avg_slopes,
)
from .hypotheses import hypotheses

__all__ = [
    # Tables
    "EstimateCall",
    "EstimateTable",
    "ESTIMATORS",
    "INFERENCE_COLUMNS",
    "build_table",
    "register_estimator",
    "replace_inference",
    # Delta method
    "delta_method",
    "jacobian",
    "normal_inference",
    # Grids
    "datagrid",
    "range_of",
    "unique_of",
    # Estimators
    "predictions",
    "avg_predictions",
    "COMPARISONS",
    "Contrast",
    "comparisons",
    "avg_comparisons",
    "slopes",
    "avg_slopes",
    "hypotheses",
]
