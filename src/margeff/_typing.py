"""Array, covariance and comparison-function aliases shared across margeff."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import pandas as pd

# numpy arrays
Float64Array = NDArray[np.float64]
Int64Array = NDArray[np.int64]

# Inputs accepted where a 1-d array is expected
ArrayLike = Union[Float64Array, "pd.Series", list]

# Covariance specification: True/None (classical), False (skip), "HC0".."HC3", or a matrix
VcovType = Union[bool, str, None, Float64Array]

# Comparison function: f(hi, lo) -> array of the same length
ComparisonFn = Callable[[Float64Array, Float64Array], ArrayLike]
