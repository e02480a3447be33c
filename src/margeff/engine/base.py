"""
Base class for resampling backends.

A backend turns a fitted model into R perturbed models:

1. `validate(table)`: reject configurations before any work is done
2. `draw(model, R, random_state)`: the perturbation record (row indices,
   case weights or coefficient vectors), generated up front
3. `replicate_model(model, samples, i)`: the fitted model for replicate i

Step 3 runs inside the per-replicate error boundary, so a failed refit only
loses that replicate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from ..estimates import EstimateTable
    from ..models import FittedModel


class ResamplingBackend:
    """Base backend; subclasses implement draw() and replicate_model()."""

    name: str = "base"

    def validate(self, table: "EstimateTable") -> None:
        """Default: nothing to check."""
        return None

    def draw(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> Any:
        """Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement draw()")

    def replicate_model(self, model: "FittedModel", samples: Any, i: int) -> "FittedModel":
        """Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement replicate_model()")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
