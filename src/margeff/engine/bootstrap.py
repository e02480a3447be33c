"""
Case-resampling bootstrap backends.

Both backends resample rows of the fitting frame with replacement
(`sklearn.utils.resample`, optionally stratified) and refit the model on
each resample. They differ in the record they keep:

- boot: an (R, n) matrix of row indices, like an ordinary nonparametric
  bootstrap object
- rsample: a set of splits, each holding the analysis (in-bag) rows and the
  assessment (out-of-bag) rows
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np
from sklearn.utils import resample

from .._typing import Int64Array
from ..exceptions import ConfigurationError
from .base import ResamplingBackend

if TYPE_CHECKING:
    from ..estimates import EstimateTable
    from ..models import FittedModel


@dataclass
class BootSamples:
    """Row indices of an ordinary bootstrap.

    Attributes:
        indices: (R, n) resampled row positions
        strata: Stratification column, if any
    """

    indices: Int64Array
    strata: Optional[str] = None

    @property
    def R(self) -> int:
        return self.indices.shape[0]


@dataclass
class Split:
    """One bootstrap split."""

    id: str
    analysis: Int64Array
    assessment: Int64Array


@dataclass
class Bootstraps:
    """Bootstrap splits.

    Attributes:
        splits: One Split per replicate
        strata: Stratification column, if any
    """

    splits: List[Split] = field(default_factory=list)
    strata: Optional[str] = None

    def __len__(self) -> int:
        return len(self.splits)


class _CaseResampling(ResamplingBackend):
    """Shared resampling and refit logic."""

    def __init__(self, strata: Optional[str] = None):
        self.strata = strata

    def validate(self, table: "EstimateTable") -> None:
        if self.strata is not None and self.strata not in table.model.data.columns:
            raise ConfigurationError(f"strata column not found in the model data: {self.strata}")

    def _resample_indices(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> Int64Array:
        n = model.n_obs
        labels = None if self.strata is None else model.data[self.strata].to_numpy()
        positions = np.arange(n)
        out = np.empty((R, n), dtype=np.int64)
        for b in range(R):
            out[b] = resample(
                positions,
                replace=True,
                n_samples=n,
                random_state=random_state,
                stratify=labels,
            )
        return out

    def _refit(self, model: "FittedModel", rows: Int64Array) -> "FittedModel":
        return model.refit(model.data.iloc[rows].reset_index(drop=True))


class BootBackend(_CaseResampling):
    """Ordinary nonparametric bootstrap."""

    name = "boot"

    def draw(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> BootSamples:
        return BootSamples(indices=self._resample_indices(model, R, random_state), strata=self.strata)

    def replicate_model(self, model: "FittedModel", samples: BootSamples, i: int) -> "FittedModel":
        return self._refit(model, samples.indices[i])


class RsampleBackend(_CaseResampling):
    """Bootstrap splits with out-of-bag assessment sets."""

    name = "rsample"

    def draw(self, model: "FittedModel", R: int, random_state: np.random.RandomState) -> Bootstraps:
        indices = self._resample_indices(model, R, random_state)
        width = len(str(R))
        splits = []
        for b, rows in enumerate(indices):
            out_of_bag = np.setdiff1d(np.arange(model.n_obs), rows)
            splits.append(Split(id=f"Bootstrap{b + 1:0{width}d}", analysis=rows, assessment=out_of_bag))
        return Bootstraps(splits=splits, strata=self.strata)

    def replicate_model(self, model: "FittedModel", samples: Bootstraps, i: int) -> "FittedModel":
        return self._refit(model, samples.splits[i].analysis)
