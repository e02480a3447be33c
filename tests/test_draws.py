"""Tests for posterior_draws()."""

import numpy as np
import pandas as pd
import pytest

from margeff import (
    ConfigurationError,
    PreconditionError,
    avg_predictions,
    inferences,
    posterior_draws,
    predictions,
)


@pytest.fixture
def grouped(ols_model):
    """Bootstrapped average predictions by group: K=3 rows, R=20 replicates."""
    return inferences(avg_predictions(ols_model, by="g"), method="boot", R=20, random_state=0)


class TestPosteriorDraws:
    """Test suite for the replicate access layer."""

    def test_long_has_R_times_K_rows(self, grouped):
        """Long layout has one row per (estimate row, replicate)."""
        long = posterior_draws(grouped)

        assert len(long) == 20 * 3
        assert {"drawid", "draw", "g", "estimate"} <= set(long.columns)
        assert long["drawid"].nunique() == 20

    def test_long_values_match_draws(self, grouped):
        """Each (row, replicate) value comes from the draws matrix."""
        long = posterior_draws(grouped)
        first = long[long["drawid"] == long["drawid"].iloc[0]]

        np.testing.assert_allclose(first["draw"].to_numpy(), grouped.draws[:, 0])
        assert list(first["g"]) == list(grouped["g"])

    def test_unit_level_long(self, ols_model, linear_df):
        """Unit-level tables also give R x K rows."""
        table = predictions(ols_model, newdata=linear_df.head(5))
        out = inferences(table, method="simulation", R=8, random_state=0)

        assert len(posterior_draws(out)) == 40

    def test_matrix_layouts(self, grouped):
        """DxP is replicates by rows, PxD is its transpose."""
        dxp = posterior_draws(grouped, shape="DxP")
        pxd = posterior_draws(grouped, shape="PxD")

        assert dxp.shape == (20, 3)
        assert pxd.shape == (3, 20)
        np.testing.assert_allclose(dxp.to_numpy(), pxd.to_numpy().T)
        np.testing.assert_allclose(pxd.to_numpy(), grouped.draws)

    def test_repeated_calls_are_identical(self, grouped):
        """posterior_draws() is a pure read."""
        stored = grouped.draws.copy()
        first = posterior_draws(grouped)
        first["draw"] = 0.0
        second = posterior_draws(grouped)
        third = posterior_draws(grouped)

        pd.testing.assert_frame_equal(second, third)
        np.testing.assert_array_equal(grouped.draws, stored)
        assert not (second["draw"] == 0.0).all()

    def test_drawid_tracks_successful_replicates(self, grouped):
        """drawid holds the replicate indices."""
        dxp = posterior_draws(grouped, shape="DxP")

        assert list(dxp.index) == grouped.inferences.replicate_ids
        assert dxp.index.name == "drawid"

    def test_head_slices_draws(self, grouped):
        """head() keeps the matching rows of the draws."""
        top = grouped.head(2)

        assert posterior_draws(top, shape="PxD").shape == (2, 20)

    def test_unknown_shape_raises(self, grouped):
        """Only long, DxP and PxD are valid shapes."""
        with pytest.raises(ConfigurationError, match="shape"):
            posterior_draws(grouped, shape="wide")

    def test_without_inferences_raises(self, ols_model):
        """A table that was never passed through inferences() has no draws."""
        with pytest.raises(PreconditionError):
            posterior_draws(avg_predictions(ols_model))

    def test_missing_draws_reported_before_bad_shape(self, ols_model):
        """Without draws the missing inferences() call is reported, whatever the shape."""
        with pytest.raises(PreconditionError, match="inferences"):
            posterior_draws(avg_predictions(ols_model), shape="wide")
