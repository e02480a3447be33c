"""Tests for predictions, comparisons, slopes, hypotheses and grids."""

import numpy as np
import pandas as pd
import pytest

from margeff import (
    ConfigurationError,
    EstimateTable,
    avg_comparisons,
    avg_predictions,
    avg_slopes,
    comparisons,
    datagrid,
    hypotheses,
    predictions,
    range_of,
    slopes,
)


class TestPredictions:
    """Test suite for adjusted predictions."""

    def test_unit_level(self, ols_model, linear_df):
        """One row per newdata row, matching model.predict()."""
        p = predictions(ols_model)

        assert isinstance(p, EstimateTable)
        assert p.kind == "predictions"
        assert len(p) == len(linear_df)
        np.testing.assert_array_equal(p["rowid"].to_numpy(), np.arange(len(linear_df)))
        np.testing.assert_allclose(p.estimate, ols_model.predict(linear_df))
        assert p.key_columns == ["rowid"]

    def test_average_equals_mean_outcome(self, ols_model, linear_df):
        """OLS with an intercept: the average prediction is the mean outcome."""
        p = avg_predictions(ols_model)

        assert len(p) == 1
        assert p.estimate[0] == pytest.approx(linear_df["y"].mean(), rel=1e-8)
        assert p.key_columns == []

    def test_delta_method_se(self, ols_model, linear_df):
        """Average-prediction SE should equal sqrt(xbar' V xbar)."""
        p = avg_predictions(ols_model)
        xbar = ols_model.design(linear_df).mean(axis=0)
        expected = np.sqrt(xbar @ ols_model.vcov() @ xbar)

        assert p.std_error[0] == pytest.approx(expected, rel=1e-4)
        assert p.conf_low[0] < p.estimate[0] < p.conf_high[0]
        assert p["statistic"][0] == pytest.approx(p.estimate[0] / p.std_error[0])

    def test_by_group(self, ols_model, linear_df):
        """by= should give one row per group in first-appearance order."""
        p = avg_predictions(ols_model, by="g")
        expected = (
            linear_df.assign(pred=ols_model.predict(linear_df))
            .groupby("g", sort=False)["pred"].mean()
        )

        assert list(p["g"]) == list(expected.index)
        np.testing.assert_allclose(p.estimate, expected.to_numpy())
        assert p.key_columns == ["g"]

    def test_weighted_average(self, ols_model, linear_df):
        """wts= should give a weighted mean of the unit-level predictions."""
        p = avg_predictions(ols_model, wts="w")
        expected = np.average(ols_model.predict(linear_df), weights=linear_df["w"])

        assert p.estimate[0] == pytest.approx(expected)

    def test_vcov_false_leaves_inference_empty(self, ols_model):
        """vcov=False should skip the delta method."""
        p = avg_predictions(ols_model, vcov=False)

        assert np.isnan(p.std_error).all()
        assert np.isfinite(p.estimate).all()

    def test_robust_vcov_changes_se(self, ols_model):
        """HC3 errors should differ from classical ones."""
        classical = avg_predictions(ols_model)
        robust = avg_predictions(ols_model, vcov="HC3")

        assert classical.estimate[0] == robust.estimate[0]
        assert classical.std_error[0] != pytest.approx(robust.std_error[0], rel=1e-6)

    def test_invalid_arguments(self, ols_model, linear_df):
        """Bad by, type, wts and conf_level should raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            predictions(ols_model, by="nope")
        with pytest.raises(ConfigurationError):
            predictions(ols_model, type="probability")
        with pytest.raises(ConfigurationError):
            avg_predictions(ols_model, wts="nope")
        with pytest.raises(ConfigurationError):
            predictions(ols_model, conf_level=1.5)
        with pytest.raises(ConfigurationError):
            predictions(ols_model, newdata=linear_df[["x1"]])

    def test_head_keeps_provenance(self, ols_model):
        """head() should keep kind, model and call."""
        p = predictions(ols_model)
        top = p.head(3)

        assert len(top) == 3
        assert top.kind == p.kind
        assert top.model is p.model
        assert top.call is p.call


class TestComparisons:
    """Test suite for comparisons and slopes."""

    def test_numeric_contrast_with_interaction(self, ols_model, linear_df):
        """Average +1 contrast of x1 is b_x1 + b_x1:x2 * mean(x2)."""
        cmp = avg_comparisons(ols_model, variables="x1")
        b = ols_model.params
        expected = b["x1"] + b["x1:x2"] * linear_df["x2"].mean()

        assert len(cmp) == 1
        assert cmp["term"][0] == "x1"
        assert cmp["contrast"][0] == "+1"
        assert cmp.estimate[0] == pytest.approx(expected, rel=1e-6)

    def test_custom_step(self, ols_model):
        """A {name: value} mapping should scale the numeric contrast."""
        one = avg_comparisons(ols_model, variables="x1")
        ten = avg_comparisons(ols_model, variables={"x1": 10})

        assert ten["contrast"][0] == "+10"
        assert ten.estimate[0] == pytest.approx(10 * one.estimate[0], rel=1e-6)

    def test_factor_reference_contrasts(self, ols_model):
        """Factor levels are compared with the reference level."""
        cmp = avg_comparisons(ols_model, variables="g")
        b = ols_model.params

        assert list(cmp["contrast"]) == ["b - a", "c - a"]
        np.testing.assert_allclose(cmp.estimate, [b["g[T.b]"], b["g[T.c]"]], rtol=1e-6)

    def test_factor_sequential_contrasts(self, ols_model):
        """'sequential' compares adjacent levels."""
        cmp = avg_comparisons(ols_model, variables={"g": "sequential"})
        b = ols_model.params

        assert list(cmp["contrast"]) == ["b - a", "c - b"]
        assert cmp.estimate[1] == pytest.approx(b["g[T.c]"] - b["g[T.b]"], rel=1e-6)

    def test_default_variables_cover_all_regressors(self, ols_model):
        """variables=None compares every regressor."""
        cmp = avg_comparisons(ols_model)

        assert list(cmp["term"]) == ["x1", "x2", "g", "g"]
        assert cmp.key_columns == ["term", "contrast"]

    def test_unit_level_rows(self, ols_model, linear_df):
        """Unit-level comparisons have one row per (variable, contrast, unit)."""
        cmp = comparisons(ols_model, variables="x1")

        assert len(cmp) == len(linear_df)
        assert cmp.key_columns == ["rowid", "term", "contrast"]

    def test_ratio_matches_callable(self, logit_model):
        """The built-in ratio equals the same ratio passed as a function."""
        builtin = avg_comparisons(logit_model, variables="x1", comparison="ratio")
        custom = avg_comparisons(logit_model, variables="x1", comparison=lambda hi, lo: hi / lo)

        np.testing.assert_allclose(builtin.estimate, custom.estimate)
        assert builtin.estimate[0] > 1

    def test_callable_with_wrong_shape_raises(self, ols_model):
        """A comparison function must return one value per row."""
        with pytest.raises(ConfigurationError, match="comparison function"):
            avg_comparisons(ols_model, variables="x1", comparison=lambda hi, lo: np.mean(hi - lo))

    def test_unknown_names_raise(self, ols_model):
        """Unknown variables, comparisons and factor contrasts are rejected."""
        with pytest.raises(ConfigurationError):
            avg_comparisons(ols_model, variables="nope")
        with pytest.raises(ConfigurationError):
            avg_comparisons(ols_model, variables="x1", comparison="odds")
        with pytest.raises(ConfigurationError):
            avg_comparisons(ols_model, variables={"g": "pairwise"})

    def test_numeric_variable_next_to_derived_factor(self, linear_df):
        """A numeric regressor keeps a single +1 contrast beside C(x2 > 0)."""
        from margeff import fit_model

        model = fit_model("y ~ x1 + C(x2 > 0)", linear_df)
        cmp = avg_comparisons(model, variables="x1")

        assert len(cmp) == 1
        assert cmp["contrast"][0] == "+1"
        assert cmp.estimate[0] == pytest.approx(model.params["x1"], rel=1e-6)

    def test_cross_contrasts(self, iris):
        """cross=True changes every variable at once, one row per contrast combination."""
        from margeff import fit_model

        model = fit_model("Sepal_Width ~ Sepal_Length * Species", iris)
        cmp = avg_comparisons(
            model, variables={"Sepal_Length": 1, "Species": "reference"}, cross=True
        )

        assert len(cmp) == 2
        assert list(cmp["term"]) == ["cross", "cross"]
        assert list(cmp["contrast_Sepal_Length"]) == ["+1", "+1"]
        assert list(cmp["contrast_Species"]) == ["versicolor - setosa", "virginica - setosa"]
        assert list(cmp["contrast"]) == ["+1, versicolor - setosa", "+1, virginica - setosa"]

        x = iris["Sepal_Length"]
        lo = iris.assign(Sepal_Length=x - 0.5, Species="setosa")
        hi = iris.assign(Sepal_Length=x + 0.5, Species="virginica")
        expected = np.mean(model.predict(hi) - model.predict(lo))
        assert cmp.estimate[1] == pytest.approx(expected, rel=1e-8)
        assert np.all(cmp.std_error > 0)

    def test_cross_differs_from_separate_contrasts(self, iris):
        """Crossed rows are joint changes, not the per-variable rows."""
        from margeff import fit_model

        model = fit_model("Sepal_Width ~ Sepal_Length * Species", iris)
        variables = {"Sepal_Length": 1, "Species": "reference"}
        separate = avg_comparisons(model, variables=variables)
        crossed = avg_comparisons(model, variables=variables, cross=True)

        assert len(separate) == 3
        assert "contrast_Species" not in separate.columns
        assert not np.isclose(crossed.estimate[0], separate.estimate[1])

    def test_cross_unit_level_rows(self, iris):
        """Unit-level crossed comparisons keep one row per unit and combination."""
        from margeff import fit_model

        model = fit_model("Sepal_Width ~ Sepal_Length * Species", iris)
        cmp = comparisons(
            model, variables={"Sepal_Length": 1, "Species": "reference"}, cross=True
        )

        assert len(cmp) == 2 * len(iris)
        assert cmp.key_columns == ["rowid", "term", "contrast"]

    def test_slopes_equal_contrasts_for_linear_model(self, ols_model):
        """For a linear-in-x1 model the derivative equals the +1 contrast."""
        slope = avg_slopes(ols_model, variables="x1")
        cmp = avg_comparisons(ols_model, variables="x1")

        assert slope.kind == "slopes"
        assert slope["contrast"][0] == "dY/dX"
        assert slope.estimate[0] == pytest.approx(cmp.estimate[0], rel=1e-5)

    def test_logit_slope_formula(self, logit_model, logit_df):
        """Logit marginal effect of x1 is mean(b1 * p * (1 - p))."""
        slope = slopes(logit_model, variables="x1")
        p = logit_model.predict(logit_df)
        expected = logit_model.params["x1"] * p * (1 - p)

        np.testing.assert_allclose(slope.estimate, expected, rtol=1e-4)


class TestHypotheses:
    """Test suite for hypothesis tests."""

    def test_coefficient_difference(self, ols_model):
        """'x1 = x2' tests b_x1 - b_x2 with the matching delta-method SE."""
        h = hypotheses(ols_model, "x1 = x2")
        b = ols_model.params
        V = ols_model.vcov()
        i, j = ols_model.coef_names.index("x1"), ols_model.coef_names.index("x2")
        se = np.sqrt(V[i, i] + V[j, j] - 2 * V[i, j])

        assert h.kind == "hypotheses"
        assert h["term"][0] == "x1 = x2"
        assert h.estimate[0] == pytest.approx(b["x1"] - b["x2"], rel=1e-10)
        assert h.std_error[0] == pytest.approx(se, rel=1e-4)

    def test_positional_aliases(self, ols_model):
        """b1, b2, ... refer to coefficients by position."""
        h = hypotheses(ols_model, "b2 = 0")

        assert h.estimate[0] == pytest.approx(ols_model.params.iloc[1])

    def test_on_estimate_table(self, ols_model):
        """On a table, b1..bK refer to its rows."""
        cmp = avg_comparisons(ols_model, variables="g")
        h = hypotheses(cmp, "b2 - b1 = 0")

        assert h.estimate[0] == pytest.approx(cmp.estimate[1] - cmp.estimate[0])
        assert h.conf_level == cmp.conf_level

    def test_bad_hypotheses_raise(self, ols_model):
        """Unknown names and malformed strings raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            hypotheses(ols_model, "nope = 0")
        with pytest.raises(ConfigurationError):
            hypotheses(ols_model, "x1 = x2 = 0")
        with pytest.raises(ConfigurationError):
            hypotheses(ols_model, "")


class TestDatagrid:
    """Test suite for datagrid()."""

    def test_typical_values(self, ols_model, linear_df):
        """Unlisted columns are held at their mean or mode."""
        grid = datagrid(ols_model, x1=[0, 1])

        assert list(grid.columns) == ["x1", "x2", "g"]
        assert list(grid["x1"]) == [0, 1]
        assert grid["x2"].iloc[0] == pytest.approx(linear_df["x2"].mean())
        assert grid["g"].iloc[0] == linear_df["g"].mode().iloc[0]

    def test_cartesian_product(self, ols_model):
        """Listed columns are crossed."""
        grid = datagrid(ols_model, x1=[0, 1, 2], g=["a", "c"])

        assert len(grid) == 6

    def test_range_of(self, ols_model, linear_df):
        """range_of gives the minimum and maximum."""
        grid = datagrid(ols_model, x1=range_of)

        assert grid["x1"].tolist() == pytest.approx([linear_df["x1"].min(), linear_df["x1"].max()])

    def test_unique_of(self, ols_model):
        """unique_of crosses every observed level."""
        from margeff import unique_of

        grid = datagrid(ols_model, g=unique_of)

        assert list(grid["g"]) == ["a", "b", "c"]

    def test_predictions_on_grid(self, ols_model):
        """Grids work as newdata."""
        grid = datagrid(ols_model, g=["a", "b", "c"])
        p = predictions(ols_model, newdata=grid)

        assert len(p) == 3
        assert p.estimate[1] - p.estimate[0] == pytest.approx(ols_model.params["g[T.b]"], rel=1e-8)

    def test_unknown_column_raises(self, ols_model):
        """Columns must exist in the data."""
        with pytest.raises(ConfigurationError):
            datagrid(ols_model, nope=[1])


class TestSummary:
    """Test suite for tabulated output."""

    def test_summary_contains_table(self, ols_model):
        """summary() should show the title, keys and estimates."""
        text = avg_comparisons(ols_model, variables="g").summary()

        assert "Comparisons" in text
        assert "contrast" in text
        assert "b - a" in text
        assert "delta method" in text

    def test_summary_truncates(self, ols_model):
        """Long tables are truncated after max_rows."""
        text = predictions(ols_model).summary(max_rows=20)

        assert "180 more rows" in text

    def test_format_pvalue(self):
        """p-values are shown with three decimals."""
        from margeff.utils import format_pvalue

        assert format_pvalue(0.0421) == "0.042"
        assert format_pvalue(1e-8) == "<0.001"
        assert format_pvalue(np.nan) == "-"

    def test_to_frame_is_a_copy(self, ols_model):
        """to_frame() returns a detached DataFrame."""
        p = avg_predictions(ols_model)
        frame = p.to_frame()
        frame["estimate"] = 0.0

        assert isinstance(frame, pd.DataFrame)
        assert p.estimate[0] != 0.0
