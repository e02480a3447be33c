"""Pytest configuration and fixtures for margeff tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def seed():
    """Random seed for reproducibility."""
    return 42


@pytest.fixture
def linear_df(seed):
    """Generate linear DGP data with an interaction and a factor.

    y = 1 + 0.5*x1 - 0.3*x2 + 0.2*x1*x2 + 0.4*[g == "b"] + epsilon

    Also carries a positive weight column `w`.
    """
    rng = np.random.RandomState(seed)
    n = 200
    x1 = rng.randn(n)
    x2 = rng.randn(n)
    g = rng.choice(["a", "b", "c"], size=n)
    epsilon = rng.randn(n) * 0.5
    y = 1 + 0.5 * x1 - 0.3 * x2 + 0.2 * x1 * x2 + 0.4 * (g == "b") + epsilon
    w = rng.uniform(0.5, 2.0, size=n)

    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "g": g, "w": w})


@pytest.fixture
def logit_df(seed):
    """Generate binary DGP: y ~ Bernoulli(sigmoid(-0.3 + 0.8*x1 - 0.5*x2 + 0.3*[g == "b"]))."""
    rng = np.random.RandomState(seed)
    n = 300
    x1 = rng.randn(n)
    x2 = rng.randn(n)
    g = rng.choice(["a", "b", "c"], size=n)
    eta = -0.3 + 0.8 * x1 - 0.5 * x2 + 0.3 * (g == "b")
    prob = 1 / (1 + np.exp(-eta))
    y = rng.binomial(1, prob)

    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "g": g})


@pytest.fixture
def poisson_df(seed):
    """Generate Poisson DGP: y ~ Poisson(exp(0.5 + 0.3*x1 - 0.2*x2))."""
    rng = np.random.RandomState(seed)
    n = 300
    x1 = rng.randn(n)
    x2 = rng.randn(n)
    y = rng.poisson(np.exp(0.5 + 0.3 * x1 - 0.2 * x2))

    return pd.DataFrame({"y": y, "x1": x1, "x2": x2})


@pytest.fixture
def iris():
    """Iris data with identifier-friendly column names and a binary outcome.

    `large` is 1 when the petal is longer than the median petal.
    """
    from sklearn.datasets import load_iris

    bunch = load_iris(as_frame=True)
    df = bunch.frame.rename(columns={
        "sepal length (cm)": "Sepal_Length",
        "sepal width (cm)": "Sepal_Width",
        "petal length (cm)": "Petal_Length",
        "petal width (cm)": "Petal_Width",
    })
    df["Species"] = np.asarray(bunch.target_names)[df.pop("target").to_numpy()]
    df["large"] = (df["Petal_Length"] > df["Petal_Length"].median()).astype(int)
    return df


@pytest.fixture
def ols_model(linear_df):
    """OLS fit of y ~ x1 * x2 + g."""
    from margeff import fit_model

    return fit_model("y ~ x1 * x2 + g", linear_df)


@pytest.fixture
def logit_model(logit_df):
    """Logit fit of y ~ x1 + x2 + g."""
    from margeff import fit_model

    return fit_model("y ~ x1 + x2 + g", logit_df, family="logit")
