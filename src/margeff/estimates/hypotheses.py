"""
Hypothesis tests on coefficients or on the rows of an estimate table.

"lhs = rhs" is evaluated as lhs - rhs. Names are the coefficient names that
are valid identifiers, plus positional aliases b1, b2, ... (the only names
available when testing the rows of an estimate table).
"""

from __future__ import annotations

import keyword
import re
from typing import TYPE_CHECKING, Dict, Optional, Union

import numpy as np
import pandas as pd

from .._typing import VcovType
from ..exceptions import ConfigurationError
from .table import EstimateCall, EstimateTable, build_table, register_estimator

if TYPE_CHECKING:
    from ..models import FittedModel

_EQUALS = re.compile(r"(?<![<>=!])=(?!=)")


def parse_hypothesis(hypothesis: str) -> str:
    """Rewrite "lhs = rhs" as "(lhs) - (rhs)"."""
    if not isinstance(hypothesis, str) or not hypothesis.strip():
        raise ConfigurationError("hypothesis must be a non-empty string")
    parts = _EQUALS.split(hypothesis)
    if len(parts) == 1:
        return hypothesis.strip()
    if len(parts) != 2:
        raise ConfigurationError(f"hypothesis has more than one '=': {hypothesis}")
    lhs, rhs = parts
    return f"({lhs.strip()}) - ({rhs.strip()})"


def _namespace(names, values) -> Dict[str, float]:
    ns = {}
    for i, (name, value) in enumerate(zip(names, values)):
        ns[f"b{i + 1}"] = float(value)
        if name.isidentifier() and not keyword.iskeyword(name):
            ns.setdefault(name, float(value))
    return ns


def evaluate_hypothesis(expression: str, names, values) -> float:
    try:
        result = pd.eval(expression, local_dict=_namespace(names, values), global_dict={}, engine="python")
    except (NameError, SyntaxError, pd.errors.UndefinedVariableError) as e:
        raise ConfigurationError(f"Cannot evaluate hypothesis '{expression}': {e}") from e
    return float(np.asarray(result, dtype=np.float64))


@register_estimator("hypotheses")
def _hypotheses(
    model: "FittedModel",
    hypothesis: str,
    expression: str,
    source: Optional[EstimateCall] = None,
) -> pd.DataFrame:
    if source is None:
        names, values = model.coef_names, model.params.to_numpy()
    else:
        frame = source.evaluate(model)
        values = frame["estimate"].to_numpy()
        names = [f"b{i + 1}" for i in range(len(values))]
    return pd.DataFrame({
        "term": [hypothesis],
        "estimate": [evaluate_hypothesis(expression, names, values)],
    })


def hypotheses(
    obj: Union["FittedModel", EstimateTable],
    hypothesis: str,
    vcov: Optional[VcovType] = None,
    conf_level: Optional[float] = None,
) -> EstimateTable:
    """
    Test a (non-)linear hypothesis.

    Args:
        obj: Fitted model (names are coefficients) or EstimateTable
             (names are b1..bK, one per row)
        hypothesis: Expression such as "hp / cyl = 1" or "b1 - b2 = 0"
        vcov: Covariance for delta-method errors (default: True for models,
              the table's own covariance for tables)
        conf_level: Confidence level (default 0.95, or the table's level)

    Returns:
        One-row EstimateTable of kind "hypotheses"

    Examples:
        h = hypotheses(model, "hp / cyl = 1")
        h = hypotheses(avg_slopes(model), "b1 = b2")
    """
    expression = parse_hypothesis(hypothesis)
    if isinstance(obj, EstimateTable):
        model = obj.model
        kwargs = dict(hypothesis=hypothesis, expression=expression, source=obj.call)
        vcov = obj.vcov if vcov is None else vcov
        conf_level = obj.conf_level if conf_level is None else conf_level
    else:
        model = obj
        kwargs = dict(hypothesis=hypothesis, expression=expression, source=None)
        vcov = True if vcov is None else vcov
        conf_level = 0.95 if conf_level is None else conf_level
    return build_table("hypotheses", model, kwargs, vcov=vcov, conf_level=conf_level)
