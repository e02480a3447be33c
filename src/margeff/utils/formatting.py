"""Summary formatting utilities for estimate tables."""

from typing import List, Optional

import numpy as np
import pandas as pd
from tabulate import tabulate

TITLES = {
    "predictions": "Predictions",
    "comparisons": "Comparisons",
    "slopes": "Slopes",
    "hypotheses": "Hypothesis Tests",
}


def format_pvalue(p: float) -> str:
    """
    Format p-value for display.

    Args:
        p: p-value

    Returns:
        Formatted string (e.g., "0.042", "<0.001", "-" when missing)
    """
    if p is None or np.isnan(p):
        return "-"
    if p < 0.001:
        return "<0.001"
    return f"{p:.3f}"


def _format_number(x, digits: int = 4) -> str:
    if x is None or (isinstance(x, float) and np.isnan(x)):
        return "-"
    return f"{x:.{digits}f}"


def format_summary_header(
    title: str,
    family: Optional[str] = None,
    n_obs: Optional[int] = None,
    method: Optional[str] = None,
    width: int = 78,
) -> str:
    lines = ["=" * width, f"{title:^{width}}", "=" * width]
    if family is not None:
        lines.append(f"{'Family:':<18}{family}")
    if n_obs is not None:
        lines.append(f"{'No. Observations:':<18}{n_obs:,}")
    lines.append(f"{'Inference:':<18}{method if method is not None else 'delta method'}")
    lines.append("-" * width)
    return "\n".join(lines)


def format_estimate_table(
    frame: pd.DataFrame,
    kind: str,
    key_columns: List[str],
    conf_level: float = 0.95,
    family: Optional[str] = None,
    n_obs: Optional[int] = None,
    method: Optional[str] = None,
    max_rows: int = 20,
    width: int = 78,
) -> str:
    """
    Format an estimate table for display.

    Args:
        frame: Estimates with the standard inference columns
        kind: Estimate kind, used for the title
        key_columns: Identifying columns shown before the estimates
        conf_level: Confidence level, used for the interval header
        family: Model family tag
        n_obs: Number of observations of the model
        method: Resampling method, or None for delta-method inference
        max_rows: Rows shown before truncating
        width: Output width

    Returns:
        Formatted summary string
    """
    lo = 100 * (1 - conf_level) / 2
    hi = 100 - lo
    headers = list(key_columns) + ["estimate", "std err", "z", "P>|z|", f"{lo:g}%", f"{hi:g}%"]

    rows = []
    for _, row in frame.head(max_rows).iterrows():
        rows.append(
            [row[c] for c in key_columns]
            + [
                _format_number(row["estimate"]),
                _format_number(row.get("std_error")),
                _format_number(row.get("statistic"), 3),
                format_pvalue(row.get("p_value")),
                _format_number(row.get("conf_low")),
                _format_number(row.get("conf_high")),
            ]
        )

    parts = [
        format_summary_header(TITLES.get(kind, kind), family=family, n_obs=n_obs, method=method, width=width),
        tabulate(rows, headers=headers, tablefmt="simple"),
    ]
    if len(frame) > max_rows:
        parts.append(f"... {len(frame) - max_rows} more rows")
    parts.append("=" * width)
    return "\n".join(parts)
