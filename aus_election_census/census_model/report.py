from typing import Any, Dict

import pandas as pd

def build_summary(
    stats: Dict[str, Any],
    significant: pd.DataFrame,
    alpha: float,
) -> Dict[str, Any]:
    return {
        "fit": stats,
        "alpha": alpha,
        "significant_terms": significant[["term", "estimate", "p_value"]].to_dict("records"),
    }

def format_float(value: float, digits: int = 3) -> str:
    if pd.isna(value):
        return ""
    if value != 0 and abs(value) < 10 ** -digits:
        return f"{value:.{digits}g}"
    return f"{value:.{digits}f}"

def markdown_table(df: pd.DataFrame, digits: int = 3) -> str:
    """Render a small DataFrame as a GitHub-flavoured Markdown table."""
    header = "| " + " | ".join(str(c) for c in df.columns) + " |"
    rule = "| " + " | ".join("---" for _ in df.columns) + " |"
    rows = []
    for rec in df.itertuples(index=False):
        cells = [format_float(v, digits) if isinstance(v, float) else ("" if pd.isna(v) else str(v)) for v in rec]
        rows.append("| " + " | ".join(cells) + " |")
    return "\n".join([header, rule, *rows])
