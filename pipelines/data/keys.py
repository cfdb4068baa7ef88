from __future__ import annotations

import pandas as pd


def normalize_division(raw: pd.Series) -> pd.Series:
    """Canonical electorate key: upper-case, straight apostrophes, single spaces, tight hyphens."""
    s = raw.astype("string").str.strip().str.upper()
    s = s.str.replace(r"[‘’`]", "'", regex=True)
    s = s.str.replace(r"\s*-\s*", "-", regex=True)
    s = s.str.replace(r"\s+", " ", regex=True)
    return s.where(s.str.len() > 0, pd.NA)


def year_suffix(year: int) -> str:
    return f"{int(year) % 100:02d}"
