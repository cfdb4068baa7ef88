from __future__ import annotations

import re

import pandas as pd
from loguru import logger

from .io import stdcols, require_columns
from .keys import normalize_division

ID_COLUMNS = {"id", "division_nm", "division_id", "state_ab", "year", "census_year", "uniqueid", "unique_id"}

DIVISION_ALIASES = ["division_nm", "division", "elect_div", "ced_name", "electorate"]


def coerce_numeric_light(df: pd.DataFrame, skip=ID_COLUMNS) -> pd.DataFrame:
    """Coerce mostly-numeric text columns (commas and % allowed) to floats."""
    out = df.copy()
    for c in out.columns:
        if c in skip or pd.api.types.is_numeric_dtype(out[c]):
            continue
        raw = out[c].astype("string").str.strip().str.replace(r"[,%$]", "", regex=True)
        s = raw.dropna().head(12)
        if len(s) and (s.str.fullmatch(r"-?\d+(\.\d+)?").mean() > 0.6):
            out[c] = pd.to_numeric(raw, errors="coerce")
    return out


def clean_census(df: pd.DataFrame, year: int | None = None) -> pd.DataFrame:
    """
    Standardize an ABS census-by-electorate table.

    The division column may arrive under several names (DivisionNm, Elect_div,
    CED_NAME, ...). Numeric attributes are coerced; the result must be unique
    on (division_nm, year) so that it can be the secondary side of a
    many-to-one join.
    """
    out = stdcols(df)
    div_col = next((c for c in DIVISION_ALIASES if c in out.columns), None)
    if div_col is None:
        raise ValueError(f"Census table lacks a recognizable division column; expected one of {DIVISION_ALIASES}")
    if div_col != "division_nm":
        out = out.rename(columns={div_col: "division_nm"})
    if "state" in out.columns and "state_ab" not in out.columns:
        out = out.rename(columns={"state": "state_ab"})

    out["division_nm"] = normalize_division(out["division_nm"])
    out = out.dropna(subset=["division_nm"])
    if year is not None:
        out["year"] = int(year)
    require_columns(out, {"year"}, "census")
    out["year"] = pd.to_numeric(out["year"], errors="coerce").astype("Int64")

    out = coerce_numeric_light(out)

    dup = out.duplicated(["division_nm", "year"], keep=False)
    if dup.any():
        examples = out.loc[dup, "division_nm"].unique().tolist()[:10]
        raise ValueError(f"Census table has duplicate (division_nm, year) rows: {examples}")

    logger.info(f"Census: {len(out)} divisions, {len(numeric_attributes(out))} numeric attributes")
    return out.reset_index(drop=True)


def numeric_attributes(df: pd.DataFrame) -> list[str]:
    return [c for c in df.columns if c not in ID_COLUMNS and pd.api.types.is_numeric_dtype(df[c])]


def is_age_bracket(col: str) -> bool:
    return re.match(r"^age_?\d", col) is not None
