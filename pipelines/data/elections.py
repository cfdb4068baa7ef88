from __future__ import annotations

import numpy as np
import pandas as pd
from loguru import logger

from .io import stdcols, require_columns
from .keys import normalize_division

COALITION = {"LP", "LIB", "LNP", "NP", "NAT", "CLP", "LNQ", "NATS"}
LABOR = {"ALP", "LAB"}
GREENS = {"GRN", "AG", "GVIC", "GWA", "TG"}

TPP_RENAME = {
    "liberal_national_coalition_votes": "lnp_votes",
    "liberal_national_coalition_percentage": "lnp_percent",
    "australian_labor_party_votes": "alp_votes",
    "australian_labor_party_percentage": "alp_percent",
}


def normalize_party(p) -> str:
    """Map raw AEC party abbreviations to ALP/LNP/GRN/IND or the upper-cased label."""
    if not isinstance(p, str) or not p.strip():
        return "IND"
    p = p.strip().upper()

    if p in COALITION:
        return "LNP"
    if p in LABOR:
        return "ALP"
    if p in GREENS:
        return "GRN"
    return p


def _yes_no(s: pd.Series) -> pd.Series:
    return s.astype("string").str.strip().str.upper().isin({"Y", "YES", "TRUE", "1", "#"})


def _common(df: pd.DataFrame, year: int | None, name: str) -> pd.DataFrame:
    out = stdcols(df)
    if "state" in out.columns and "state_ab" not in out.columns:
        out = out.rename(columns={"state": "state_ab"})
    if "polling_place_nm" in out.columns and "polling_place" not in out.columns:
        out = out.rename(columns={"polling_place_nm": "polling_place"})
    require_columns(out, {"division_nm"}, name)
    out["division_nm"] = normalize_division(out["division_nm"])
    if "state_ab" in out.columns:
        out["state_ab"] = out["state_ab"].astype("string").str.strip().str.upper()
    if year is not None:
        out["year"] = int(year)
    elif "year" in out.columns:
        out["year"] = pd.to_numeric(out["year"], errors="coerce").astype("Int64")
    return out


def _drop_informal(df: pd.DataFrame) -> pd.DataFrame:
    mask = pd.Series(False, index=df.index)
    for c in ("surname", "party_nm", "candidate"):
        if c in df.columns:
            mask |= df[c].astype("string").str.strip().str.casefold().eq("informal").fillna(False)
    if mask.any():
        logger.debug(f"Dropping {int(mask.sum())} informal-vote rows")
    return df.loc[~mask].copy()


def _candidate_votes(df: pd.DataFrame, year: int | None, name: str) -> pd.DataFrame:
    out = _common(df, year, name)
    if "votes" in out.columns and "ordinary_votes" not in out.columns:
        out = out.rename(columns={"votes": "ordinary_votes"})
    require_columns(out, {"party_ab", "ordinary_votes"}, name)
    out = _drop_informal(out)

    out["party_raw"] = out["party_ab"].astype("string").str.strip()
    out["party_ab"] = out["party_ab"].map(normalize_party)
    out["ordinary_votes"] = pd.to_numeric(out["ordinary_votes"], errors="coerce").fillna(0).astype("int64")
    if "percent" in out.columns:
        out["percent"] = pd.to_numeric(out["percent"], errors="coerce")
    for flag in ("elected", "historic_elected"):
        if flag in out.columns:
            out[flag] = _yes_no(out[flag])
    if "polling_place_id" in out.columns:
        out["polling_place_id"] = pd.to_numeric(out["polling_place_id"], errors="coerce").astype("Int64")
    return out.reset_index(drop=True)


def clean_first_preferences(df: pd.DataFrame, year: int | None = None) -> pd.DataFrame:
    """
    Standardize an AEC first-preference table (by division or by polling place).

    Output columns include division_nm, party_ab (ALP/LNP/GRN/...), party_raw,
    ordinary_votes (int64), elected (bool, when present) and year.
    Informal-vote rows are removed.
    """
    return _candidate_votes(df, year, "first preferences")


def clean_two_candidate(df: pd.DataFrame, year: int | None = None) -> pd.DataFrame:
    """Standardize an AEC two-candidate-preferred table (two rows per division or booth)."""
    return _candidate_votes(df, year, "two-candidate preferred")


def clean_two_party(df: pd.DataFrame, year: int | None = None) -> pd.DataFrame:
    """
    Standardize an AEC two-party-preferred table to lnp_/alp_ votes and percent.

    Percentages are recomputed from votes when the file carries only counts;
    rows with zero two-party votes get NaN percentages, published or not.
    """
    out = _common(df, year, "two-party preferred").rename(columns=TPP_RENAME)
    require_columns(out, {"lnp_votes", "alp_votes"}, "two-party preferred")

    for c in ("lnp_votes", "alp_votes"):
        out[c] = pd.to_numeric(out[c], errors="coerce").fillna(0).astype("int64")
    if "total_votes" in out.columns:
        out["total_votes"] = pd.to_numeric(out["total_votes"], errors="coerce").fillna(0).astype("int64")
    else:
        out["total_votes"] = out["lnp_votes"] + out["alp_votes"]

    two = (out["lnp_votes"] + out["alp_votes"]).astype(float)
    for party in ("lnp", "alp"):
        pct_col = f"{party}_percent"
        computed = np.where(two > 0, 100.0 * out[f"{party}_votes"] / two.where(two > 0, 1.0), np.nan)
        if pct_col in out.columns:
            published = pd.to_numeric(out[pct_col], errors="coerce").astype(float)
            out[pct_col] = published.fillna(pd.Series(computed, index=out.index))
        else:
            out[pct_col] = computed
    # Published 0.00/0.00 for a booth that took no votes is not a share
    out.loc[two <= 0, ["lnp_percent", "alp_percent"]] = np.nan
    if "swing" in out.columns:
        out["swing"] = pd.to_numeric(out["swing"], errors="coerce")
    if "polling_place_id" in out.columns:
        out["polling_place_id"] = pd.to_numeric(out["polling_place_id"], errors="coerce").astype("Int64")
    return out.reset_index(drop=True)


def clean_polling_places(df: pd.DataFrame) -> pd.DataFrame:
    """Polling-place locations: one row per polling_place_id with latitude/longitude."""
    out = _common(df, None, "polling places")
    require_columns(out, {"polling_place_id", "latitude", "longitude"}, "polling places")
    out["polling_place_id"] = pd.to_numeric(out["polling_place_id"], errors="coerce").astype("Int64")
    out["latitude"] = pd.to_numeric(out["latitude"], errors="coerce")
    out["longitude"] = pd.to_numeric(out["longitude"], errors="coerce")

    before = len(out)
    out = out.dropna(subset=["polling_place_id"]).drop_duplicates("polling_place_id")
    if len(out) < before:
        logger.warning(f"Dropped {before - len(out)} polling-place rows with missing or duplicate ids")

    keep = [c for c in ["polling_place_id", "polling_place", "division_nm", "state_ab", "premises_nm",
                        "latitude", "longitude"] if c in out.columns]
    return out[keep].reset_index(drop=True)


def attach_locations(results: pd.DataFrame, places: pd.DataFrame) -> pd.DataFrame:
    """Left-join booth coordinates onto polling-place results by polling_place_id."""
    require_columns(results, {"polling_place_id"}, "polling-place results")
    loc = places[["polling_place_id", "latitude", "longitude"]]
    out = results.drop(columns=[c for c in ("latitude", "longitude") if c in results.columns])
    out = out.merge(loc, on="polling_place_id", how="left", validate="many_to_one")
    n_missing = int(out["latitude"].isna().sum())
    if n_missing:
        logger.warning(f"{n_missing} polling-place result rows have no coordinates")
    return out
