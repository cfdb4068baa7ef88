from __future__ import annotations

import duckdb
import pandas as pd
from loguru import logger

from .winners import group_keys, vote_percent


def check_divisions_known(polling: pd.DataFrame, electorates: pd.DataFrame) -> None:
    """Every polling place's division (per year) must exist in the electorate table."""
    keys = [k for k in group_keys(polling) if k in electorates.columns]
    known = electorates[keys].drop_duplicates()
    seen = polling[keys].drop_duplicates()
    orphans = seen.merge(known.assign(_ok=True), on=keys, how="left")
    orphans = orphans.loc[orphans["_ok"].isna(), keys]
    if not orphans.empty:
        raise ValueError(f"{len(orphans)} polling-place division(s) missing from electorate table: "
                         f"{orphans.head(10).to_dict('records')}")


def check_winner_is_max(tcp: pd.DataFrame, tol: float = 1e-9) -> None:
    """
    The elected candidate of each division must hold the larger two-candidate-preferred share.

    Seats are decided after preferences, so this runs on the TCP table; an
    elected candidate may well trail on first preferences.
    """
    if "elected" not in tcp.columns:
        raise ValueError("check_winner_is_max needs an elected column")
    keys = group_keys(tcp)
    pct = tcp if "percent" in tcp.columns else vote_percent(tcp, keys)
    best = pct.groupby(keys, dropna=False)["percent"].transform("max")
    bad = pct.loc[pct["elected"].fillna(False).astype(bool) & (pct["percent"] < best - tol), keys]
    if not bad.empty:
        raise ValueError(f"Elected candidate is not the top share in: {bad.head(10).to_dict('records')}")


def check_tpp_sums(tpp: pd.DataFrame, tol: float = 0.1) -> None:
    """lnp_percent + alp_percent must equal 100 within tol (rounding in AEC files)."""
    total = tpp["lnp_percent"] + tpp["alp_percent"]
    bad = tpp.loc[total.notna() & ((total - 100.0).abs() > tol)]
    if not bad.empty:
        cols = [c for c in ("division_nm", "polling_place_id", "lnp_percent", "alp_percent") if c in bad.columns]
        raise ValueError(f"{len(bad)} two-party row(s) do not sum to 100: {bad[cols].head(10).to_dict('records')}")


def run_sanity(
    fp: pd.DataFrame | None = None,
    tpp: pd.DataFrame | None = None,
    polling: pd.DataFrame | None = None,
    tcp: pd.DataFrame | None = None,
) -> None:
    if tcp is not None and "elected" in tcp.columns:
        check_winner_is_max(tcp)
    if tpp is not None:
        check_tpp_sums(tpp)
    if polling is not None and fp is not None:
        check_divisions_known(polling, fp)
    logger.info("Sanity checks passed.")


def sanity_checks(con: duckdb.DuckDBPyConnection) -> None:
    # 1) every polling-place division must exist among electorates of the same year
    missing_div = con.execute("""
        SELECT COUNT(*) AS n
        FROM (SELECT DISTINCT division_nm, year FROM two_party_booths) pp
        LEFT JOIN (SELECT DISTINCT division_nm, year FROM first_prefs) e
          ON e.division_nm = pp.division_nm AND e.year = pp.year
        WHERE e.division_nm IS NULL
    """).fetchone()[0]
    if missing_div:
        raise ValueError(f"{missing_div} polling-place divisions missing from first_prefs (bad division keys).")

    # 2) two-party percentages sum to 100
    bad_tpp = con.execute("""
        SELECT COUNT(*) FROM two_party
        WHERE lnp_votes + alp_votes > 0
          AND ABS(lnp_percent + alp_percent - 100.0) > 0.1
    """).fetchone()[0]
    if bad_tpp:
        raise ValueError(f"{bad_tpp} two_party rows do not sum to 100.")

    # 3) one elected candidate per division (not fatal: older snapshots lack the flag)
    counts = con.execute("""
        SELECT year, division_nm, SUM(CASE WHEN elected THEN 1 ELSE 0 END) AS n_elected
        FROM first_prefs
        GROUP BY year, division_nm
        HAVING n_elected <> 1
    """).df()
    if not counts.empty:
        logger.warning(f"{len(counts)} divisions do not have exactly one elected candidate")
        logger.warning(counts.head().to_string())

    # 4) the elected candidate tops the two-candidate-preferred count
    beaten = con.execute("""
        SELECT COUNT(*) FROM two_candidate w
        JOIN two_candidate o
          ON o.year = w.year AND o.division_nm = w.division_nm AND o.party_ab <> w.party_ab
        WHERE w.elected AND o.ordinary_votes > w.ordinary_votes
    """).fetchone()[0]
    if beaten:
        raise ValueError(f"{beaten} elected two-candidate rows trail their opponent.")

    logger.info("Sanity checks passed.")
