from __future__ import annotations

from typing import List, Sequence

import pandas as pd
from loguru import logger


def group_keys(df: pd.DataFrame, base: Sequence[str] = ("division_nm",)) -> List[str]:
    """Base grouping keys plus `year` when the table spans several elections."""
    keys = list(base)
    if "year" in df.columns and "year" not in keys:
        keys.append("year")
    return keys


def drop_zero_vote_groups(df: pd.DataFrame, keys: List[str], votes_col: str = "ordinary_votes") -> pd.DataFrame:
    """Remove every row belonging to a group whose votes sum to zero."""
    totals = df.groupby(keys, dropna=False)[votes_col].transform("sum")
    zero = totals <= 0
    if zero.any():
        dropped = df.loc[zero, keys].drop_duplicates()
        logger.warning(f"Excluding {len(dropped)} group(s) with zero total votes: {dropped.head(10).to_dict('records')}")
    return df.loc[~zero].copy()


def vote_percent(df: pd.DataFrame, keys: List[str], votes_col: str = "ordinary_votes") -> pd.DataFrame:
    """Append total_votes and percent (0-100) of votes_col within each group; zero-vote groups are excluded."""
    out = drop_zero_vote_groups(df, keys, votes_col)
    out["total_votes"] = out.groupby(keys, dropna=False)[votes_col].transform("sum")
    out["percent"] = 100.0 * out[votes_col].astype(float) / out["total_votes"].astype(float)
    return out


def first_pref_percent(fp: pd.DataFrame, by: Sequence[str] = ("division_nm",)) -> pd.DataFrame:
    """First-preference share of each candidate within its division (or booth, via `by`)."""
    return vote_percent(fp, group_keys(fp, by))


def rank_within(
    df: pd.DataFrame,
    keys: List[str],
    value_col: str,
    label_col: str = "party_ab",
) -> pd.DataFrame:
    """
    One row per group: winner (strictly highest value_col) and runner-up.

    A tie for first place leaves `winner` null; ties are reported, never
    broken.
    """
    ranked = df.sort_values(value_col, ascending=False, kind="mergesort")
    ranked = ranked.assign(_rank=ranked.groupby(keys, dropna=False).cumcount())

    cols = keys + [label_col, value_col]
    top = ranked.loc[ranked["_rank"] == 0, cols].rename(
        columns={label_col: "winner", value_col: f"winner_{value_col}"}
    )
    runner = ranked.loc[ranked["_rank"] == 1, cols].rename(
        columns={label_col: "runner_up", value_col: f"runner_up_{value_col}"}
    )
    out = top.merge(runner, on=keys, how="left")

    tied = out[f"winner_{value_col}"] == out[f"runner_up_{value_col}"]
    if tied.any():
        logger.warning(f"No winner declared for {int(tied.sum())} tied group(s): "
                       f"{out.loc[tied, keys].head(10).to_dict('records')}")
        out["winner"] = out["winner"].astype("object")
        out.loc[tied, "winner"] = pd.NA
    return out.sort_values(keys).reset_index(drop=True)


def two_party_winner(tpp: pd.DataFrame) -> pd.DataFrame:
    """
    Winner of each two-party-preferred row: the party (LNP/ALP) holding at
    least 50%. An exact 50/50 split has no winner. Rows with no two-party
    votes are excluded.
    """
    out = tpp.copy()
    if {"lnp_votes", "alp_votes"}.issubset(out.columns):
        zero = (out["lnp_votes"] + out["alp_votes"]) <= 0
        if zero.any():
            logger.warning(f"Excluding {int(zero.sum())} two-party row(s) with zero votes")
        out = out.loc[~zero].copy()
    out = out.dropna(subset=["lnp_percent", "alp_percent"])

    lnp = out["lnp_percent"] >= 50
    alp = out["alp_percent"] >= 50
    out["winner"] = pd.Series(pd.NA, index=out.index, dtype="object")
    out.loc[lnp & ~alp, "winner"] = "LNP"
    out.loc[alp & ~lnp, "winner"] = "ALP"
    if (lnp & alp).any():
        logger.warning(f"No two-party winner for {int((lnp & alp).sum())} exact 50/50 row(s)")
    out["winner_percent"] = out[["lnp_percent", "alp_percent"]].max(axis=1)
    return out.reset_index(drop=True)


def _tcp_with_percent(tcp: pd.DataFrame, keys: List[str]) -> pd.DataFrame:
    out = drop_zero_vote_groups(tcp, keys)
    out["total_votes"] = out.groupby(keys, dropna=False)["ordinary_votes"].transform("sum")
    computed = 100.0 * out["ordinary_votes"].astype(float) / out["total_votes"].astype(float)
    if "percent" in out.columns:
        out["percent"] = out["percent"].fillna(computed)
    else:
        out["percent"] = computed
    return out


def two_candidate_winner(tcp: pd.DataFrame, by: Sequence[str] = ("division_nm",)) -> pd.DataFrame:
    """Per division: the party with the maximum two-candidate-preferred share, plus runner-up."""
    keys = group_keys(tcp, by)
    pct = _tcp_with_percent(tcp, keys)
    winners = rank_within(pct, keys, "percent")

    extra = [c for c in ("state_ab",) if c in pct.columns and c not in keys]
    totals = pct.groupby(keys, dropna=False, as_index=False).agg(
        total_votes=("total_votes", "first"), **{c: (c, "first") for c in extra}
    )
    return winners.merge(totals, on=keys, how="left")


def tcp_margins(tcp: pd.DataFrame, by: Sequence[str] = ("division_nm",)) -> pd.DataFrame:
    """
    Winning margin per division.

    margin_percent = 2 * (winner_percent - 50), i.e. the gap between the two
    candidates; margin_votes ~= margin_percent * total_votes / 100.
    """
    out = two_candidate_winner(tcp, by)
    out["margin_percent"] = 2.0 * (out["winner_percent"] - 50.0)
    out["margin_votes"] = out["margin_percent"] * out["total_votes"] / 100.0
    return out


def closest_divisions(margins: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return margins.dropna(subset=["winner"]).nsmallest(n, "margin_percent").reset_index(drop=True)


def booth_winners(pp_tcp: pd.DataFrame) -> pd.DataFrame:
    """Two-candidate winner at each polling place; coordinates are carried through when present."""
    keys = ["division_nm", "polling_place_id"]
    out = two_candidate_winner(pp_tcp, by=keys)
    loc_cols = [c for c in ("polling_place", "latitude", "longitude") if c in pp_tcp.columns]
    if loc_cols:
        locs = pp_tcp[group_keys(pp_tcp, keys) + loc_cols].drop_duplicates(group_keys(pp_tcp, keys))
        out = out.merge(locs, on=group_keys(pp_tcp, keys), how="left")
    return out
