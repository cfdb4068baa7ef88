from __future__ import annotations

import pandas as pd
from loguru import logger

from .winners import group_keys, rank_within, vote_percent


def party_votes_by_division(fp: pd.DataFrame) -> pd.DataFrame:
    """
    Total first-preference votes per party per division, with the party's
    percent of the division. Parties sharing a normalized label (e.g. LP and
    NP under LNP) are summed together. Zero-vote divisions are excluded.
    """
    keys = group_keys(fp)
    summed = fp.groupby(keys + ["party_ab"], as_index=False, dropna=False)["ordinary_votes"].sum()
    return vote_percent(summed, keys).sort_values(keys + ["ordinary_votes"], ascending=[True] * len(keys) + [False]).reset_index(drop=True)


def division_winners(fp: pd.DataFrame) -> pd.DataFrame:
    """Winner per division by strictly highest first-preference count; ties leave winner null."""
    votes = party_votes_by_division(fp)
    return rank_within(votes, group_keys(fp), "ordinary_votes")


def seats_won(fp: pd.DataFrame) -> pd.DataFrame:
    """
    Seats won per party.

    Uses the AEC `elected` flag when the table carries it (one elected row per
    division); otherwise falls back to division_winners on vote counts.
    """
    keys = group_keys(fp)
    by = ["party_ab"] + [k for k in keys if k != "division_nm"]

    if "elected" in fp.columns:
        elected = fp.loc[fp["elected"].fillna(False).astype(bool)]
        per_div = elected.groupby(keys, dropna=False).size()
        if (per_div > 1).any():
            raise ValueError(f"More than one elected candidate in: {per_div[per_div > 1].index.tolist()[:10]}")
        winners = elected[keys + ["party_ab"]]
    else:
        winners = division_winners(fp).rename(columns={"winner": "party_ab"})
        winners = winners.dropna(subset=["party_ab"])

    seats = winners.groupby(by, as_index=False).size().rename(columns={"size": "seats"})
    return seats.sort_values(by[1:] + ["seats"], ascending=[True] * (len(by) - 1) + [False]).reset_index(drop=True)


def party_share_by_state(fp: pd.DataFrame) -> pd.DataFrame:
    """Each party's share of the ordinary vote per state."""
    if "state_ab" not in fp.columns:
        raise ValueError("party_share_by_state needs a state_ab column")
    keys = group_keys(fp, ("state_ab",))
    summed = fp.groupby(keys + ["party_ab"], as_index=False, dropna=False)["ordinary_votes"].sum()
    return vote_percent(summed, keys).sort_values(keys + ["percent"], ascending=[True] * len(keys) + [False]).reset_index(drop=True)


def seat_changes(winners_a: pd.DataFrame, winners_b: pd.DataFrame) -> pd.DataFrame:
    """Divisions present in both elections whose winning party changed."""
    a = winners_a[["division_nm", "winner"]].rename(columns={"winner": "winner_before"})
    b = winners_b[["division_nm", "winner"]].rename(columns={"winner": "winner_after"})
    both = a.merge(b, on="division_nm", how="inner", validate="one_to_one")
    changed = both["winner_before"].astype("string") != both["winner_after"].astype("string")
    out = both.loc[changed.fillna(False)].sort_values("division_nm").reset_index(drop=True)
    logger.info(f"{len(out)} of {len(both)} common divisions changed hands")
    return out


def tpp_swing(tpp_before: pd.DataFrame, tpp_after: pd.DataFrame) -> pd.DataFrame:
    """Change in LNP two-party-preferred percent for divisions contested in both elections."""
    a = tpp_before[["division_nm", "lnp_percent"]].rename(columns={"lnp_percent": "lnp_percent_before"})
    b = tpp_after[["division_nm", "lnp_percent"]].rename(columns={"lnp_percent": "lnp_percent_after"})
    out = a.merge(b, on="division_nm", how="inner", validate="one_to_one")
    out["lnp_swing"] = out["lnp_percent_after"] - out["lnp_percent_before"]
    return out.sort_values("lnp_swing").reset_index(drop=True)
