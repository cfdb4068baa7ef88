from __future__ import annotations

from typing import Sequence

import pandas as pd
from loguru import logger

from aus_election_census.config import CENSUS_YEAR_FOR_ELECTION

JOIN_KINDS = ("left", "inner")


def join_tables(
    primary: pd.DataFrame,
    secondary: pd.DataFrame,
    on: str | Sequence[str] = "division_nm",
    how: str = "left",
    suffix: str = "_census",
) -> pd.DataFrame:
    """
    Join a secondary table onto a primary one by a shared key.

    - how="left": every primary row is kept; unmatched rows get null
      secondary columns, so len(result) == len(primary).
    - how="inner": unmatched primary rows are dropped.

    The secondary table must be unique on the key. Non-key columns present
    on both sides keep the primary name and get `suffix` on the secondary side.
    """
    if how not in JOIN_KINDS:
        raise ValueError(f"Unsupported join {how!r}; expected one of {JOIN_KINDS}")
    keys = [on] if isinstance(on, str) else list(on)

    for side, df in (("primary", primary), ("secondary", secondary)):
        missing = [k for k in keys if k not in df.columns]
        if missing:
            raise ValueError(f"{side} table missing join key(s): {missing}")

    dup = secondary.duplicated(keys, keep=False)
    if dup.any():
        examples = secondary.loc[dup, keys].drop_duplicates().head(10).to_dict("records")
        raise ValueError(f"Secondary table is not unique on {keys}; duplicates: {examples}")

    out = primary.merge(
        secondary,
        on=keys,
        how=how,
        suffixes=("", suffix),
        validate="many_to_one",
    )

    secondary_only = [c for c in secondary.columns if c not in keys]
    if secondary_only:
        matched = primary[keys].merge(secondary[keys].assign(_hit=True), on=keys, how="left")["_hit"]
        n_unmatched = int(matched.isna().sum())
        if n_unmatched:
            sample = primary.loc[matched.isna().to_numpy(), keys].drop_duplicates().head(10).to_dict("records")
            logger.warning(f"{n_unmatched} primary rows have no match on {keys} ({how} join); e.g. {sample}")

    return out


def election_census_table(
    election: pd.DataFrame,
    census: pd.DataFrame,
    how: str = "left",
) -> pd.DataFrame:
    """
    Join one election's electorate table to the census nearest that election.

    Both tables must cover a single year; the census year is kept as
    `census_year` and the join key is the division name alone.
    """
    years = election["year"].dropna().unique() if "year" in election.columns else []
    if len(years) != 1:
        raise ValueError(f"Election table must cover exactly one year, found {list(years)}")
    year = int(years[0])
    wanted = CENSUS_YEAR_FOR_ELECTION.get(year)

    c = census
    if "year" in census.columns:
        c_years = census["year"].dropna().unique()
        if wanted is not None and wanted in set(int(y) for y in c_years):
            c = census.loc[census["year"] == wanted]
        elif len(c_years) != 1:
            raise ValueError(f"No census for {year} (expected census {wanted}); found {sorted(c_years)}")
        c = c.rename(columns={"year": "census_year"})
        if wanted is not None and int(c["census_year"].iloc[0]) != wanted:
            logger.warning(f"Using census {int(c['census_year'].iloc[0])} for election {year} (expected {wanted})")

    if "state_ab" in c.columns and "state_ab" in election.columns:
        c = c.drop(columns=["state_ab"])
    return join_tables(election, c, on="division_nm", how=how)
