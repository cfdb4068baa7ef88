from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger
from tqdm import tqdm

from aus_election_census.config import AEC_BASE_URL, AEC_EVENT_IDS, RAW_DATA_DIR, STATES
from .census import clean_census
from .elections import (
    clean_first_preferences,
    clean_polling_places,
    clean_two_candidate,
    clean_two_party,
)
from .io import read_any
from .keys import year_suffix

# AEC download file stems, keyed by dataset kind ("_pp" = by polling place)
AEC_FILES = {
    "fp": "HouseFirstPrefsByCandidateByVoteTypeDownload",
    "fp_pp": "HouseStateFirstPrefsByPollingPlaceDownload",
    "tpp": "HouseTppByDivisionDownload",
    "tpp_pp": "HouseTppByPollingPlaceDownload",
    "tcp": "HouseTcpByCandidateByVoteTypeDownload",
    "tcp_pp": "HouseTcpByCandidateByPollingPlaceDownload",
    "polling_places": "GeneralPollingPlacesDownload",
}

CLEANERS = {
    "fp": clean_first_preferences,
    "fp_pp": clean_first_preferences,
    "tpp": clean_two_party,
    "tpp_pp": clean_two_party,
    "tcp": clean_two_candidate,
    "tcp_pp": clean_two_candidate,
    "abs": clean_census,
}

SNAPSHOT_EXTS = (".parquet", ".csv")


def aec_url(kind: str, year: int, state: str | None = None) -> str:
    if kind not in AEC_FILES:
        raise ValueError(f"Unknown AEC dataset kind {kind!r}; expected one of {sorted(AEC_FILES)}")
    if year not in AEC_EVENT_IDS:
        raise ValueError(
            f"No AEC results download for {year}; available years: {sorted(AEC_EVENT_IDS)}. "
            "Use the bundled snapshot instead."
        )
    event = AEC_EVENT_IDS[year]
    stem = f"{AEC_FILES[kind]}-{event}"
    if kind == "fp_pp":
        if state is None:
            raise ValueError("First preferences by polling place are published per state; pass state=")
        stem = f"{stem}-{state.upper()}"
    return f"{AEC_BASE_URL}/{event}/Website/Downloads/{stem}.csv"


def fetch_aec_table(kind: str, year: int) -> pd.DataFrame:
    """Download one raw AEC table. The first line of every AEC CSV is a banner row."""
    if kind == "fp_pp":
        frames = []
        for state in tqdm(STATES, desc=f"fp_pp {year}"):
            url = aec_url(kind, year, state)
            logger.debug(f"GET {url}")
            frames.append(pd.read_csv(url, skiprows=1))
        return pd.concat(frames, ignore_index=True)

    url = aec_url(kind, year)
    logger.info(f"GET {url}")
    return pd.read_csv(url, skiprows=1)


def snapshot_path(kind: str, year: int, data_dir: Path = RAW_DATA_DIR) -> Path:
    """Bundled datasets are named by kind + two-digit year, e.g. fp16.parquet or abs11.csv."""
    name = f"{kind}{year_suffix(year)}"
    for ext in SNAPSHOT_EXTS:
        p = Path(data_dir) / f"{name}{ext}"
        if p.exists():
            return p
    raise FileNotFoundError(f"No snapshot {name}{{{','.join(SNAPSHOT_EXTS)}}} under {data_dir}")


def load_snapshot(kind: str, year: int, data_dir: Path = RAW_DATA_DIR, clean: bool = True) -> pd.DataFrame:
    df = read_any(snapshot_path(kind, year, data_dir))
    if not clean:
        return df
    if kind == "polling_places":
        return clean_polling_places(df)
    if kind not in CLEANERS:
        raise ValueError(f"Unknown snapshot kind {kind!r}")
    return CLEANERS[kind](df, year)


def download_snapshot(kinds, years, data_dir: Path = RAW_DATA_DIR) -> list[Path]:
    """Fetch raw AEC tables and store them as {kind}{yy}.csv snapshots."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for year in years:
        for kind in kinds:
            df = fetch_aec_table(kind, year)
            out = data_dir / f"{kind}{year_suffix(year)}.csv"
            df.to_csv(out, index=False)
            logger.info(f"[download] {kind} {year}: {len(df)} rows -> {out}")
            written.append(out)
    return written
