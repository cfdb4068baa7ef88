#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from loguru import logger

from aus_election_census.config import (
    AEC_EVENT_IDS,
    CENSUS_YEAR_FOR_ELECTION,
    ELECTION_YEARS,
    PROCESSED_DATA_DIR,
    RAW_DATA_DIR,
)
from .download import download_snapshot, load_snapshot, snapshot_path
from .elections import attach_locations
from .io import mkdir_p, write_parquet
from .keys import year_suffix

ELECTION_KINDS = ["fp", "tpp", "tcp", "fp_pp", "tpp_pp", "tcp_pp"]
BOOTH_KINDS = {"fp_pp", "tpp_pp", "tcp_pp"}


def out_path(processed_dir: Path, kind: str, year: int) -> Path:
    return processed_dir / f"{kind}{year_suffix(year)}.parquet"


def _has_snapshot(kind: str, year: int, raw_dir: Path) -> bool:
    try:
        snapshot_path(kind, year, raw_dir)
    except FileNotFoundError:
        return False
    return True


def build_processed_inputs(
    years: list[int],
    kinds: list[str],
    raw_dir: Path,
    processed_dir: Path,
    with_census: bool = True,
) -> list[Path]:
    """
    Clean every available raw snapshot into processed/{kind}{yy}.parquet.

    Booth-level tables get polling-place coordinates attached when a
    polling_places snapshot for the same year exists.
    """
    mkdir_p(processed_dir)
    written = []

    for year in years:
        places = None
        if BOOTH_KINDS & set(kinds) and _has_snapshot("polling_places", year, raw_dir):
            places = load_snapshot("polling_places", year, raw_dir)

        for kind in kinds:
            if not _has_snapshot(kind, year, raw_dir):
                logger.warning(f"[skip] no raw snapshot {kind}{year_suffix(year)} in {raw_dir}")
                continue
            df = load_snapshot(kind, year, raw_dir)
            if kind in BOOTH_KINDS and places is not None:
                df = attach_locations(df, places)
            p = out_path(processed_dir, kind, year)
            write_parquet(df, p)
            written.append(p)

    if with_census:
        for census_year in sorted({CENSUS_YEAR_FOR_ELECTION[y] for y in years if y in CENSUS_YEAR_FOR_ELECTION}):
            if not _has_snapshot("abs", census_year, raw_dir):
                logger.warning(f"[skip] no census snapshot abs{year_suffix(census_year)} in {raw_dir}")
                continue
            p = out_path(processed_dir, "abs", census_year)
            write_parquet(load_snapshot("abs", census_year, raw_dir), p)
            written.append(p)

    logger.info("[OK] Wrote processed inputs:")
    for p in written:
        logger.info(f"  {p}")
    return written


def main():
    ap = argparse.ArgumentParser(description="Download AEC results and clean snapshots into processed Parquet.")
    ap.add_argument("--years", type=int, nargs="+", default=ELECTION_YEARS)
    ap.add_argument("--kinds", nargs="+", default=ELECTION_KINDS, choices=ELECTION_KINDS + ["polling_places"])
    ap.add_argument("--raw-dir", type=Path, default=RAW_DATA_DIR)
    ap.add_argument("--out", type=Path, default=PROCESSED_DATA_DIR, help="Output directory (data/processed).")
    ap.add_argument("--download", action="store_true",
                    help="Fetch raw tables from results.aec.gov.au before cleaning (2004-2016 only).")
    ap.add_argument("--no-census", action="store_true")
    args = ap.parse_args()

    if args.download:
        fetch = list(args.kinds)
        if BOOTH_KINDS & set(fetch) and "polling_places" not in fetch:
            fetch.append("polling_places")
        download_snapshot(fetch, [y for y in args.years if y in AEC_EVENT_IDS], args.raw_dir)

    kinds = [k for k in args.kinds if k != "polling_places"]
    build_processed_inputs(args.years, kinds, args.raw_dir, args.out, with_census=not args.no_census)


if __name__ == "__main__":
    main()
