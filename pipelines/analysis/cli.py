from __future__ import annotations
import argparse
from pathlib import Path

import pandas as pd
from loguru import logger

from aus_election_census.config import (
    BOUNDARIES_FILE,
    CENSUS_YEAR_FOR_ELECTION,
    FIGURES_DIR,
    MODEL_DIR,
    PROCESSED_DATA_DIR,
    WAREHOUSE_PATH,
)
from aus_election_census.census_model.config import ModelParams
from aus_election_census.census_model.io import write_csv, write_json
from aus_election_census.census_model.report import build_summary, markdown_table
from aus_election_census.census_model.scoring import fit_ols, fit_stats, significant
from pipelines.data.io import read_any
from pipelines.data.keys import year_suffix
from .db import connect_db
from .io_export import export_outputs
from .joins import election_census_table
from .plots import (
    plot_coefficients,
    plot_electorate_choropleth,
    plot_polling_places,
    plot_scatter_matrix,
    plot_seat_counts,
)
from .sanity import sanity_checks
from .schema import create_schema
from .warehouse import build_division_party_votes, build_party_seats, load_census, load_table, read_census
from .winners import closest_divisions, tcp_margins, two_party_winner

STAGES = ["schema", "load", "sanity", "aggregates", "model", "plots", "export", "all"]

# processed file kind -> warehouse table
LOAD_MAP = {
    "fp": "first_prefs",
    "tpp": "two_party",
    "tpp_pp": "two_party_booths",
    "tcp": "two_candidate",
}


def processed_file(processed_dir: Path, kind: str, year: int) -> Path:
    return processed_dir / f"{kind}{year_suffix(year)}.parquet"


def run_load(con, processed_dir: Path, years: list[int]) -> None:
    for year in years:
        for kind, table in LOAD_MAP.items():
            p = processed_file(processed_dir, kind, year)
            if not p.exists():
                logger.warning(f"[load] missing {p}; {table} {year} not loaded")
                continue
            load_table(con, table, read_any(p))

    for census_year in sorted({CENSUS_YEAR_FOR_ELECTION[y] for y in years if y in CENSUS_YEAR_FOR_ELECTION}):
        p = processed_file(processed_dir, "abs", census_year)
        if p.exists():
            load_census(con, read_any(p))
        else:
            logger.warning(f"[load] missing {p}; census {census_year} not loaded")


def run_aggregates(con) -> pd.DataFrame:
    build_division_party_votes(con)
    build_party_seats(con)
    seats = con.execute("SELECT * FROM party_seats ORDER BY year, seats DESC").df()
    print("\nSeats won by party:")
    print(seats.to_string(index=False))
    return seats


def election_model_table(con, year: int) -> pd.DataFrame:
    tpp = con.execute("SELECT * FROM two_party WHERE year = ?", [int(year)]).df()
    if tpp.empty:
        raise ValueError(f"No two_party rows for {year}; run the load stage first.")
    census = read_census(con, CENSUS_YEAR_FOR_ELECTION[year])
    return election_census_table(tpp, census, how="inner")


def run_model(con, year: int, model_dir: Path, params: ModelParams = ModelParams()) -> pd.DataFrame:
    table = election_model_table(con, year)
    coefs, fit = fit_ols(table, params)
    sig = significant(coefs, params.alpha, params.drop_intercept_in_report)

    write_csv(coefs, model_dir / f"coefficients_{year}.csv")
    write_json(build_summary(fit_stats(fit, params), sig, params.alpha), model_dir / f"fit_summary_{year}.json")

    print(f"\nCensus terms with p < {params.alpha} ({params.response}, {year}):")
    print(markdown_table(sig[["term", "estimate", "std_error", "p_value"]]))
    return coefs


def run_plots(con, year: int, figures_dir: Path, model_dir: Path, boundaries: Path | None) -> None:
    seats = con.execute("SELECT * FROM party_seats WHERE year = ?", [int(year)]).df()
    if not seats.empty:
        plot_seat_counts(seats, title=f"Seats won, {year}", fname=figures_dir / f"seats_{year}.png")

    booths = con.execute("SELECT * FROM two_party_booths WHERE year = ?", [int(year)]).df()
    if not booths.empty:
        plot_polling_places(two_party_winner(booths), colour_by="winner",
                            title=f"Two-party preferred winner by polling place, {year}",
                            fname=figures_dir / f"booths_tpp_{year}.png")

    tcp = con.execute("SELECT * FROM two_candidate WHERE year = ?", [int(year)]).df()
    if not tcp.empty:
        print(f"\nClosest divisions, {year}:")
        print(closest_divisions(tcp_margins(tcp))[["division_nm", "winner", "runner_up", "margin_percent",
                                                   "margin_votes"]].to_string(index=False))

    table = None
    try:
        table = election_model_table(con, year)
    except ValueError as e:
        logger.warning(f"[plots] no election+census table: {e}")
    if table is not None:
        cols = [c for c in ("lnp_percent", "median_personal_income", "unemployed", "bachelor_abv", "born_overseas")
                if c in table.columns]
        if len(cols) >= 2:
            plot_scatter_matrix(table, cols, fname=figures_dir / f"scatter_{year}.png")
        if boundaries is not None and boundaries.exists():
            plot_electorate_choropleth(read_any(boundaries), two_party_winner(table), "winner",
                                       title=f"Two-party preferred winner, {year}",
                                       fname=figures_dir / f"electorates_{year}.png")

    coef_file = model_dir / f"coefficients_{year}.csv"
    if coef_file.exists():
        plot_coefficients(pd.read_csv(coef_file), title=f"OLS estimates, {year}",
                          fname=figures_dir / f"coefficients_{year}.png")


def main() -> None:
    p = argparse.ArgumentParser(description="Australian federal election + census pipeline with stages")
    p.add_argument("--db", type=Path, default=WAREHOUSE_PATH)
    p.add_argument("--stage", default="all", choices=STAGES)
    p.add_argument("--processed-dir", type=Path, default=PROCESSED_DATA_DIR)
    p.add_argument("--years", type=int, nargs="+", default=[2016], help="Elections to load")
    p.add_argument("--year", type=int, default=2016, help="Election used by model/plots stages")
    p.add_argument("--response", default="lnp_percent")
    p.add_argument("--standardize", action="store_true")
    p.add_argument("--alpha", type=float, default=0.05)
    p.add_argument("--boundaries", type=Path, default=BOUNDARIES_FILE)
    p.add_argument("--figures-dir", type=Path, default=FIGURES_DIR)
    p.add_argument("--model-dir", type=Path, default=MODEL_DIR)
    p.add_argument("--export-dir", type=Path, default=PROCESSED_DATA_DIR / "exports")
    p.add_argument("--fmt", default="parquet", choices=["parquet", "csv"])

    args = p.parse_args()
    params = ModelParams(response=args.response, standardize=args.standardize, alpha=args.alpha)

    con = connect_db(args.db)

    def run_schema():
        create_schema(con)

    stages = {
        "schema": [run_schema],
        "load": [run_schema, lambda: run_load(con, args.processed_dir, args.years)],
        "sanity": [lambda: sanity_checks(con)],
        "aggregates": [lambda: run_aggregates(con)],
        "model": [lambda: run_model(con, args.year, args.model_dir, params)],
        "plots": [lambda: run_plots(con, args.year, args.figures_dir, args.model_dir, args.boundaries)],
        "export": [lambda: export_outputs(con, args.export_dir, args.fmt)],
    }
    stages["all"] = [fn for name in STAGES[1:-1] for fn in stages[name]]

    try:
        for fn in stages[args.stage]:
            fn()
    finally:
        con.close()
    logger.info(f"Done. stage={args.stage}")


if __name__ == "__main__":
    main()
