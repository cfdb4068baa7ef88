from __future__ import annotations

import duckdb
import pandas as pd
from loguru import logger

from pipelines.data.census import numeric_attributes
from .schema import TABLE_COLUMNS


def load_table(con: duckdb.DuckDBPyConnection, table: str, df: pd.DataFrame) -> None:
    """Replace the rows of `table` for every year present in df."""
    if table not in TABLE_COLUMNS:
        raise ValueError(f"Unknown warehouse table {table!r}")
    cols = TABLE_COLUMNS[table]
    if "year" not in df.columns or df["year"].isna().any():
        raise ValueError(f"{table}: every row needs a year")

    tmp = df.copy()
    for c in cols:
        if c not in tmp.columns:
            tmp[c] = None
    tmp = tmp[cols]
    for c in ("division_nm", "state_ab", "party_ab", "party_nm", "polling_place"):
        if c in tmp.columns:
            tmp[c] = tmp[c].astype("object").where(tmp[c].notna(), None)

    con.register("tmp_load", tmp)
    con.execute(f"DELETE FROM {table} WHERE year IN (SELECT DISTINCT year FROM tmp_load)")
    con.execute(f"INSERT INTO {table} SELECT {', '.join(cols)} FROM tmp_load")
    con.unregister("tmp_load")
    logger.info(f"[load] {table}: {len(tmp)} rows")


def load_census(con: duckdb.DuckDBPyConnection, census: pd.DataFrame) -> None:
    """Census attributes are stored long (year, division_nm, attribute, value) since columns vary by year."""
    attrs = numeric_attributes(census)
    long = census.melt(id_vars=["year", "division_nm"], value_vars=attrs, var_name="attribute", value_name="value")
    long["division_nm"] = long["division_nm"].astype("object")
    long["value"] = long["value"].astype(float)

    con.execute("""
    CREATE TABLE IF NOT EXISTS census_long (
        year INTEGER,
        division_nm TEXT,
        attribute TEXT,
        value DOUBLE
    );
    """)
    con.register("tmp_census", long)
    con.execute("DELETE FROM census_long WHERE year IN (SELECT DISTINCT year FROM tmp_census)")
    con.execute("INSERT INTO census_long SELECT year, division_nm, attribute, value FROM tmp_census")
    con.unregister("tmp_census")
    logger.info(f"[load] census_long: {len(long)} rows ({len(attrs)} attributes)")


def read_census(con: duckdb.DuckDBPyConnection, year: int) -> pd.DataFrame:
    long = con.execute(
        "SELECT division_nm, attribute, value FROM census_long WHERE year = ?", [int(year)]
    ).df()
    if long.empty:
        raise ValueError(f"No census rows for {year}")
    wide = long.pivot(index="division_nm", columns="attribute", values="value").reset_index()
    wide.columns.name = None
    wide.insert(1, "year", int(year))
    return wide


def build_division_party_votes(con: duckdb.DuckDBPyConnection) -> None:
    """
    Aggregate first preferences to (year, division, party).

    Divisions with zero total votes are dropped before any percent is taken.
    """
    con.execute("DELETE FROM division_party_votes;")
    con.execute("""
    INSERT INTO division_party_votes
    WITH t AS (
        SELECT year, division_nm, party_ab, SUM(ordinary_votes) AS votes
        FROM first_prefs
        GROUP BY year, division_nm, party_ab
    ),
    d AS (
        SELECT year, division_nm, SUM(votes) AS total
        FROM t
        GROUP BY year, division_nm
    )
    SELECT
        t.year,
        t.division_nm,
        t.party_ab,
        t.votes AS ordinary_votes,
        100.0 * t.votes::DOUBLE / d.total AS percent
    FROM t
    JOIN d ON d.year = t.year AND d.division_nm = t.division_nm
    WHERE d.total > 0;
    """)


def build_party_seats(con: duckdb.DuckDBPyConnection) -> None:
    """
    Seats per party and year.

    The AEC elected flag decides a division when present; divisions without
    an elected row fall back to the strictly highest party vote total, and
    tied or zero-vote divisions are not counted.
    """
    con.execute("DELETE FROM party_seats;")
    con.execute("""
    INSERT INTO party_seats
    WITH flagged AS (
        SELECT DISTINCT year, division_nm, party_ab
        FROM first_prefs
        WHERE elected
    ),
    votes AS (
        SELECT year, division_nm, party_ab, SUM(ordinary_votes) AS votes,
               MAX(SUM(ordinary_votes)) OVER (PARTITION BY year, division_nm) AS best
        FROM first_prefs
        GROUP BY year, division_nm, party_ab
    ),
    by_votes AS (
        SELECT year, division_nm, MIN(party_ab) AS party_ab
        FROM votes
        WHERE votes = best AND best > 0
        GROUP BY year, division_nm
        HAVING COUNT(*) = 1
    ),
    winners AS (
        SELECT year, division_nm, party_ab FROM flagged
        UNION ALL
        SELECT b.year, b.division_nm, b.party_ab
        FROM by_votes b
        WHERE NOT EXISTS (
            SELECT 1 FROM flagged f WHERE f.year = b.year AND f.division_nm = b.division_nm
        )
    )
    SELECT year, party_ab, COUNT(DISTINCT division_nm) AS seats
    FROM winners
    GROUP BY year, party_ab;
    """)
