from __future__ import annotations
import duckdb

def create_schema(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("""
    CREATE TABLE IF NOT EXISTS first_prefs (
        year INTEGER,
        state_ab TEXT,
        division_nm TEXT,
        party_ab TEXT,
        party_nm TEXT,
        ordinary_votes BIGINT,
        elected BOOLEAN
    );
    """)

    con.execute("""
    CREATE TABLE IF NOT EXISTS two_party (
        year INTEGER,
        state_ab TEXT,
        division_nm TEXT,
        lnp_votes BIGINT,
        alp_votes BIGINT,
        lnp_percent DOUBLE,
        alp_percent DOUBLE,
        total_votes BIGINT,
        PRIMARY KEY (year, division_nm)
    );
    """)

    con.execute("""
    CREATE TABLE IF NOT EXISTS two_party_booths (
        year INTEGER,
        state_ab TEXT,
        division_nm TEXT,
        polling_place_id BIGINT,
        polling_place TEXT,
        lnp_percent DOUBLE,
        alp_percent DOUBLE,
        total_votes BIGINT,
        latitude DOUBLE,
        longitude DOUBLE,
        PRIMARY KEY (year, polling_place_id)
    );
    """)

    con.execute("""
    CREATE TABLE IF NOT EXISTS two_candidate (
        year INTEGER,
        state_ab TEXT,
        division_nm TEXT,
        party_ab TEXT,
        ordinary_votes BIGINT,
        elected BOOLEAN
    );
    """)

    con.execute("""
    CREATE TABLE IF NOT EXISTS division_party_votes (
        year INTEGER,
        division_nm TEXT,
        party_ab TEXT,
        ordinary_votes BIGINT,
        percent DOUBLE,
        PRIMARY KEY (year, division_nm, party_ab)
    );
    """)

    con.execute("""
    CREATE TABLE IF NOT EXISTS party_seats (
        year INTEGER,
        party_ab TEXT,
        seats BIGINT,
        PRIMARY KEY (year, party_ab)
    );
    """)

TABLE_COLUMNS = {
    "first_prefs": ["year", "state_ab", "division_nm", "party_ab", "party_nm", "ordinary_votes", "elected"],
    "two_party": ["year", "state_ab", "division_nm", "lnp_votes", "alp_votes", "lnp_percent", "alp_percent",
                  "total_votes"],
    "two_party_booths": ["year", "state_ab", "division_nm", "polling_place_id", "polling_place", "lnp_percent",
                         "alp_percent", "total_votes", "latitude", "longitude"],
    "two_candidate": ["year", "state_ab", "division_nm", "party_ab", "ordinary_votes", "elected"],
}
