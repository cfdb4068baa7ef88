from __future__ import annotations
from pathlib import Path
import duckdb

def connect_db(db_path: str | Path, threads: int = 1) -> duckdb.DuckDBPyConnection:
    """Open (creating if needed) the election warehouse; ':memory:' gives a throwaway database."""
    db_path = str(db_path)
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    con = duckdb.connect(db_path)
    con.execute(f"PRAGMA threads={int(threads)};")
    return con

def table_names(con: duckdb.DuckDBPyConnection) -> set[str]:
    rows = con.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
    ).fetchall()
    return {r[0] for r in rows}
