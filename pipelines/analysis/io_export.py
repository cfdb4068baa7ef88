from __future__ import annotations

from pathlib import Path
import duckdb
from loguru import logger

from .db import table_names

# Warehouse tables written by the export stage, in load order
OUTPUT_TABLES = [
    "first_prefs",
    "two_party",
    "two_party_booths",
    "two_candidate",
    "census_long",
    "division_party_votes",
    "party_seats",
]

COPY_OPTIONS = {
    "parquet": "(FORMAT PARQUET)",
    "csv": "(HEADER, DELIMITER ',', QUOTE '\"', ESCAPE '\"')",
}


def export_table(con: duckdb.DuckDBPyConnection, table: str, out_dir: Path, fmt: str) -> Path:
    if fmt not in COPY_OPTIONS:
        raise ValueError(f"Unknown export format: {fmt}")
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{table}.{fmt}"
    con.execute(f"COPY (SELECT * FROM {table} ORDER BY ALL) TO '{out_path.as_posix()}' {COPY_OPTIONS[fmt]};")
    return out_path


def export_outputs(con: duckdb.DuckDBPyConnection, out_dir: str | Path, fmt: str = "parquet") -> list[Path]:
    """Copy every non-empty warehouse table to out_dir/{table}.{fmt}."""
    out = Path(out_dir)
    existing = table_names(con)

    written = []
    for t in OUTPUT_TABLES:
        if t not in existing:
            logger.debug(f"[export] {t} not built; skipped")
            continue
        if con.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0] == 0:
            continue
        fp = export_table(con, t, out, fmt)
        logger.info(f"[export] {t} -> {fp}")
        written.append(fp)

    if not written:
        logger.warning("[export] No output tables were exported (tables missing or empty).")
    return written
