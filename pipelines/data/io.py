#!/usr/bin/env python3
from __future__ import annotations
import re
from pathlib import Path
import pandas as pd

import geopandas as gpd

SUPPORTED_GEO = (".shp", ".gpkg", ".geojson", ".json")

def mkdir_p(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def snake(name: str) -> str:
    """CamelCase / spaced AEC and ABS headers -> snake_case (DivisionNm -> division_nm)."""
    s = str(name).strip()
    s = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", s)
    s = re.sub(r"(?<=[A-Z])(?=[A-Z][a-z])", "_", s)
    s = re.sub(r"[^\w]+", "_", s.lower())
    return re.sub(r"_{2,}", "_", s).strip("_")

def stdcols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [snake(c) for c in df.columns]
    return df

def read_any(path: Path, **kwargs):
    ext = path.suffix.lower()
    if ext in (".parquet", ".pq"):
        return pd.read_parquet(path)
    if ext == ".feather":
        return pd.read_feather(path)
    if ext in (".csv", ".tsv"):
        sep = "\t" if ext == ".tsv" else ","
        return pd.read_csv(path, sep=sep, **kwargs)
    if ext in SUPPORTED_GEO:
        return gpd.read_file(path)
    raise ValueError(f"Unsupported input file type: {path}")

def require_columns(df: pd.DataFrame, required, name: str) -> None:
    missing = sorted(set(required) - set(df.columns))
    if missing:
        raise ValueError(f"{name} missing required columns: {missing}")

def write_parquet(df: pd.DataFrame, path: Path) -> None:
    mkdir_p(path.parent)
    df.to_parquet(path, engine="pyarrow", index=False)
