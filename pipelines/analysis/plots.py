from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger

from aus_election_census.config import PARTY_COLOURS
from pipelines.data.io import mkdir_p, stdcols
from pipelines.data.keys import normalize_division

MISSING_STYLE = {"color": "#f8f8f8", "edgecolor": "#cccccc", "hatch": "///", "linewidth": 0.25}


def party_colour(party) -> str:
    if not isinstance(party, str):
        return PARTY_COLOURS["OTHER"]
    return PARTY_COLOURS.get(party, PARTY_COLOURS["OTHER"])


def save_figure(fig, fname: Optional[Path], dpi: int = 150) -> None:
    if fname is None:
        return
    fname = Path(fname)
    mkdir_p(fname.parent)
    fig.savefig(fname, bbox_inches="tight", dpi=dpi, facecolor="white", edgecolor="none")
    plt.close(fig)
    logger.info(f"Figure saved: {fname}")


def _new_axes(ax, figsize):
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return fig, ax
    return ax.figure, ax


def points_frame(pp: pd.DataFrame) -> gpd.GeoDataFrame:
    """Polling places with coordinates as a WGS84 point GeoDataFrame; booths without coordinates are skipped."""
    located = pp.dropna(subset=["longitude", "latitude"])
    if len(located) < len(pp):
        logger.warning(f"{len(pp) - len(located)} polling places have no coordinates and are not drawn")
    return gpd.GeoDataFrame(
        located,
        geometry=gpd.points_from_xy(located["longitude"], located["latitude"]),
        crs="EPSG:4326",
    )


def plot_polling_places(
    pp: pd.DataFrame,
    colour_by: str = "winner",
    title: str = "",
    ax=None,
    fname: Optional[Path] = None,
    markersize: float = 4,
):
    """Point map of booths coloured by party (categorical) or by a numeric column."""
    gdf = points_frame(pp)
    fig, ax = _new_axes(ax, (9, 8))

    if colour_by in gdf.columns and pd.api.types.is_numeric_dtype(gdf[colour_by]):
        gdf.plot(column=colour_by, cmap="RdBu_r", markersize=markersize, legend=True, ax=ax)
    else:
        labels = gdf[colour_by].astype("object") if colour_by in gdf.columns else pd.Series("OTHER", index=gdf.index)
        for party, sub in gdf.groupby(labels.fillna("OTHER"), sort=True):
            sub.plot(ax=ax, color=party_colour(party), markersize=markersize, label=str(party))
        if len(gdf):
            ax.legend(title=colour_by, loc="lower left", fontsize=8, markerscale=2)

    ax.set_aspect("equal")
    ax.set_axis_off()
    if title:
        ax.set_title(title, loc="left", fontweight="bold")
    save_figure(fig, fname)
    return fig


def plot_electorate_choropleth(
    boundaries: gpd.GeoDataFrame,
    table: pd.DataFrame,
    column: str,
    key: str = "division_nm",
    title: str = "",
    ax=None,
    fname: Optional[Path] = None,
):
    """
    Choropleth of an electorate-level table drawn on boundary polygons.

    Text columns (e.g. winner) use the party palette; numeric columns use a
    sequential colour map. Electorates absent from `table` are hatched.
    """
    b = stdcols(boundaries)
    for alias in ("division_nm", "elect_div", "ced_name", "division"):
        if alias in b.columns:
            b = b.rename(columns={alias: key})
            break
    else:
        raise ValueError("Boundary file lacks a division name column (Elect_div / CED_NAME / DivisionNm).")
    b[key] = normalize_division(b[key])
    if column not in table.columns:
        raise ValueError(f"Column not found in table: {column}")

    gdf = b.merge(table[[key, column]], on=key, how="left", validate="one_to_one")
    fig, ax = _new_axes(ax, (10, 9))

    if pd.api.types.is_numeric_dtype(gdf[column]):
        gdf.plot(column=column, cmap="viridis", linewidth=0.25, edgecolor="#444444", ax=ax,
                 legend=True, missing_kwds=MISSING_STYLE)
    else:
        missing = gdf[column].isna()
        known = gdf.loc[~missing]
        if len(known):
            known.plot(color=known[column].map(party_colour), linewidth=0.25, edgecolor="#444444", ax=ax)
        if missing.any():
            gdf.loc[missing].plot(ax=ax, **MISSING_STYLE)

    ax.set_axis_off()
    if title:
        ax.set_title(title, loc="left", fontweight="bold")
    save_figure(fig, fname)
    return fig


def plot_scatter_matrix(df: pd.DataFrame, columns: Sequence[str], fname: Optional[Path] = None):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"scatter matrix columns not found: {missing}")
    axes = pd.plotting.scatter_matrix(df[list(columns)], figsize=(2.2 * len(columns), 2.2 * len(columns)),
                                      alpha=0.5, diagonal="hist")
    fig = axes[0, 0].figure
    save_figure(fig, fname)
    return fig


def plot_coefficients(coefs: pd.DataFrame, title: str = "", fname: Optional[Path] = None):
    """Point-range chart: estimate with confidence interval per term, intercept omitted."""
    c = coefs.loc[coefs["term"] != "const"].sort_values("estimate").reset_index(drop=True)
    fig, ax = plt.subplots(figsize=(7, 0.35 * max(len(c), 1) + 1.5))
    ax.errorbar(
        c["estimate"],
        range(len(c)),
        xerr=[c["estimate"] - c["conf_low"], c["conf_high"] - c["estimate"]],
        fmt="o",
        color="#333333",
        ecolor="#888888",
        capsize=2,
    )
    ax.axvline(0, color="#cc0000", linewidth=0.8, linestyle="--")
    ax.set_yticks(range(len(c)))
    ax.set_yticklabels(c["term"])
    ax.set_xlabel("estimate")
    if title:
        ax.set_title(title, loc="left", fontweight="bold")
    save_figure(fig, fname)
    return fig


def plot_seat_counts(seats: pd.DataFrame, title: str = "", fname: Optional[Path] = None):
    s = seats.groupby("party_ab", as_index=False)["seats"].sum().sort_values("seats", ascending=False)
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.bar(s["party_ab"], s["seats"], color=[party_colour(p) for p in s["party_ab"]])
    ax.set_ylabel("seats")
    if title:
        ax.set_title(title, loc="left", fontweight="bold")
    save_figure(fig, fname)
    return fig
