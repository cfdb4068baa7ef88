"""Tests for maps and charts; figures are rendered off-screen."""

from __future__ import annotations

from pathlib import Path

import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd
import pytest
from shapely.geometry import box

from aus_election_census.config import PARTY_COLOURS
from pipelines.analysis.plots import (
    party_colour,
    plot_coefficients,
    plot_electorate_choropleth,
    plot_polling_places,
    plot_scatter_matrix,
    plot_seat_counts,
    points_frame,
)


def _booths() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "polling_place_id": [1, 2, 3, 4],
            "winner": ["ALP", "LNP", None, "LNP"],
            "lnp_percent": [42.0, 58.0, 50.0, 61.0],
            "latitude": [-34.9, -34.95, -35.0, None],
            "longitude": [138.6, 138.61, 138.62, None],
        }
    )


def _boundaries() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        {"Elect_div": ["Adelaide", "Boothby", "Sturt"]},
        geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1)],
        crs="EPSG:4326",
    )


def test_party_colour_falls_back_to_other() -> None:
    assert party_colour("ALP") == PARTY_COLOURS["ALP"]
    assert party_colour("ONP") == PARTY_COLOURS["OTHER"]
    assert party_colour(None) == PARTY_COLOURS["OTHER"]


def test_points_frame_skips_booths_without_coordinates() -> None:
    gdf = points_frame(_booths())
    assert len(gdf) == 3
    assert gdf.crs.to_epsg() == 4326
    assert gdf.geometry.iloc[0].x == pytest.approx(138.6)


def test_polling_place_map_has_party_legend(tmp_path: Path) -> None:
    fig = plot_polling_places(_booths(), colour_by="winner", title="Booths")
    labels = [t.get_text() for t in fig.axes[0].get_legend().get_texts()]
    assert labels == ["ALP", "LNP", "OTHER"]
    plt.close(fig)

    out = tmp_path / "figs" / "booths.png"
    plot_polling_places(_booths(), colour_by="lnp_percent", fname=out)
    assert out.exists()


def test_choropleth_by_winner_and_by_share(tmp_path: Path) -> None:
    table = pd.DataFrame({"division_nm": ["ADELAIDE", "BOOTHBY"], "winner": ["ALP", "LNP"],
                          "lnp_percent": [41.2, 51.4]})

    out = tmp_path / "winner.png"
    plot_electorate_choropleth(_boundaries(), table, "winner", title="Winner", fname=out)
    assert out.exists()

    # Sturt has no row in the table and is drawn hatched
    out = tmp_path / "share.png"
    plot_electorate_choropleth(_boundaries(), table, "lnp_percent", fname=out)
    assert out.exists()


def test_choropleth_by_winner_hatches_electorates_without_results() -> None:
    table = pd.DataFrame({"division_nm": ["ADELAIDE", "BOOTHBY"], "winner": ["ALP", "LNP"]})

    fig = plot_electorate_choropleth(_boundaries(), table, "winner")
    polygons = fig.axes[0].collections

    assert len(polygons) == 2
    assert polygons[0].get_hatch() is None
    assert polygons[-1].get_hatch() == "///"
    assert len(polygons[-1].get_paths()) == 1
    plt.close(fig)


def test_choropleth_errors() -> None:
    table = pd.DataFrame({"division_nm": ["ADELAIDE"], "winner": ["ALP"]})
    with pytest.raises(ValueError, match="Column not found"):
        plot_electorate_choropleth(_boundaries(), table, "margin_percent")

    unnamed = _boundaries().rename(columns={"Elect_div": "name"})
    with pytest.raises(ValueError, match="division name column"):
        plot_electorate_choropleth(unnamed, table, "winner")


def test_scatter_matrix(tmp_path: Path) -> None:
    df = pd.DataFrame({"lnp_percent": [40.0, 50.0, 60.0, 55.0], "income": [1.0, 2.0, 3.0, 2.5]})
    out = tmp_path / "scatter.png"
    plot_scatter_matrix(df, ["lnp_percent", "income"], fname=out)
    assert out.exists()

    with pytest.raises(ValueError, match="not found"):
        plot_scatter_matrix(df, ["lnp_percent", "unemployed"])


def test_coefficient_chart_omits_intercept() -> None:
    coefs = pd.DataFrame(
        {
            "term": ["const", "income", "unemployed"],
            "estimate": [40.0, 2.9, -0.4],
            "conf_low": [38.0, 2.5, -1.1],
            "conf_high": [42.0, 3.3, 0.3],
        }
    )
    fig = plot_coefficients(coefs, title="OLS")
    labels = [t.get_text() for t in fig.axes[0].get_yticklabels()]
    assert labels == ["unemployed", "income"]
    plt.close(fig)


def test_seat_counts_sums_over_years(tmp_path: Path) -> None:
    seats = pd.DataFrame({"year": [2013, 2016, 2016], "party_ab": ["LNP", "LNP", "ALP"], "seats": [90, 76, 69]})
    fig = plot_seat_counts(seats)
    heights = [p.get_height() for p in fig.axes[0].patches]
    assert heights == [166, 69]
    plt.close(fig)
