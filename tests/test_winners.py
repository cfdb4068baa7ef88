"""Tests for winners, margins and percentage derivations."""

from __future__ import annotations

import pandas as pd
import pytest

from pipelines.analysis.winners import (
    booth_winners,
    closest_divisions,
    first_pref_percent,
    tcp_margins,
    two_candidate_winner,
    two_party_winner,
)


def _tcp() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "division_nm": ["CAPRICORNIA"] * 2 + ["GRAYNDLER"] * 2 + ["EMPTY"] * 2 + ["TIED"] * 2,
            "state_ab": ["QLD"] * 2 + ["NSW"] * 2 + ["NSW"] * 2 + ["VIC"] * 2,
            "party_ab": ["ALP", "LNP", "ALP", "GRN", "ALP", "LNP", "ALP", "LNP"],
            "ordinary_votes": [42534, 42466, 60000, 30000, 0, 0, 500, 500],
        }
    )


def test_tcp_margin_matches_winner_percent_and_total_votes() -> None:
    margins = tcp_margins(_tcp()).set_index("division_nm")

    cap = margins.loc["CAPRICORNIA"]
    assert cap["winner"] == "ALP"
    assert cap["runner_up"] == "LNP"
    assert cap["winner_percent"] == pytest.approx(50.04)
    assert cap["total_votes"] == 85000
    assert cap["margin_percent"] == pytest.approx(0.08)
    assert cap["margin_votes"] == pytest.approx(68)

    gray = margins.loc["GRAYNDLER"]
    assert gray["winner"] == "ALP"
    assert gray["margin_percent"] == pytest.approx(2 * (200 / 3 - 50))


def test_zero_vote_divisions_are_excluded_not_divided() -> None:
    winners = two_candidate_winner(_tcp())
    assert "EMPTY" not in set(winners["division_nm"])
    assert winners["winner_percent"].notna().any()


def test_ties_have_no_winner() -> None:
    winners = two_candidate_winner(_tcp()).set_index("division_nm")
    assert pd.isna(winners.loc["TIED", "winner"])
    assert winners.loc["TIED", "winner_percent"] == pytest.approx(50.0)

    closest = closest_divisions(tcp_margins(_tcp()), n=5)
    assert "TIED" not in set(closest["division_nm"])
    assert closest.iloc[0]["division_nm"] == "CAPRICORNIA"


def test_published_percent_is_kept() -> None:
    tcp = pd.DataFrame(
        {
            "division_nm": ["HINDMARSH", "HINDMARSH"],
            "party_ab": ["ALP", "LNP"],
            "ordinary_votes": [49000, 51000],
            "percent": [49.02, 50.98],
        }
    )
    margins = tcp_margins(tcp)
    assert margins.loc[0, "winner"] == "LNP"
    assert margins.loc[0, "margin_percent"] == pytest.approx(1.96)


def test_two_party_winner_needs_a_majority() -> None:
    tpp = pd.DataFrame(
        {
            "division_nm": ["A", "B", "C", "D"],
            "lnp_votes": [52300, 45000, 50000, 0],
            "alp_votes": [47700, 55000, 50000, 0],
            "lnp_percent": [52.3, 45.0, 50.0, float("nan")],
            "alp_percent": [47.7, 55.0, 50.0, float("nan")],
        }
    )

    out = two_party_winner(tpp).set_index("division_nm")

    assert list(out.index) == ["A", "B", "C"]
    assert out.loc["A", "winner"] == "LNP"
    assert out.loc["B", "winner"] == "ALP"
    assert pd.isna(out.loc["C", "winner"])
    assert out.loc["B", "winner_percent"] == pytest.approx(55.0)


def test_first_pref_percent_sums_to_100_per_division() -> None:
    fp = pd.DataFrame(
        {
            "division_nm": ["A", "A", "A", "B", "B"],
            "year": [2016] * 5,
            "party_ab": ["ALP", "LNP", "GRN", "ALP", "LNP"],
            "ordinary_votes": [400, 450, 150, 0, 0],
        }
    )

    pct = first_pref_percent(fp)

    assert set(pct["division_nm"]) == {"A"}
    assert pct["percent"].sum() == pytest.approx(100.0)
    assert pct.loc[pct["party_ab"] == "LNP", "percent"].item() == pytest.approx(45.0)
    assert (pct["total_votes"] == 1000).all()


def test_booth_winners_carry_coordinates() -> None:
    pp = pd.DataFrame(
        {
            "division_nm": ["A"] * 4,
            "polling_place_id": [1, 1, 2, 2],
            "party_ab": ["ALP", "LNP", "ALP", "LNP"],
            "ordinary_votes": [300, 200, 100, 400],
            "latitude": [-35.0, -35.0, -35.1, -35.1],
            "longitude": [149.0, 149.0, 149.1, 149.1],
        }
    )

    out = booth_winners(pp).set_index("polling_place_id")

    assert out.loc[1, "winner"] == "ALP"
    assert out.loc[2, "winner"] == "LNP"
    assert out.loc[2, "winner_percent"] == pytest.approx(80.0)
    assert out.loc[2, "latitude"] == pytest.approx(-35.1)
