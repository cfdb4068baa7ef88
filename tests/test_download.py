"""Tests for AEC download URLs, snapshot discovery and snapshot loading."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from aus_election_census.config import AEC_BASE_URL, STATES
from pipelines.data import download
from pipelines.data.download import aec_url, download_snapshot, fetch_aec_table, load_snapshot, snapshot_path


def test_aec_url_uses_event_id_and_state() -> None:
    assert aec_url("tpp", 2016) == f"{AEC_BASE_URL}/20499/Website/Downloads/HouseTppByDivisionDownload-20499.csv"
    assert aec_url("fp_pp", 2013, "vic") == (
        f"{AEC_BASE_URL}/17496/Website/Downloads/HouseStateFirstPrefsByPollingPlaceDownload-17496-VIC.csv"
    )
    assert "/12246/" in aec_url("polling_places", 2004)


def test_aec_url_rejects_unavailable_inputs() -> None:
    with pytest.raises(ValueError, match="No AEC results download for 2001"):
        aec_url("fp", 2001)
    with pytest.raises(ValueError, match="Unknown AEC dataset kind"):
        aec_url("senate", 2016)
    with pytest.raises(ValueError, match="per state"):
        aec_url("fp_pp", 2016)


def _fake_read_csv(calls: list):
    def fake(url, skiprows=None, **kwargs):
        calls.append((url, skiprows))
        return pd.DataFrame({"DivisionNm": ["Adelaide"], "OrdinaryVotes": [1]})

    return fake


def test_fetch_aec_table_skips_banner_row(monkeypatch) -> None:
    calls: list = []
    monkeypatch.setattr(download.pd, "read_csv", _fake_read_csv(calls))

    df = fetch_aec_table("tcp", 2010)

    assert len(df) == 1
    assert calls == [(aec_url("tcp", 2010), 1)]


def test_fetch_first_prefs_by_polling_place_concatenates_states(monkeypatch) -> None:
    calls: list = []
    monkeypatch.setattr(download.pd, "read_csv", _fake_read_csv(calls))

    df = fetch_aec_table("fp_pp", 2007)

    assert len(df) == len(STATES)
    assert [url for url, _ in calls] == [aec_url("fp_pp", 2007, s) for s in STATES]


def test_download_snapshot_writes_csv(monkeypatch, tmp_path: Path) -> None:
    calls: list = []
    monkeypatch.setattr(download.pd, "read_csv", _fake_read_csv(calls))

    written = download_snapshot(["tpp"], [2013], tmp_path)

    assert written == [tmp_path / "tpp13.csv"]
    assert written[0].exists()


def test_snapshot_path_prefers_parquet_and_reports_missing(tmp_path: Path) -> None:
    (tmp_path / "tpp16.csv").write_text("DivisionNm\nAdelaide\n")
    assert snapshot_path("tpp", 2016, tmp_path).name == "tpp16.csv"

    pd.DataFrame({"DivisionNm": ["Adelaide"]}).to_parquet(tmp_path / "tpp16.parquet", index=False)
    assert snapshot_path("tpp", 2016, tmp_path).name == "tpp16.parquet"

    with pytest.raises(FileNotFoundError, match="fp04"):
        snapshot_path("fp", 2004, tmp_path)


def test_load_snapshot_cleans_aec_two_party_file(tmp_path: Path) -> None:
    pd.DataFrame(
        {
            "DivisionID": [179, 180],
            "DivisionNm": ["Adelaide", "Barker"],
            "StateAb": ["SA", "SA"],
            "Liberal/National Coalition Votes": [41000, 62000],
            "Liberal/National Coalition Percentage": [41.0, 62.0],
            "Australian Labor Party Votes": [59000, 38000],
            "Australian Labor Party Percentage": [59.0, 38.0],
            "TotalVotes": [100000, 100000],
            "Swing": [-1.2, 0.4],
        }
    ).to_csv(tmp_path / "tpp16.csv", index=False)

    tpp = load_snapshot("tpp", 2016, tmp_path)

    assert tpp["division_nm"].tolist() == ["ADELAIDE", "BARKER"]
    assert tpp["lnp_percent"].tolist() == [41.0, 62.0]
    assert tpp["alp_votes"].tolist() == [59000, 38000]
    assert (tpp["year"] == 2016).all()

    raw = load_snapshot("tpp", 2016, tmp_path, clean=False)
    assert "DivisionNm" in raw.columns


def test_load_snapshot_rejects_unknown_kind(tmp_path: Path) -> None:
    (tmp_path / "senate16.csv").write_text("DivisionNm\nAdelaide\n")
    with pytest.raises(ValueError, match="Unknown snapshot kind"):
        load_snapshot("senate", 2016, tmp_path)
