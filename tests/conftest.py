from __future__ import annotations

from pathlib import Path

import matplotlib
import pandas as pd
import pytest

matplotlib.use("Agg")

N_DIVISIONS = 12


def _lnp_percent(i: int) -> float:
    income = 600 + 25 * i
    return round(30 + 0.03 * income + ((i * 7) % 5 - 2) * 0.3, 2)


def write_raw_snapshots(raw_dir: Path) -> Path:
    """A small 2016 election in AEC download layout plus a 2016 census table."""
    raw_dir.mkdir(parents=True, exist_ok=True)
    fp, tpp, tcp, booths, places, census = [], [], [], [], [], []

    for i in range(N_DIVISIONS):
        name = f"Division {chr(65 + i)}"
        lnp_pct = _lnp_percent(i)
        lnp_votes = int(round(lnp_pct * 1000))
        alp_votes = 100_000 - lnp_votes
        lnp_won = lnp_votes > alp_votes
        common = {"StateAb": "NSW", "DivisionID": 100 + i, "DivisionNm": name}

        fp += [
            {**common, "Surname": "LIB", "PartyAb": "LP", "PartyNm": "Liberal",
             "Elected": "Y" if lnp_won else "N", "OrdinaryVotes": int(lnp_votes * 0.8)},
            {**common, "Surname": "LAB", "PartyAb": "ALP", "PartyNm": "Australian Labor Party",
             "Elected": "N" if lnp_won else "Y", "OrdinaryVotes": int(alp_votes * 0.8)},
            {**common, "Surname": "GRN", "PartyAb": "GRN", "PartyNm": "The Greens",
             "Elected": "N", "OrdinaryVotes": 12_000},
            {**common, "Surname": "Informal", "PartyAb": None, "PartyNm": "Informal",
             "Elected": "N", "OrdinaryVotes": 3_000},
        ]
        tpp.append({
            **common,
            "Liberal/National Coalition Votes": lnp_votes,
            "Liberal/National Coalition Percentage": lnp_votes / 1000,
            "Australian Labor Party Votes": alp_votes,
            "Australian Labor Party Percentage": alp_votes / 1000,
            "TotalVotes": 100_000,
        })
        tcp += [
            {**common, "PartyAb": "LP", "Elected": "Y" if lnp_won else "N", "OrdinaryVotes": lnp_votes},
            {**common, "PartyAb": "ALP", "Elected": "N" if lnp_won else "Y", "OrdinaryVotes": alp_votes},
        ]
        for j, shift in ((1, 2.0), (2, -2.0)):
            booth_lnp = int(round((lnp_pct + shift) * 10))
            booths.append({
                **common,
                "PollingPlaceID": i * 10 + j,
                "PollingPlace": f"{name} Booth {j}",
                "Liberal/National Coalition Votes": booth_lnp,
                "Liberal/National Coalition Percentage": booth_lnp / 10,
                "Australian Labor Party Votes": 1000 - booth_lnp,
                "Australian Labor Party Percentage": (1000 - booth_lnp) / 10,
                "TotalVotes": 1000,
            })
            places.append({
                "State": "NSW", "DivisionID": 100 + i, "DivisionNm": name,
                "PollingPlaceID": i * 10 + j, "PollingPlaceNm": f"{name} Booth {j}",
                "Latitude": -33.0 - 0.1 * i, "Longitude": 150.0 + 0.05 * j,
            })
        census.append({
            "DivisionNm": name,
            "State": "NSW",
            "Population": 100_000 + ((i * 37) % 11) * 1000,
            "MedianPersonalIncome": 600 + 25 * i,
            "Unemployed": 4 + ((i * 3) % 7) * 0.5,
            "Age00_04": 6.0 + 0.1 * i,
            "BornElsewhereNS": 1.5,
        })

    pd.DataFrame(fp).to_csv(raw_dir / "fp16.csv", index=False)
    pd.DataFrame(tpp).to_csv(raw_dir / "tpp16.csv", index=False)
    pd.DataFrame(tcp).to_csv(raw_dir / "tcp16.csv", index=False)
    pd.DataFrame(booths).to_csv(raw_dir / "tpp_pp16.csv", index=False)
    pd.DataFrame(places).to_csv(raw_dir / "polling_places16.csv", index=False)
    pd.DataFrame(census).to_csv(raw_dir / "abs16.csv", index=False)
    return raw_dir


@pytest.fixture
def raw_dir(tmp_path: Path) -> Path:
    return write_raw_snapshots(tmp_path / "raw")
