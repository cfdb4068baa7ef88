from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

# Election-side columns that must never enter the design matrix
ELECTION_COLUMNS: Tuple[str, ...] = (
    "lnp_votes", "alp_votes", "lnp_percent", "alp_percent", "total_votes", "swing",
    "winner_percent", "runner_up_percent", "margin_percent", "margin_votes",
    "ordinary_votes", "percent", "division_id", "polling_place_id", "latitude", "longitude",
)

@dataclass(frozen=True)
class ModelParams:
    response: str = "lnp_percent"
    # Census "not stated" marker columns end in _ns
    exclude_suffixes: Tuple[str, ...] = ("_ns",)
    exclude_age_brackets: bool = True
    exclude_columns: Tuple[str, ...] = ELECTION_COLUMNS
    standardize: bool = False
    alpha: float = 0.05
    drop_intercept_in_report: bool = True
