import pandas as pd
from loguru import logger
from typing import List, Tuple

from pipelines.data.census import ID_COLUMNS, is_age_bracket
from .config import ModelParams

def select_predictors(df: pd.DataFrame, params: ModelParams) -> List[str]:
    """Numeric columns of the joined table minus ids, the response, election columns, not-stated and age brackets."""
    drop = set(ID_COLUMNS) | set(params.exclude_columns) | {params.response}
    out = []
    for c in df.columns:
        if c in drop or not pd.api.types.is_numeric_dtype(df[c]):
            continue
        if pd.api.types.is_bool_dtype(df[c]):
            continue
        if any(c.endswith(s) for s in params.exclude_suffixes):
            continue
        if params.exclude_age_brackets and is_age_bracket(c):
            continue
        out.append(c)
    return out

def zscore(X: pd.DataFrame) -> pd.DataFrame:
    sd = X.std(ddof=0)
    constant = sd == 0
    if constant.any():
        logger.warning(f"Dropping constant predictors: {X.columns[constant].tolist()}")
        X = X.loc[:, ~constant]
        sd = sd[~constant]
    return (X - X.mean()) / sd

def build_design(df: pd.DataFrame, params: ModelParams) -> Tuple[pd.Series, pd.DataFrame]:
    if params.response not in df.columns:
        raise ValueError(f"Response column not found: {params.response}")
    predictors = select_predictors(df, params)
    if not predictors:
        raise ValueError("No numeric predictors left after exclusions.")

    data = df[[params.response] + predictors].apply(pd.to_numeric, errors="coerce").astype(float)
    complete = data.dropna()
    if len(complete) < len(data):
        logger.warning(f"Dropped {len(data) - len(complete)} rows with missing response/predictors")
    if len(complete) <= len(predictors) + 1:
        raise ValueError(
            f"Not enough complete rows ({len(complete)}) for {len(predictors)} predictors plus intercept."
        )

    y = complete[params.response]
    X = complete[predictors]
    if params.standardize:
        X = zscore(X)
    return y, X
