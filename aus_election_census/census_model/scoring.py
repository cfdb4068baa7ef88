import pandas as pd
import statsmodels.api as sm
from loguru import logger
from typing import Dict, Tuple

from .config import ModelParams
from .features import build_design

def fit_ols(df: pd.DataFrame, params: ModelParams = ModelParams()) -> Tuple[pd.DataFrame, object]:
    """
    OLS of the response on census predictors.

    Returns the coefficient table (term, estimate, std_error, t_value,
    p_value, conf_low, conf_high) and the fitted statsmodels results.
    """
    y, X = build_design(df, params)
    fit = sm.OLS(y, sm.add_constant(X, has_constant="add")).fit()
    ci = fit.conf_int(alpha=params.alpha)

    coefs = pd.DataFrame({
        "term": fit.params.index,
        "estimate": fit.params.values,
        "std_error": fit.bse.values,
        "t_value": fit.tvalues.values,
        "p_value": fit.pvalues.values,
        "conf_low": ci[0].values,
        "conf_high": ci[1].values,
    })
    logger.info(f"OLS {params.response} ~ {X.shape[1]} predictors, n={int(fit.nobs)}, R2={fit.rsquared:.3f}")
    return coefs, fit

def significant(coefs: pd.DataFrame, alpha: float = 0.05, drop_intercept: bool = True) -> pd.DataFrame:
    out = coefs.loc[coefs["p_value"] < alpha]
    if drop_intercept:
        out = out.loc[out["term"] != "const"]
    return out.sort_values("p_value").reset_index(drop=True)

def fit_stats(fit, params: ModelParams) -> Dict[str, object]:
    return {
        "response": params.response,
        "n_obs": int(fit.nobs),
        "r_squared": float(fit.rsquared),
        "adj_r_squared": float(fit.rsquared_adj),
        "aic": float(fit.aic),
        "standardized": params.standardize,
        "predictors": [t for t in fit.params.index if t != "const"],
    }
