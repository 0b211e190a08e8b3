"""
Cross-year correlation between submitted charges and allowed amounts.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import stats


@dataclass
class CorrelationResult:
    """Pearson correlation with the sample it was computed on."""

    r: float
    p_value: float
    n_pairs: int
    n_joined: int
    first_year: int
    second_year: int


def join_cross_year(
    cohort: pd.DataFrame,
    first_year: int,
    second_year: int,
) -> pd.DataFrame:
    """
    Pair each provider's first-year submitted charge with their
    second-year allowed amount.

    Returns:
        DataFrame with npi, submitted_first, allowed_second (inner join)
    """
    submitted = cohort.loc[cohort["year"] == first_year, ["npi", "submitted_charge"]]
    allowed = cohort.loc[cohort["year"] == second_year, ["npi", "allowed_amount"]]

    joined = submitted.merge(allowed, on="npi", how="inner")
    return joined.rename(columns={
        "submitted_charge": "submitted_first",
        "allowed_amount": "allowed_second",
    })


def correlate_submitted_allowed(
    cohort: pd.DataFrame,
    first_year: int,
    second_year: int,
) -> CorrelationResult:
    """
    Pearson correlation of first-year submitted vs second-year allowed.

    Pairs missing either value are excluded; other missing fields do not
    matter. With fewer than two complete pairs r and p are NaN.

    Args:
        cohort: Cohort-filtered table
        first_year: Year supplying submitted charges
        second_year: Year supplying allowed amounts

    Returns:
        CorrelationResult
    """
    joined = join_cross_year(cohort, first_year, second_year)
    complete = joined.dropna(subset=["submitted_first", "allowed_second"])

    n = len(complete)
    if n < 2:
        r, p = np.nan, np.nan
    else:
        r, p = stats.pearsonr(
            complete["submitted_first"].to_numpy(dtype=float),
            complete["allowed_second"].to_numpy(dtype=float),
        )

    return CorrelationResult(
        r=float(r),
        p_value=float(p),
        n_pairs=n,
        n_joined=len(joined),
        first_year=first_year,
        second_year=second_year,
    )
