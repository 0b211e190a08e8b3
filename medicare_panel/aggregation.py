"""
Descriptive statistics over the analysis cohort.

Charge summaries by state and year, and specialty shares by state.
"""

import pandas as pd

from .config import DEFAULT_TOP_SPECIALTIES


def summarize_charges(cohort: pd.DataFrame) -> pd.DataFrame:
    """
    Compute mean and standard deviation of charges by state and year.

    Missing values are skipped per statistic, so a row missing its allowed
    amount still counts toward the submitted-charge statistics. The
    standard deviation is the sample SD (ddof=1).

    Args:
        cohort: Cohort-filtered table

    Returns:
        DataFrame with state, year, n, submitted_mean, submitted_sd,
        allowed_mean, allowed_sd (one row per non-empty group)
    """
    grouped = cohort.groupby(["state", "year"])
    summary = grouped.agg(
        n=("npi", "size"),
        submitted_mean=("submitted_charge", "mean"),
        submitted_sd=("submitted_charge", "std"),
        allowed_mean=("allowed_amount", "mean"),
        allowed_sd=("allowed_amount", "std"),
    ).reset_index()

    return summary.sort_values(["state", "year"]).reset_index(drop=True)


def top_specialties(cohort: pd.DataFrame, k: int = DEFAULT_TOP_SPECIALTIES) -> list[str]:
    """
    Return the k most frequent specialty labels in the cohort.

    Ties keep the order in which the labels first appear in the table.
    """
    counts = cohort.groupby("specialty", sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable")
    return counts.head(k).index.tolist()


def summarize_specialties(
    cohort: pd.DataFrame,
    k: int = DEFAULT_TOP_SPECIALTIES,
) -> pd.DataFrame:
    """
    Compute each state's specialty mix across the top-k specialties.

    Percentages are relative to the state's total over the top-k
    specialties only, rounded to one decimal place.

    Args:
        cohort: Cohort-filtered table
        k: Number of specialties to keep

    Returns:
        DataFrame with state, specialty, count, percent
    """
    labels = top_specialties(cohort, k)
    restricted = cohort[cohort["specialty"].isin(labels)]

    counts = restricted.groupby(["state", "specialty"]).size().reset_index(name="count")
    state_totals = counts.groupby("state")["count"].transform("sum")
    counts["percent"] = (100 * counts["count"] / state_totals).round(1)

    # Order specialties by overall frequency within each state
    rank = {label: i for i, label in enumerate(labels)}
    counts["_rank"] = counts["specialty"].map(rank)
    counts = counts.sort_values(["state", "_rank"]).drop(columns="_rank")

    return counts.reset_index(drop=True)
