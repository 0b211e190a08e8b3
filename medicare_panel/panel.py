"""
Balanced provider panel construction.

Keeps providers observed exactly once in each of the two data years.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)


def find_duplicate_provider_years(df: pd.DataFrame) -> pd.DataFrame:
    """
    Find (npi, year) pairs that occur more than once.

    Args:
        df: Combined table with npi and year columns

    Returns:
        DataFrame with npi, year, n_rows for every duplicated pair
    """
    counts = df.groupby(["npi", "year"]).size().reset_index(name="n_rows")
    return counts[counts["n_rows"] > 1].reset_index(drop=True)


def filter_balanced_panel(df: pd.DataFrame) -> pd.DataFrame:
    """
    Retain only providers with exactly one row in each of two years.

    A provider counts as balanced when it has exactly two rows and those
    rows carry two distinct years. Two rows from the same year (a duplicate
    record) do not make a provider balanced.

    Args:
        df: Combined table from load_panel_sources()

    Returns:
        New DataFrame with the balanced providers' rows
    """
    per_provider = df.groupby("npi").agg(
        n_rows=("year", "size"),
        n_years=("year", "nunique"),
    )
    balanced = per_provider[(per_provider["n_rows"] == 2) & (per_provider["n_years"] == 2)].index

    same_year_pairs = per_provider[(per_provider["n_rows"] == 2) & (per_provider["n_years"] < 2)]
    if len(same_year_pairs) > 0:
        logger.warning(
            f"Dropped {len(same_year_pairs):,} providers whose two rows share one year"
        )

    n_other = len(per_provider) - len(balanced)
    print(f"  Balanced providers: {len(balanced):,} (dropped {n_other:,} others)")

    return df[df["npi"].isin(balanced)].reset_index(drop=True)


def get_panel_stats(combined: pd.DataFrame, panel: pd.DataFrame) -> dict:
    """
    Summarize the effect of the panel filter.

    Returns:
        Dictionary with row and provider counts before and after filtering
    """
    return {
        "n_rows_combined": len(combined),
        "n_providers_combined": combined["npi"].nunique(),
        "n_rows_panel": len(panel),
        "n_providers_panel": panel["npi"].nunique(),
        "n_duplicate_provider_years": len(find_duplicate_provider_years(combined)),
    }
