"""
Cohort selection: MD-credentialed providers in the target states.
"""

from typing import Iterable, Optional

import pandas as pd

from .config import DEFAULT_TARGET_STATES, N_TARGET_STATES
from .credentials import (
    CredentialNormalizer,
    get_credential_normalizer,
    has_md_token,
    is_do_only,
)


def check_target_states(target_states: list[str]) -> None:
    """Raise ValueError unless exactly two distinct states are given."""
    if len(set(target_states)) != N_TARGET_STATES:
        raise ValueError(
            f"Expected exactly {N_TARGET_STATES} target states, got {len(set(target_states))}: "
            f"{', '.join(target_states)}"
        )


def add_normalized_credentials(
    df: pd.DataFrame,
    normalizer: Optional[CredentialNormalizer] = None,
) -> pd.DataFrame:
    """Return a copy of df with a credentials_normalized column."""
    normalizer = normalizer or get_credential_normalizer()
    result = df.copy()
    result["credentials_normalized"] = result["credentials"].map(normalizer.normalize)
    return result


def filter_cohort(
    panel: pd.DataFrame,
    target_states: Iterable[str] = DEFAULT_TARGET_STATES,
    normalizer: Optional[CredentialNormalizer] = None,
) -> pd.DataFrame:
    """
    Select the analysis cohort from the balanced panel.

    Keeps rows whose normalized credential contains MD as a whole word and
    whose state is one of target_states. Rows credentialed DO only are
    excluded by the MD test.

    Args:
        panel: Balanced panel from filter_balanced_panel()
        target_states: State abbreviations to keep
        normalizer: Credential normalizer (default rules if None)

    Returns:
        New DataFrame with a credentials_normalized column added
    """
    target_states = list(target_states)
    check_target_states(target_states)
    df = add_normalized_credentials(panel, normalizer)

    md_mask = df["credentials_normalized"].map(has_md_token).astype(bool)
    state_mask = df["state"].isin(target_states)

    cohort = df[md_mask & state_mask].reset_index(drop=True)
    print(
        f"  Cohort: {len(cohort):,} rows, {cohort['npi'].nunique():,} providers "
        f"in {', '.join(target_states)}"
    )

    return cohort


def get_cohort_stats(
    panel: pd.DataFrame,
    cohort: pd.DataFrame,
    target_states: Iterable[str] = DEFAULT_TARGET_STATES,
    normalizer: Optional[CredentialNormalizer] = None,
) -> dict:
    """
    Summarize the effect of the cohort filter.

    Returns:
        Dictionary with cohort sizes, rows per state, and the number of
        in-state panel rows dropped for carrying DO without MD
    """
    target_states = list(target_states)
    in_states = add_normalized_credentials(panel[panel["state"].isin(target_states)], normalizer)
    n_do_only = int(in_states["credentials_normalized"].map(is_do_only).astype(bool).sum())

    return {
        "n_rows": len(cohort),
        "n_providers": cohort["npi"].nunique(),
        "rows_by_state": {s: int((cohort["state"] == s).sum()) for s in target_states},
        "n_panel_rows_in_states": len(in_states),
        "n_do_only_excluded": n_do_only,
    }
