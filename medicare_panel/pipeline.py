"""
End-to-end report pipeline.

Each stage is a function of the previous stage's table:

    load -> balanced panel -> cohort -> {charge/specialty summaries,
                                         regression, correlation}

run_report() wires the stages together and optionally writes the report,
tables and figures.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from .aggregation import summarize_charges, summarize_specialties
from .cohort import filter_cohort, get_cohort_stats
from .config import DEFAULT_TARGET_STATES, DEFAULT_TOP_SPECIALTIES
from .correlation import CorrelationResult, correlate_submitted_allowed
from .credentials import CredentialNormalizer
from .loading import load_panel_sources
from .panel import filter_balanced_panel, get_panel_stats
from .regression import RegressionResult, fit_allowed_amount_model

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """Everything the report shows."""

    years: tuple[int, int]
    target_states: list[str]
    panel_stats: dict
    cohort_stats: dict
    cohort: pd.DataFrame = field(repr=False)
    charge_summary: pd.DataFrame = field(repr=False)
    specialty_summary: pd.DataFrame = field(repr=False)
    regression: Optional[RegressionResult]
    correlation: CorrelationResult
    plot_paths: list[Path] = field(default_factory=list)


def analyze(
    combined: pd.DataFrame,
    years: tuple[int, int],
    target_states: Iterable[str] = DEFAULT_TARGET_STATES,
    top_k: int = DEFAULT_TOP_SPECIALTIES,
    normalizer: Optional[CredentialNormalizer] = None,
) -> ReportResult:
    """
    Run every analysis stage on an already-loaded combined table.

    Args:
        combined: Stacked yearly table (see load_panel_sources())
        years: (first_year, second_year)
        target_states: State abbreviations for the cohort
        top_k: Number of specialties in the specialty summary
        normalizer: Credential normalizer (default rules if None)

    Returns:
        ReportResult
    """
    first_year, second_year = years
    target_states = list(target_states)

    print("\n--- Balanced panel ---")
    panel = filter_balanced_panel(combined)
    panel_stats = get_panel_stats(combined, panel)

    print("\n--- Cohort ---")
    cohort = filter_cohort(panel, target_states, normalizer)
    cohort_stats = get_cohort_stats(panel, cohort, target_states, normalizer)
    if cohort_stats["n_do_only_excluded"]:
        logger.warning(
            f"{cohort_stats['n_do_only_excluded']:,} in-state rows credentialed DO "
            "without MD are excluded by the MD filter"
        )

    print("\n--- Summaries ---")
    charge_summary = summarize_charges(cohort)
    specialty_summary = summarize_specialties(cohort, top_k)
    print(f"  Charge groups: {len(charge_summary)}, specialty rows: {len(specialty_summary)}")

    print("\n--- Regression ---")
    if cohort["allowed_amount"].notna().any():
        regression = fit_allowed_amount_model(cohort)
    else:
        logger.warning("Cohort has no allowed amounts; skipping regression")
        regression = None

    print("\n--- Correlation ---")
    correlation = correlate_submitted_allowed(cohort, first_year, second_year)
    print(f"  r = {correlation.r:.4f} over {correlation.n_pairs:,} pairs")

    return ReportResult(
        years=(first_year, second_year),
        target_states=target_states,
        panel_stats=panel_stats,
        cohort_stats=cohort_stats,
        cohort=cohort,
        charge_summary=charge_summary,
        specialty_summary=specialty_summary,
        regression=regression,
        correlation=correlation,
    )


def run_report(
    sources: dict[int, Path],
    target_states: Iterable[str] = DEFAULT_TARGET_STATES,
    top_k: int = DEFAULT_TOP_SPECIALTIES,
    output_dir: Optional[Path] = None,
    make_plots: bool = True,
    config: Optional[dict] = None,
) -> ReportResult:
    """
    Load both yearly extracts, run the analysis, and write the outputs.

    Args:
        sources: Mapping of data year -> CSV path (exactly two years)
        target_states: State abbreviations for the cohort
        top_k: Number of specialties in the specialty summary
        output_dir: Where to write report.md, tables/ and plots/ (None: no files)
        make_plots: Whether to render figures
        config: Report config (column mapping, credential rules)

    Returns:
        ReportResult
    """
    config = config or {}
    years = tuple(sorted(sources))

    print("--- Loading ---")
    combined = load_panel_sources(sources, columns=config.get("columns"))

    result = analyze(
        combined,
        years,
        target_states=target_states,
        top_k=top_k,
        normalizer=CredentialNormalizer(config),
    )

    if output_dir is None:
        return result

    from .report import write_report, write_tables

    output_dir = Path(output_dir)
    print("\n--- Writing outputs ---")
    write_tables(result, output_dir / "tables")

    if make_plots:
        from .plotting import plot_charge_summary, plot_specialty_shares

        plots_dir = output_dir / "plots"
        bar = plot_charge_summary(
            result.charge_summary, output_path=plots_dir / "charges_by_state_year.png"
        )
        if bar:
            result.plot_paths.append(bar)
        result.plot_paths.extend(plot_specialty_shares(result.specialty_summary, plots_dir))

    write_report(result, output_dir / "report.md")

    return result
