"""
Report text assembly.

Turns a ReportResult into the narrative report with its tables.
"""

from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from .regression import coefficient_table, rank_specialty_terms, top_specialty


def _table(df: pd.DataFrame, float_format: str = "{:,.2f}") -> list[str]:
    if df.empty:
        return ["(no rows)"]
    text = df.to_string(index=False, float_format=lambda v: float_format.format(v))
    return ["```", text, "```"]


def _fmt(value: float, spec: str = ",.2f") -> str:
    if value is None or np.isnan(value):
        return "N/A"
    return format(value, spec)


def build_report_text(result) -> str:
    """
    Build the report as Markdown text.

    Args:
        result: ReportResult from run_report()

    Returns:
        Report text
    """
    first_year, second_year = result.years
    states = ", ".join(result.target_states)
    panel = result.panel_stats
    cohort = result.cohort_stats

    lines = [
        "# Medicare Physician Charges: Two-Year Panel Report",
        "",
        f"Data years: {first_year} and {second_year}. Target states: {states}.",
        "",
        "## Sample construction",
        "",
        f"- Combined records: {panel['n_rows_combined']:,} "
        f"({panel['n_providers_combined']:,} providers)",
        f"- Balanced panel (one record in each year): {panel['n_rows_panel']:,} records, "
        f"{panel['n_providers_panel']:,} providers",
        f"- Duplicate provider-year records in the source: {panel['n_duplicate_provider_years']:,}",
        f"- Cohort (MD credential, {states}): {cohort['n_rows']:,} records, "
        f"{cohort['n_providers']:,} providers",
        f"- In-state panel records credentialed DO without MD (excluded): "
        f"{cohort['n_do_only_excluded']:,}",
        "",
        "## 1. Charges by state and year",
        "",
        *_table(result.charge_summary),
        "",
        "## 2. Top specialties by state",
        "",
        *_table(result.specialty_summary, float_format="{:.1f}"),
        "",
        "## 3. Regression of allowed amount on state, specialty and year",
        "",
    ]

    regression = result.regression
    if regression is None:
        lines.append("Model not fitted (empty cohort).")
    else:
        refs = ", ".join(f"{k} = {v}" for k, v in regression.reference_levels.items())
        lines.extend([
            f"OLS, n = {regression.n_obs:,}, R² = {_fmt(regression.r_squared, '.4f')}, "
            f"adjusted R² = {_fmt(regression.adj_r_squared, '.4f')}. "
            f"Reference levels: {refs}. Year is entered as a linear trend.",
            "",
            *_table(coefficient_table(regression).drop(columns=["kind", "level"]), "{:,.4f}"),
            "",
        ])

        best = top_specialty(regression)
        if best is None:
            lines.append("No specialty contrasts were estimated.")
        else:
            lines.append(
                f"Highest-allowed specialty: **{best.level}** "
                f"({_fmt(best.estimate)} vs {regression.reference_levels['specialty']}, "
                f"p = {_fmt(best.p_value, '.4g')})."
            )
            if best.estimate < 0:
                lines.append(
                    f"All specialty contrasts are negative, so the reference level "
                    f"{regression.reference_levels['specialty']} has the highest allowed amount."
                )
            runners_up = [t.level for t in rank_specialty_terms(regression)[1:4]]
            if runners_up:
                lines.append(f"Next highest: {', '.join(runners_up)}.")

    corr = result.correlation
    lines.extend([
        "",
        f"## 4. Correlation of {first_year} submitted charges with {second_year} allowed amounts",
        "",
        f"Pearson r = {_fmt(corr.r, '.4f')} (p = {_fmt(corr.p_value, '.4g')}, "
        f"{corr.n_pairs:,} complete pairs of {corr.n_joined:,} joined providers).",
        "",
    ])

    if result.plot_paths:
        lines.extend(["## Figures", ""])
        for path in result.plot_paths:
            lines.append(f"![{path.stem}](plots/{path.name})")
        lines.append("")

    return "\n".join(lines)


def write_report(result, output_path: Path) -> Path:
    """Write the report text to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(build_report_text(result))
    print(f"Created: {output_path}")
    return output_path


def write_tables(result, tables_dir: Path) -> list[Path]:
    """Write the summary and coefficient tables as CSV."""
    tables_dir.mkdir(parents=True, exist_ok=True)

    tables = {
        "charge_summary.csv": result.charge_summary,
        "specialty_summary.csv": result.specialty_summary,
    }
    if result.regression is not None:
        tables["regression_coefficients.csv"] = coefficient_table(result.regression)

    paths = []
    for name, df in tables.items():
        path = tables_dir / name
        df.to_csv(path, index=False)
        print(f"Created: {path}")
        paths.append(path)

    return paths
