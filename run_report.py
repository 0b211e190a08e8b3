#!/usr/bin/env python3
"""
Medicare Physician Two-Year Panel Report

Builds a balanced provider panel from two yearly CMS Medicare Physician &
Other Practitioners "by Provider" extracts, restricts it to MD-credentialed
physicians in the target states, and reports:

1. Mean and SD of submitted charges and allowed amounts by state and year
2. Specialty mix (top three specialties) by state
3. OLS of allowed amount on state, specialty and year
4. Correlation of first-year submitted charges with second-year allowed amounts

Usage:
    python run_report.py                          # Files auto-discovered in data/raw/cms/
    python run_report.py --file-a 2022.csv --file-b 2023.csv
    python run_report.py --states "Rhode Island,NH" --no-plots

Output:
    outputs/report.md
    outputs/tables/*.csv
    outputs/plots/*.png
"""

import logging
import sys
from pathlib import Path

import click

from medicare_panel.config import (
    CMS_RAW_DIR,
    OUTPUTS_DIR,
    ensure_directories,
    get_report_config,
)
from medicare_panel.cohort import check_target_states
from medicare_panel.loading import find_source_file
from medicare_panel.text import parse_state_list


@click.command()
@click.option("--year-a", type=int, default=None, help="First data year (default: from config)")
@click.option("--year-b", type=int, default=None, help="Second data year (default: from config)")
@click.option(
    "--file-a",
    type=click.Path(path_type=Path),
    default=None,
    help=f"CSV for the first year (default: search {CMS_RAW_DIR})",
)
@click.option(
    "--file-b",
    type=click.Path(path_type=Path),
    default=None,
    help=f"CSV for the second year (default: search {CMS_RAW_DIR})",
)
@click.option(
    "--states",
    type=str,
    default=None,
    help="Comma-separated target states, names or abbreviations (default: from config)",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=OUTPUTS_DIR,
    help=f"Output directory (default: {OUTPUTS_DIR})",
)
@click.option("--no-plots", is_flag=True, help="Skip figure generation")
def main(year_a, year_b, file_a, file_b, states, output_dir, no_plots):
    """Generate the Medicare physician two-year panel report."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("MEDICARE PHYSICIAN PANEL REPORT")
    print("=" * 60)

    config = get_report_config()
    default_a, default_b = config["years"]
    year_a = year_a or default_a
    year_b = year_b or default_b
    if year_a == year_b:
        raise click.BadParameter("the two data years must differ", param_hint="--year-b")

    try:
        target_states = parse_state_list(states) if states else list(config["target_states"])
        check_target_states(target_states)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--states")

    ensure_directories()

    from medicare_panel.pipeline import run_report

    try:
        sources = {
            year_a: file_a or find_source_file(year_a),
            year_b: file_b or find_source_file(year_b),
        }
        result = run_report(
            sources,
            target_states=target_states,
            top_k=config["top_specialties"],
            output_dir=output_dir,
            make_plots=not no_plots,
            config=config,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print(f"Please download the CMS Medicare Provider PUF files to {CMS_RAW_DIR}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("COMPLETE")
    print("=" * 60)
    print(f"  Cohort providers: {result.cohort_stats['n_providers']:,}")
    print(f"\nReport saved to: {Path(output_dir).absolute() / 'report.md'}")


if __name__ == "__main__":
    main()
