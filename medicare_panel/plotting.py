"""
Visualization module for the Medicare panel report.

Creates the charge bar chart and the per-state specialty pie charts.
"""

from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .config import PLOTS_DIR

# Plot style configuration
PLOT_STYLE = {
    "figure.figsize": (10, 6),
    "font.size": 12,
    "axes.titlesize": 16,
    "axes.labelsize": 12,
    "xtick.labelsize": 12,
    "ytick.labelsize": 10,
}

MEASURE_LABELS = {
    "submitted": "Submitted charge",
    "allowed": "Medicare allowed amount",
}


def setup_plot_style():
    """Apply consistent plot styling."""
    plt.rcParams.update(PLOT_STYLE)
    sns.set_style("whitegrid")


def _save_or_show(fig, output_path: Optional[Path], show: bool) -> Optional[Path]:
    plt.tight_layout()

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        return output_path

    if show:
        plt.show()

    plt.close(fig)
    return None


def plot_charge_summary(
    summary: pd.DataFrame,
    output_path: Optional[Path] = None,
    show: bool = False,
) -> Optional[Path]:
    """
    Bar chart of mean charges by state and year with SD error bars.

    Args:
        summary: Output of summarize_charges()
        output_path: Optional output file path
        show: Whether to display the plot

    Returns:
        Output path if saved, None otherwise
    """
    if summary.empty:
        print("No charge summary to plot")
        return None

    setup_plot_style()

    fig, axes = plt.subplots(1, 2, figsize=(14, 6), sharey=True)

    groups = summary["state"] + " " + summary["year"].astype(str)
    x = np.arange(len(summary))
    palette = sns.color_palette("deep", n_colors=len(summary))

    for ax, measure in zip(axes, ["submitted", "allowed"]):
        ax.bar(
            x,
            summary[f"{measure}_mean"],
            yerr=summary[f"{measure}_sd"].fillna(0),
            capsize=6,
            color=palette,
        )
        ax.set_xticks(x)
        ax.set_xticklabels(groups, rotation=0)
        ax.set_title(f"{MEASURE_LABELS[measure]} (mean ± SD)")
        ax.set_xlabel("")

    axes[0].set_ylabel("USD")

    return _save_or_show(fig, output_path, show)


def plot_specialty_shares(
    summary: pd.DataFrame,
    output_dir: Optional[Path] = None,
) -> list[Path]:
    """
    One pie chart of specialty shares per state.

    Args:
        summary: Output of summarize_specialties()
        output_dir: Output directory for plots

    Returns:
        List of created file paths
    """
    output_dir = output_dir or PLOTS_DIR
    setup_plot_style()

    labels = list(dict.fromkeys(summary["specialty"]))
    colors = dict(zip(labels, sns.color_palette("pastel", n_colors=max(len(labels), 1))))

    paths = []
    for state, rows in summary.groupby("state", sort=True):
        fig, ax = plt.subplots(figsize=(8, 8))
        ax.pie(
            rows["count"],
            labels=rows["specialty"],
            autopct="%1.1f%%",
            colors=[colors[s] for s in rows["specialty"]],
            startangle=90,
        )
        ax.set_title(f"Top specialties, {state} (n={rows['count'].sum():,})")
        ax.axis("equal")

        path = _save_or_show(fig, output_dir / f"specialty_share_{state}.png", show=False)
        paths.append(path)

    return paths
