"""
Domain service: descriptive statistics and figures for the girth values.

All formulas are delegated to numpy, pandas and matplotlib; this module
only shapes their results into domain models and figures.
"""
from typing import Iterable, Optional, Union
import logging

import matplotlib.pyplot as plt
from matplotlib import cbook
import numpy as np
import pandas as pd

from girth_survey.domain.models import BoxplotStatistics, HistogramBin, SummaryStatistics

logger = logging.getLogger(__name__)

GIRTH_LABEL = "Girth (mm)"

SUMMARY_LABELS = {
    "n": "N",
    "n_missing": "Missing",
    "prop_missing": "Proportion missing",
    "mean": "Mean",
    "sd": "SD",
    "min": "Min",
    "q1": "Q1",
    "median": "Median",
    "q3": "Q3",
    "max": "Max",
}


def _as_series(values: Iterable[Optional[float]]) -> pd.Series:
    return pd.Series([np.nan if pd.isna(v) else float(v) for v in values], dtype=float)


def _valid_values(values: Iterable[Optional[float]]) -> np.ndarray:
    return _as_series(values).dropna().to_numpy()


def summarize(
    values: Iterable[Optional[float]],
    quantile_method: str = "linear",
    ddof: int = 1,
) -> SummaryStatistics:
    """
    Compute the summary statistics of a numeric sequence.

    Missing values (None/NaN) count towards n and n_missing but are
    excluded from every other statistic.

    Args:
        values: Girth values, possibly with missing entries
        quantile_method: numpy percentile method for the quartiles
        ddof: Delta degrees of freedom of the standard deviation

    Returns:
        SummaryStatistics instance
    """
    series = _as_series(values)
    n = int(len(series))
    n_missing = int(series.isna().sum())
    valid = series.dropna().to_numpy()

    stats = {
        "n": n,
        "n_missing": n_missing,
        "prop_missing": n_missing / n if n else 0.0,
    }

    if len(valid):
        q1, median, q3 = np.percentile(valid, [25, 50, 75], method=quantile_method)
        stats.update(
            mean=float(np.mean(valid)),
            min=float(np.min(valid)),
            q1=float(q1),
            median=float(median),
            q3=float(q3),
            max=float(np.max(valid)),
        )
        if len(valid) > ddof:
            stats["sd"] = float(np.std(valid, ddof=ddof))

    logger.debug(f"Summary over {n} values ({n_missing} missing)")
    return SummaryStatistics(**stats)


def boxplot_statistics(values: Iterable[Optional[float]], whis: float = 1.5) -> BoxplotStatistics:
    """
    Compute Tukey boxplot statistics.

    Args:
        values: Girth values, missing entries ignored
        whis: Whisker reach as a multiple of the IQR

    Returns:
        BoxplotStatistics instance

    Raises:
        ValueError: If there is no valid value
    """
    valid = _valid_values(values)
    if not len(valid):
        raise ValueError("Cannot compute boxplot statistics without values")

    stats = cbook.boxplot_stats(valid, whis=whis)[0]
    return BoxplotStatistics(
        whisker_low=float(stats["whislo"]),
        q1=float(stats["q1"]),
        median=float(stats["med"]),
        q3=float(stats["q3"]),
        whisker_high=float(stats["whishi"]),
        outliers=[float(v) for v in stats["fliers"]],
    )


def histogram_bins(
    values: Iterable[Optional[float]],
    bins: Union[int, str] = "sturges",
) -> list[HistogramBin]:
    """
    Compute histogram bin edges and counts.

    Args:
        values: Girth values, missing entries ignored
        bins: Bin count or numpy bin rule

    Returns:
        List of HistogramBin, low to high
    """
    valid = _valid_values(values)
    if not len(valid):
        return []

    counts, edges = np.histogram(valid, bins=bins)
    return [
        HistogramBin(lower=float(edges[i]), upper=float(edges[i + 1]), count=int(counts[i]))
        for i in range(len(counts))
    ]


def summary_table(stats: SummaryStatistics, decimals: int = 1) -> pd.DataFrame:
    """
    Lay out summary statistics as a two-column table.

    Args:
        stats: Summary statistics
        decimals: Rounding applied to float statistics

    Returns:
        DataFrame with "statistic" and "value" columns
    """
    rows = []
    for key, label in SUMMARY_LABELS.items():
        value = getattr(stats, key)
        if isinstance(value, float):
            value = round(value, 3 if key == "prop_missing" else decimals)
        rows.append({"statistic": label, "value": "NA" if value is None else value})
    return pd.DataFrame(rows, columns=["statistic", "value"])


def plot_boxplot(values: Iterable[Optional[float]], title: str = "Tree girth") -> plt.Figure:
    """
    Draw a horizontal boxplot of the girths with the raw values overlaid.
    """
    valid = _valid_values(values)
    fig, ax = plt.subplots(figsize=(8, 3))
    if len(valid):
        ax.boxplot(valid, orientation="horizontal", whis=1.5, widths=0.5)
        jitter = np.random.default_rng(0).uniform(0.85, 1.15, len(valid))
        ax.scatter(valid, jitter, s=12, alpha=0.6, color="tab:green", zorder=3)
    ax.set_yticks([])
    ax.set_xlabel(GIRTH_LABEL)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_histogram(
    values: Iterable[Optional[float]],
    bins: Union[int, str] = "sturges",
    title: str = "Tree girth distribution",
) -> plt.Figure:
    """
    Draw a histogram of the girths.
    """
    fig, ax = plt.subplots(figsize=(8, 4))
    hist = histogram_bins(values, bins=bins)
    if hist:
        edges = [b.lower for b in hist] + [hist[-1].upper]
        counts = [b.count for b in hist]
        ax.stairs(counts, edges, fill=True, color="tab:green", alpha=0.7)
        ax.stairs(counts, edges, color="black")
    ax.set_xlabel(GIRTH_LABEL)
    ax.set_ylabel("Trees")
    ax.set_title(title)
    fig.tight_layout()
    return fig
