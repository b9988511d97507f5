"""
Cross-trial percentile bands of total wealth.
"""
import math
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from .trajectory import YearlySnapshot

PERCENTILES: dict[str, float] = {
    "p10": 0.10,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p90": 0.90,
}


def nearest_rank_index(n: int, p: float) -> int:
    """
    Index into an ascending sample of size n for percentile p.

    floor(n * p), clamped to the last element (floor(n * 0.9) can reach n
    for small n).
    """
    return min(math.floor(n * p), n - 1)


def total_balance_matrix(trials: Sequence[Sequence["YearlySnapshot"]]) -> np.ndarray:
    """Total balances as an array of shape (num_trials, num_years)."""
    if len(trials) == 0:
        return np.empty((0, 0))

    num_years = len(trials[0])
    if any(len(trial) != num_years for trial in trials):
        raise ValueError("All trials must cover the same number of years")

    return np.array(
        [[snapshot.total_balance for snapshot in trial] for trial in trials],
        dtype=np.float64
    ).reshape(len(trials), num_years)


def compute_percentile_bands(
    trials: Sequence[Sequence["YearlySnapshot"]]
) -> dict[str, list[float]]:
    """
    Nearest-rank percentiles of total balance for every year.

    Args:
        trials: Trial trajectories of equal length

    Returns:
        Dict mapping percentile label to values ordered by year
        (empty lists when there are no trials)
    """
    totals = total_balance_matrix(trials)
    bands = {label: [] for label in PERCENTILES}

    num_trials = totals.shape[0]
    if num_trials == 0:
        return bands

    # Sort each year's column independently
    sorted_totals = np.sort(totals, axis=0)

    for label, p in PERCENTILES.items():
        row = sorted_totals[nearest_rank_index(num_trials, p)]
        bands[label] = [float(v) for v in row]

    return bands
