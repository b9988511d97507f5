"""
Headline numbers of a projection: readiness, withdrawal rate, run-out age.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from .trajectory import annual_withdrawal_need

if TYPE_CHECKING:
    from wealth_forecaster.accounts.configuration import Configuration
    from .monte_carlo import SimulationResult


@dataclass
class ProjectionSummary:
    """Key figures shown above the charts."""

    final_deterministic: float
    final_p10: float
    final_p50: float
    final_p90: float
    retirement_index: int
    retirement_spending: float  # Withdrawal need in the first year that withdraws
    readiness_score: Optional[float]  # Share of trials that never run dry after retiring
    safe_withdrawal_rate: Optional[float]  # retirement_spending / p50 balance at retirement
    run_out_age: Optional[int]  # First age from retirement on where p10 is exhausted

    @property
    def failure_rate(self) -> Optional[float]:
        if self.readiness_score is None:
            return None
        return 1 - self.readiness_score


def retirement_index(config: "Configuration", num_years: int) -> int:
    """Year index of retirement, clamped into the projection."""
    return max(0, min(num_years - 1, config.retirement_age - config.current_age))


def calculate_readiness_score(totals: np.ndarray, start_index: int) -> Optional[float]:
    """
    Share of trials whose balance stays above zero from start_index on.

    Args:
        totals: Total balances, shape (num_trials, num_years)
        start_index: First year that has to stay funded
    """
    if totals.shape[0] == 0 or totals.shape[1] == 0:
        return None
    funded = np.all(totals[:, start_index:] > 0, axis=1)
    return float(np.mean(funded))


def find_run_out_age(
    config: "Configuration",
    p10: list[float],
    start_index: int
) -> Optional[int]:
    """Age at which the conservative (p10) path is exhausted, if ever."""
    for index in range(start_index, len(p10)):
        if p10[index] <= 0:
            return config.current_age + index
    return None


def summarize(config: "Configuration", result: "SimulationResult") -> ProjectionSummary:
    """
    Derive the summary figures of a simulation.

    Args:
        config: Configuration the result was computed from
        result: Simulation result

    Returns:
        ProjectionSummary
    """
    index = retirement_index(config, result.num_years)
    # Year 0 never withdraws, so an already retired plan first spends at current_age + 1
    first_withdrawal_age = max(config.retirement_age, config.current_age + 1)
    spending = annual_withdrawal_need(config, first_withdrawal_age)

    p50 = result.percentiles["p50"]
    safe_withdrawal_rate = None
    if p50 and p50[index] > 0:
        safe_withdrawal_rate = spending / p50[index]

    return ProjectionSummary(
        final_deterministic=result.deterministic_final_value,
        final_p10=result.final_percentile("p10"),
        final_p50=result.final_percentile("p50"),
        final_p90=result.final_percentile("p90"),
        retirement_index=index,
        retirement_spending=spending,
        readiness_score=calculate_readiness_score(result.total_balances, index),
        safe_withdrawal_rate=safe_withdrawal_rate,
        run_out_age=find_run_out_age(config, result.percentiles["p10"], index)
    )
