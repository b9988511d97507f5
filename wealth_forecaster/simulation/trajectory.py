"""
Year-by-year trajectory of one projection (deterministic or one stochastic trial).
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from .yearly_step import simulate_year

if TYPE_CHECKING:
    from wealth_forecaster.accounts.configuration import Configuration


@dataclass(frozen=True)
class YearlySnapshot:
    """State of all buckets at the end of one projection year."""

    year: int  # 0 = today
    age: int
    salary: float  # 0 once retired
    total_balance: float
    bucket_balances: dict[str, float]
    contributions: float
    returns: float
    withdrawals: float


def is_retired_at(config: "Configuration", age: int) -> bool:
    return age >= config.retirement_age


def annual_withdrawal_need(config: "Configuration", age: int) -> float:
    """
    Spending to withdraw in the year the individual is at the given age.

    Spending is escalated from the retirement year on; nothing is needed
    before retirement.
    """
    if not is_retired_at(config, age):
        return 0.0
    years_retired = age - config.retirement_age
    return config.annual_retirement_spending * (1 + config.retirement_spending_increase) ** years_retired


def build_trajectory(
    config: "Configuration",
    stochastic: bool = False,
    rng: Optional[np.random.Generator] = None
) -> list[YearlySnapshot]:
    """
    Project all buckets from year 0 through the projection horizon.

    Args:
        config: Projection configuration
        stochastic: Use random returns (one trial) instead of expected returns
        rng: Random generator for the stochastic trial

    Returns:
        Snapshots ordered by year, projection_years + 1 entries
    """
    balances = {b.id: b.current_balance for b in config.buckets}
    salary = config.current_salary
    trajectory = []

    for year in range(config.projection_years + 1):
        age = config.current_age + year
        retired = is_retired_at(config, age)

        if year == 0:
            trajectory.append(YearlySnapshot(
                year=year,
                age=age,
                salary=0.0 if retired else salary,
                total_balance=float(sum(balances.values())),
                bucket_balances=dict(balances),
                contributions=0.0,
                returns=0.0,
                withdrawals=0.0
            ))
            continue

        step = simulate_year(
            config.buckets,
            balances,
            salary,
            retired,
            stochastic,
            annual_withdrawal_need(config, age),
            rng
        )
        balances = step.balances

        trajectory.append(YearlySnapshot(
            year=year,
            age=age,
            salary=0.0 if retired else salary,
            total_balance=step.total_balance,
            bucket_balances=dict(balances),
            contributions=step.contributions,
            returns=step.returns,
            withdrawals=step.withdrawals
        ))

        if not retired:
            salary *= 1 + config.annual_salary_increase

    return trajectory


def project(config: "Configuration") -> list[YearlySnapshot]:
    """Deterministic trajectory using expected returns."""
    return build_trajectory(config, stochastic=False)
