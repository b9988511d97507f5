"""
One simulated year across all buckets.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional

import numpy as np

from .contributions import calculate_yearly_contribution
from .random_source import sample_annual_return

if TYPE_CHECKING:
    from wealth_forecaster.accounts.bucket import Bucket

# Contributions arrive on average mid-year and earn half a year's return
CONTRIBUTION_RETURN_FACTOR = 0.5


@dataclass
class YearStepResult:
    """Balances and aggregate flows of one simulated year."""

    balances: dict[str, float]
    contributions: float
    returns: float
    withdrawals: float

    @property
    def total_balance(self) -> float:
        return float(sum(self.balances.values()))


def proportional_withdrawal(
    balance: float,
    total_balance: float,
    annual_withdrawal: float
) -> float:
    """Share of the total withdrawal taken from one bucket, capped at its balance."""
    if total_balance <= 0:
        return 0.0
    return min(annual_withdrawal * balance / total_balance, balance)


def simulate_year(
    buckets: list["Bucket"],
    balances: Mapping[str, float],
    annual_salary: float,
    is_retired: bool,
    stochastic: bool,
    annual_withdrawal: float = 0.0,
    rng: Optional[np.random.Generator] = None
) -> YearStepResult:
    """
    Advance every bucket by one year.

    Each bucket only depends on its own balance and the total balance at the
    start of the year, so the bucket order does not change any result.

    Args:
        buckets: Bucket configurations
        balances: Balance per bucket id at the start of the year
        annual_salary: Salary for the year (drives percentage contributions)
        is_retired: Stops contributions and enables withdrawals
        stochastic: Draw random returns instead of the expected return
        annual_withdrawal: Total amount to withdraw this year
        rng: Random generator, required when stochastic

    Returns:
        YearStepResult with new balances and the year's totals
    """
    if stochastic and rng is None:
        raise ValueError("A random generator is required for stochastic returns")

    total_balance = sum(balances.get(b.id, b.current_balance) for b in buckets)

    new_balances = {}
    total_contributions = 0.0
    total_returns = 0.0
    total_withdrawals = 0.0

    for bucket in buckets:
        balance = balances.get(bucket.id, bucket.current_balance)
        contribution = calculate_yearly_contribution(bucket, annual_salary, is_retired)

        withdrawal = 0.0
        if is_retired:
            withdrawal = proportional_withdrawal(balance, total_balance, annual_withdrawal)

        if stochastic:
            rate = sample_annual_return(rng, bucket.annual_return, bucket.return_volatility)
        else:
            rate = bucket.annual_return

        after_withdrawal = balance - withdrawal
        balance_return = after_withdrawal * rate
        contribution_return = contribution * rate * CONTRIBUTION_RETURN_FACTOR

        new_balances[bucket.id] = max(
            0.0, after_withdrawal + contribution + balance_return + contribution_return
        )
        total_contributions += contribution
        total_returns += balance_return + contribution_return
        total_withdrawals += withdrawal

    return YearStepResult(
        balances=new_balances,
        contributions=total_contributions,
        returns=total_returns,
        withdrawals=total_withdrawals
    )
