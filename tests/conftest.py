"""
Shared test fixtures for all test modules.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from wealth_forecaster.accounts.bucket import Bucket, BucketCategory, ContributionMode
from wealth_forecaster.accounts.configuration import Configuration


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def flat_bucket() -> Bucket:
    """Bucket without growth, volatility or contributions."""
    return Bucket(
        id="flat",
        name="Flat",
        current_balance=100000.0,
        annual_return=0.0,
        return_volatility=0.0,
        monthly_contribution=0.0
    )


@pytest.fixture
def retirement_bucket() -> Bucket:
    """401(k) with 50% match up to 6% of salary, employee contributing 6%."""
    return Bucket(
        id="401k",
        name="401(k)",
        category=BucketCategory.RETIREMENT,
        current_balance=50000.0,
        annual_return=0.07,
        return_volatility=0.15,
        contribution_mode=ContributionMode.PERCENTAGE,
        contribution_percentage=0.06,
        employer_match=0.50,
        employer_match_limit=0.06,
        max_annual_contribution=23500.0
    )


@pytest.fixture
def savings_bucket() -> Bucket:
    return Bucket(
        id="hysa",
        name="High-Yield Savings",
        category=BucketCategory.HIGH_YIELD_SAVINGS,
        current_balance=20000.0,
        annual_return=0.045,
        return_volatility=0.005,
        monthly_contribution=500.0
    )


@pytest.fixture
def etf_bucket() -> Bucket:
    return Bucket(
        id="etf",
        name="ETF Portfolio",
        category=BucketCategory.ETF,
        current_balance=30000.0,
        annual_return=0.08,
        return_volatility=0.18,
        monthly_contribution=300.0
    )


@pytest.fixture
def lifecycle_config(retirement_bucket, savings_bucket, etf_bucket) -> Configuration:
    """Accumulation followed by retirement within the horizon."""
    return Configuration(
        current_age=40,
        retirement_age=60,
        projection_years=35,
        current_salary=100000.0,
        annual_salary_increase=0.03,
        monthly_retirement_spending=4000.0,
        retirement_spending_increase=0.025,
        buckets=[retirement_bucket, savings_bucket, etf_bucket]
    )


@pytest.fixture
def flat_config(flat_bucket) -> Configuration:
    """Single flat bucket, retirement beyond the horizon."""
    return Configuration(
        current_age=30,
        retirement_age=65,
        projection_years=5,
        current_salary=80000.0,
        annual_salary_increase=0.02,
        monthly_retirement_spending=3000.0,
        retirement_spending_increase=0.02,
        buckets=[flat_bucket]
    )
