"""
Savings buckets - the individual accounts a projection is built from.
"""
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class BucketCategory(Enum):
    """Account categories. Only used to pick preset values."""
    HIGH_YIELD_SAVINGS = "hysa"
    RETIREMENT = "401k"
    ETF = "etf"
    OTHER = "other"

    @property
    def supports_employer_match(self) -> bool:
        return self is BucketCategory.RETIREMENT


class ContributionMode(Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass
class Bucket:
    """
    A single savings or investment account.

    All rates are fractions (0.07 = 7%). Optional fields set to None
    (or 0) disable the corresponding rule.

    Attributes:
        id: Identifier, unique within a configuration
        current_balance: Starting balance
        annual_return: Expected annual return
        return_volatility: Standard deviation of the annual return
        monthly_contribution: Used when contribution_mode is FIXED
        contribution_percentage: Share of salary, used when mode is PERCENTAGE
        employer_match: Fraction of the matchable contribution added by the employer
        employer_match_limit: Share of salary beyond which nothing is matched
        max_annual_contribution: Cap on the employee contribution per year
        employer_match_eligible: Whether the match rule applies at all
    """

    id: str
    name: str = "New Bucket"
    category: BucketCategory = BucketCategory.OTHER
    current_balance: float = 0.0
    annual_return: float = 0.07
    return_volatility: float = 0.15
    monthly_contribution: float = 0.0
    contribution_mode: ContributionMode = ContributionMode.FIXED
    contribution_percentage: float = 0.0
    employer_match: Optional[float] = None
    employer_match_limit: Optional[float] = None
    max_annual_contribution: Optional[float] = None
    employer_match_eligible: Optional[bool] = field(default=None)

    def __post_init__(self):
        self.category = BucketCategory(self.category)
        self.contribution_mode = ContributionMode(self.contribution_mode)
        if self.employer_match_eligible is None:
            self.employer_match_eligible = self.category.supports_employer_match

    @property
    def has_employer_match(self) -> bool:
        return bool(
            self.employer_match_eligible
            and self.employer_match
            and self.employer_match_limit
        )

    def copy(self, **changes) -> "Bucket":
        """Create a copy of the bucket, optionally with changed fields."""
        return replace(self, **changes)


# Values applied on top of DEFAULT_BUCKET when a bucket of a category is created
BUCKET_PRESETS: dict[BucketCategory, dict] = {
    BucketCategory.HIGH_YIELD_SAVINGS: {
        "name": "High-Yield Savings",
        "annual_return": 0.045,
        "return_volatility": 0.005,
    },
    BucketCategory.RETIREMENT: {
        "name": "401(k)",
        "annual_return": 0.07,
        "return_volatility": 0.15,
        "employer_match": 0.50,
        "employer_match_limit": 0.06,
        "contribution_mode": ContributionMode.FIXED,
        "max_annual_contribution": 23500.0,
    },
    BucketCategory.ETF: {
        "name": "ETF Portfolio",
        "annual_return": 0.08,
        "return_volatility": 0.18,
    },
}

DEFAULT_BUCKET: dict = {
    "name": "New Bucket",
    "category": BucketCategory.OTHER,
    "current_balance": 0.0,
    "annual_return": 0.07,
    "return_volatility": 0.15,
    "monthly_contribution": 0.0,
    "contribution_mode": ContributionMode.FIXED,
    "contribution_percentage": 0.0,
}


def new_bucket_id() -> str:
    return str(uuid.uuid4())


def create_bucket(
    category: BucketCategory = BucketCategory.OTHER,
    bucket_id: Optional[str] = None,
    **overrides
) -> Bucket:
    """
    Create a bucket pre-filled with the preset values of its category.

    Args:
        category: Account category selecting the preset
        bucket_id: Explicit identifier (a new uuid4 if omitted)
        **overrides: Field values replacing the preset

    Returns:
        New Bucket
    """
    category = BucketCategory(category)
    values = {**DEFAULT_BUCKET, **BUCKET_PRESETS.get(category, {}), "category": category}
    values.update(overrides)
    return Bucket(id=bucket_id or new_bucket_id(), **values)
