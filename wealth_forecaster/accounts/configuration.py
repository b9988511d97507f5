"""
Projection configuration - life timeline plus the set of buckets.
"""
from dataclasses import dataclass, field, replace

from .bucket import Bucket, BucketCategory, create_bucket

SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CHF", "CAD", "AUD", "JPY", "INR")


@dataclass
class Configuration:
    """
    Full input of a projection.

    Rates are fractions. The order of buckets is kept in every output
    (per-bucket balances, reports, charts).
    """

    current_age: int = 30
    retirement_age: int = 65
    projection_years: int = 40
    current_salary: float = 100000.0
    annual_salary_increase: float = 0.03
    monthly_retirement_spending: float = 5000.0
    retirement_spending_increase: float = 0.025
    buckets: list[Bucket] = field(default_factory=list)
    currency: str = "USD"

    @property
    def bucket_ids(self) -> list[str]:
        return [b.id for b in self.buckets]

    @property
    def starting_balance(self) -> float:
        return sum(b.current_balance for b in self.buckets)

    @property
    def annual_retirement_spending(self) -> float:
        """Baseline yearly spending in today's terms."""
        return self.monthly_retirement_spending * 12

    def copy(self, **changes) -> "Configuration":
        buckets = changes.pop("buckets", [b.copy() for b in self.buckets])
        return replace(self, buckets=buckets, **changes)


def default_configuration() -> Configuration:
    """Starting inputs shown to a new user."""
    return Configuration(
        current_age=30,
        retirement_age=65,
        projection_years=40,
        current_salary=100000.0,
        annual_salary_increase=0.03,
        monthly_retirement_spending=5000.0,
        retirement_spending_increase=0.025,
        buckets=[
            create_bucket(
                BucketCategory.RETIREMENT,
                current_balance=50000.0,
                monthly_contribution=1500.0,
            ),
            create_bucket(
                BucketCategory.HIGH_YIELD_SAVINGS,
                current_balance=20000.0,
                monthly_contribution=500.0,
            ),
        ],
    )


def validate_configuration(config: Configuration) -> list[str]:
    """
    Check a configuration for values the input form should reject.

    The projection engine accepts any numbers; this is only used by the
    input layer to warn the user.

    Returns:
        List of problems (empty if the configuration is fine)
    """
    errors = []

    if config.current_age < 0:
        errors.append("Current age cannot be negative")
    if config.retirement_age < config.current_age:
        errors.append("Retirement age is before the current age")
    if config.projection_years < 0:
        errors.append("Projection years cannot be negative")
    if config.current_salary < 0:
        errors.append("Salary cannot be negative")
    if config.monthly_retirement_spending < 0:
        errors.append("Retirement spending cannot be negative")
    if config.currency not in SUPPORTED_CURRENCIES:
        errors.append(f"Unsupported currency: {config.currency}")

    seen = set()
    for bucket in config.buckets:
        label = bucket.name or bucket.id
        if bucket.id in seen:
            errors.append(f"Duplicate bucket id: {bucket.id}")
        seen.add(bucket.id)
        if bucket.current_balance < 0:
            errors.append(f"{label}: balance cannot be negative")
        if bucket.return_volatility < 0:
            errors.append(f"{label}: volatility cannot be negative")
        if bucket.monthly_contribution < 0:
            errors.append(f"{label}: contribution cannot be negative")
        if not 0 <= bucket.contribution_percentage <= 1:
            errors.append(f"{label}: contribution percentage must be between 0% and 100%")
        if bucket.max_annual_contribution is not None and bucket.max_annual_contribution < 0:
            errors.append(f"{label}: contribution cap cannot be negative")

    return errors
