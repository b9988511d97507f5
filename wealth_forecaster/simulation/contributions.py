"""
Yearly contributions per bucket (employee part plus employer match).
"""
from typing import TYPE_CHECKING

from wealth_forecaster.accounts.bucket import ContributionMode

if TYPE_CHECKING:
    from wealth_forecaster.accounts.bucket import Bucket


def calculate_employee_contribution(bucket: "Bucket", annual_salary: float) -> float:
    """Employee contribution for one year, after the annual cap."""
    if bucket.contribution_mode is ContributionMode.FIXED:
        contribution = bucket.monthly_contribution * 12
    else:
        contribution = bucket.contribution_percentage * annual_salary

    # Annual cap (e.g. 401k limit); a cap of 0 counts as not set
    if bucket.max_annual_contribution and contribution > bucket.max_annual_contribution:
        contribution = bucket.max_annual_contribution

    return contribution


def calculate_employer_match(
    bucket: "Bucket",
    employee_contribution: float,
    annual_salary: float
) -> float:
    """
    Employer match on an employee contribution.

    The employee contribution is expressed as a share of salary, limited to
    the match ceiling, and matched at the bucket's match rate.
    """
    if not bucket.has_employer_match or annual_salary <= 0:
        return 0.0

    contribution_share = employee_contribution / annual_salary
    matchable_share = min(contribution_share, bucket.employer_match_limit)
    return matchable_share * annual_salary * bucket.employer_match


def calculate_yearly_contribution(
    bucket: "Bucket",
    annual_salary: float,
    is_retired: bool
) -> float:
    """
    Total contribution credited to a bucket for one year.

    Args:
        bucket: Bucket configuration
        annual_salary: Salary for the year
        is_retired: Contributions stop entirely once retired

    Returns:
        Employee contribution plus employer match
    """
    if is_retired:
        return 0.0

    employee = calculate_employee_contribution(bucket, annual_salary)
    return employee + calculate_employer_match(bucket, employee, annual_salary)
