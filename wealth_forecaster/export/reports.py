"""
Export functionality for configurations and simulation results.
"""
import io
import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING, MutableMapping, Optional

import pandas as pd

from wealth_forecaster.accounts.bucket import Bucket, BucketCategory, ContributionMode
from wealth_forecaster.accounts.configuration import Configuration
from wealth_forecaster.simulation.percentiles import PERCENTILES
from wealth_forecaster.simulation.summary import summarize

if TYPE_CHECKING:
    from wealth_forecaster.simulation.monte_carlo import SimulationResult
    from wealth_forecaster.simulation.trajectory import YearlySnapshot

logger = logging.getLogger(__name__)

CURRENCIES: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CHF": "CHF ",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
    "INR": "₹",
}

_REQUIRED_CONFIG_FIELDS = (
    "current_age",
    "retirement_age",
    "projection_years",
    "current_salary",
    "annual_salary_increase",
    "monthly_retirement_spending",
    "retirement_spending_increase",
    "buckets",
)

_OPTIONAL_BUCKET_FIELDS = (
    "employer_match",
    "employer_match_limit",
    "max_annual_contribution",
)


def bucket_to_dict(bucket: Bucket) -> dict:
    return {
        "id": bucket.id,
        "name": bucket.name,
        "category": bucket.category.value,
        "current_balance": bucket.current_balance,
        "annual_return": bucket.annual_return,
        "return_volatility": bucket.return_volatility,
        "monthly_contribution": bucket.monthly_contribution,
        "contribution_mode": bucket.contribution_mode.value,
        "contribution_percentage": bucket.contribution_percentage,
        "employer_match": bucket.employer_match,
        "employer_match_limit": bucket.employer_match_limit,
        "max_annual_contribution": bucket.max_annual_contribution,
        "employer_match_eligible": bucket.employer_match_eligible,
    }


def bucket_from_dict(data: dict) -> Bucket:
    """Parse a bucket entry of a saved configuration."""
    try:
        return Bucket(
            id=str(data["id"]),
            name=data.get("name", "New Bucket"),
            category=BucketCategory(data.get("category", BucketCategory.OTHER.value)),
            current_balance=float(data["current_balance"]),
            annual_return=float(data["annual_return"]),
            return_volatility=float(data["return_volatility"]),
            monthly_contribution=float(data.get("monthly_contribution", 0.0)),
            contribution_mode=ContributionMode(data.get("contribution_mode", ContributionMode.FIXED.value)),
            contribution_percentage=float(data.get("contribution_percentage", 0.0)),
            employer_match_eligible=data.get("employer_match_eligible"),
            **{
                name: float(data[name])
                for name in _OPTIONAL_BUCKET_FIELDS
                if data.get(name) is not None
            }
        )
    except KeyError as e:
        raise ValueError(f"Invalid bucket: field {e} is missing")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid bucket '{data.get('id', '?')}': {e}")


def configuration_to_dict(config: Configuration) -> dict:
    return {
        "current_age": config.current_age,
        "retirement_age": config.retirement_age,
        "projection_years": config.projection_years,
        "current_salary": config.current_salary,
        "annual_salary_increase": config.annual_salary_increase,
        "monthly_retirement_spending": config.monthly_retirement_spending,
        "retirement_spending_increase": config.retirement_spending_increase,
        "currency": config.currency,
        "buckets": [bucket_to_dict(b) for b in config.buckets],
    }


def configuration_from_dict(data: dict) -> Configuration:
    """Parse and validate the structure of a saved configuration."""
    if not isinstance(data, dict):
        raise ValueError("Invalid configuration: expected a JSON object")

    missing = [name for name in _REQUIRED_CONFIG_FIELDS if name not in data]
    if missing:
        raise ValueError(f"Invalid configuration: field(s) {', '.join(missing)} missing")

    try:
        return Configuration(
            current_age=int(data["current_age"]),
            retirement_age=int(data["retirement_age"]),
            projection_years=int(data["projection_years"]),
            current_salary=float(data["current_salary"]),
            annual_salary_increase=float(data["annual_salary_increase"]),
            monthly_retirement_spending=float(data["monthly_retirement_spending"]),
            retirement_spending_increase=float(data["retirement_spending_increase"]),
            buckets=[bucket_from_dict(b) for b in data["buckets"]],
            currency=data.get("currency", "USD"),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration: {e}")


def save_configuration(config: Configuration, name: str = "") -> str:
    """Serialize a configuration to indented JSON."""
    payload = {
        "name": name or f"Forecast_{datetime.now().strftime('%Y%m%d_%H%M%S')}",
        "created_at": datetime.now().isoformat(),
        **configuration_to_dict(config),
    }
    return json.dumps(payload, indent=2)


def load_configuration(text: str) -> Configuration:
    """
    Load a configuration saved with save_configuration.

    Raises:
        ValueError: If the text is not valid JSON or fields are missing
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Configuration is not valid JSON: %s", e)
        raise ValueError(f"Configuration is not valid JSON: {e}")
    return configuration_from_dict(data)


def apply_uploaded_configuration(state: MutableMapping, upload_id: str, text: str) -> bool:
    """
    Load an uploaded configuration into state["config"] once per upload.

    The uploader keeps returning the same file on every rerun; only an
    upload_id not seen before replaces the configuration, so later edits
    survive.

    Returns:
        True if the configuration was replaced

    Raises:
        ValueError: If the upload cannot be loaded
    """
    if state.get("upload_id") == upload_id:
        return False
    state["config"] = load_configuration(text)
    state["upload_id"] = upload_id
    logger.info("Loaded configuration from upload %s", upload_id)
    return True


def trajectory_to_dataframe(
    trajectory: list["YearlySnapshot"],
    bucket_names: Optional[dict[str, str]] = None
) -> pd.DataFrame:
    """
    One row per projection year with one column per bucket balance.

    Args:
        trajectory: Snapshots ordered by year
        bucket_names: Optional mapping of bucket id to column name
    """
    bucket_names = bucket_names or {}
    rows = []
    for snapshot in trajectory:
        row = {
            "Year": snapshot.year,
            "Age": snapshot.age,
            "Salary": snapshot.salary,
            "Total": snapshot.total_balance,
            "Contributions": snapshot.contributions,
            "Returns": snapshot.returns,
            "Withdrawals": snapshot.withdrawals,
        }
        for bucket_id, balance in snapshot.bucket_balances.items():
            row[bucket_names.get(bucket_id, bucket_id)] = balance
        rows.append(row)
    return pd.DataFrame(rows)


def percentiles_to_dataframe(result: "SimulationResult") -> pd.DataFrame:
    """Deterministic path and percentile bands by year."""
    data = {
        "Year": [s.year for s in result.deterministic],
        "Age": [s.age for s in result.deterministic],
        "Deterministic": [s.total_balance for s in result.deterministic],
    }
    for label in PERCENTILES:
        band = result.percentiles[label]
        data[label.upper()] = band if band else [float("nan")] * result.num_years
    return pd.DataFrame(data)


def buckets_to_dataframe(config: Configuration) -> pd.DataFrame:
    """Bucket settings for display."""
    return pd.DataFrame({
        "Name": [b.name for b in config.buckets],
        "Category": [b.category.value for b in config.buckets],
        "Balance": [b.current_balance for b in config.buckets],
        "Return": [b.annual_return for b in config.buckets],
        "Volatility": [b.return_volatility for b in config.buckets],
        "Contribution": [
            b.monthly_contribution * 12 if b.contribution_mode is ContributionMode.FIXED
            else b.contribution_percentage
            for b in config.buckets
        ],
        "Mode": [b.contribution_mode.value for b in config.buckets],
        "Employer Match": [b.has_employer_match for b in config.buckets],
    })


def _summary_rows(config: Configuration, result: "SimulationResult") -> list[tuple[str, object]]:
    summary = summarize(config, result)
    return [
        ("Starting balance", config.starting_balance),
        ("Final wealth (expected)", summary.final_deterministic),
        ("Monte Carlo mean", result.mean_final_value),
        ("Monte Carlo median (P50)", summary.final_p50),
        ("Conservative (P10)", summary.final_p10),
        ("Optimistic (P90)", summary.final_p90),
        ("Spending in first retirement year", summary.retirement_spending),
        ("Retirement readiness", summary.readiness_score),
        ("Withdrawal rate at retirement", summary.safe_withdrawal_rate),
        ("P10 run-out age", summary.run_out_age),
        ("Simulations", result.num_simulations),
    ]


def bucket_column_names(config: Configuration) -> dict[str, str]:
    """Bucket id to display name; falls back to ids when names repeat."""
    names = [b.name for b in config.buckets]
    if len(set(names)) != len(names):
        return {b.id: b.id for b in config.buckets}
    return {b.id: b.name for b in config.buckets}


def create_excel_report(config: Configuration, result: "SimulationResult") -> bytes:
    """
    Create an Excel report with multiple sheets.

    Returns:
        Excel file as bytes
    """
    output = io.BytesIO()
    bucket_names = bucket_column_names(config)

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        summary_df = pd.DataFrame(_summary_rows(config, result), columns=["Metric", "Value"])
        summary_df.to_excel(writer, sheet_name='Summary', index=False)

        trajectory_to_dataframe(result.deterministic, bucket_names).to_excel(
            writer, sheet_name='Deterministic', index=False
        )
        percentiles_to_dataframe(result).to_excel(
            writer, sheet_name='Percentiles', index=False
        )
        buckets_to_dataframe(config).to_excel(writer, sheet_name='Buckets', index=False)

    output.seek(0)
    return output.getvalue()


def create_csv_report(config: Configuration, result: "SimulationResult") -> str:
    """
    Create a simple CSV summary report.

    Returns:
        CSV content as string
    """
    lines = [
        "Wealth Forecast Report",
        f"Created: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "=== Buckets ===",
        "Name,Category,Balance,Return,Volatility",
    ]

    for bucket in config.buckets:
        lines.append(
            f"{bucket.name},{bucket.category.value},{bucket.current_balance:.2f},"
            f"{bucket.annual_return:.2%},{bucket.return_volatility:.2%}"
        )

    lines.extend(["", "=== Summary ===", "Metric,Value"])
    for label, value in _summary_rows(config, result):
        lines.append(f"{label},{'' if value is None else value}")

    lines.extend(["", "=== Percentiles ==="])
    lines.append(percentiles_to_dataframe(result).to_csv(index=False, float_format="%.2f").strip())

    return "\n".join(lines)


def format_currency(value: float, currency: str = "USD") -> str:
    """Format a number as currency, without decimals."""
    symbol = CURRENCIES.get(currency, "$")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.0f}"


def format_percentage(value: float) -> str:
    """Format a number as percentage."""
    return f"{value:.2%}"
