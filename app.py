"""
Wealth Forecaster - Streamlit Web Application
Multi-bucket savings projection with Monte Carlo percentile bands and export
"""
import logging
import sys
from datetime import datetime
from pathlib import Path

import streamlit as st

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent))

from wealth_forecaster.accounts.bucket import BucketCategory, ContributionMode, create_bucket
from wealth_forecaster.accounts.configuration import (
    SUPPORTED_CURRENCIES,
    Configuration,
    default_configuration,
    validate_configuration,
)
from wealth_forecaster.export.reports import (
    CURRENCIES,
    apply_uploaded_configuration,
    bucket_column_names,
    create_csv_report,
    create_excel_report,
    format_currency,
    format_percentage,
    percentiles_to_dataframe,
    save_configuration,
    trajectory_to_dataframe,
)
from wealth_forecaster.simulation.monte_carlo import MonteCarloSimulator
from wealth_forecaster.simulation.summary import summarize
from wealth_forecaster.visualization.charts import (
    plot_bucket_balances,
    plot_projection_bands,
    plot_readiness_gauge,
    plot_sample_trials,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

st.set_page_config(
    page_title="Wealth Forecaster",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("📈 Wealth Forecaster")
st.caption("Project your wealth growth with Monte Carlo simulation")

# Initialize session state
if "config" not in st.session_state:
    st.session_state.config = default_configuration()
for key in ["results", "results_config"]:
    if key not in st.session_state:
        st.session_state[key] = None

CATEGORY_LABELS = {
    BucketCategory.HIGH_YIELD_SAVINGS: "High-Yield Savings",
    BucketCategory.RETIREMENT: "401(k) / Retirement",
    BucketCategory.ETF: "ETF / Brokerage",
    BucketCategory.OTHER: "Other",
}


def bucket_editor(bucket, index: int):
    """Render the inputs of one bucket and return the edited copy (None if removed)."""
    key = f"bucket_{bucket.id}"
    with st.expander(f"{bucket.name}", expanded=index == 0):
        name = st.text_input("Name", value=bucket.name, key=f"{key}_name")
        balance = st.number_input(
            "Current balance", min_value=0.0, value=float(bucket.current_balance),
            step=1000.0, key=f"{key}_balance"
        )
        col1, col2 = st.columns(2)
        with col1:
            annual_return = st.number_input(
                "Expected return (%)", value=bucket.annual_return * 100,
                step=0.5, key=f"{key}_return"
            ) / 100
        with col2:
            volatility = st.number_input(
                "Volatility (%)", min_value=0.0, value=bucket.return_volatility * 100,
                step=0.5, key=f"{key}_vol"
            ) / 100

        mode = st.radio(
            "Contribution",
            options=[ContributionMode.FIXED, ContributionMode.PERCENTAGE],
            format_func=lambda m: "Fixed monthly amount" if m is ContributionMode.FIXED else "% of salary",
            index=0 if bucket.contribution_mode is ContributionMode.FIXED else 1,
            horizontal=True,
            key=f"{key}_mode"
        )
        if mode is ContributionMode.FIXED:
            monthly = st.number_input(
                "Monthly contribution", min_value=0.0, value=float(bucket.monthly_contribution),
                step=100.0, key=f"{key}_monthly"
            )
            percentage = bucket.contribution_percentage
        else:
            monthly = bucket.monthly_contribution
            percentage = st.number_input(
                "Contribution (% of salary)", min_value=0.0, max_value=100.0,
                value=bucket.contribution_percentage * 100, step=0.5, key=f"{key}_pct"
            ) / 100

        cap = st.number_input(
            "Annual contribution cap (0 = none)", min_value=0.0,
            value=float(bucket.max_annual_contribution or 0.0), step=500.0, key=f"{key}_cap"
        )

        match = bucket.employer_match
        match_limit = bucket.employer_match_limit
        if bucket.employer_match_eligible:
            col1, col2 = st.columns(2)
            with col1:
                match = st.number_input(
                    "Employer match (%)", min_value=0.0, max_value=200.0,
                    value=(bucket.employer_match or 0.0) * 100, step=5.0, key=f"{key}_match"
                ) / 100
            with col2:
                match_limit = st.number_input(
                    "Match up to (% of salary)", min_value=0.0, max_value=100.0,
                    value=(bucket.employer_match_limit or 0.0) * 100, step=0.5, key=f"{key}_limit"
                ) / 100

        if st.button("🗑️ Remove bucket", key=f"{key}_remove"):
            return None

    return bucket.copy(
        name=name,
        current_balance=balance,
        annual_return=annual_return,
        return_volatility=volatility,
        contribution_mode=mode,
        monthly_contribution=monthly,
        contribution_percentage=percentage,
        max_annual_contribution=cap or None,
        employer_match=match or None,
        employer_match_limit=match_limit or None,
    )


# Sidebar - Configuration
with st.sidebar:
    st.header("⚙️ Configuration")

    with st.expander("💾 Load / Save", expanded=False):
        uploaded_file = st.file_uploader(
            "Load configuration",
            type=["json"],
            help="Load a previously exported configuration"
        )
        if uploaded_file is not None:
            try:
                if apply_uploaded_configuration(
                    st.session_state, uploaded_file.file_id, uploaded_file.getvalue().decode("utf-8")
                ):
                    st.success("Configuration loaded!")
            except ValueError as e:
                st.error(f"Error: {e}")

    config: Configuration = st.session_state.config

    st.subheader("Timeline")
    current_age = st.number_input("Current age", min_value=0, max_value=120, value=config.current_age)
    retirement_age = st.number_input("Retirement age", min_value=0, max_value=120, value=config.retirement_age)
    projection_years = st.slider("Projection years", min_value=1, max_value=80, value=max(1, min(config.projection_years, 80)))

    st.subheader("Income & Spending")
    current_salary = st.number_input(
        "Annual salary", min_value=0.0, value=float(config.current_salary), step=5000.0
    )
    salary_increase = st.number_input(
        "Annual salary increase (%)", value=config.annual_salary_increase * 100, step=0.5
    ) / 100
    monthly_spending = st.number_input(
        "Monthly retirement spending (today)", min_value=0.0,
        value=float(config.monthly_retirement_spending), step=250.0
    )
    spending_increase = st.number_input(
        "Annual spending increase in retirement (%)",
        value=config.retirement_spending_increase * 100, step=0.5
    ) / 100
    currency = st.selectbox(
        "Currency",
        options=list(SUPPORTED_CURRENCIES),
        index=SUPPORTED_CURRENCIES.index(config.currency) if config.currency in SUPPORTED_CURRENCIES else 0
    )

    st.subheader("Simulation")
    num_simulations = st.select_slider(
        "Number of simulations",
        options=[100, 500, 1000, 2500, 5000],
        value=1000
    )

# Buckets
st.header("🪣 Savings Buckets")

edited_buckets = []
for i, bucket in enumerate(config.buckets):
    edited = bucket_editor(bucket, i)
    if edited is not None:
        edited_buckets.append(edited)

col1, col2 = st.columns([3, 1])
with col1:
    new_category = st.selectbox(
        "Preset",
        options=list(BucketCategory),
        format_func=lambda c: CATEGORY_LABELS[c]
    )
with col2:
    st.write("")
    add_bucket = st.button("➕ Add bucket", use_container_width=True)
if add_bucket:
    edited_buckets.append(create_bucket(new_category))

config = Configuration(
    current_age=int(current_age),
    retirement_age=int(retirement_age),
    projection_years=int(projection_years),
    current_salary=current_salary,
    annual_salary_increase=salary_increase,
    monthly_retirement_spending=monthly_spending,
    retirement_spending_increase=spending_increase,
    buckets=edited_buckets,
    currency=currency,
)
st.session_state.config = config
if add_bucket:
    st.rerun()

with st.sidebar:
    with st.expander("💾 Export configuration", expanded=False):
        st.download_button(
            label="📥 Download JSON",
            data=save_configuration(config),
            file_name=f"wealth-forecast-{datetime.now().strftime('%Y-%m-%d')}.json",
            mime="application/json",
            use_container_width=True
        )

    st.markdown("---")
    run_simulation = st.button("🚀 Run Wealth Projection", type="primary", use_container_width=True)

problems = validate_configuration(config)
for problem in problems:
    st.warning(problem)

if run_simulation:
    if not config.buckets:
        st.error("Please add at least one bucket.")
    else:
        with st.spinner(f"Running {num_simulations:,} simulations..."):
            simulator = MonteCarloSimulator(num_simulations=num_simulations)
            st.session_state.results = simulator.run(config)
            st.session_state.results_config = config.copy()

# Results
if st.session_state.results is not None:
    results = st.session_state.results
    results_config = st.session_state.results_config
    symbol = CURRENCIES.get(results_config.currency, "$")
    summary = summarize(results_config, results)

    def money(value):
        return format_currency(value, results_config.currency)

    st.header("📊 Results")
    cols = st.columns(4)
    with cols[0]:
        st.metric("Final Wealth (Expected)", money(summary.final_deterministic),
                  help="Steady average returns every year, no volatility")
    with cols[1]:
        st.metric("Monte Carlo Median (P50)", money(summary.final_p50))
    with cols[2]:
        st.metric("Conservative (P10)", money(summary.final_p10),
                  help="90% of simulations did better than this")
    with cols[3]:
        st.metric("Optimistic (P90)", money(summary.final_p90),
                  help="Only 10% of simulations did better than this")

    cols = st.columns(3)
    with cols[0]:
        st.metric("Spending in first retirement year", money(summary.retirement_spending))
    with cols[1]:
        rate = summary.safe_withdrawal_rate
        st.metric("Withdrawal rate at retirement (P50)", format_percentage(rate) if rate is not None else "n/a")
    with cols[2]:
        st.metric("P10 runs out at age", summary.run_out_age if summary.run_out_age is not None else "Never")

    tab1, tab2, tab3, tab4 = st.tabs(["📈 Projection", "🪣 Buckets", "🎲 Simulations", "📥 Export"])

    with tab1:
        col1, col2 = st.columns([3, 1])
        with col1:
            st.plotly_chart(plot_projection_bands(results, results_config, symbol), use_container_width=True)
        with col2:
            st.plotly_chart(plot_readiness_gauge(summary.readiness_score), use_container_width=True)
        st.dataframe(percentiles_to_dataframe(results), use_container_width=True, hide_index=True)

    with tab2:
        st.plotly_chart(plot_bucket_balances(results, results_config, symbol), use_container_width=True)
        st.dataframe(
            trajectory_to_dataframe(results.deterministic, bucket_column_names(results_config)),
            use_container_width=True,
            hide_index=True
        )

    with tab3:
        st.plotly_chart(plot_sample_trials(results), use_container_width=True)

    with tab4:
        col1, col2 = st.columns(2)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        with col1:
            st.download_button(
                label="📊 Excel report",
                data=create_excel_report(results_config, results),
                file_name=f"wealth_forecast_{timestamp}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True
            )
        with col2:
            st.download_button(
                label="📄 CSV report",
                data=create_csv_report(results_config, results),
                file_name=f"wealth_forecast_{timestamp}.csv",
                mime="text/csv",
                use_container_width=True
            )
else:
    st.info('Configure your inputs and click "Run Wealth Projection" to see your forecast')
