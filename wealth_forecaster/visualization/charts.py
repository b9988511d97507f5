"""
Plotly visualizations for wealth projections.
"""
from typing import Optional

import numpy as np
import plotly.graph_objects as go

from wealth_forecaster.accounts.configuration import Configuration
from wealth_forecaster.simulation.monte_carlo import SimulationResult

BUCKET_COLORS = ['#3b82f6', '#10b981', '#8b5cf6', '#f59e0b', '#ef4444', '#06b6d4']


def _ages(result: SimulationResult) -> np.ndarray:
    return np.array([s.age for s in result.deterministic])


def plot_projection_bands(
    result: SimulationResult,
    config: Configuration,
    currency_symbol: str = "$"
) -> go.Figure:
    """
    Plot Monte Carlo percentile bands with the deterministic projection.

    Args:
        result: Simulation result
        config: Configuration used for the simulation (retirement marker)
        currency_symbol: Prefix for the y axis

    Returns:
        Plotly figure
    """
    fig = go.Figure()
    ages = _ages(result)
    bands = result.percentiles

    if len(bands["p50"]) == len(ages) and len(ages) > 0:
        for lower, upper, color, name in [
            ("p10", "p90", 'rgba(59, 130, 246, 0.15)', 'P10 - P90'),
            ("p25", "p75", 'rgba(59, 130, 246, 0.30)', 'P25 - P75'),
        ]:
            fig.add_trace(go.Scatter(
                x=np.concatenate([ages, ages[::-1]]),
                y=np.concatenate([bands[upper], bands[lower][::-1]]),
                fill='toself',
                fillcolor=color,
                line=dict(color='rgba(0,0,0,0)'),
                name=name,
                hoverinfo='skip'
            ))

        fig.add_trace(go.Scatter(
            x=ages,
            y=bands["p50"],
            mode='lines',
            name='Median (P50)',
            line=dict(color='#10b981', width=2)
        ))

    fig.add_trace(go.Scatter(
        x=ages,
        y=[s.total_balance for s in result.deterministic],
        mode='lines',
        name='Expected',
        line=dict(color='#1e3a8a', width=2, dash='dash')
    ))

    if len(ages) > 0 and ages[0] <= config.retirement_age <= ages[-1]:
        fig.add_vline(
            x=config.retirement_age,
            line_dash="dot",
            line_color="gray",
            annotation_text="Retirement"
        )

    fig.update_layout(
        title='Projected Wealth',
        xaxis_title='Age',
        yaxis_title=f'Total Savings ({currency_symbol})',
        yaxis_tickformat=',.0f',
        hovermode='x unified',
        legend=dict(yanchor="top", y=0.99, xanchor="left", x=0.01)
    )

    return fig


def plot_bucket_balances(
    result: SimulationResult,
    config: Configuration,
    currency_symbol: str = "$"
) -> go.Figure:
    """Stacked deterministic balances per bucket."""
    fig = go.Figure()
    ages = _ages(result)

    for i, bucket in enumerate(config.buckets):
        fig.add_trace(go.Scatter(
            x=ages,
            y=[s.bucket_balances.get(bucket.id, 0.0) for s in result.deterministic],
            mode='lines',
            stackgroup='buckets',
            name=bucket.name,
            line=dict(width=1, color=BUCKET_COLORS[i % len(BUCKET_COLORS)])
        ))

    fig.update_layout(
        title='Balance by Bucket (Expected Returns)',
        xaxis_title='Age',
        yaxis_title=f'Balance ({currency_symbol})',
        yaxis_tickformat=',.0f',
        hovermode='x unified'
    )

    return fig


def plot_sample_trials(
    result: SimulationResult,
    num_paths: int = 50,
    random_seed: Optional[int] = None
) -> go.Figure:
    """Plot a random sample of individual trials."""
    fig = go.Figure()
    ages = _ages(result)
    totals = result.total_balances

    if totals.shape[0] > 0:
        rng = np.random.default_rng(random_seed)
        sample_indices = rng.choice(
            totals.shape[0],
            size=min(num_paths, totals.shape[0]),
            replace=False
        )
        for idx in sample_indices:
            fig.add_trace(go.Scatter(
                x=ages,
                y=totals[idx],
                mode='lines',
                line=dict(width=0.5, color='rgba(100, 149, 237, 0.3)'),
                showlegend=False,
                hoverinfo='skip'
            ))

    fig.update_layout(
        title='Sample Simulation Paths',
        xaxis_title='Age',
        yaxis_title='Total Savings',
        yaxis_tickformat=',.0f'
    )

    return fig


def plot_readiness_gauge(readiness_score: Optional[float]) -> go.Figure:
    """
    Create a gauge chart showing retirement readiness.

    Args:
        readiness_score: Share of trials that stay funded (0..1), None if unknown

    Returns:
        Plotly figure
    """
    score = readiness_score or 0.0
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=score * 100,
        domain={'x': [0, 1], 'y': [0, 1]},
        title={'text': "Retirement Readiness"},
        number={'suffix': '%'},
        gauge={
            'axis': {'range': [0, 100]},
            'bar': {'color': "darkgreen" if score >= 0.9 else "orange" if score >= 0.7 else "red"},
            'steps': [
                {'range': [0, 70], 'color': 'rgba(255, 100, 100, 0.3)'},
                {'range': [70, 90], 'color': 'rgba(255, 200, 100, 0.3)'},
                {'range': [90, 100], 'color': 'rgba(100, 200, 100, 0.3)'}
            ],
        }
    ))

    fig.update_layout(
        height=300
    )

    return fig
