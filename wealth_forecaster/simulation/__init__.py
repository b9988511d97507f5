from .contributions import calculate_yearly_contribution
from .yearly_step import YearStepResult, simulate_year
from .trajectory import YearlySnapshot, annual_withdrawal_need, build_trajectory, project
from .percentiles import PERCENTILES, compute_percentile_bands, nearest_rank_index
from .monte_carlo import MonteCarloSimulator, SimulationResult, TrialBatch, simulate
from .summary import ProjectionSummary, summarize
