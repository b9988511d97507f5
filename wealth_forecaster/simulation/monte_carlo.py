"""
Monte Carlo Simulation Engine for wealth projections.

Runs many stochastic trajectories of the same configuration and summarizes
them as percentile bands next to the deterministic projection.
"""
import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

import numpy as np

from .percentiles import compute_percentile_bands, total_balance_matrix
from .random_source import SeedLike, as_seed_sequence
from .trajectory import YearlySnapshot, build_trajectory, project

if TYPE_CHECKING:
    from wealth_forecaster.accounts.configuration import Configuration

logger = logging.getLogger(__name__)

Trajectory = list[YearlySnapshot]


@dataclass
class SimulationResult:
    """Deterministic projection plus all Monte Carlo trials and their percentiles."""

    deterministic: Trajectory
    trials: list[Trajectory]
    percentiles: dict[str, list[float]]  # "p10" ... "p90", aligned by year

    @property
    def num_simulations(self) -> int:
        return len(self.trials)

    @property
    def num_years(self) -> int:
        return len(self.deterministic)

    @property
    def total_balances(self) -> np.ndarray:
        """Shape: (num_simulations, num_years)"""
        return total_balance_matrix(self.trials)

    @property
    def final_values(self) -> np.ndarray:
        """Shape: (num_simulations,)"""
        totals = self.total_balances
        if totals.size == 0:
            return np.array([])
        return totals[:, -1]

    @property
    def deterministic_final_value(self) -> float:
        if not self.deterministic:
            return 0.0
        return self.deterministic[-1].total_balance

    @property
    def mean_final_value(self) -> float:
        return float(np.mean(self.final_values)) if self.num_simulations else 0.0

    def final_percentile(self, label: str) -> float:
        """Last value of a percentile band (0 if the band is empty)."""
        band = self.percentiles[label]
        return band[-1] if band else 0.0


@dataclass
class TrialBatch:
    """A group of trials drawn from one random stream."""

    index: int
    trials: list[Trajectory]


def run_trial_batch(
    config: "Configuration",
    num_trials: int,
    seed: np.random.SeedSequence,
    index: int = 0
) -> TrialBatch:
    """
    Run num_trials stochastic trajectories with a generator built from seed.

    Top-level function so it's picklable for worker processes.
    """
    rng = np.random.default_rng(seed)
    trials = [build_trajectory(config, stochastic=True, rng=rng) for _ in range(num_trials)]
    return TrialBatch(index=index, trials=trials)


class MonteCarloSimulator:
    """
    Monte Carlo simulator for multi-bucket wealth projections.

    Trials are split into fixed-size batches. Every batch gets its own child
    SeedSequence, so a given seed yields the same trials no matter how many
    workers run the batches.
    """

    def __init__(
        self,
        num_simulations: int = 1000,
        random_seed: SeedLike = None,
        max_workers: int = 1,
        batch_size: int = 250
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.num_simulations = num_simulations
        self.random_seed = random_seed
        self.max_workers = max_workers
        self.batch_size = batch_size
        self.seed_sequence = as_seed_sequence(random_seed)

    def _batch_sizes(self) -> list[int]:
        full, rest = divmod(max(self.num_simulations, 0), self.batch_size)
        sizes = [self.batch_size] * full
        if rest:
            sizes.append(rest)
        return sizes

    def iter_batches(self, config: "Configuration") -> Iterator[TrialBatch]:
        """
        Yield trial batches as they complete.

        With several workers the batches arrive in completion order; use
        TrialBatch.index to restore the original order.
        """
        sizes = self._batch_sizes()
        seeds = self.seed_sequence.spawn(len(sizes))

        if self.max_workers <= 1 or len(sizes) <= 1:
            for index, (size, seed) in enumerate(zip(sizes, seeds)):
                yield run_trial_batch(config, size, seed, index)
            return

        with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(run_trial_batch, config, size, seed, index)
                for index, (size, seed) in enumerate(zip(sizes, seeds))
            ]
            for future in as_completed(futures):
                batch = future.result()
                logger.debug("Batch %d finished (%d trials)", batch.index, len(batch.trials))
                yield batch

    def run(self, config: "Configuration") -> SimulationResult:
        """
        Run the deterministic projection and all Monte Carlo trials.

        Args:
            config: Projection configuration

        Returns:
            SimulationResult with deterministic trajectory, trials and percentiles
        """
        logger.info(
            "Running %d trials over %d years for %d bucket(s) with %d worker(s)",
            self.num_simulations, config.projection_years, len(config.buckets), self.max_workers
        )

        deterministic = project(config)

        batches = sorted(self.iter_batches(config), key=lambda b: b.index)
        trials = [trial for batch in batches for trial in batch.trials]

        percentiles = compute_percentile_bands(trials)
        if not trials:
            logger.warning("No trials were run; percentile bands are empty")

        logger.info("Monte Carlo simulation finished: %d trials", len(trials))

        return SimulationResult(
            deterministic=deterministic,
            trials=trials,
            percentiles=percentiles
        )


def simulate(
    config: "Configuration",
    trial_count: int = 1000,
    random_seed: SeedLike = None,
    max_workers: int = 1
) -> SimulationResult:
    """Deterministic projection plus trial_count Monte Carlo trials."""
    simulator = MonteCarloSimulator(
        num_simulations=trial_count,
        random_seed=random_seed,
        max_workers=max_workers
    )
    return simulator.run(config)
