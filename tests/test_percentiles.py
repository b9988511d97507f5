"""
Tests for nearest-rank percentile bands.
"""
import pytest

from wealth_forecaster.simulation.percentiles import (
    PERCENTILES,
    compute_percentile_bands,
    nearest_rank_index,
    total_balance_matrix,
)
from wealth_forecaster.simulation.trajectory import YearlySnapshot


def make_trial(totals: list[float]) -> list[YearlySnapshot]:
    return [
        YearlySnapshot(
            year=year,
            age=30 + year,
            salary=0.0,
            total_balance=total,
            bucket_balances={"a": total},
            contributions=0.0,
            returns=0.0,
            withdrawals=0.0
        )
        for year, total in enumerate(totals)
    ]


class TestNearestRankIndex:
    """Tests for the index rule."""

    def test_floor_of_n_times_p(self):
        assert nearest_rank_index(1000, 0.10) == 100
        assert nearest_rank_index(1000, 0.50) == 500
        assert nearest_rank_index(1000, 0.90) == 900

    def test_small_samples(self):
        assert nearest_rank_index(4, 0.25) == 1
        assert nearest_rank_index(4, 0.90) == 3
        assert nearest_rank_index(3, 0.10) == 0

    def test_single_trial_clamped(self):
        for p in PERCENTILES.values():
            assert nearest_rank_index(1, p) == 0

    def test_never_past_the_end(self):
        for n in range(1, 200):
            for p in PERCENTILES.values():
                assert 0 <= nearest_rank_index(n, p) <= n - 1


class TestComputePercentileBands:
    """Tests for compute_percentile_bands."""

    def test_labels(self):
        bands = compute_percentile_bands([make_trial([1.0, 2.0])])
        assert list(bands) == ["p10", "p25", "p50", "p75", "p90"]

    def test_known_values(self):
        # Ten trials with final totals 0, 10, ..., 90 in shuffled order
        finals = [50, 20, 90, 0, 70, 10, 40, 80, 30, 60]
        trials = [make_trial([100.0, float(v)]) for v in finals]
        bands = compute_percentile_bands(trials)

        assert bands["p10"] == [100.0, 10.0]
        assert bands["p25"] == [100.0, 20.0]
        assert bands["p50"] == [100.0, 50.0]
        assert bands["p75"] == [100.0, 70.0]
        assert bands["p90"] == [100.0, 90.0]

    def test_each_year_sorted_independently(self):
        trials = [
            make_trial([1.0, 30.0]),
            make_trial([2.0, 10.0]),
            make_trial([3.0, 20.0]),
        ]
        bands = compute_percentile_bands(trials)
        # n = 3: p50 -> index 1, p90 -> index 2
        assert bands["p50"] == [2.0, 20.0]
        assert bands["p90"] == [3.0, 30.0]

    def test_single_trial(self):
        bands = compute_percentile_bands([make_trial([5.0, 6.0, 7.0])])
        for band in bands.values():
            assert band == [5.0, 6.0, 7.0]

    def test_monotonic(self):
        trials = [make_trial([float(i % 7), float((i * 13) % 11)]) for i in range(37)]
        bands = compute_percentile_bands(trials)
        for year in range(2):
            values = [bands[label][year] for label in PERCENTILES]
            assert values == sorted(values)

    def test_no_trials(self):
        bands = compute_percentile_bands([])
        assert bands == {label: [] for label in PERCENTILES}

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            compute_percentile_bands([make_trial([1.0, 2.0]), make_trial([1.0])])

    def test_total_balance_matrix_shape(self):
        trials = [make_trial([1.0, 2.0, 3.0]) for _ in range(4)]
        assert total_balance_matrix(trials).shape == (4, 3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
