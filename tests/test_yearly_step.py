"""
Tests for the one-year step across buckets.
"""
import numpy as np
import pytest
from scipy import stats

from wealth_forecaster.accounts.bucket import Bucket
from wealth_forecaster.simulation.random_source import sample_annual_return, standard_normal
from wealth_forecaster.simulation.yearly_step import (
    YearStepResult,
    proportional_withdrawal,
    simulate_year,
)


@pytest.fixture
def two_buckets() -> list[Bucket]:
    return [
        Bucket(id="a", current_balance=75000.0, annual_return=0.0, return_volatility=0.0),
        Bucket(id="b", current_balance=25000.0, annual_return=0.0, return_volatility=0.0),
    ]


class TestProportionalWithdrawal:
    """Tests for splitting a withdrawal across buckets."""

    def test_share_of_total(self):
        assert proportional_withdrawal(75000.0, 100000.0, 10000.0) == pytest.approx(7500.0)

    def test_zero_total_skips_withdrawal(self):
        assert proportional_withdrawal(0.0, 0.0, 10000.0) == 0.0

    def test_clamped_to_balance(self):
        assert proportional_withdrawal(25000.0, 100000.0, 500000.0) == 25000.0


class TestSimulateYear:
    """Tests for simulate_year."""

    def test_returns_step_result(self, two_buckets):
        balances = {"a": 75000.0, "b": 25000.0}
        result = simulate_year(two_buckets, balances, 50000.0, False, False)
        assert isinstance(result, YearStepResult)
        assert list(result.balances) == ["a", "b"]

    def test_withdrawal_sum_equals_need(self, two_buckets):
        balances = {"a": 75000.0, "b": 25000.0}
        result = simulate_year(two_buckets, balances, 0.0, True, False, annual_withdrawal=20000.0)

        assert result.withdrawals == pytest.approx(20000.0)
        assert result.balances["a"] == pytest.approx(60000.0)
        assert result.balances["b"] == pytest.approx(20000.0)

    def test_withdrawal_clamped_to_total(self, two_buckets):
        balances = {"a": 75000.0, "b": 25000.0}
        result = simulate_year(two_buckets, balances, 0.0, True, False, annual_withdrawal=250000.0)

        assert result.withdrawals == pytest.approx(100000.0)
        assert result.total_balance == 0.0

    def test_no_withdrawal_before_retirement(self, two_buckets):
        balances = {"a": 75000.0, "b": 25000.0}
        result = simulate_year(two_buckets, balances, 50000.0, False, False, annual_withdrawal=20000.0)
        assert result.withdrawals == 0.0
        assert result.total_balance == pytest.approx(100000.0)

    def test_zero_total_balance_skips_withdrawal(self):
        buckets = [Bucket(id="a", annual_return=0.05, return_volatility=0.0)]
        result = simulate_year(buckets, {"a": 0.0}, 0.0, True, False, annual_withdrawal=10000.0)
        assert result.withdrawals == 0.0
        assert result.balances["a"] == 0.0

    def test_half_year_credit_on_contribution(self):
        bucket = Bucket(
            id="a",
            current_balance=10000.0,
            annual_return=0.10,
            return_volatility=0.0,
            monthly_contribution=1000.0
        )
        result = simulate_year([bucket], {"a": 10000.0}, 0.0, False, False)

        # 10,000 * 10% on the balance plus 12,000 * 10% * 0.5 on contributions
        assert result.contributions == pytest.approx(12000.0)
        assert result.returns == pytest.approx(1000.0 + 600.0)
        assert result.balances["a"] == pytest.approx(10000.0 + 12000.0 + 1600.0)

    def test_returns_after_withdrawal(self):
        bucket = Bucket(id="a", current_balance=100000.0, annual_return=0.05, return_volatility=0.0)
        result = simulate_year([bucket], {"a": 100000.0}, 0.0, True, False, annual_withdrawal=20000.0)

        assert result.returns == pytest.approx(4000.0)
        assert result.balances["a"] == pytest.approx(84000.0)

    def test_balance_floors_at_zero(self):
        bucket = Bucket(id="a", current_balance=1000.0, annual_return=-1.5, return_volatility=0.0)
        result = simulate_year([bucket], {"a": 1000.0}, 0.0, False, False)
        assert result.balances["a"] == 0.0

    def test_missing_balance_uses_starting_balance(self):
        bucket = Bucket(id="a", current_balance=5000.0, annual_return=0.0, return_volatility=0.0)
        result = simulate_year([bucket], {}, 0.0, False, False)
        assert result.balances["a"] == 5000.0

    def test_zero_balance_is_not_reset(self):
        bucket = Bucket(id="a", current_balance=5000.0, annual_return=0.0, return_volatility=0.0)
        result = simulate_year([bucket], {"a": 0.0}, 0.0, False, False)
        assert result.balances["a"] == 0.0

    def test_bucket_order_does_not_matter(self, two_buckets):
        balances = {"a": 75000.0, "b": 25000.0}
        forward = simulate_year(two_buckets, balances, 0.0, True, False, annual_withdrawal=30000.0)
        backward = simulate_year(two_buckets[::-1], balances, 0.0, True, False, annual_withdrawal=30000.0)

        for bucket_id in balances:
            assert forward.balances[bucket_id] == pytest.approx(backward.balances[bucket_id])

    def test_empty_bucket_list(self):
        result = simulate_year([], {}, 50000.0, False, False)
        assert result.balances == {}
        assert result.total_balance == 0.0

    def test_stochastic_requires_generator(self, two_buckets):
        with pytest.raises(ValueError):
            simulate_year(two_buckets, {}, 0.0, False, True)

    def test_stochastic_reproducible_with_seed(self):
        bucket = Bucket(id="a", current_balance=100000.0, annual_return=0.07, return_volatility=0.15)
        first = simulate_year([bucket], {}, 0.0, False, True, rng=np.random.default_rng(7))
        second = simulate_year([bucket], {}, 0.0, False, True, rng=np.random.default_rng(7))
        assert first.balances == second.balances

    def test_zero_volatility_stochastic_equals_expected(self):
        bucket = Bucket(id="a", current_balance=100000.0, annual_return=0.07, return_volatility=0.0)
        stochastic = simulate_year([bucket], {}, 0.0, False, True, rng=np.random.default_rng(1))
        expected = simulate_year([bucket], {}, 0.0, False, False)
        assert stochastic.balances["a"] == pytest.approx(expected.balances["a"])


class TestRandomSource:
    """Tests for Box-Muller sampling."""

    def test_standard_normal_distribution(self, rng):
        samples = np.array([standard_normal(rng) for _ in range(5000)])

        assert abs(np.mean(samples)) < 0.05
        assert abs(np.std(samples) - 1.0) < 0.05
        # Kolmogorov-Smirnov against N(0, 1)
        assert stats.kstest(samples, "norm").pvalue > 0.01

    def test_sample_annual_return_scaling(self, rng):
        samples = np.array([sample_annual_return(rng, 0.07, 0.15) for _ in range(5000)])
        assert abs(np.mean(samples) - 0.07) < 0.01
        assert abs(np.std(samples) - 0.15) < 0.01

    def test_consumes_two_uniforms(self):
        rng_a = np.random.default_rng(3)
        rng_b = np.random.default_rng(3)
        standard_normal(rng_a)
        rng_b.random()
        rng_b.random()
        assert rng_a.random() == rng_b.random()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
