"""
Tests for the portfolio calculations: totals, allocations, bucket status,
FI progress, CAGR and historical metrics.
"""

import pytest

from portfolio_tracker.calculations import (
    calculate_allocations,
    calculate_bucket_status,
    calculate_cagr,
    calculate_fi_progress,
    calculate_historical_metrics,
    calculate_total,
)
from portfolio_tracker.data import HISTORICAL_DATA, INITIAL_BUCKETS
from portfolio_tracker.errors import InvalidInput, MissingField
from portfolio_tracker.models import BucketStatus, HistoricalEntry, Portfolio


def entry(year, networth, gains_percentage=0.0, total_saved=1_000, annual_savings=1_000):
    return HistoricalEntry(
        year=year,
        networth=networth,
        total_saved=total_saved,
        annual_savings=annual_savings,
        annual_gains=0,
        gains_percentage=gains_percentage,
    )


class TestTotal:
    """Tests for calculate_total."""

    def test_total_of_model(self):
        """Test the total of a Portfolio model."""
        portfolio = Portfolio(**INITIAL_BUCKETS)
        assert calculate_total(portfolio) == 476_847

    def test_total_of_mapping(self):
        """Test the total of a raw mapping."""
        assert calculate_total({"core": 1.5, "growth": 2, "crypto": 0, "hedge": 0.5}) == 4.0

    def test_total_ignores_extra_keys(self):
        """Test that monthly savings and metadata are not summed."""
        data = {"core": 1, "growth": 1, "crypto": 1, "hedge": 1, "monthly_savings": 7_000}
        assert calculate_total(data) == 4

    def test_missing_bucket_raises(self):
        """Test that a missing bucket is reported by name."""
        with pytest.raises(MissingField, match="hedge"):
            calculate_total({"core": 1, "growth": 1, "crypto": 1})

    def test_missing_field_is_invalid_input(self):
        """Test MissingField is an InvalidInput."""
        with pytest.raises(InvalidInput):
            calculate_total({"core": 1})

    @pytest.mark.parametrize("bad", ["100", None, True, float("nan"), float("inf"), -1])
    def test_bad_bucket_value_raises(self, bad):
        """Test non-numeric, non-finite and negative values are rejected."""
        with pytest.raises(InvalidInput):
            calculate_total({"core": bad, "growth": 1, "crypto": 1, "hedge": 1})

    def test_non_mapping_raises(self):
        """Test that a non-mapping portfolio is rejected."""
        with pytest.raises(InvalidInput):
            calculate_total([1, 2, 3, 4])


class TestAllocations:
    """Tests for calculate_allocations."""

    def test_allocations_sum_to_100(self):
        """Test percentages add up to 100 when total > 0."""
        allocations = calculate_allocations(Portfolio(**INITIAL_BUCKETS))
        assert allocations.total_percentage == pytest.approx(100)

    def test_allocation_values(self):
        """Test each bucket's share of the total."""
        allocations = calculate_allocations({"core": 55, "growth": 5, "crypto": 10, "hedge": 30})
        assert allocations.core == pytest.approx(55)
        assert allocations.growth == pytest.approx(5)
        assert allocations.crypto == pytest.approx(10)
        assert allocations.hedge == pytest.approx(30)

    def test_zero_total_gives_zero_allocations(self):
        """Test a zero total yields exactly zero, not NaN."""
        allocations = calculate_allocations({"core": 0, "growth": 0, "crypto": 0, "hedge": 0})
        assert allocations.as_dict() == {"core": 0.0, "growth": 0.0, "crypto": 0.0, "hedge": 0.0}

    def test_single_bucket_holds_everything(self):
        """Test a portfolio entirely in one bucket."""
        allocations = calculate_allocations({"core": 0, "growth": 0, "crypto": 0, "hedge": 250})
        assert allocations.hedge == pytest.approx(100)
        assert allocations.core == 0


class TestBucketStatus:
    """Tests for calculate_bucket_status."""

    @pytest.mark.parametrize("current, expected", [
        (100, BucketStatus.ON_TARGET),
        (95, BucketStatus.ON_TARGET),
        (105, BucketStatus.ON_TARGET),
        (80, BucketStatus.CLOSE),
        (120, BucketStatus.CLOSE),
        (79, BucketStatus.OFF_TARGET),
        (121, BucketStatus.OFF_TARGET),
        (0, BucketStatus.OFF_TARGET),
    ])
    def test_status_bands(self, current, expected):
        """Test the on-target and close bands."""
        assert calculate_bucket_status(current, 100) == expected

    def test_non_positive_target_raises(self):
        """Test a zero target is rejected."""
        with pytest.raises(InvalidInput):
            calculate_bucket_status(100, 0)


class TestFIProgress:
    """Tests for calculate_fi_progress."""

    def test_halfway(self):
        """Test progress, income and the linear projection at 50%."""
        progress = calculate_fi_progress(925_000, 1_850_000, 0.04, 0.07)
        assert progress.percentage == pytest.approx(50)
        assert progress.remaining == pytest.approx(925_000)
        assert progress.monthly_passive_income == pytest.approx(925_000 * 0.04 / 12)
        assert progress.years_to_target == pytest.approx(1 / 0.07)

    def test_target_reached(self):
        """Test percentage clamps at 100 and nothing remains."""
        progress = calculate_fi_progress(3_000_000, 2_500_000, 0.04, 0.07)
        assert progress.percentage == 100
        assert progress.remaining == 0
        assert progress.years_to_target == 0

    def test_zero_current(self):
        """Test zero current value has no projection."""
        progress = calculate_fi_progress(0, 1_850_000, 0.04, 0.07)
        assert progress.percentage == 0
        assert progress.remaining == 1_850_000
        assert progress.monthly_passive_income == 0
        assert progress.years_to_target is None

    def test_percentage_is_monotone_and_clamped(self):
        """Test percentage never decreases as current grows, within [0, 100]."""
        currents = [0, 1, 1_000, 500_000, 1_849_999, 1_850_000, 1_850_001, 10_000_000]
        percentages = [
            calculate_fi_progress(current, 1_850_000, 0.04, 0.07).percentage
            for current in currents
        ]
        assert percentages == sorted(percentages)
        assert all(0 <= value <= 100 for value in percentages)

    @pytest.mark.parametrize("target", [0, -1, float("nan")])
    def test_non_positive_target_raises(self, target):
        """Test the target must be positive."""
        with pytest.raises(InvalidInput):
            calculate_fi_progress(100, target, 0.04, 0.07)

    def test_negative_current_raises(self):
        """Test a negative current value is rejected."""
        with pytest.raises(InvalidInput):
            calculate_fi_progress(-1, 100, 0.04, 0.07)


class TestCAGR:
    """Tests for calculate_cagr."""

    def test_doubling_in_one_year(self):
        """Test doubling over one year is 100%."""
        assert calculate_cagr(100, 200, 1) == pytest.approx(100)

    def test_flat(self):
        """Test no growth is 0%."""
        assert calculate_cagr(100, 100, 5) == pytest.approx(0)

    def test_matches_formula(self):
        """Test against the closed-form formula."""
        expected = ((491_132 / 20_000) ** (1 / 7) - 1) * 100
        assert calculate_cagr(20_000, 491_132, 7) == pytest.approx(expected)

    @pytest.mark.parametrize("start, end, years", [
        (0, 100, 1),
        (-5, 100, 1),
        (100, 200, 0),
        (100, 200, -1),
        (100, -1, 1),
    ])
    def test_undefined_inputs_raise(self, start, end, years):
        """Test CAGR refuses inputs it is undefined for."""
        with pytest.raises(InvalidInput):
            calculate_cagr(start, end, years)


class TestHistoricalMetrics:
    """Tests for calculate_historical_metrics over the reference series."""

    @pytest.fixture
    def metrics(self):
        return calculate_historical_metrics(491_132, HISTORICAL_DATA)

    def test_gains(self, metrics):
        """Test gains against the latest cumulative savings."""
        assert metrics.total_saved == 327_219
        assert metrics.actual_gains == pytest.approx(491_132 - 327_219)
        assert metrics.gains_percentage == pytest.approx(50.1, abs=0.05)

    def test_cagr(self, metrics):
        """Test CAGR spans first to last year from the first year's savings."""
        assert metrics.years == 7
        assert metrics.cagr == pytest.approx(((491_132 / 20_000) ** (1 / 7) - 1) * 100)

    def test_peak(self, metrics):
        """Test the 2021 peak and the drawdown from it."""
        assert metrics.peak_year == 2021
        assert metrics.peak_value == 578_896
        assert metrics.recovery_from_peak == pytest.approx(
            (491_132 - 578_896) / 578_896 * 100
        )

    def test_best_and_worst_year(self, metrics):
        """Test the years with the highest and lowest returns."""
        assert metrics.best_year.year == 2021
        assert metrics.worst_year.year == 2022

    def test_uses_live_total(self):
        """Test the current total drives gains, not the last recorded networth."""
        metrics = calculate_historical_metrics(600_000, HISTORICAL_DATA)
        assert metrics.current_networth == 600_000
        assert metrics.actual_gains == pytest.approx(600_000 - 327_219)

    def test_peak_ties_keep_first(self):
        """Test the first maximal entry wins a tie."""
        history = [entry(2020, 500), entry(2021, 900), entry(2022, 900)]
        metrics = calculate_historical_metrics(800, history)
        assert metrics.peak_year == 2021

    def test_empty_history_raises(self):
        """Test an empty series is rejected."""
        with pytest.raises(InvalidInput):
            calculate_historical_metrics(100, [])

    def test_single_year_history_raises(self):
        """Test a series spanning zero years has no CAGR."""
        with pytest.raises(InvalidInput):
            calculate_historical_metrics(100, [entry(2020, 100)])

    def test_zero_total_saved_raises(self):
        """Test gains percentage is undefined without savings."""
        history = [entry(2020, 100), entry(2021, 100, total_saved=0)]
        with pytest.raises(InvalidInput):
            calculate_historical_metrics(100, history)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
