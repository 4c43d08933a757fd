"""Tests for core.stageplan.allocator -- splitting days across stages.

Covers the exact-sum and minimum-one-day invariants, the
largest-remainder corrections in both directions, and rejection of
durations the invariants cannot satisfy.
"""

import random

import pytest

from core.stageplan import InvalidCatalog, InvalidDuration, allocate_days, round_half_up


def _days(allocated):
    return [s.days for s in allocated]


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(2.49) == 2

    def test_negative_half_rounds_away_from_zero(self):
        assert round_half_up(-2.5) == -3


class TestCanonicalCatalog:
    def test_hundred_days_matches_weights(self, catalog):
        assert _days(allocate_days(100, catalog)) == [3, 5, 3, 10, 20, 15, 32, 12]

    def test_output_keeps_stage_order_and_names(self, catalog):
        allocated = allocate_days(100, catalog)
        assert [s.number for s in allocated] == list(range(1, 9))
        assert [s.name for s in allocated] == [s.name for s in catalog]
        assert [s.weight for s in allocated] == [s.weight for s in catalog]

    @pytest.mark.parametrize("total", list(range(8, 401)))
    def test_sum_and_minimum_invariants(self, catalog, total):
        days = _days(allocate_days(total, catalog))
        assert sum(days) == total
        assert min(days) >= 1

    def test_smallest_accepted_total_gives_one_day_each(self, catalog):
        assert _days(allocate_days(8, catalog)) == [1] * 8


class TestRemainderCorrection:
    def test_shortfall_goes_to_largest_remainders_first(self, make_catalog):
        # 11 * 0.125 = 1.375 everywhere: rounds to 8, 3 days short;
        # equal remainders keep stage order
        assert _days(allocate_days(11, make_catalog([0.125] * 8))) == [2, 2, 2, 1, 1, 1, 1, 1]

    def test_shortfall_prefers_largest_fraction(self, make_catalog):
        # exact = [1.3, 1.3, 2.4] -> [1, 1, 2], one day short
        assert _days(allocate_days(5, make_catalog([0.26, 0.26, 0.48]))) == [1, 1, 3]

    def test_shortfall_cycles_when_larger_than_stage_count(self, make_catalog):
        # weights sum to 0.4, so 12 days are left over for 8 stages
        assert _days(allocate_days(20, make_catalog([0.05] * 8))) == [3, 3, 3, 3, 2, 2, 2, 2]

    def test_excess_taken_from_smallest_remainders(self, make_catalog):
        # 12 * 0.125 = 1.5 rounds to 2 everywhere: 4 days over
        assert _days(allocate_days(12, make_catalog([0.125] * 8))) == [1, 1, 1, 1, 2, 2, 2, 2]

    def test_excess_from_overweight_catalog(self, make_catalog):
        assert _days(allocate_days(8, make_catalog([0.25] * 8))) == [1] * 8

    def test_zero_weight_stages_still_get_one_day(self, make_catalog):
        days = _days(allocate_days(10, make_catalog([0.0] * 7 + [1.0])))
        assert days == [1, 1, 1, 1, 1, 1, 1, 3]

    def test_single_stage_takes_everything(self, make_catalog):
        assert _days(allocate_days(5, make_catalog([1.0]))) == [5]

    def test_random_catalogs_keep_invariants(self, make_catalog):
        rng = random.Random(20250101)
        for _ in range(300):
            weights = [rng.random() for _ in range(8)]
            scale = rng.choice([1.0, 0.5, 1.7])
            total_w = sum(weights)
            catalog = make_catalog([w / total_w * scale for w in weights])
            total = rng.randint(8, 1000)
            days = _days(allocate_days(total, catalog))
            assert sum(days) == total
            assert min(days) >= 1


class TestErrors:
    @pytest.mark.parametrize("total", [0, -1, -100])
    def test_non_positive_total_rejected(self, catalog, total):
        with pytest.raises(InvalidDuration):
            allocate_days(total, catalog)

    @pytest.mark.parametrize("total", [None, 1.5, "100", True])
    def test_non_integer_total_rejected(self, catalog, total):
        with pytest.raises(InvalidDuration):
            allocate_days(total, catalog)

    def test_total_below_stage_count_rejected(self, catalog):
        # 5 days cannot give 8 stages one day each and still sum to 5
        with pytest.raises(InvalidDuration) as exc:
            allocate_days(5, catalog)
        assert exc.value.kind == "INVALID_DURATION"

    def test_empty_catalog_rejected(self):
        with pytest.raises(InvalidCatalog):
            allocate_days(10, [])

    def test_negative_weight_rejected(self, make_catalog):
        with pytest.raises(InvalidCatalog):
            allocate_days(10, make_catalog([0.5, -0.1, 0.6]))
