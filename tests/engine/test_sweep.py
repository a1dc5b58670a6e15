"""Tests for parameter range expansion and combination generation."""

from decimal import Decimal

import pytest

from coin_backtester.engine.models import ParameterRange
from coin_backtester.engine.sweep import count_combinations, generate_combinations
from coin_backtester.exceptions import ParameterRangeError


class TestParameterRange:

    def test_inclusive_values(self):
        assert ParameterRange(0, 100, 10).values() == [Decimal(v) for v in range(0, 101, 10)]

    def test_fractional_step_does_not_drift(self):
        values = ParameterRange("0.1", "0.5", "0.1").values()
        assert values == [Decimal("0.1"), Decimal("0.2"), Decimal("0.3"), Decimal("0.4"), Decimal("0.5")]

    def test_float_inputs(self):
        assert ParameterRange(0.5, 1.5, 0.5).values() == [Decimal("0.5"), Decimal("1"), Decimal("1.5")]

    def test_step_not_reaching_maximum(self):
        assert ParameterRange(0, 10, 3).values() == [Decimal(v) for v in (0, 3, 6, 9)]

    def test_single_value(self):
        assert ParameterRange(5, 5, 1).values() == [Decimal("5")]

    @pytest.mark.parametrize("step", [0, -1])
    def test_non_positive_step_raises(self, step):
        with pytest.raises(ParameterRangeError):
            ParameterRange(0, 10, step).values()

    def test_minimum_above_maximum_raises(self):
        with pytest.raises(ParameterRangeError):
            ParameterRange(10, 0, 1).values()

    def test_coerce_mapping(self):
        assert ParameterRange.coerce({"minimum": 0, "maximum": 2, "step": 1}) == ParameterRange(0, 2, 1)


class TestGenerateCombinations:

    def test_first_parameter_varies_slowest(self):
        combos = list(generate_combinations({
            "a": ParameterRange(0, 1, 1),
            "b": ParameterRange(0, 10, 10),
        }))
        assert [(c["a"], c["b"]) for c in combos] == [
            (Decimal("0"), Decimal("0")),
            (Decimal("0"), Decimal("10")),
            (Decimal("1"), Decimal("0")),
            (Decimal("1"), Decimal("10")),
        ]

    def test_cartesian_product_size(self):
        ranges = {name: ParameterRange(0, 100, 10) for name in ("a", "b", "c")}
        assert len(list(generate_combinations(ranges))) == 1331
        assert count_combinations(ranges) == 1331

    def test_empty_ranges_yield_single_empty_combination(self):
        assert list(generate_combinations({})) == [{}]
