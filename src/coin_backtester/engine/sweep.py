"""
Parameter sweep generation.

Expands requested ranges into the Cartesian product of parameter values,
in declared order with the first parameter varying slowest.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from coin_backtester.exceptions import ParameterRangeError

if TYPE_CHECKING:
    from coin_backtester.engine.models import ParameterRange


def _decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return max(-int(exponent), 0)


def range_values(parameter_range: ParameterRange) -> list[Decimal]:
    """
    Inclusive arithmetic sequence minimum, minimum + step, ... <= maximum.

    Bounds and step are scaled to integers by their largest number of decimal
    places, so 0.1-steps never drift.

    Raises:
        ParameterRangeError: If step <= 0 or minimum > maximum.
    """
    minimum, maximum, step = (
        parameter_range.minimum,
        parameter_range.maximum,
        parameter_range.step,
    )
    if step <= 0:
        raise ParameterRangeError(f"Range step must be positive, got {step}")
    if minimum > maximum:
        raise ParameterRangeError(
            f"Range minimum {minimum} is greater than maximum {maximum}"
        )

    precision = max(_decimal_places(v) for v in (minimum, maximum, step))
    scale = Decimal(10) ** precision
    lo, hi, st = (int(v * scale) for v in (minimum, maximum, step))

    return [Decimal(i).scaleb(-precision) for i in range(lo, hi + 1, st)]


def generate_combinations(
    ranges: Mapping[str, ParameterRange],
) -> Iterator[dict[str, Decimal]]:
    """
    Yield every combination of range values as a name -> value dict.

    An empty mapping yields a single empty combination.
    """
    names = list(ranges)
    value_lists = [range_values(ranges[name]) for name in names]

    for combo in itertools.product(*value_lists):
        yield dict(zip(names, combo))


def count_combinations(ranges: Mapping[str, ParameterRange]) -> int:
    """Number of combinations ``generate_combinations`` would yield."""
    total = 1
    for parameter_range in ranges.values():
        total *= len(range_values(parameter_range))
    return total
