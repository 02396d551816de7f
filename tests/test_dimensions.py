"""
Dimension range generator tests.

Tests:
1-3. Ordering and inclusive bounds
4-8. Non-multiple ranges, max just below a step, decimal steps
9-11. Empty ranges and invalid increments
"""

import pytest

from serramenti.calculators.dimensions import axis_samples, count_samples, generate_dimensions
from serramenti.errors import InvalidConfiguration


def test_height_major_order():
    """Width varies fastest."""
    assert generate_dimensions(0, 100, 0, 50, 50) == [
        (0, 0), (0, 50), (50, 0), (50, 50), (100, 0), (100, 50),
    ]


def test_single_point_range():
    assert generate_dimensions(10, 10, 10, 10, 5) == [(10, 10)]


def test_size_is_product_of_axes():
    pairs = generate_dimensions(60, 240, 40, 180, 10)
    assert len(pairs) == 19 * 15
    assert pairs[0] == (60, 40)
    assert pairs[-1] == (240, 180)


def test_last_sample_not_above_max():
    """max - min not a multiple of increment: stop at the largest value <= max."""
    assert axis_samples(0, 25, 10) == [0, 10, 20]
    assert count_samples(0, 25, 10) == 3


def test_max_just_below_a_step_is_not_overshot():
    """A max a hair under the next step stops one step earlier."""
    samples = axis_samples(0, 29.9999999999, 10)
    assert samples == [0, 10, 20]
    assert all(s <= 29.9999999999 for s in samples)
    assert count_samples(0, 29.9999999999, 10) == 3


def test_decimal_max_still_included():
    assert axis_samples(0, 0.3, 0.1) == [0, 0.1, 0.2, 0.3]
    assert axis_samples(10, 10.7, 0.1)[-1] == 10.7


def test_decimal_increment_reaches_max():
    """0.1 steps don't drift past or short of the exact max."""
    samples = axis_samples(0, 1, 0.1)
    assert len(samples) == 11
    assert samples[-1] == 1.0
    assert samples[3] == 0.3


def test_count_matches_generated():
    for args in [(0, 100, 7), (50, 50, 1), (10.5, 30.5, 2.5)]:
        assert count_samples(*args) == len(axis_samples(*args))


def test_inverted_range_is_empty():
    assert generate_dimensions(100, 50, 0, 50, 10) == []
    assert generate_dimensions(0, 50, 100, 50, 10) == []
    assert count_samples(100, 50, 10) == 0


def test_zero_increment_rejected():
    with pytest.raises(InvalidConfiguration):
        generate_dimensions(0, 100, 0, 100, 0)


def test_negative_increment_rejected():
    with pytest.raises(InvalidConfiguration) as exc:
        generate_dimensions(0, 100, 0, 100, -5)
    assert exc.value.details["increment"] == -5
