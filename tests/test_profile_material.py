"""
Profile material calculator tests.

Tests:
1.    Worked example (reusable offcut, scrapped length billed)
2-3.  Unusable offcut bills whole bars; reuse boundary
4-8.  Bar count ceiling, exact bar multiples, minimum one bar, leftover never negative
9-10. Rounding happens on output only
11-12. Invalid bar length
"""

import math

import pytest

from serramenti.calculators.profile_material import calculate_profile_material
from serramenti.errors import InvalidConfiguration


def _calc(height=200, width=100, height_multiplier=2, width_multiplier=2,
          scrap_percentage=5, bar_length=6, cost_per_meter=10,
          min_reusable_length=0.5, profile_name="A"):
    return calculate_profile_material(
        height=height,
        width=width,
        height_multiplier=height_multiplier,
        width_multiplier=width_multiplier,
        scrap_percentage=scrap_percentage,
        bar_length=bar_length,
        cost_per_meter=cost_per_meter,
        min_reusable_length=min_reusable_length,
        profile_name=profile_name,
    )


def test_worked_example():
    """200 x 100 cm, 2/2 multipliers, 5% scrap, 6 m bars at 10/m."""
    result = _calc()
    assert result["profile_name"] == "A"
    assert result["required_length"] == 6.0      # 2*2 + 1*2
    assert result["length_with_scrap"] == 6.3
    assert result["full_bars"] == 2              # ceil(6.3 / 6)
    assert result["leftover"] == 5.7             # 12 - 6.3
    assert result["is_reusable"] is True         # 5.7 >= 0.5
    assert result["used_length"] == 6.3
    assert result["cost"] == 63.00


def test_unusable_offcut_bills_full_bars():
    """Leftover below the reuse threshold, the customer pays for whole bars."""
    # 250 x 0 cm, mult 2 → 5.0 m, no scrap, 6 m bar → leftover 1.0 < 1.5
    result = _calc(height=250, width=0, scrap_percentage=0, min_reusable_length=1.5)
    assert result["full_bars"] == 1
    assert result["leftover"] == 1.0
    assert result["is_reusable"] is False
    assert result["used_length"] == 6.0
    assert result["cost"] == 60.00


def test_reuse_boundary_equality_is_reusable():
    """leftover == min_reusable_length counts as reusable."""
    result = _calc(height=250, width=0, scrap_percentage=0, min_reusable_length=1.0)
    assert result["leftover"] == 1.0
    assert result["is_reusable"] is True
    assert result["used_length"] == 5.0
    assert result["cost"] == 50.00


def test_bar_ceiling_holds_across_range():
    """full_bars * bar_length always covers the scrapped length."""
    for height in range(0, 301, 7):
        for width in range(0, 301, 11):
            r = _calc(height=height, width=width, scrap_percentage=7, bar_length=6.5,
                      min_reusable_length=0.8)
            assert r["full_bars"] >= 1
            assert r["full_bars"] * 6.5 >= r["length_with_scrap"]
            assert r["leftover"] >= 0
            # Reuse is decided on the unrounded leftover
            with_scrap = (height / 100.0 * 2 + width / 100.0 * 2) * (1 + 7 / 100.0)
            leftover = max(0.0, r["full_bars"] * 6.5 - with_scrap)
            assert r["is_reusable"] == (leftover >= 0.8)
            expected_used = r["length_with_scrap"] if r["is_reusable"] else r["full_bars"] * 6.5
            assert r["used_length"] == pytest.approx(expected_used, abs=1e-3)


def test_exact_bar_length_buys_one_bar():
    """0.2 * 2 + 1.8 * 3 lands a hair above 5.8 in floating point, still one bar."""
    result = _calc(height=20, width=180, height_multiplier=2, width_multiplier=3,
                   scrap_percentage=0, bar_length=5.8, min_reusable_length=0.5)
    assert result["length_with_scrap"] == 5.8
    assert result["full_bars"] == 1
    assert result["leftover"] == 0.0
    assert result["is_reusable"] is False
    assert result["used_length"] == 5.8
    assert result["cost"] == 58.00


def test_exact_multiples_never_buy_an_extra_bar():
    for height in range(0, 301, 10):
        for width in range(0, 301, 10):
            r = _calc(height=height, width=width, height_multiplier=2, width_multiplier=3,
                      scrap_percentage=0, bar_length=5.8)
            assert r["full_bars"] == max(1, math.ceil(round(r["length_with_scrap"] / 5.8, 6)))


def test_zero_opening_still_buys_one_bar():
    result = _calc(height=0, width=0, min_reusable_length=0.5)
    assert result["required_length"] == 0.0
    assert result["full_bars"] == 1
    assert result["leftover"] == 6.0
    assert result["is_reusable"] is True
    assert result["cost"] == 0.0


def test_exact_bar_multiple_has_no_leftover():
    """6 m and 12 m on 6 m bars, whole bars, nothing left."""
    result = _calc(height=300, width=0, scrap_percentage=0, min_reusable_length=0.0)
    assert result["required_length"] == 6.0
    assert result["full_bars"] == 1
    assert result["leftover"] == 0.0
    assert result["is_reusable"] is True

    result = _calc(height=300, width=300, scrap_percentage=0, min_reusable_length=0.5)
    assert result["required_length"] == 12.0
    assert result["full_bars"] == 2
    assert result["is_reusable"] is False
    assert result["used_length"] == 12.0


def test_lengths_rounded_to_three_decimals():
    # 123 x 77 cm, mult 1/1 → 2.0 m, 3.3% scrap → 2.066 m
    result = _calc(height=123, width=77, height_multiplier=1, width_multiplier=1,
                   scrap_percentage=3.3, cost_per_meter=12.37)
    assert result["length_with_scrap"] == 2.066
    assert result["is_reusable"] is True
    # Cost uses the unrounded length: 2.066 * 12.37 = 25.55642
    assert result["cost"] == round(2.0 * 1.033 * 12.37, 2)


def test_cost_rounded_to_cents():
    result = _calc(height=100, width=100, height_multiplier=1, width_multiplier=1,
                   scrap_percentage=0, cost_per_meter=3.333)
    assert result["used_length"] == 2.0
    assert result["cost"] == 6.67


def test_zero_bar_length_rejected():
    with pytest.raises(InvalidConfiguration) as exc:
        _calc(bar_length=0)
    assert exc.value.details["profile_name"] == "A"


def test_negative_bar_length_rejected():
    with pytest.raises(InvalidConfiguration):
        _calc(bar_length=-6)
