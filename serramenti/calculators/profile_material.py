"""
Profile material calculator: length, bars, offcut and cost of one profile
for one opening.

All length math is in meters; heights and widths come in centimeters.

    required       = h/100 * height_mult + w/100 * width_mult
    with_scrap     = required * (1 + scrap% / 100)
    full_bars      = ceil(with_scrap / bar_length)        (at least 1)
    leftover       = full_bars * bar_length - with_scrap
    reusable       = leftover >= min_reusable_length
    used           = with_scrap if reusable else full_bars * bar_length
    cost           = round(used * cost_per_meter, 2)

A reusable offcut goes back to stock, so only the scrapped length is billed.
An unusable one is waste and the whole bars are billed.
"""

import math

from ..errors import InvalidConfiguration

LENGTH_DECIMALS = 3
CURRENCY_DECIMALS = 2

# Tolerance for "scrapped length is an exact multiple of bar_length"
_BAR_EPSILON = 1e-9


def cm_to_m(value_cm: float) -> float:
    return value_cm / 100.0


def validate_bar_length(bar_length: float, profile_name: str = "") -> None:
    """Bar length is a divisor, zero or negative is a configuration error."""
    if bar_length is None or bar_length <= 0:
        raise InvalidConfiguration(
            f"Bar length must be greater than 0 for profile '{profile_name}', got {bar_length}",
            profile_name=profile_name,
            bar_length=bar_length,
        )


def make_material_calculation(profile_name: str, required_length: float,
                              length_with_scrap: float, full_bars: int,
                              leftover: float, is_reusable: bool,
                              used_length: float, cost: float) -> dict:
    """Build a MaterialCalculation dict. Lengths are rounded here, not before."""
    return {
        "profile_name": profile_name,
        "required_length": round(required_length, LENGTH_DECIMALS),
        "length_with_scrap": round(length_with_scrap, LENGTH_DECIMALS),
        "full_bars": full_bars,
        "leftover": round(leftover, LENGTH_DECIMALS),
        "is_reusable": is_reusable,
        "used_length": round(used_length, LENGTH_DECIMALS),
        "cost": cost,
    }


def calculate_profile_material(height: float, width: float,
                               height_multiplier: float, width_multiplier: float,
                               scrap_percentage: float, bar_length: float,
                               cost_per_meter: float, min_reusable_length: float,
                               profile_name: str) -> dict:
    """
    Material consumption and cost of one profile for a height x width opening (cm).

    Returns a MaterialCalculation dict:
        profile_name, required_length, length_with_scrap, full_bars,
        leftover, is_reusable, used_length, cost

    Raises InvalidConfiguration when bar_length <= 0.
    """
    validate_bar_length(bar_length, profile_name)

    required_length = (cm_to_m(height) * height_multiplier) + (cm_to_m(width) * width_multiplier)
    length_with_scrap = required_length * (1 + scrap_percentage / 100.0)

    # Always buy at least one bar, even for a zero-length cut
    full_bars = max(1, math.ceil(length_with_scrap / bar_length - _BAR_EPSILON))
    purchased_length = full_bars * bar_length
    leftover = max(0.0, purchased_length - length_with_scrap)

    is_reusable = leftover >= min_reusable_length
    used_length = length_with_scrap if is_reusable else purchased_length
    cost = round(used_length * cost_per_meter, CURRENCY_DECIMALS)

    return make_material_calculation(
        profile_name=profile_name,
        required_length=required_length,
        length_with_scrap=length_with_scrap,
        full_bars=full_bars,
        leftover=leftover,
        is_reusable=is_reusable,
        used_length=used_length,
        cost=cost,
    )
