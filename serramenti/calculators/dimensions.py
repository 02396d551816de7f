"""
Dimension range generator: the (height, width) samples a grid is priced on.

Heights are the outer loop, widths the inner one, so width varies fastest.
Both ends are inclusive; when max - min is not a multiple of the increment
the last sample is the largest value not above max.
"""

import math

from ..errors import InvalidConfiguration

# Tolerance for "max - min is an exact multiple of increment" with decimal steps
_STEP_EPSILON = 1e-9
SAMPLE_DECIMALS = 6


def _step_count(start: float, stop: float, increment: float) -> int:
    """Index of the last sample. Its rounded value never lies above stop."""
    steps = math.floor((stop - start) / increment + _STEP_EPSILON)
    if steps > 0 and round(start + steps * increment, SAMPLE_DECIMALS) > stop:
        steps -= 1
    return steps


def axis_samples(start: float, stop: float, increment: float) -> list:
    """Samples from start to stop inclusive. Empty when stop < start."""
    if increment <= 0:
        raise InvalidConfiguration(
            f"Increment must be greater than 0, got {increment}",
            increment=increment,
        )
    if stop < start:
        return []
    steps = _step_count(start, stop, increment)
    # start + i * increment, not a running sum, no drift on decimal steps
    return [round(start + i * increment, SAMPLE_DECIMALS) for i in range(steps + 1)]


def count_samples(start: float, stop: float, increment: float) -> int:
    """Number of samples axis_samples() would return, without building them."""
    if increment <= 0:
        raise InvalidConfiguration(
            f"Increment must be greater than 0, got {increment}",
            increment=increment,
        )
    if stop < start:
        return 0
    return _step_count(start, stop, increment) + 1


def generate_dimensions(height_min: float, height_max: float,
                        width_min: float, width_max: float,
                        increment: float) -> list:
    """
    Cross product of height and width samples, height-major.

    generate_dimensions(0, 100, 0, 50, 50)
        → [(0, 0), (0, 50), (50, 0), (50, 50), (100, 0), (100, 50)]

    Raises InvalidConfiguration when increment <= 0.
    """
    heights = axis_samples(height_min, height_max, increment)
    widths = axis_samples(width_min, width_max, increment)
    return [(h, w) for h in heights for w in widths]
