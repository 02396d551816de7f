"""
Grid calculation engine.

Prices a series + frame type combination over a range of heights and widths.
Pure math over two upfront reads, no persistence. Storing the result and
rejecting duplicate grids is the caller's job.

Input:  series_id, frame_type_id, dimension config dict
        {"height_min", "height_max", "width_min", "width_max", "increment"}
Output: list of GridCell dicts, height-major:
        {"height", "width", "total_cost", "materials": [MaterialCalculation, ...]}
"""

import logging

from .calculators.dimensions import count_samples, generate_dimensions
from .calculators.profile_material import (
    CURRENCY_DECIMALS,
    calculate_profile_material,
    validate_bar_length,
)
from .config import settings
from .errors import InvalidConfiguration, NoApplicableProfiles, NotFound

logger = logging.getLogger(__name__)


class GridEngine:
    """
    Stateless between calls. The store only needs two read methods:

        get_profiles_for_series(series_id) -> list of ProfileCostModel dicts
        get_rules_for_frame_type(frame_type_id) -> list of FrameTypeProfileRule dicts
    """

    def __init__(self, store, max_cells: int = None):
        self.store = store
        self.max_cells = max_cells if max_cells is not None else settings.MAX_GRID_CELLS

    def calculate_grid(self, series_id, frame_type_id, config: dict) -> list:
        """
        Price every (height, width) sample of config for the profiles the
        series and the frame type have in common.

        Raises:
            NotFound: the series has no cost data, or the frame type has no rules
            NoApplicableProfiles: both exist but share no profile
            InvalidConfiguration: bad increment, bar length or oversized range
        """
        profiles = self.store.get_profiles_for_series(series_id)
        if not profiles:
            raise NotFound(
                f"No profile cost data for series {series_id}",
                missing="series",
                series_id=series_id,
            )

        rules = self.store.get_rules_for_frame_type(frame_type_id)
        if not rules:
            raise NotFound(
                f"No profile rules for frame type {frame_type_id}",
                missing="frame_type",
                frame_type_id=frame_type_id,
            )

        bound = self._join_profiles_and_rules(profiles, rules)
        if not bound:
            raise NoApplicableProfiles(
                f"Series {series_id} has no profile with a rule for frame type {frame_type_id}, "
                f"check that the series is configured for this frame type",
                series_id=series_id,
                frame_type_id=frame_type_id,
            )

        # Fail fast before computing anything
        for profile, _ in bound:
            validate_bar_length(profile["bar_length"], profile["profile_name"])
        self._check_grid_size(config)

        dimensions = generate_dimensions(
            config["height_min"], config["height_max"],
            config["width_min"], config["width_max"],
            config["increment"],
        )

        cells = [self._price_cell(height, width, bound) for height, width in dimensions]

        logger.info(
            "Priced grid series=%s frame_type=%s: %d cells x %d profiles",
            series_id, frame_type_id, len(cells), len(bound),
        )
        return cells

    def _join_profiles_and_rules(self, profiles: list, rules: list) -> list:
        """
        Pair each series profile with its frame-type rule, keeping the series
        binding order. Profiles without a rule are skipped.
        """
        rules_by_profile = {rule["profile_id"]: rule for rule in rules}
        bound = []
        for profile in profiles:
            rule = rules_by_profile.get(profile["profile_id"])
            if rule is None:
                logger.debug(
                    "Profile %s (%s) has no rule for this frame type, excluded",
                    profile["profile_id"], profile["profile_name"],
                )
                continue
            bound.append((profile, rule))
        return bound

    def _check_grid_size(self, config: dict) -> None:
        """Reject ranges that would produce more than max_cells cells."""
        increment = config["increment"]
        n_heights = count_samples(config["height_min"], config["height_max"], increment)
        n_widths = count_samples(config["width_min"], config["width_max"], increment)
        total = n_heights * n_widths
        if total > self.max_cells:
            raise InvalidConfiguration(
                f"Range produces {total} cells, limit is {self.max_cells}, "
                f"narrow the range or raise the increment",
                cells=total,
                max_cells=self.max_cells,
            )

    def _price_cell(self, height: float, width: float, bound: list) -> dict:
        materials = [
            calculate_profile_material(
                height=height,
                width=width,
                height_multiplier=rule["height_multiplier"],
                width_multiplier=rule["width_multiplier"],
                scrap_percentage=profile["scrap_percentage"],
                bar_length=profile["bar_length"],
                cost_per_meter=profile["cost_per_meter"],
                min_reusable_length=profile["min_reusable_length"],
                profile_name=profile["profile_name"],
            )
            for profile, rule in bound
        ]
        return make_grid_cell(height, width, materials)


def make_grid_cell(height: float, width: float, materials: list) -> dict:
    """Build a GridCell dict. total_cost is the sum of the material costs."""
    return {
        "height": height,
        "width": width,
        "total_cost": round(sum(m["cost"] for m in materials), CURRENCY_DECIMALS),
        "materials": materials,
    }
