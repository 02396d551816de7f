"""
Grid store: the engine's persistence collaborator over a SQLAlchemy session.

Reads return plain dicts (the shapes GridEngine consumes). Writes are a
single transaction: a grid is stored with all of its cells or not at all.
Any SQLAlchemyError is rolled back and re-raised as PersistenceFailure.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import GridAlreadyExists, PersistenceFailure

logger = logging.getLogger(__name__)


class GridStore:

    def __init__(self, db: Session):
        self.db = db

    # --- Reads ---

    def get_profiles_for_series(self, series_id: int) -> list:
        """ProfileCostModel dicts for a series, in binding order."""
        try:
            rows = (
                self.db.query(models.SeriesProfileCost, models.Profile.name)
                .join(models.Profile, models.Profile.id == models.SeriesProfileCost.profile_id)
                .filter(models.SeriesProfileCost.series_id == series_id)
                .order_by(models.SeriesProfileCost.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Could not load profiles for series {series_id}: {e}") from e
        return [
            {
                "profile_id": cost.profile_id,
                "profile_name": name,
                "cost_per_meter": cost.cost_per_meter,
                "bar_length": cost.bar_length,
                "scrap_percentage": cost.scrap_percentage,
                "min_reusable_length": cost.min_reusable_length,
            }
            for cost, name in rows
        ]

    def get_rules_for_frame_type(self, frame_type_id: int) -> list:
        """FrameTypeProfileRule dicts for a frame type, in binding order."""
        try:
            rules = (
                self.db.query(models.FrameTypeProfileRule)
                .filter(models.FrameTypeProfileRule.frame_type_id == frame_type_id)
                .order_by(models.FrameTypeProfileRule.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Could not load rules for frame type {frame_type_id}: {e}") from e
        return [
            {
                "profile_id": r.profile_id,
                "height_multiplier": r.height_multiplier,
                "width_multiplier": r.width_multiplier,
            }
            for r in rules
        ]

    def get_grid(self, series_id: int, frame_type_id: int):
        """Stored PriceGrid for the pair, or None."""
        try:
            return self.db.query(models.PriceGrid).filter(
                models.PriceGrid.series_id == series_id,
                models.PriceGrid.frame_type_id == frame_type_id,
            ).first()
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Could not load grid: {e}") from e

    def grid_exists(self, series_id: int, frame_type_id: int) -> bool:
        return self.get_grid(series_id, frame_type_id) is not None

    # --- Writes ---

    def save_grid(self, series_id: int, frame_type_id: int, cells: list, config: dict) -> models.PriceGrid:
        """
        Bulk insert a grid and its cells in one transaction.

        Raises GridAlreadyExists if the (series, frame type) pair is taken,
        PersistenceFailure for any other database error. Nothing is stored
        in either case.
        """
        grid = models.PriceGrid(
            series_id=series_id,
            frame_type_id=frame_type_id,
            height_min=config["height_min"],
            height_max=config["height_max"],
            width_min=config["width_min"],
            width_max=config["width_max"],
            increment=config["increment"],
        )
        grid.cells = [
            models.GridCell(
                height=cell["height"],
                width=cell["width"],
                total_cost=cell["total_cost"],
                materials_json=cell["materials"],
            )
            for cell in cells
        ]
        try:
            self.db.add(grid)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Grid save rolled back for series=%s frame_type=%s: %s", series_id, frame_type_id, e)
            raise GridAlreadyExists(
                f"A grid already exists for series {series_id} and frame type {frame_type_id}",
                series_id=series_id,
                frame_type_id=frame_type_id,
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Grid save rolled back for series=%s frame_type=%s: %s", series_id, frame_type_id, e)
            raise PersistenceFailure(f"Could not save grid: {e}") from e

        self.db.refresh(grid)
        logger.info("Saved grid %s (series=%s frame_type=%s, %d cells)", grid.id, series_id, frame_type_id, len(cells))
        return grid

    def delete_grid(self, series_id: int, frame_type_id: int) -> bool:
        """Delete a grid with all of its cells. False if there was none."""
        grid = self.get_grid(series_id, frame_type_id)
        if grid is None:
            return False
        try:
            self.db.delete(grid)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Grid delete rolled back for series=%s frame_type=%s: %s", series_id, frame_type_id, e)
            raise PersistenceFailure(f"Could not delete grid: {e}") from e
        logger.info("Deleted grid series=%s frame_type=%s", series_id, frame_type_id)
        return True

    def update_cell(self, cell_id: int, total_cost: float):
        """
        Manual price override for one cell. Does not re-derive anything from
        the formula, materials stay as generated. None if the cell is unknown.
        """
        try:
            cell = self.db.query(models.GridCell).filter(models.GridCell.id == cell_id).first()
            if cell is None:
                return None
            cell.total_cost = round(total_cost, 2)
            cell.manually_edited = True
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"Could not update cell {cell_id}: {e}") from e
        self.db.refresh(cell)
        return cell
