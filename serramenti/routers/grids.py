"""
Price grid API.

POST   /api/grids/preview                                  calculate only, nothing stored
POST   /api/grids/                                         calculate and store (one grid per pair)
GET    /api/grids/{series_id}/{frame_type_id}              stored grid
DELETE /api/grids/{series_id}/{frame_type_id}              delete grid with all cells
PATCH  /api/grids/cells/{cell_id}                          manual price override
GET    /api/grids/{series_id}/{frame_type_id}/export       CSV (?layout=list|matrix)

Engine and store errors propagate as GridError subclasses and are rendered
by the handlers in errors.py.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List

from .. import models, schemas
from ..database import get_db
from ..errors import GridAlreadyExists, InvalidConfiguration
from ..grid_engine import GridEngine
from ..grid_export import LAYOUTS, export_cells
from ..grid_store import GridStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grids", tags=["grids"])


def get_store(db: Session = Depends(get_db)) -> GridStore:
    return GridStore(db)


def _cell_out(cell: models.GridCell) -> dict:
    return {
        "id": cell.id,
        "height": cell.height,
        "width": cell.width,
        "total_cost": cell.total_cost,
        "materials": cell.materials_json or [],
        "manually_edited": bool(cell.manually_edited),
    }


def _grid_out(grid: models.PriceGrid) -> dict:
    return {
        "id": grid.id,
        "series_id": grid.series_id,
        "frame_type_id": grid.frame_type_id,
        "config": {
            "height_min": grid.height_min,
            "height_max": grid.height_max,
            "width_min": grid.width_min,
            "width_max": grid.width_max,
            "increment": grid.increment,
        },
        "created_at": grid.created_at,
        "cells": [_cell_out(c) for c in grid.cells],
    }


def _get_grid_or_404(series_id: int, frame_type_id: int, store: GridStore) -> models.PriceGrid:
    grid = store.get_grid(series_id, frame_type_id)
    if not grid:
        raise HTTPException(status_code=404, detail="Grid not found for this series and frame type")
    return grid


@router.post("/preview", response_model=List[schemas.GridCell])
def preview_grid(request: schemas.GridRequest, store: GridStore = Depends(get_store)):
    """Run the engine and return the cells without storing them."""
    engine = GridEngine(store)
    return engine.calculate_grid(request.series_id, request.frame_type_id, request.config.model_dump())


@router.post("/", response_model=schemas.Grid)
def generate_grid(request: schemas.GridRequest, store: GridStore = Depends(get_store)):
    """
    Generate and store the grid for a series + frame type.

    409 if a grid already exists for the pair, delete it first to regenerate.
    422 if the range produces no cells.
    """
    if store.grid_exists(request.series_id, request.frame_type_id):
        raise GridAlreadyExists(
            f"A grid already exists for series {request.series_id} and "
            f"frame type {request.frame_type_id}, delete it before generating a new one",
            series_id=request.series_id,
            frame_type_id=request.frame_type_id,
        )

    config = request.config.model_dump()
    cells = GridEngine(store).calculate_grid(request.series_id, request.frame_type_id, config)
    if not cells:
        raise InvalidConfiguration(
            "Dimension range produces no cells, check that max is not below min",
            **config,
        )

    grid = store.save_grid(request.series_id, request.frame_type_id, cells, config)
    return _grid_out(grid)


@router.get("/{series_id}/{frame_type_id}", response_model=schemas.Grid)
def get_grid(series_id: int, frame_type_id: int, store: GridStore = Depends(get_store)):
    return _grid_out(_get_grid_or_404(series_id, frame_type_id, store))


@router.delete("/{series_id}/{frame_type_id}")
def delete_grid(series_id: int, frame_type_id: int, store: GridStore = Depends(get_store)):
    if not store.delete_grid(series_id, frame_type_id):
        raise HTTPException(status_code=404, detail="Grid not found for this series and frame type")
    return {"ok": True}


@router.patch("/cells/{cell_id}", response_model=schemas.StoredGridCell)
def update_cell(cell_id: int, update: schemas.GridCellUpdate, store: GridStore = Depends(get_store)):
    """Override one cell's total by hand. Materials are left as generated."""
    cell = store.update_cell(cell_id, update.total_cost)
    if cell is None:
        raise HTTPException(status_code=404, detail="Grid cell not found")
    return _cell_out(cell)


@router.get("/{series_id}/{frame_type_id}/export")
def export_grid(
    series_id: int,
    frame_type_id: int,
    layout: str = Query("list"),
    store: GridStore = Depends(get_store),
):
    """Download the stored grid as CSV."""
    if layout not in LAYOUTS:
        raise HTTPException(status_code=400, detail=f"Unknown layout '{layout}'. Available: {list(LAYOUTS)}")
    grid = _get_grid_or_404(series_id, frame_type_id, store)
    cells = [_cell_out(c) for c in grid.cells]
    content = export_cells(cells, layout)

    filename = f"grid-{grid.series.name}-{grid.frame_type.label}-{layout}.csv".replace(" ", "_")
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )
