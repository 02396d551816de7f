from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/series", tags=["series"])


def _series_out(series: models.Series) -> dict:
    return {
        "id": series.id,
        "name": series.name,
        "description": series.description,
        "created_at": series.created_at,
        "updated_at": series.updated_at,
        "frame_type_ids": [ft.id for ft in series.frame_types],
        "profiles": [
            {
                "profile_id": cost.profile_id,
                "profile_name": cost.profile.name,
                "cost_per_meter": cost.cost_per_meter,
                "bar_length": cost.bar_length,
                "scrap_percentage": cost.scrap_percentage,
                "min_reusable_length": cost.min_reusable_length,
            }
            for cost in series.profile_costs
        ],
    }


def _get_series_or_404(series_id: int, db: Session) -> models.Series:
    series = db.query(models.Series).filter(models.Series.id == series_id).first()
    if not series:
        raise HTTPException(status_code=404, detail="Series not found")
    return series


def _load_frame_types(frame_type_ids: list, db: Session) -> list:
    """Frame types in the requested order. 404 if any id is unknown."""
    if not frame_type_ids:
        return []
    found = {
        ft.id: ft
        for ft in db.query(models.FrameType).filter(models.FrameType.id.in_(frame_type_ids)).all()
    }
    missing = [i for i in frame_type_ids if i not in found]
    if missing:
        raise HTTPException(status_code=404, detail=f"Frame type(s) not found: {missing}")
    return [found[i] for i in dict.fromkeys(frame_type_ids)]


@router.post("/", response_model=schemas.Series)
def create_series(series: schemas.SeriesCreate, db: Session = Depends(get_db)):
    name = series.name.strip()
    if db.query(models.Series).filter(models.Series.name == name).first():
        raise HTTPException(status_code=409, detail=f"Series '{name}' already exists")
    db_series = models.Series(
        name=name,
        description=series.description,
        frame_types=_load_frame_types(series.frame_type_ids, db),
    )
    db.add(db_series)
    db.commit()
    db.refresh(db_series)
    return _series_out(db_series)


@router.get("/", response_model=List[schemas.Series])
def list_series(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    series = db.query(models.Series).order_by(models.Series.name).offset(skip).limit(limit).all()
    return [_series_out(s) for s in series]


@router.get("/{series_id}", response_model=schemas.Series)
def get_series(series_id: int, db: Session = Depends(get_db)):
    return _series_out(_get_series_or_404(series_id, db))


@router.patch("/{series_id}", response_model=schemas.Series)
def update_series(series_id: int, update: schemas.SeriesUpdate, db: Session = Depends(get_db)):
    series = _get_series_or_404(series_id, db)
    data = update.model_dump(exclude_unset=True)
    if data.get("name"):
        name = data["name"].strip()
        clash = db.query(models.Series).filter(models.Series.name == name, models.Series.id != series_id).first()
        if clash:
            raise HTTPException(status_code=409, detail=f"Series '{name}' already exists")
        data["name"] = name
    for field, value in data.items():
        if value is not None or field == "description":
            setattr(series, field, value)
    db.commit()
    db.refresh(series)
    return _series_out(series)


@router.delete("/{series_id}")
def delete_series(series_id: int, db: Session = Depends(get_db)):
    """Deletes the series with its profile costs and grids."""
    series = _get_series_or_404(series_id, db)
    db.delete(series)
    db.commit()
    return {"ok": True}


@router.put("/{series_id}/frame-types", response_model=schemas.Series)
def set_series_frame_types(series_id: int, update: schemas.SeriesFrameTypes, db: Session = Depends(get_db)):
    """Replace the frame types the series is offered in."""
    series = _get_series_or_404(series_id, db)
    series.frame_types = _load_frame_types(update.frame_type_ids, db)
    db.commit()
    db.refresh(series)
    return _series_out(series)


# --- Profile cost models ---

@router.put("/{series_id}/profiles/{profile_id}", response_model=schemas.Series)
def set_profile_cost(series_id: int, profile_id: int, cost: schemas.ProfileCostBase,
                     db: Session = Depends(get_db)):
    """Create or replace the cost model of a profile in this series."""
    series = _get_series_or_404(series_id, db)
    profile = db.query(models.Profile).filter(models.Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    existing = db.query(models.SeriesProfileCost).filter(
        models.SeriesProfileCost.series_id == series_id,
        models.SeriesProfileCost.profile_id == profile_id,
    ).first()
    if existing:
        for field, value in cost.model_dump().items():
            setattr(existing, field, value)
    else:
        db.add(models.SeriesProfileCost(series_id=series_id, profile_id=profile_id, **cost.model_dump()))
    db.commit()
    db.refresh(series)
    return _series_out(series)


@router.delete("/{series_id}/profiles/{profile_id}", response_model=schemas.Series)
def remove_profile_cost(series_id: int, profile_id: int, db: Session = Depends(get_db)):
    series = _get_series_or_404(series_id, db)
    cost = db.query(models.SeriesProfileCost).filter(
        models.SeriesProfileCost.series_id == series_id,
        models.SeriesProfileCost.profile_id == profile_id,
    ).first()
    if not cost:
        raise HTTPException(status_code=404, detail="Profile has no cost model in this series")
    db.delete(cost)
    db.commit()
    db.refresh(series)
    return _series_out(series)
