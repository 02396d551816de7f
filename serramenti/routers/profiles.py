from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _get_profile_or_404(profile_id: int, db: Session) -> models.Profile:
    profile = db.query(models.Profile).filter(models.Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


def _name_taken(name: str, db: Session, exclude_id: int = None) -> bool:
    query = db.query(models.Profile).filter(models.Profile.name == name)
    if exclude_id is not None:
        query = query.filter(models.Profile.id != exclude_id)
    return query.first() is not None


@router.post("/", response_model=schemas.Profile)
def create_profile(profile: schemas.ProfileCreate, db: Session = Depends(get_db)):
    name = profile.name.strip()
    if _name_taken(name, db):
        raise HTTPException(status_code=409, detail=f"Profile '{name}' already exists")
    db_profile = models.Profile(name=name)
    db.add(db_profile)
    db.commit()
    db.refresh(db_profile)
    return db_profile


@router.get("/", response_model=List[schemas.ProfileWithUsage])
def list_profiles(db: Session = Depends(get_db)):
    """All profiles with the number of frame types that use each one."""
    rows = (
        db.query(models.Profile, func.count(models.FrameTypeProfileRule.id))
        .outerjoin(models.FrameTypeProfileRule, models.FrameTypeProfileRule.profile_id == models.Profile.id)
        .group_by(models.Profile.id)
        .order_by(models.Profile.name)
        .all()
    )
    return [
        {"id": p.id, "name": p.name, "created_at": p.created_at, "usage_count": count}
        for p, count in rows
    ]


@router.get("/{profile_id}", response_model=schemas.Profile)
def get_profile(profile_id: int, db: Session = Depends(get_db)):
    return _get_profile_or_404(profile_id, db)


@router.patch("/{profile_id}", response_model=schemas.Profile)
def rename_profile(profile_id: int, update: schemas.ProfileCreate, db: Session = Depends(get_db)):
    profile = _get_profile_or_404(profile_id, db)
    name = update.name.strip()
    if _name_taken(name, db, exclude_id=profile_id):
        raise HTTPException(status_code=409, detail=f"Profile '{name}' already exists")
    profile.name = name
    db.commit()
    db.refresh(profile)
    return profile


@router.delete("/{profile_id}")
def delete_profile(profile_id: int, db: Session = Depends(get_db)):
    """Deletes the profile with its frame-type rules and series cost entries."""
    profile = _get_profile_or_404(profile_id, db)
    db.delete(profile)
    db.commit()
    return {"ok": True}
