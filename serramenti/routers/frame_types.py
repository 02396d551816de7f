from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/frame-types", tags=["frame-types"])

# Default catalogue, frame types and the profiles each one uses.
# Multipliers start at the column default (1.0) and are tuned per shop via the API.
DEFAULT_FRAME_TYPES = {
    "Battente 1 Anta": ["Telaio", "Anta", "Fermavetro"],
    "Battente 2 Ante": ["Telaio", "Anta", "Fermavetro", "Montante"],
    "Fisso": ["Telaio", "Fermavetro"],
    "Scorrevole in linea": ["Telaio", "Anta Scorrevole", "Fermavetro", "Binario"],
    "Scorrevole alzante": ["Telaio", "Anta Alzante", "Fermavetro", "Binario Alzante"],
    "Porta": ["Telaio Porta", "Anta Porta", "Fermavetro"],
}


def seed_catalogue(db: Session) -> dict:
    """Create missing default frame types, profiles and their bindings. Skips existing rows."""
    seeded = {"frame_types": 0, "profiles": 0, "rules": 0}
    profiles = {p.name: p for p in db.query(models.Profile).all()}
    for label, profile_names in DEFAULT_FRAME_TYPES.items():
        frame_type = db.query(models.FrameType).filter(models.FrameType.label == label).first()
        if not frame_type:
            frame_type = models.FrameType(label=label)
            db.add(frame_type)
            seeded["frame_types"] += 1
        for name in profile_names:
            profile = profiles.get(name)
            if not profile:
                profile = models.Profile(name=name)
                db.add(profile)
                profiles[name] = profile
                seeded["profiles"] += 1
            db.flush()
            existing = db.query(models.FrameTypeProfileRule).filter(
                models.FrameTypeProfileRule.frame_type_id == frame_type.id,
                models.FrameTypeProfileRule.profile_id == profile.id,
            ).first()
            if not existing:
                db.add(models.FrameTypeProfileRule(frame_type_id=frame_type.id, profile_id=profile.id))
                seeded["rules"] += 1
    db.commit()
    return seeded


def _frame_type_out(frame_type: models.FrameType) -> dict:
    return {
        "id": frame_type.id,
        "label": frame_type.label,
        "created_at": frame_type.created_at,
        "updated_at": frame_type.updated_at,
        "profiles": [
            {
                "profile_id": rule.profile_id,
                "profile_name": rule.profile.name,
                "height_multiplier": rule.height_multiplier,
                "width_multiplier": rule.width_multiplier,
            }
            for rule in frame_type.profile_rules
        ],
    }


def _get_frame_type_or_404(frame_type_id: int, db: Session) -> models.FrameType:
    frame_type = db.query(models.FrameType).filter(models.FrameType.id == frame_type_id).first()
    if not frame_type:
        raise HTTPException(status_code=404, detail="Frame type not found")
    return frame_type


def _get_rule_or_404(frame_type_id: int, profile_id: int, db: Session) -> models.FrameTypeProfileRule:
    rule = db.query(models.FrameTypeProfileRule).filter(
        models.FrameTypeProfileRule.frame_type_id == frame_type_id,
        models.FrameTypeProfileRule.profile_id == profile_id,
    ).first()
    if not rule:
        raise HTTPException(status_code=404, detail="Profile is not assigned to this frame type")
    return rule


@router.get("/seed")
def seed_frame_types(db: Session = Depends(get_db)):
    """Seed the default catalogue. Safe to run multiple times, skips existing."""
    return {"ok": True, "seeded": seed_catalogue(db)}


@router.post("/", response_model=schemas.FrameType)
def create_frame_type(frame_type: schemas.FrameTypeCreate, db: Session = Depends(get_db)):
    label = frame_type.label.strip()
    if db.query(models.FrameType).filter(models.FrameType.label == label).first():
        raise HTTPException(status_code=409, detail=f"Frame type '{label}' already exists")
    db_frame_type = models.FrameType(label=label)
    db.add(db_frame_type)
    db.commit()
    db.refresh(db_frame_type)
    return _frame_type_out(db_frame_type)


@router.get("/", response_model=List[schemas.FrameType])
def list_frame_types(db: Session = Depends(get_db)):
    frame_types = db.query(models.FrameType).order_by(models.FrameType.label).all()
    return [_frame_type_out(ft) for ft in frame_types]


@router.get("/{frame_type_id}", response_model=schemas.FrameType)
def get_frame_type(frame_type_id: int, db: Session = Depends(get_db)):
    return _frame_type_out(_get_frame_type_or_404(frame_type_id, db))


@router.patch("/{frame_type_id}", response_model=schemas.FrameType)
def rename_frame_type(frame_type_id: int, update: schemas.FrameTypeCreate, db: Session = Depends(get_db)):
    frame_type = _get_frame_type_or_404(frame_type_id, db)
    label = update.label.strip()
    clash = db.query(models.FrameType).filter(
        models.FrameType.label == label, models.FrameType.id != frame_type_id
    ).first()
    if clash:
        raise HTTPException(status_code=409, detail=f"Frame type '{label}' already exists")
    frame_type.label = label
    db.commit()
    db.refresh(frame_type)
    return _frame_type_out(frame_type)


@router.delete("/{frame_type_id}")
def delete_frame_type(frame_type_id: int, db: Session = Depends(get_db)):
    """Deletes the frame type with its profile rules and any grids generated for it."""
    frame_type = _get_frame_type_or_404(frame_type_id, db)
    db.delete(frame_type)
    db.commit()
    return {"ok": True}


# --- Profile rules ---

@router.post("/{frame_type_id}/profiles", response_model=schemas.FrameType)
def add_profile_to_frame_type(frame_type_id: int, rule: schemas.RuleCreate, db: Session = Depends(get_db)):
    frame_type = _get_frame_type_or_404(frame_type_id, db)
    profile = db.query(models.Profile).filter(models.Profile.id == rule.profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    existing = db.query(models.FrameTypeProfileRule).filter(
        models.FrameTypeProfileRule.frame_type_id == frame_type_id,
        models.FrameTypeProfileRule.profile_id == rule.profile_id,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Profile '{profile.name}' is already assigned to this frame type")
    db.add(models.FrameTypeProfileRule(frame_type_id=frame_type_id, **rule.model_dump()))
    db.commit()
    db.refresh(frame_type)
    return _frame_type_out(frame_type)


@router.patch("/{frame_type_id}/profiles/{profile_id}", response_model=schemas.FrameType)
def update_multipliers(frame_type_id: int, profile_id: int, update: schemas.RuleUpdate,
                       db: Session = Depends(get_db)):
    frame_type = _get_frame_type_or_404(frame_type_id, db)
    rule = _get_rule_or_404(frame_type_id, profile_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(rule, field, value)
    db.commit()
    db.refresh(frame_type)
    return _frame_type_out(frame_type)


@router.delete("/{frame_type_id}/profiles/{profile_id}", response_model=schemas.FrameType)
def remove_profile_from_frame_type(frame_type_id: int, profile_id: int, db: Session = Depends(get_db)):
    frame_type = _get_frame_type_or_404(frame_type_id, db)
    rule = _get_rule_or_404(frame_type_id, profile_id, db)
    db.delete(rule)
    db.commit()
    db.refresh(frame_type)
    return _frame_type_out(frame_type)
