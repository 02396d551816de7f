from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from .config import settings


# --- Profiles ---

class ProfileBase(BaseModel):
    name: str = Field(min_length=1)

class ProfileCreate(ProfileBase):
    pass

class Profile(ProfileBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True

class ProfileWithUsage(Profile):
    usage_count: int = 0  # frame types using this profile


# --- Frame types + profile rules ---

class FrameTypeBase(BaseModel):
    label: str = Field(min_length=1)

class FrameTypeCreate(FrameTypeBase):
    pass

class RuleCreate(BaseModel):
    profile_id: int
    height_multiplier: float = Field(default=1.0, ge=0)
    width_multiplier: float = Field(default=1.0, ge=0)

class RuleUpdate(BaseModel):
    height_multiplier: Optional[float] = Field(default=None, ge=0)
    width_multiplier: Optional[float] = Field(default=None, ge=0)

class ProfileAssignment(BaseModel):
    profile_id: int
    profile_name: str
    height_multiplier: float
    width_multiplier: float

class FrameType(FrameTypeBase):
    id: int
    created_at: datetime
    updated_at: datetime
    profiles: List[ProfileAssignment] = []


# --- Series ---

class SeriesBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None

class SeriesCreate(SeriesBase):
    frame_type_ids: List[int] = []

class SeriesUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

class SeriesFrameTypes(BaseModel):
    frame_type_ids: List[int]

class ProfileCostBase(BaseModel):
    cost_per_meter: float = Field(ge=0)
    bar_length: float = Field(gt=0)  # meters
    scrap_percentage: float = Field(default=0.0, ge=0)
    min_reusable_length: float = Field(default=0.0, ge=0)  # meters

class ProfileCost(ProfileCostBase):
    profile_id: int
    profile_name: str

class Series(SeriesBase):
    id: int
    created_at: datetime
    updated_at: datetime
    frame_type_ids: List[int] = []
    profiles: List[ProfileCost] = []


# --- Grids ---

class DimensionRangeConfig(BaseModel):
    """Centimeters. increment is validated by the engine, not here."""
    height_min: float = Field(ge=0)
    height_max: float = Field(ge=0)
    width_min: float = Field(ge=0)
    width_max: float = Field(ge=0)
    increment: float = settings.DEFAULT_INCREMENT

class GridRequest(BaseModel):
    series_id: int
    frame_type_id: int
    config: DimensionRangeConfig

class MaterialCalculation(BaseModel):
    profile_name: str
    required_length: float
    length_with_scrap: float
    full_bars: int
    leftover: float
    is_reusable: bool
    used_length: float
    cost: float

class GridCell(BaseModel):
    height: float
    width: float
    total_cost: float
    materials: List[MaterialCalculation] = []

class StoredGridCell(GridCell):
    id: int
    manually_edited: bool = False

class Grid(BaseModel):
    id: int
    series_id: int
    frame_type_id: int
    config: DimensionRangeConfig
    created_at: datetime
    cells: List[StoredGridCell] = []

class GridCellUpdate(BaseModel):
    total_cost: float = Field(ge=0)
