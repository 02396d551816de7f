from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Boolean, JSON, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base


# --- Catalogue: frame types ("tipologie") and profiles ---

class FrameType(Base):
    """Opening style, decides which profiles apply and how much of each is consumed."""
    __tablename__ = "frame_types"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Ordered by id so the rule order is the binding order
    profile_rules = relationship(
        "FrameTypeProfileRule", back_populates="frame_type",
        cascade="all, delete-orphan", order_by="FrameTypeProfileRule.id",
    )
    series = relationship("Series", secondary="series_frame_types", back_populates="frame_types")
    grids = relationship("PriceGrid", back_populates="frame_type", cascade="all, delete-orphan")


class Profile(Base):
    """Linear extruded material (frame, sash, glazing bead...) priced per meter."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    frame_type_rules = relationship("FrameTypeProfileRule", back_populates="profile", cascade="all, delete-orphan")
    series_costs = relationship("SeriesProfileCost", back_populates="profile", cascade="all, delete-orphan")


class FrameTypeProfileRule(Base):
    """Profile-meters consumed per meter of opening height/width for one frame type."""
    __tablename__ = "frame_type_profile_rules"
    __table_args__ = (UniqueConstraint("frame_type_id", "profile_id", name="uq_frame_type_profile"),)

    id = Column(Integer, primary_key=True, index=True)
    frame_type_id = Column(Integer, ForeignKey("frame_types.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    height_multiplier = Column(Float, nullable=False, default=1.0)
    width_multiplier = Column(Float, nullable=False, default=1.0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    frame_type = relationship("FrameType", back_populates="profile_rules")
    profile = relationship("Profile", back_populates="frame_type_rules")


# --- Series ---

series_frame_types = Table(
    "series_frame_types",
    Base.metadata,
    Column("series_id", Integer, ForeignKey("series.id", ondelete="CASCADE"), primary_key=True),
    Column("frame_type_id", Integer, ForeignKey("frame_types.id", ondelete="CASCADE"), primary_key=True),
)


class Series(Base):
    """Product line with its own per-profile cost structure."""
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    frame_types = relationship(
        "FrameType", secondary=series_frame_types, back_populates="series", order_by="FrameType.id",
    )
    profile_costs = relationship(
        "SeriesProfileCost", back_populates="series",
        cascade="all, delete-orphan", order_by="SeriesProfileCost.id",
    )
    grids = relationship("PriceGrid", back_populates="series", cascade="all, delete-orphan")


class SeriesProfileCost(Base):
    """Cost model of one profile inside one series."""
    __tablename__ = "series_profile_costs"
    __table_args__ = (UniqueConstraint("series_id", "profile_id", name="uq_series_profile"),)

    id = Column(Integer, primary_key=True, index=True)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    cost_per_meter = Column(Float, nullable=False, default=0.0)
    bar_length = Column(Float, nullable=False, default=6.0)  # meters, standard stock bar
    scrap_percentage = Column(Float, nullable=False, default=0.0)
    min_reusable_length = Column(Float, nullable=False, default=0.0)  # meters
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    series = relationship("Series", back_populates="profile_costs")
    profile = relationship("Profile", back_populates="series_costs")


# --- Generated grids ---

class PriceGrid(Base):
    """One generation run for a (series, frame type) pair. At most one per pair."""
    __tablename__ = "price_grids"
    __table_args__ = (UniqueConstraint("series_id", "frame_type_id", name="uq_grid_series_frame_type"),)

    id = Column(Integer, primary_key=True, index=True)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False)
    frame_type_id = Column(Integer, ForeignKey("frame_types.id", ondelete="CASCADE"), nullable=False)
    # Range the grid was generated from (cm)
    height_min = Column(Float, nullable=False)
    height_max = Column(Float, nullable=False)
    width_min = Column(Float, nullable=False)
    width_max = Column(Float, nullable=False)
    increment = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    series = relationship("Series", back_populates="grids")
    frame_type = relationship("FrameType", back_populates="grids")
    cells = relationship(
        "GridCell", back_populates="grid",
        cascade="all, delete-orphan", order_by="GridCell.id",
    )


class GridCell(Base):
    __tablename__ = "grid_cells"

    id = Column(Integer, primary_key=True, index=True)
    grid_id = Column(Integer, ForeignKey("price_grids.id", ondelete="CASCADE"), nullable=False)
    height = Column(Float, nullable=False)  # cm
    width = Column(Float, nullable=False)   # cm
    total_cost = Column(Float, nullable=False, default=0.0)
    materials_json = Column(JSON, default=list)  # List of MaterialCalculation dicts
    # Set when total_cost was overridden by hand instead of derived
    manually_edited = Column(Boolean, default=False)

    grid = relationship("PriceGrid", back_populates="cells")
