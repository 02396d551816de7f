from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base
from .errors import register_exception_handlers
from .routers import frame_types, profiles, series, grids

logger = logging.getLogger("serramenti")
logger.setLevel(settings.LOG_LEVEL)

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=f"{settings.COMPANY_NAME} Price Grids",
    description="Frame types, profiles, series costs and price grid generation for window/door fabrication",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# API routes
app.include_router(frame_types.router, prefix="/api")
app.include_router(profiles.router, prefix="/api")
app.include_router(series.router, prefix="/api")
app.include_router(grids.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "serramenti-price-grids"}


@app.on_event("startup")
def auto_seed():
    """Seed the default frame types and profiles on first run."""
    if not settings.AUTO_SEED:
        return
    from .database import SessionLocal
    db = SessionLocal()
    try:
        seeded = frame_types.seed_catalogue(db)
        logger.info("Catalogue seed: %s", seeded)
    finally:
        db.close()
