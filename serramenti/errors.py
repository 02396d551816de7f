"""
Grid generation errors and their HTTP mapping.

The engine and the store raise these; routers let them propagate and the
handlers registered here turn them into JSON error bodies:

    {"error": <message>, "error_type": <kind>, "details": {...}}
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class GridError(Exception):
    """Base class for every grid-generation failure."""

    error_type = "grid_error"
    status_code = 400

    def __init__(self, message: str, **details) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidConfiguration(GridError):
    """Non-positive increment or bar length, or an unusable dimension range."""

    error_type = "invalid_configuration"
    status_code = 422


class NotFound(GridError):
    """No cost data for the series, or no rules for the frame type."""

    error_type = "not_found"
    status_code = 404

    def __init__(self, message: str, missing: str, **details) -> None:
        self.missing = missing  # "series" | "frame_type"
        super().__init__(message, missing=missing, **details)


class NoApplicableProfiles(GridError):
    """Both sides had data but no series profile has a rule for the frame type."""

    error_type = "no_applicable_profiles"
    status_code = 422


class GridAlreadyExists(GridError):
    """A grid for the same series + frame type pair is already stored."""

    error_type = "grid_exists"
    status_code = 409


class PersistenceFailure(GridError):
    """Reading from or writing to the datastore failed. Original error is __cause__."""

    error_type = "persistence"
    status_code = 503


def register_exception_handlers(app: FastAPI) -> None:
    """Register the GridError handler with the FastAPI app."""

    @app.exception_handler(GridError)
    async def grid_error_handler(request: Request, exc: GridError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "error_type": exc.error_type,
                "details": exc.details,
            },
        )
