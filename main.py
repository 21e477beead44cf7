import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

import models  # noqa: F401  Ensure every table is known to SQLModel before create_all
from api.perimeter_routes import router as perimeter_router
from api.report_routes import router as report_router
from api.time_routes import router as time_router
from core.config import LOG_LEVEL, allowed_origins
from core.exceptions import InvalidInput, TimeClockError
from db.session import engine

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

# This file is the control center of the whole application

allowed_origins_list = allowed_origins()
logger.info(f"CORS: Allowing origins: {allowed_origins_list}")


# When We Start, Create the DB Tables if they don't exist
@asynccontextmanager
async def lifespan(app: FastAPI):
    SQLModel.metadata.create_all(engine)
    yield


# Starts Fast API Up; Init
app = FastAPI(title="Geofenced Time Clock", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors -> JSON with the matching HTTP status
@app.exception_handler(TimeClockError)
async def time_clock_error_handler(request: Request, exc: TimeClockError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


# Malformed bodies and query params share the invalid_input envelope
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidInput("Request validation failed.", errors=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


# Services roll back before re-raising; only log and answer here
@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "error": "storage_error",
            "detail": "An unexpected error occurred while saving changes.",
        },
    )


# Connects Routes to main app
app.include_router(time_router, prefix="/time", tags=["Time"])
app.include_router(perimeter_router, prefix="/manager/perimeter", tags=["Manager", "Geofence"])
app.include_router(report_router, prefix="/reports", tags=["Reports"])
