"""HTTP Entry Point - FastAPI service.

Thin boundary layer: validates request fields, converts them to core
types and calls the SOS coordinator. Run with:

    uvicorn main:app --port 3000
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.coordinator import SosCoordinator, SosOrchestrationError
from src.core.config import Config, validate_config
from src.core.geo import Coordinate
from src.dispatcher import NotificationDispatcher
from src.shell.broadcast import ConnectionManager
from src.shell.config_loader import load_config
from src.shell.push_client import PushClient


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ===== Request Models =====

class LocationReport(BaseModel):
    """A user's position as sent by the mobile client."""
    userId: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


# ===== Wiring =====

def _check_config(config: Config) -> None:
    """Log config warnings; refuse to start on errors."""
    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not result.valid:
        details = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ValueError(f"Invalid configuration: {details}")
    logger.info(
        "Delivery: %d attempts per recipient, up to %.1fs of backoff",
        config.retry.max_attempts,
        config.retry.worst_case_seconds,
    )


def build_coordinator(config: Config, broadcaster: ConnectionManager | None = None) -> SosCoordinator:
    """Create a coordinator with real shell components."""
    dispatcher = NotificationDispatcher(
        PushClient(config.push),
        retry_policy=config.retry,
        title=config.push.title,
    )
    return SosCoordinator(config, dispatcher, broadcaster=broadcaster)


def get_coordinator(request: Request) -> SosCoordinator:
    return request.app.state.coordinator


router = APIRouter()


@router.post("/sos")
async def trigger_sos(
    report: LocationReport,
    coordinator: SosCoordinator = Depends(get_coordinator),
):
    """Alert every user near the sender."""
    try:
        result = await coordinator.trigger_sos(report.userId, report.coordinate)
    except SosOrchestrationError as e:
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "Failed to send push notification.",
                "error": str(e),
            },
        )

    return {
        "status": "success",
        "message": "SOS signal sent successfully.",
        "notificationsSent": result.delivered_count,
    }


@router.post("/location")
async def update_location(
    report: LocationReport,
    coordinator: SosCoordinator = Depends(get_coordinator),
):
    """Record the latest location of a user."""
    await coordinator.update_location(report.userId, report.coordinate)
    return {
        "status": "success",
        "message": "Location data received successfully.",
    }


@router.get("/nearby")
async def get_nearby(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float | None = Query(default=None, gt=0),
    coordinator: SosCoordinator = Depends(get_coordinator),
):
    """List users within a radius of a point."""
    users = coordinator.find_nearby(Coordinate(latitude, longitude), radius_km)
    return {
        "status": "success",
        "count": len(users),
        "users": [
            {
                "userId": u.user_id,
                "latitude": u.coordinate.latitude,
                "longitude": u.coordinate.longitude,
                "distanceKm": round(u.distance_km, 3),
            }
            for u in users
        ],
    }


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.websocket("/ws")
async def events(websocket: WebSocket):
    """Realtime feed of sosAlert and locationUpdate events."""
    manager: ConnectionManager = websocket.app.state.broadcaster
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            logger.info("Received custom event: %s", data)
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "status": "error",
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": str(exc)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Let in-flight broadcasts finish on shutdown."""
    yield
    await app.state.coordinator.wait_for_broadcasts()


def create_app(
    config: Config | None = None,
    coordinator: SosCoordinator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration (loaded from file/env if not provided)
        coordinator: Coordinator to serve (built from config if not provided)

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config = coordinator.config if coordinator is not None else load_config()
    _check_config(config)

    broadcaster = ConnectionManager(send_timeout_seconds=config.broadcast_timeout_seconds)
    if coordinator is None:
        coordinator = build_coordinator(config, broadcaster)
    elif coordinator.broadcaster is None:
        coordinator.broadcaster = broadcaster

    app = FastAPI(
        title="SOS Relay",
        description="Relays SOS alerts to nearby users via push notifications",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.include_router(router)

    app.state.config = config
    app.state.coordinator = coordinator
    app.state.broadcaster = broadcaster

    return app


app = create_app()
