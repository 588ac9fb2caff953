"""
FastAPI Application - WebSocket game protocol plus a few HTTP routes.

Endpoints:
    GET    /health                  Health check
    GET    /                        API info
    GET    /api/v1/rooms/{code}     Room snapshot (late state hydration)
    WS     /api/v1/ws               Game actions and pushed room updates

WebSocket protocol:
    Client -> server:
        {"type": "createRoom", "request_id": "1", "payload": {"name": "Ann"}}
        {"type": "ping"}
    Server -> client:
        {"type": "ack", "request_id": "1", "ok": true, "room": {...}, "player_id": "..."}
        {"type": "room_updated", "payload": {...}}   after every change
        {"type": "pong"}
        {"type": "error", "payload": {"message": "Invalid JSON"}}

Closing the socket is treated exactly like a leaveRoom action.

Run with: uvicorn hotseat.api.app:create_app --factory
"""

from __future__ import annotations
from contextlib import asynccontextmanager
import asyncio
import json
import logging
import uuid

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import GameConfig, load_config
from ..engine_core import PhaseScheduler, RoundEngine, NotFoundError
from ..questions import QuestionProvider
from ..session import RoomRegistry, TickDriver
from .connections import ConnectionHub
from .schemas import ErrorCode, ErrorResponse, HealthResponse, RoomSnapshot
from .service import GameService


logger = logging.getLogger(__name__)


def build_service(config: GameConfig) -> GameService:
    """Wire the core: provider -> engine -> scheduler -> registry -> service."""
    engine = RoundEngine(
        questions=QuestionProvider(),
        answer_max_length=config.answer_max_length,
    )
    scheduler = PhaseScheduler(engine=engine, config=config)
    return GameService(registry=RoomRegistry(scheduler=scheduler))


def create_app(service: GameService | None = None, config: GameConfig | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService (built from config if not provided)
        config: Optional GameConfig (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    config = config or (service.registry.config if service else load_config())
    api_service = service or build_service(config)
    hub = ConnectionHub()
    api_service.set_publisher(hub.publish)
    driver = TickDriver(api_service.registry, interval=config.tick_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        driver.start()
        try:
            yield
        finally:
            await driver.stop()

    app = FastAPI(
        title="Hot Seat API",
        description="""
Real-time rooms for the Hot Seat bluffing game.

Connect to `WS /api/v1/ws` and send action frames. Every change to a
room is pushed to all of its players as a `room_updated` snapshot.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Empty or malformed input |
| `PERMISSION_DENIED` | Host-only action |
| `INVALID_PHASE` | Wrong phase for this action |
| `CONFLICT` | Name taken, game started, already voted |
| `NOT_FOUND` | Unknown room or player |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service
    app.state.hub = hub
    app.state.driver = driver

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
            ).model_dump(mode="json"),
        )

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/rooms/{code}",
        response_model=RoomSnapshot,
        responses={404: {"model": ErrorResponse, "description": "Room not found"}},
        tags=["Rooms"],
        summary="Get a room snapshot",
    )
    async def get_room(code: str):
        """
        Current snapshot of a room.

        Best-effort hydration for clients that connect mid-game; live
        updates arrive over the WebSocket.
        """
        try:
            return api_service.get_room_snapshot(code)
        except NotFoundError as e:
            return make_error_response(ErrorCode.NOT_FOUND, e.message, status_code=404)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        One socket per player.

        Each socket gets a fresh connection id; create/join/reconnect
        bind it to a player.
        """
        await websocket.accept()
        connection_id = str(uuid.uuid4())
        hub.register(connection_id)
        writer = asyncio.create_task(hub.pump(connection_id, websocket))

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    hub.send(connection_id, {
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                if isinstance(message, dict) and message.get("type") == "ping":
                    hub.send(connection_id, {"type": "pong"})
                    continue

                response = api_service.handle(connection_id, message)
                hub.send(connection_id, {
                    "type": "ack",
                    **response.model_dump(mode="json"),
                })

        except WebSocketDisconnect:
            pass
        finally:
            api_service.disconnect(connection_id)
            hub.unregister(connection_id)
            writer.cancel()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="hotseat",
            version=__version__,
            rooms=len(api_service.registry.list_rooms()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Hot Seat API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
