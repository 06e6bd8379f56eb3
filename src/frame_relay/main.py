"""
Frame Relay Main Application
============================

FastAPI entry point for the frame relay.

Endpoints:
    GET  /                - Service information
    WS   /                - Producer frame ingest (also at /ws/ingest)
    GET  /frame.{format}  - Current frame as png, webp or jpeg
    GET  /preview.png     - Alias of /frame.png
    GET  /stats           - Statistics (JSON)
    GET  /health          - Liveness probe
    GET  /config          - Effective runtime config
    POST /config          - Permissive config update
    POST /clear           - Empty frame store, reset frame/byte counters
    WS   /ws/frames       - Push stream of the current frame (binary messages)
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from frame_relay import __version__
from frame_relay.config import Settings, settings
from frame_relay.ingest import IngestionSession
from frame_relay.models.api import ConfigResponse, ConfigSnapshot
from frame_relay.models.errors import ErrorKind
from frame_relay.models.frame import OutputFormat
from frame_relay.observability import StatsReporter
from frame_relay.serving import build_health, build_stats, push_frames, render_frame
from frame_relay.state import ServerState


logger = logging.getLogger(__name__)


# WebSocket close code for "going away" (server shutdown)
CLOSE_GOING_AWAY = 1001

FRAME_HEADERS = {
    "Cache-Control": "no-cache",
    "Access-Control-Allow-Origin": "*",
}

router = APIRouter()


def get_state(request: Request) -> ServerState:
    return request.app.state.relay


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    app_settings: Settings = app.state.settings
    relay: ServerState = app.state.relay

    config = relay.config.snapshot()
    logger.info(f"Starting {app_settings.service.name} {app_settings.service.version}")
    logger.info(
        f"Listening on {app_settings.server.host}:{app_settings.server.port} | "
        f"Format: {config.output_format.value.upper()} | Quality: {config.quality}%"
    )

    reporter = StatsReporter(
        relay,
        interval=app_settings.observability.stats_interval_seconds,
    )
    reporter_task = asyncio.create_task(reporter.run(), name="stats_reporter")

    yield

    # Shutdown
    logger.info("Shutting down gracefully...")
    relay.accepting_producers = False

    closed = await relay.close_connections(code=CLOSE_GOING_AWAY)
    if closed:
        logger.info(f"Closed {closed} open connection(s)")

    await relay.drain(timeout=app_settings.relay.shutdown_drain_seconds)

    await reporter.stop()
    try:
        await asyncio.wait_for(reporter_task, timeout=5.0)
    except asyncio.TimeoutError:
        reporter_task.cancel()
        try:
            await reporter_task
        except asyncio.CancelledError:
            pass

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the relay application.

    Each call gets its own ServerState, reachable as ``app.state.relay``.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="FrameRelay",
        description="Latest-frame relay with on-the-fly image transcoding",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.relay = ServerState(app_settings.relay)
    app.include_router(router)

    return app


# =============================================================================
# HTTP Endpoints
# =============================================================================

@router.get("/")
async def root(request: Request) -> JSONResponse:
    """Service information endpoint."""
    app_settings: Settings = request.app.state.settings
    relay = get_state(request)
    return JSONResponse({
        "service": "FrameRelay",
        "name": app_settings.service.name,
        "version": app_settings.service.version,
        "status": "running",
        "outputFormat": relay.config.output_format.value,
        "endpoints": {
            "ingest": ["ws /", "ws /ws/ingest"],
            "frame": [f"/frame.{fmt.value}" for fmt in OutputFormat],
            "push": "ws /ws/frames",
            "stats": "/stats",
            "health": "/health",
            "config": "/config",
            "clear": "/clear",
        },
    })


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 while the service is running.
    """
    return JSONResponse(build_health(get_state(request)).model_dump())


@router.get("/stats")
async def stats(request: Request) -> JSONResponse:
    """Statistics snapshot for dashboards."""
    return JSONResponse(build_stats(get_state(request)).model_dump(by_alias=True))


@router.get("/config")
async def read_config(request: Request) -> JSONResponse:
    """Current runtime configuration."""
    relay = get_state(request)
    snapshot = ConfigSnapshot.model_validate(relay.config.snapshot().to_dict())
    return JSONResponse({"config": snapshot.model_dump(by_alias=True)})


@router.post("/config")
async def update_config(request: Request) -> JSONResponse:
    """
    Update output format / quality / payload ceiling.

    Permissive merge: every field is validated on its own. Invalid fields
    are ignored (and counted), valid ones apply, and the response always
    echoes the effective config.
    """
    relay = get_state(request)

    body = await request.body()
    try:
        update = json.loads(body) if body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Ignoring config update with a non-JSON body")
        update = {}
    if not isinstance(update, dict):
        update = {}

    rejected = relay.config.merge(update)
    for _ in rejected:
        relay.stats.record_error(ErrorKind.CONFIG_VALIDATION_REJECTED)

    snapshot = ConfigSnapshot.model_validate(relay.config.snapshot().to_dict())
    response = ConfigResponse(success=True, config=snapshot)
    return JSONResponse(response.model_dump(by_alias=True))


@router.post("/clear")
async def clear(request: Request) -> JSONResponse:
    """Empty the frame store and reset frame/byte counters."""
    get_state(request).clear()
    return JSONResponse({"success": True})


@router.get("/frame.{image_format}")
async def frame(request: Request, image_format: str) -> Response:
    """
    Current frame in the requested format.

    Never fails because of frame state: before the first frame this
    returns a 1x1 placeholder image.
    """
    try:
        requested = OutputFormat.parse(image_format)
    except ValueError:
        return PlainTextResponse(
            "Invalid format. Use png, webp, or jpeg",
            status_code=400,
        )

    data, actual = await render_frame(get_state(request), requested)
    return Response(content=data, media_type=actual.media_type, headers=FRAME_HEADERS)


@router.get("/preview.png")
async def preview(request: Request) -> Response:
    """Alias of /frame.png."""
    return await frame(request, OutputFormat.PNG.value)


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@router.websocket("/")
@router.websocket("/ws/ingest")
async def ingest(websocket: WebSocket) -> None:
    """Producer endpoint: one text or binary message per frame."""
    relay: ServerState = websocket.app.state.relay

    # Accept first so the producer sees the 1001 close, not a rejected handshake
    await websocket.accept()

    if not relay.accepting_producers:
        await websocket.close(code=CLOSE_GOING_AWAY)
        return

    peer = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
    session = IngestionSession(relay, peer=peer)
    relay.register_connection(websocket)
    session.open()

    try:
        while True:
            try:
                message = await websocket.receive()
            except Exception as e:
                # Sockets closed by shutdown are not transport failures
                if relay.accepting_producers:
                    session.on_transport_error(e)
                break

            if message["type"] == "websocket.disconnect":
                break

            if message.get("text") is not None:
                session.handle_message(message["text"])
            elif message.get("bytes") is not None:
                session.handle_message(message["bytes"])
    finally:
        relay.unregister_connection(websocket)
        session.close()


@router.websocket("/ws/frames")
async def frame_stream(websocket: WebSocket) -> None:
    """Push subscribers receive the current frame whenever it changes."""
    relay: ServerState = websocket.app.state.relay
    app_settings: Settings = websocket.app.state.settings

    await websocket.accept()
    relay.register_connection(websocket)
    total = relay.stats.subscriber_added()
    logger.info(f"Subscriber connected to /ws/frames. Total: {total}")

    try:
        await push_frames(
            websocket,
            relay,
            interval=app_settings.relay.frame_push_interval_seconds,
        )
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"Subscriber WebSocket error: {e}")
    finally:
        relay.unregister_connection(websocket)
        total = relay.stats.subscriber_removed()
        logger.info(f"Subscriber disconnected from /ws/frames. Total: {total}")


app = create_app()


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Console entry point: serve ``app`` with uvicorn."""
    import uvicorn

    uvicorn.run(
        "frame_relay.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
