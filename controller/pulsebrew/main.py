"""FastAPI entry-point for the pulsebrew controller."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal, Optional

import psutil
import uvicorn
from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from . import __version__
from .config import BrewConfig, Settings, get_settings
from .logging_config import configure_logging
from .session import BrewSession
from .state import PHASE_LEXICON, ControllerEvent

logger = logging.getLogger(__name__)

router = APIRouter()


class MuteRequest(BaseModel):
    muted: Optional[bool] = None  # None toggles


class VisibilityRequest(BaseModel):
    visible: bool = True


class VisibilityMessage(BaseModel):
    """Page visibility report sent by the front-end over /ws/ui."""

    type: Literal["visibility"]
    visible: bool


def _session(request: Request) -> BrewSession:
    return request.app.state.session


def _event_payload(event: ControllerEvent) -> dict[str, Any]:
    payload = {
        "type": event.type,
        "phase": event.phase.value,
        "data": event.data,
    }
    if event.error:
        payload["error"] = event.error
    return payload


@router.get("/healthz")
async def healthcheck(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "phase": _session(request).phase.value})


@router.get("/debug/performance")
async def debug_performance() -> JSONResponse:
    """Get real-time CPU and memory usage."""
    try:
        cpu_percent = psutil.cpu_percent(interval=0.1)
        memory = psutil.virtual_memory()

        return JSONResponse({
            "cpu_percent": round(cpu_percent, 1),
            "memory_percent": round(memory.percent, 1),
            "memory_used_mb": round(memory.used / (1024 * 1024), 1),
            "memory_total_mb": round(memory.total / (1024 * 1024), 1)
        })
    except Exception as e:
        logger.error(f"Performance monitoring error: {e}")
        return JSONResponse(
            {"error": str(e)},
            status_code=500
        )


@router.get("/phases")
async def phases() -> JSONResponse:
    return JSONResponse({
        phase.value: {"label": info.label, "hint": info.hint}
        for phase, info in PHASE_LEXICON.items()
    })


@router.get("/state")
async def brew_state(request: Request) -> JSONResponse:
    return JSONResponse(_session(request).view())


@router.get("/config")
async def read_config(request: Request) -> JSONResponse:
    return JSONResponse(_session(request).config.model_dump())


@router.put("/config")
async def update_config(payload: BrewConfig, request: Request) -> JSONResponse:
    session = _session(request)
    await session.reconfigure(payload)
    return JSONResponse(session.view())


@router.post("/brew/start")
async def start_brew(request: Request) -> JSONResponse:
    session = _session(request)
    await session.start()
    return JSONResponse(session.view())


@router.post("/brew/stop")
async def stop_brew(request: Request) -> JSONResponse:
    session = _session(request)
    await session.stop()
    return JSONResponse(session.view())


@router.post("/brew/reset")
async def reset_brew(request: Request) -> JSONResponse:
    session = _session(request)
    await session.reset()
    return JSONResponse(session.view())


@router.post("/brew/mute")
async def mute(payload: MuteRequest, request: Request) -> JSONResponse:
    config = await _session(request).set_muted(payload.muted)
    return JSONResponse({"is_muted": config.is_muted})


@router.post("/wake-lock/visibility")
async def wake_lock_visibility(payload: VisibilityRequest, request: Request) -> JSONResponse:
    requested = await _session(request).handle_visibility_change(payload.visible)
    return JSONResponse({"visible": payload.visible, "re_requested": requested})


async def _watch_client(ws: WebSocket, session: BrewSession) -> None:
    """Consume client frames until the socket goes away."""
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return
        text = message.get("text")
        if not text:
            continue
        try:
            report = VisibilityMessage.model_validate_json(text)
        except Exception:
            logger.debug("Ignoring unrecognised UI message: %s", text)
            continue
        await session.handle_visibility_change(report.visible)


@router.websocket("/ws/ui")
async def ui_socket(ws: WebSocket) -> None:
    session: BrewSession = ws.app.state.session
    queue = session.register_ui()
    await ws.accept()
    watcher = asyncio.create_task(_watch_client(ws, session), name="ui-socket-watch")
    try:
        await ws.send_json(_event_payload(ControllerEvent(type="state", data=session.view(), phase=session.phase)))
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, watcher}, return_when=asyncio.FIRST_COMPLETED)
            if getter not in done:
                getter.cancel()
                break
            try:
                await ws.send_json(_event_payload(getter.result()))
            except Exception as e:
                # WebSocket closed, break out of loop
                logger.debug(f"WebSocket send failed (client disconnected): {e}")
                break
    except WebSocketDisconnect:
        pass
    except asyncio.CancelledError:
        pass  # Clean shutdown
    except Exception as e:
        logger.error(f"Unexpected error in UI websocket: {e}")
    finally:
        session.unregister_ui(queue)
        watcher.cancel()
        try:
            await watcher
        except (asyncio.CancelledError, Exception):
            pass
        try:
            await ws.close()
        except Exception:
            pass


def create_app(settings: Optional[Settings] = None, session: Optional[BrewSession] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(
        settings.log_level,
        settings.log_directory,
        settings.log_retention_days,
        module_levels=settings.log_module_levels,
    )

    app = FastAPI(title="pulsebrew-controller", version=__version__)
    manager = session or BrewSession(settings=settings)
    app.state.settings = settings
    app.state.session = manager

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
        """Catch-all exception handler to prevent application crashes."""
        logger.exception(f"Unhandled exception in {request.url.path}: {exc}")
        return PlainTextResponse(
            f"Internal server error: {str(exc)}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Reject invalid settings before they reach the brew engine."""
        logger.warning(f"Validation error in {request.url.path}: {exc}")
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)}
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        try:
            await manager.open()
            logger.info("Application started successfully")
        except Exception as e:
            logger.exception(f"Failed to start services: {e}")
            logger.error("Application startup failed - some features may not work")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        try:
            await manager.close()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.exception(f"Error during shutdown: {e}")

    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    app = create_app(settings)
    # log_config=None keeps the dictConfig installed by create_app
    uvicorn.run(app, host=settings.controller_host, port=settings.controller_port, log_config=None)


if __name__ == "__main__":
    run()
