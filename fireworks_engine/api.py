"""FastAPI backend for the fireworks simulation."""
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError
from starlette.websockets import WebSocketState

from .clock import SimulationClock
from .config import DEFAULT_CONFIG, DEFAULT_LAUNCH, LaunchConfig
from .presets import get_preset, list_presets
from .simulation import Simulation

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models
# ============================================================================

class LaunchConfigUpdate(BaseModel):
    """Partial update of the launch form values."""
    size: Optional[int] = Field(default=None, ge=1, le=100)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    explosion_duration: Optional[float] = Field(default=None, gt=0.0, allow_inf_nan=False)
    explosion_radius: Optional[float] = Field(default=None, ge=0.0, allow_inf_nan=False)


class LaunchRequest(BaseModel):
    """Click position relative to the drawing surface."""
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


# ============================================================================
# FastAPI App with Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the simulation clock for the lifetime of the app."""
    logger.info("Starting fireworks simulation clock")
    _clock.start()

    yield

    logger.info("Shutting down fireworks simulation clock")
    await _clock.stop()

app = FastAPI(title="Fireworks Engine", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
_config = DEFAULT_CONFIG
_simulation = Simulation(_config)
_clock = SimulationClock(_simulation)
_launch_config: LaunchConfig = DEFAULT_LAUNCH
_websocket_clients: set = set()


# ============================================================================
# Broadcast
# ============================================================================

@_clock.on_tick
async def _broadcast(state: Dict[str, Any]) -> None:
    """Send a post-tick snapshot to every connected client."""
    message = {"type": "state", "payload": state}
    dead_clients = set()

    for client in list(_websocket_clients):
        try:
            if client.client_state == WebSocketState.CONNECTED:
                await client.send_json(message)
            else:
                dead_clients.add(client)
        except Exception as e:
            logger.warning("Dropping client after send failure: %s: %s", type(e).__name__, e)
            dead_clients.add(client)

    if dead_clients:
        logger.info("Removing %d dead clients", len(dead_clients))
    _websocket_clients.difference_update(dead_clients)


# ============================================================================
# Helper Functions
# ============================================================================

def _apply_config_update(update: LaunchConfigUpdate) -> LaunchConfig:
    """Replace the current launch values with the fields set in ``update``."""
    global _launch_config
    _launch_config = _launch_config.updated(**update.model_dump())
    return _launch_config


def _apply_preset(name: str) -> LaunchConfig:
    global _launch_config
    _launch_config = get_preset(name).launch
    return _launch_config


def _launch(x: float, y: float) -> Optional[int]:
    firework = _simulation.launch((x, y), _launch_config)
    return firework.id if firework is not None else None


def _config_payload() -> Dict[str, Any]:
    return {
        "engine": _simulation.config.to_dict(),
        "launch": _launch_config.to_dict(),
    }


# ============================================================================
# REST Endpoints
# ============================================================================

@app.get("/health")
async def health() -> Dict[str, str]:
    """Health check."""
    return {"status": "ok"}


@app.get("/config")
async def get_config() -> Dict[str, Any]:
    """Get engine constants and the current launch values."""
    return _config_payload()


@app.post("/config")
async def update_config(update: LaunchConfigUpdate) -> Dict[str, Any]:
    """Update launch values; fireworks already in the air keep their own."""
    async with _clock.lock:
        _apply_config_update(update)
        return _config_payload()


@app.post("/launch")
async def launch(request: LaunchRequest) -> Dict[str, int]:
    """Queue a firework towards the given point."""
    async with _clock.lock:
        try:
            firework_id = _launch(request.x, request.y)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    if firework_id is None:
        raise HTTPException(status_code=429, detail="Too many live fireworks")
    return {"id": firework_id}


@app.post("/step")
async def step(ticks: int = Query(default=1, ge=1, le=1000)) -> Dict[str, Any]:
    """Advance the simulation by ``ticks`` ticks immediately, notifying subscribers."""
    state = None
    for _ in range(ticks):
        state = await _clock.tick()
    return state


@app.get("/state")
async def get_state() -> Dict[str, Any]:
    """Current simulation snapshot."""
    async with _clock.lock:
        return _simulation.get_state()


@app.post("/reset")
async def reset_simulation() -> Dict[str, str]:
    """Remove every firework."""
    async with _clock.lock:
        _simulation.reset()
        return {"status": "reset"}


@app.get("/presets")
async def get_presets() -> List[Dict[str, Any]]:
    """List available presets."""
    return [
        {
            "name": p.name,
            "description": p.description,
            "launch": p.launch.to_dict(),
        }
        for p in list_presets()
    ]


@app.post("/presets/{name}")
async def apply_preset(name: str) -> Dict[str, Any]:
    """Load a preset into the launch values."""
    async with _clock.lock:
        try:
            launch_config = _apply_preset(name)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"preset": name, "launch": launch_config.to_dict()}


# ============================================================================
# WebSocket
# ============================================================================

def _handle_message(message: Dict[str, Any]) -> None:
    """Handle client commands."""
    msg_type = message.get("type")

    if msg_type == "launch":
        if "x" not in message or "y" not in message:
            raise ValueError("Message missing 'x' or 'y'")
        if _launch(float(message["x"]), float(message["y"])) is None:
            raise ValueError("Too many live fireworks")

    elif msg_type == "update_config":
        try:
            update = LaunchConfigUpdate(**(message.get("config") or {}))
        except ValidationError as exc:
            raise ValueError(str(exc))
        _apply_config_update(update)

    elif msg_type == "reset":
        _simulation.reset()

    elif msg_type == "use_preset":
        name = message.get("name")
        if name is None:
            raise ValueError("Message missing 'name'")
        _apply_preset(name)

    else:
        raise ValueError(f"Unknown message type: {msg_type!r}")


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint - clients send commands and receive every tick."""
    await websocket.accept()
    _websocket_clients.add(websocket)
    logger.info("WebSocket client connected, total clients: %d", len(_websocket_clients))

    try:
        async with _clock.lock:
            state = _simulation.get_state()
        await websocket.send_json({"type": "state", "payload": state})

        while True:
            try:
                message = json.loads(await websocket.receive_text())
            except ValueError as exc:
                await websocket.send_json({"type": "error", "detail": f"Invalid JSON: {exc}"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "detail": "Message must be a JSON object"})
                continue

            try:
                async with _clock.lock:
                    _handle_message(message)
                    state = _simulation.get_state()
            except (ValueError, TypeError) as exc:
                await websocket.send_json({"type": "error", "detail": str(exc)})
                continue
            await websocket.send_json({"type": "state", "payload": state})

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        _websocket_clients.discard(websocket)
