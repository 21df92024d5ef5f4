"""Canvas page and the Server-Sent Events stream that feeds it."""

import asyncio
import json
import uuid
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from simulation.state import StateSnapshot

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
KEEPALIVE_S = 1.0

router = APIRouter(tags=["ui"])

# These will be set by app.py
_engine = None
_bus = None


def init(engine, bus):
    global _engine, _bus
    _engine = engine
    _bus = bus


def format_sse(event, data):
    """Format data as Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def encode(item):
    if isinstance(item, StateSnapshot):
        return format_sse("state", item.to_dict())
    return format_sse("event", item)


@router.get("/", response_class=HTMLResponse)
async def index():
    """Serve the canvas page that draws the particles."""
    return (STATIC_DIR / "index.html").read_text(encoding="utf-8")


@router.get("/events")
async def events(request: Request):
    """Stream the current snapshot, then every published snapshot and event."""
    name = f"ui-{uuid.uuid4().hex[:8]}"
    sub = await _bus.subscribe(name, max_queue_size=10)

    async def stream():
        try:
            yield encode(await _engine.get_snapshot())
            while not await request.is_disconnected():
                try:
                    item = await asyncio.wait_for(sub.queue.get(), timeout=KEEPALIVE_S)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield encode(item)
        finally:
            await _bus.unsubscribe(name)

    return StreamingResponse(stream(), media_type="text/event-stream")
