from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .registry import RoomRegistry
from .routers import rooms as rooms_router
from .routers import websockets as ws_router
from .settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.registry = RoomRegistry(queue_size=settings.ROOM_QUEUE_SIZE)
    try:
        yield
    finally:
        await app.state.registry.shutdown()


# -----------------------------
# FastAPI app instance
# -----------------------------

app = FastAPI(title="Secret Santa Backend", lifespan=lifespan)

# Browsers connect from wherever the UI is hosted; restrict via CORS_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(rooms_router.router)
app.include_router(ws_router.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


__all__ = ["app"]
