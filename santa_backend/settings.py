from __future__ import annotations

import os
from typing import List

from pydantic import BaseModel


class Settings(BaseModel):
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    CORS_ORIGINS: List[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    # Pending commands per room before callers wait on enqueue
    ROOM_QUEUE_SIZE: int = int(os.getenv("ROOM_QUEUE_SIZE", "64"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()

__all__ = ["Settings", "settings"]
