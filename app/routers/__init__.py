"""API routers."""

from app.routers.audio import router as audio_router
from app.routers.audio_content import router as audio_content_router
from app.routers.auth import router as auth_router
from app.routers.highlights import router as highlights_router
from app.routers.jobs import router as jobs_router

__all__ = ["auth_router", "audio_content_router", "audio_router", "highlights_router", "jobs_router"]
