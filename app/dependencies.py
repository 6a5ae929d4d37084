"""Request-scoped dependencies: identity and the services held on app state."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response

from app.config import Settings
from app.services.ai_gateway import AIGateway
from app.services.audio_content import AudioContentService
from app.services.auth import AuthService
from app.services.ingestion import IngestionPipeline
from app.services.jobs import JobManager
from app.services.jwt import JWTService
from app.storage.base import ContentStore

AUTH_COOKIE_NAME = "am_auth_token"
COOKIE_MAX_AGE = 8 * 60 * 60  # 8 hours


@dataclass
class CurrentUser:
    """Authenticated user context."""

    user_id: str
    username: str


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def get_gateway(request: Request) -> AIGateway:
    return request.app.state.gateway


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.jobs


def get_jwt_service(settings: Settings = Depends(get_app_settings)) -> JWTService:
    return JWTService(settings)


def get_auth_service(store: ContentStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_audio_content_service(
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> AudioContentService:
    return AudioContentService(store, settings)


def get_pipeline(
    store: ContentStore = Depends(get_store),
    gateway: AIGateway = Depends(get_gateway),
) -> IngestionPipeline:
    return IngestionPipeline(store, gateway)


def get_current_user(
    request: Request,
    store: ContentStore = Depends(get_store),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> CurrentUser:
    """Extract and validate user from Bearer token or cookie. Raises 401 if invalid."""
    token: str | None = None

    # Check Authorization header first
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:]

    # Fall back to cookie (the audio element cannot send headers)
    if not token:
        token = request.cookies.get(AUTH_COOKIE_NAME)

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = jwt_service.decode_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = store.get_user(payload["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")

    return CurrentUser(user_id=user.id, username=user.username)


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the authentication cookie."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=False,
        max_age=COOKIE_MAX_AGE,
    )
