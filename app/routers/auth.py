"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.dependencies import CurrentUser, get_auth_service, get_current_user, get_jwt_service, set_auth_cookie
from app.rate_limit import limiter
from app.schemas.auth import LoginRequest, MeResponse, RegisterRequest, TokenResponse
from app.services.auth import AuthResult, AuthService
from app.services.jwt import JWTService

logger = logging.getLogger("audiomind")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _issue_token(result: AuthResult, response: Response, jwt_service: JWTService) -> TokenResponse:
    token = jwt_service.create_token(user_id=result.user_id, username=result.username)  # type: ignore[arg-type]
    set_auth_cookie(response, token)
    return TokenResponse(token=token, user_id=result.user_id, username=result.username)  # type: ignore[arg-type]


@router.post("/register", response_model=TokenResponse)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Register a new user account."""
    result = auth_service.register(body.username, body.password)

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    logger.info("Registered user %s", result.username)
    return _issue_token(result, response, jwt_service)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Authenticate and receive a JWT token."""
    result = auth_service.authenticate(body.username, body.password)

    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)

    return _issue_token(result, response, jwt_service)


@router.get("/me", response_model=MeResponse)
def me(user: CurrentUser = Depends(get_current_user)) -> MeResponse:
    """Return the identity behind the current token."""
    return MeResponse(user_id=user.user_id, username=user.username)
