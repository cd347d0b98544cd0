import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..auth.deps import SESSION_COOKIE_NAME, get_request_context
from ..auth.security import create_access_token
from ..config import ACCESS_TOKEN_TTL_MINUTES, RL_AUTH_LOGIN_LIMIT, RL_AUTH_REGISTER_LIMIT, RL_WINDOW_SECONDS
from ..deps import get_core
from ..http_helpers import sanitize_profile_draft
from ..schemas import LoginRequest
from ..services.core import MatchCore, RequestContext
from ..services.directory import public_profile
from ..services.rate_limit import rate_limit_dependency

logger = logging.getLogger(__name__)

router = APIRouter()

RL_AUTH_REGISTER = rate_limit_dependency("auth_register", RL_AUTH_REGISTER_LIMIT, RL_WINDOW_SECONDS, per_user=False)
RL_AUTH_LOGIN = rate_limit_dependency("auth_login", RL_AUTH_LOGIN_LIMIT, RL_WINDOW_SECONDS, per_user=False)


def _is_bearer_mode(request: Request) -> bool:
    """Check if client requested bearer token mode (for non-browser clients)."""
    return str(request.headers.get("X-Auth-Mode") or "").strip().lower() == "bearer"


def _set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=False,  # Set to True in production with HTTPS
        samesite="lax",
        path="/",
        max_age=ACCESS_TOKEN_TTL_MINUTES * 60,
    )


def _session_response(request: Request, response: Response, profile: dict[str, Any]) -> dict[str, Any]:
    access_token = create_access_token(user_id=profile["id"], user_type=profile["type"])
    _set_session_cookie(response, access_token)
    body: dict[str, Any] = {"user": public_profile(profile)}
    if _is_bearer_mode(request):
        body.update({"access_token": access_token, "token_type": "bearer", "expires_in": ACCESS_TOKEN_TTL_MINUTES * 60})
    return body


@router.post("/register", status_code=201)
def auth_register(
    payload: dict[str, Any],
    request: Request,
    response: Response,
    core: MatchCore = Depends(get_core),
    _: None = RL_AUTH_REGISTER,
) -> dict[str, Any]:
    draft = sanitize_profile_draft(payload)
    profile = core.register(draft)
    return _session_response(request, response, profile)


@router.post("/login")
def auth_login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    core: MatchCore = Depends(get_core),
    _: None = RL_AUTH_LOGIN,
) -> dict[str, Any]:
    profile = core.login(payload.username, payload.password)
    if not profile:
        logger.warning("[auth] invalid credentials for username=%s", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _session_response(request, response, profile)


@router.post("/logout")
def auth_logout(response: Response) -> dict[str, bool]:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return {"ok": True}


@router.get("/me")
def auth_me(ctx: RequestContext = Depends(get_request_context), core: MatchCore = Depends(get_core)) -> dict[str, Any]:
    profile = core.get_profile(ctx.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": public_profile(profile)}
