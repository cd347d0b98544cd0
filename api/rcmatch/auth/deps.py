"""
Authentication dependencies for FastAPI.

Supports two auth modes:
1. Cookie-based session (primary for web): httpOnly cookie contains access token
2. Bearer token (for API clients): Authorization header with Bearer token

Both resolve to a RequestContext built from the profile record, so a profile
blocked or deleted after its token was issued loses access immediately.
"""

import logging
import uuid
from typing import Any

from fastapi import Cookie, Depends, Header, HTTPException

from ..config import DEV_MODE, SESSION_COOKIE_NAME
from ..deps import get_core
from ..errors import AccountBlocked
from ..services.core import MatchCore, RequestContext
from .security import decode_access_token

logger = logging.getLogger(__name__)


def _unauthorized(message: str, reason: str, trace_id: str) -> HTTPException:
    detail: dict[str, Any] = {"message": message, "trace_id": trace_id}
    if DEV_MODE:
        detail["reason"] = reason
    return HTTPException(status_code=401, detail=detail)


def _log_auth_failure(reason: str, trace_id: str, auth_source: str, user_id: str | None = None) -> None:
    logger.warning(f"[AUTH_FAILURE] trace_id={trace_id} reason={reason} source={auth_source} user_id={user_id}")


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


def _context_from_token(token: str, core: MatchCore, trace_id: str, auth_source: str) -> RequestContext:
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        if e.status_code != 401:
            raise
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, auth_source)
        raise _unauthorized("unauthorized", reason, trace_id)

    user_id = str(payload.get("sub") or "")
    if not user_id:
        _log_auth_failure("token_missing_subject", trace_id, auth_source)
        raise _unauthorized("unauthorized", "token_missing_subject", trace_id)

    profile = core.get_profile(user_id)
    if not profile:
        _log_auth_failure("token_user_not_found", trace_id, auth_source, user_id)
        raise _unauthorized("unauthorized", "token_user_not_found", trace_id)
    if profile["blocked"]:
        _log_auth_failure("account_blocked", trace_id, auth_source, user_id)
        raise AccountBlocked()

    logger.debug(f"[auth] user_id={user_id} type={profile['type']} source={auth_source}")
    return RequestContext(user_id=profile["id"], user_type=profile["type"], username=profile["username"])


def get_request_context(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    authorization: str | None = Header(default=None, alias="Authorization"),
    core: MatchCore = Depends(get_core),
) -> RequestContext:
    """Resolve the caller from the session cookie, falling back to a bearer token."""
    trace_id = str(uuid.uuid4())
    if session_token:
        return _context_from_token(session_token, core, trace_id, "cookie")
    token = _extract_bearer(authorization)
    if token:
        return _context_from_token(token, core, trace_id, "bearer")
    _log_auth_failure("missing_token", trace_id, "none")
    raise _unauthorized("Authentication required", "missing_token", trace_id)


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return ctx
