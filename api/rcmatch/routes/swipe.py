from typing import Any

from fastapi import APIRouter, Depends

from ..auth.deps import get_request_context
from ..config import RL_SWIPE_LIMIT, RL_WINDOW_SECONDS
from ..deps import get_core
from ..schemas import SwipeRequest
from ..services.core import MatchCore, RequestContext
from ..services.directory import public_profile
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()

RL_SWIPE = rate_limit_dependency("swipe", RL_SWIPE_LIMIT, RL_WINDOW_SECONDS)


@router.get("/potentials")
def list_potentials(
    topic: str | None = None,
    type: str | None = None,
    ctx: RequestContext = Depends(get_request_context),
    core: MatchCore = Depends(get_core),
) -> dict[str, Any]:
    profiles = core.get_potentials(ctx, topic=topic, type_preference=type)
    return {"potentials": [public_profile(p) for p in profiles]}


@router.post("/swipes")
def create_swipe(
    payload: SwipeRequest,
    ctx: RequestContext = Depends(get_request_context),
    core: MatchCore = Depends(get_core),
    _: None = RL_SWIPE,
) -> dict[str, Any]:
    return {"match": core.swipe(ctx, payload.target_id, payload.action)}
