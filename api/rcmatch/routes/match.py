from typing import Any

from fastapi import APIRouter, Depends

from ..auth.deps import get_request_context
from ..deps import get_core
from ..services.core import MatchCore, RequestContext
from ..services.directory import public_profile

router = APIRouter()


@router.get("/matches")
def list_matches(ctx: RequestContext = Depends(get_request_context), core: MatchCore = Depends(get_core)) -> dict[str, Any]:
    rows = core.get_matches(ctx)
    return {"matches": [{"match": r["match"], "other_user": public_profile(r["other_user"])} for r in rows]}
