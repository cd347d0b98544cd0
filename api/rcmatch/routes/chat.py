from typing import Any

from fastapi import APIRouter, Depends, Query

from ..auth.deps import get_request_context
from ..config import CONVERSATION_POLL_SECONDS, RL_MESSAGE_LIMIT, RL_WINDOW_SECONDS
from ..deps import get_core
from ..schemas import SendMessageRequest
from ..services.core import MatchCore, RequestContext
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()

RL_MESSAGE = rate_limit_dependency("send_message", RL_MESSAGE_LIMIT, RL_WINDOW_SECONDS)


@router.get("/conversations/{partner_id}")
def get_conversation(
    partner_id: str,
    after_seq: int | None = Query(default=None, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    core: MatchCore = Depends(get_core),
) -> dict[str, Any]:
    messages = core.get_conversation(ctx, partner_id, after_seq=after_seq)
    return {"messages": messages, "poll_interval_seconds": CONVERSATION_POLL_SECONDS}


@router.post("/conversations/{partner_id}/messages", status_code=201)
def send_message(
    partner_id: str,
    payload: SendMessageRequest,
    ctx: RequestContext = Depends(get_request_context),
    core: MatchCore = Depends(get_core),
    _: None = RL_MESSAGE,
) -> dict[str, Any]:
    return {"message": core.send_message(ctx, partner_id, payload.content)}
