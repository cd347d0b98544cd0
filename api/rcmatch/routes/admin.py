import logging
from typing import Any

from fastapi import APIRouter, Depends

from ..auth.deps import require_admin
from ..deps import get_core
from ..services.core import MatchCore, RequestContext
from ..services.directory import public_profile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/users")
def admin_users_list(admin: RequestContext = Depends(require_admin), core: MatchCore = Depends(get_core)) -> dict[str, Any]:
    _ = admin
    users = [public_profile(p) for p in core.get_all_users()]
    return {"users": users, "count": len(users)}


@router.post("/admin/users/{user_id}/toggle-block")
def admin_users_toggle_block(user_id: str, admin: RequestContext = Depends(require_admin), core: MatchCore = Depends(get_core)) -> dict[str, Any]:
    profile = core.toggle_block(user_id)
    logger.info("[moderation] admin=%s toggled block user_id=%s blocked=%s", admin.user_id, user_id, profile["blocked"])
    return {"user": public_profile(profile)}


@router.post("/admin/users/{user_id}/delete")
def admin_users_delete(user_id: str, admin: RequestContext = Depends(require_admin), core: MatchCore = Depends(get_core)) -> dict[str, Any]:
    removed = core.delete_user(user_id)
    logger.info("[moderation] admin=%s deleted user_id=%s", admin.user_id, user_id)
    return {"ok": True, "user_id": user_id, "removed": removed}
