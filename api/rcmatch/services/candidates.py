"""Candidate Selector: who a user may still be shown for swiping."""

import logging
import random
from typing import Any

from sqlalchemy import bindparam, text

from ..errors import InvalidAction, NotFound
from ..models import ADMIN, INDIVIDUAL, ORGANIZATION
from .directory import ProfileDirectory, row_to_profile
from .store import store_guard

logger = logging.getLogger(__name__)

SWIPEABLE_TYPES = (ORGANIZATION, INDIVIDUAL)


def normalize_type_preference(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip().upper()
    if not v:
        return None
    if v not in SWIPEABLE_TYPES:
        raise InvalidAction("type must be one of: ORGANIZATION, INDIVIDUAL")
    return v


def eligible_types(requester_type: str, type_preference: str | None = None) -> list[str]:
    if requester_type == ORGANIZATION:
        return [INDIVIDUAL]
    if requester_type == INDIVIDUAL:
        if type_preference:
            return [type_preference]
        return [ORGANIZATION, INDIVIDUAL]
    return []


_CANDIDATES_SQL = text(
    """
    SELECT p.*
    FROM user_profile p
    WHERE p.id <> :requester_id
      AND p.blocked = :blocked
      AND p.type <> :admin
      AND p.type IN :types
      AND NOT EXISTS (
        SELECT 1
        FROM swipe_action s
        WHERE s.actor_id = :requester_id
          AND s.target_id = p.id
      )
    ORDER BY p.created_at ASC, p.id ASC
    """
).bindparams(bindparam("types", expanding=True))


class CandidateSelector:
    def __init__(self, session_factory, directory: ProfileDirectory, rng: random.Random | None = None):
        self._session_factory = session_factory
        self._directory = directory
        self._rng = rng or random.Random()

    def potentials(
        self,
        requester_id: str,
        topic: str | None = None,
        type_preference: str | None = None,
    ) -> list[dict[str, Any]]:
        preference = normalize_type_preference(type_preference)
        requester = self._directory.get_by_id(requester_id)
        if not requester:
            raise NotFound("User not found")
        types = eligible_types(requester["type"], preference)
        if not types:
            return []

        with store_guard("potentials"):
            with self._session_factory() as db:
                rows = db.execute(
                    _CANDIDATES_SQL,
                    {"requester_id": str(requester_id), "blocked": False, "admin": ADMIN, "types": types},
                ).mappings().all()
        candidates = [row_to_profile(r) for r in rows]

        wanted = (topic or "").strip()
        if wanted:
            candidates = [c for c in candidates if wanted in c["topics"]]

        self._rng.shuffle(candidates)
        logger.debug("[candidates] requester=%s types=%s topic=%s count=%s", requester_id, types, wanted or None, len(candidates))
        return candidates
