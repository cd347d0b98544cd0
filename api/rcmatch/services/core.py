"""MatchCore: the operations the UI and moderation surfaces call.

One instance is built per process with its store injected. Every user-facing
operation takes a RequestContext naming the authenticated user instead of
reading any process-wide "current user".
"""

import logging
import random
from dataclasses import dataclass
from typing import Any

from ..auth.security import hash_password, verify_password
from ..config import MESSAGE_MAX_LENGTH
from ..errors import AccountBlocked, InvalidAction, NotFound, StoreUnavailable
from ..models import ADMIN, LIKE
from .candidates import CandidateSelector
from .conversations import ConversationStore
from .directory import ProfileDirectory
from .ledger import SwipeLedger
from .match_detector import MatchDetector
from .store import store_guard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    user_type: str
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.user_type == ADMIN


class MatchCore:
    def __init__(self, session_factory, *, rng: random.Random | None = None, message_max_length: int = MESSAGE_MAX_LENGTH):
        self.session_factory = session_factory
        self.directory = ProfileDirectory(session_factory)
        self.ledger = SwipeLedger(session_factory)
        self.detector = MatchDetector(session_factory, self.ledger)
        self.candidates = CandidateSelector(session_factory, self.directory, rng=rng)
        self.conversations = ConversationStore(session_factory, self.directory, max_length=message_max_length)

    # --- Auth ---

    def login(self, username: str, password: str | None = None) -> dict[str, Any] | None:
        profile = self.directory.get_by_username(str(username or "").strip(), include_secret=True)
        if not profile:
            return None
        if profile["blocked"]:
            raise AccountBlocked()
        stored = profile.pop("password_hash", None)
        if stored:
            if not password or not verify_password(password, stored):
                return None
        elif password:
            return None
        logger.info("[auth] login user_id=%s type=%s", profile["id"], profile["type"])
        return profile

    def register(self, draft: dict[str, Any]) -> dict[str, Any]:
        password = draft.get("password")
        password_hash = hash_password(password) if password else None
        return self.directory.create_profile(draft, password_hash=password_hash)

    def ensure_admin(self, username: str, password: str) -> dict[str, Any]:
        existing = self.directory.get_by_username(username)
        if existing:
            return existing
        return self.directory.create_profile(
            {"username": username, "type": ADMIN, "name": "Administrator"},
            password_hash=hash_password(password),
        )

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        return self.directory.get_by_id(user_id)

    # --- Matching ---

    def get_potentials(self, ctx: RequestContext, topic: str | None = None, type_preference: str | None = None) -> list[dict[str, Any]]:
        try:
            return self.candidates.potentials(ctx.user_id, topic=topic, type_preference=type_preference)
        except StoreUnavailable:
            logger.warning("[candidates] store unavailable; returning empty pool for user_id=%s", ctx.user_id)
            return []

    def swipe(self, ctx: RequestContext, target_id: str, action: Any) -> dict[str, Any] | None:
        if ctx.is_admin:
            raise InvalidAction("Administrators cannot swipe")
        value = self.ledger.validate(ctx.user_id, target_id, action)
        # ADMIN and blocked profiles are never swipeable.
        target = self.directory.get_by_id(target_id)
        if not target or target["type"] == ADMIN or target["blocked"]:
            raise NotFound("Target user not found")
        if value == LIKE:
            return self.detector.on_like(ctx.user_id, target_id)
        self.ledger.record(ctx.user_id, target_id, value)
        return None

    # --- Chat ---

    def get_matches(self, ctx: RequestContext) -> list[dict[str, Any]]:
        try:
            return self.conversations.matches_for(ctx.user_id)
        except StoreUnavailable:
            logger.warning("[match] store unavailable; returning no matches for user_id=%s", ctx.user_id)
            return []

    def get_conversation(self, ctx: RequestContext, partner_id: str, after_seq: int | None = None) -> list[dict[str, Any]]:
        return self.conversations.history(ctx.user_id, partner_id, after_seq=after_seq)

    def send_message(self, ctx: RequestContext, receiver_id: str, content: str) -> dict[str, Any]:
        return self.conversations.append(ctx.user_id, receiver_id, content)

    # --- Moderation ---

    def get_all_users(self) -> list[dict[str, Any]]:
        return self.directory.list_non_admin()

    def toggle_block(self, user_id: str) -> dict[str, Any]:
        profile = self.directory.toggle_blocked(user_id)
        logger.info("[moderation] user_id=%s blocked=%s", user_id, profile["blocked"])
        return profile

    def delete_user(self, user_id: str) -> dict[str, int]:
        """Remove a profile and every swipe, match and message that references it."""
        with store_guard("delete_user"):
            with self.session_factory() as db:
                counts = {
                    "swipes": self.ledger.purge_user(db, user_id),
                    "matches": self.detector.purge_user(db, user_id),
                    "messages": self.conversations.purge_user(db, user_id),
                }
                removed = self.directory.purge_user(db, user_id)
                if not removed:
                    db.rollback()
                    raise NotFound("User not found")
                db.commit()
        logger.info("[moderation] deleted user_id=%s cascade=%s", user_id, counts)
        return counts
