"""Swipe Ledger: one row per (actor, target), last action wins."""

import logging
from typing import Any

from sqlalchemy import text

from ..errors import DuplicateActor, InvalidAction
from ..models import LIKE, SWIPE_ACTIONS
from .store import now_ms, store_guard

logger = logging.getLogger(__name__)


def normalize_action(action: Any) -> str:
    value = str(action or "").strip().upper()
    if value not in SWIPE_ACTIONS:
        raise InvalidAction("action must be one of: like, pass")
    return value


class SwipeLedger:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def validate(self, actor_id: str, target_id: str, action: Any) -> str:
        if str(actor_id) == str(target_id):
            raise DuplicateActor("Cannot swipe on yourself")
        return normalize_action(action)

    def record(self, actor_id: str, target_id: str, action: Any, *, db=None) -> dict[str, Any]:
        """Upsert the actor's action on target.

        When ``db`` is given the write joins the caller's transaction and is not
        committed here.
        """
        value = self.validate(actor_id, target_id, action)
        row = {"actor_id": str(actor_id), "target_id": str(target_id), "action": value, "created_at": now_ms()}
        if db is not None:
            self._upsert(db, row)
            return row
        with store_guard("record_swipe"):
            with self._session_factory() as own_db:
                self._upsert(own_db, row)
                own_db.commit()
        return row

    def _upsert(self, db, row: dict[str, Any]) -> None:
        db.execute(
            text(
                """
                INSERT INTO swipe_action (actor_id, target_id, action, created_at)
                VALUES (:actor_id, :target_id, :action, :created_at)
                ON CONFLICT (actor_id, target_id)
                DO UPDATE SET action = excluded.action, created_at = excluded.created_at
                """
            ),
            row,
        )
        logger.debug("[swipe] %s -> %s %s", row["actor_id"], row["target_id"], row["action"])

    def acted_targets(self, actor_id: str) -> set[str]:
        with store_guard("acted_targets"):
            with self._session_factory() as db:
                rows = db.execute(
                    text("SELECT target_id FROM swipe_action WHERE actor_id=:actor_id"),
                    {"actor_id": str(actor_id)},
                ).mappings().all()
        return {str(r["target_id"]) for r in rows}

    def has_like(self, actor_id: str, target_id: str, *, db=None) -> bool:
        query = text(
            """
            SELECT 1
            FROM swipe_action
            WHERE actor_id=:actor_id AND target_id=:target_id AND action=:like
            """
        )
        params = {"actor_id": str(actor_id), "target_id": str(target_id), "like": LIKE}
        if db is not None:
            return db.execute(query, params).first() is not None
        with store_guard("has_like"):
            with self._session_factory() as own_db:
                return own_db.execute(query, params).first() is not None

    def get(self, actor_id: str, target_id: str) -> dict[str, Any] | None:
        with store_guard("get_swipe"):
            with self._session_factory() as db:
                row = db.execute(
                    text(
                        """
                        SELECT actor_id, target_id, action, created_at
                        FROM swipe_action
                        WHERE actor_id=:actor_id AND target_id=:target_id
                        """
                    ),
                    {"actor_id": str(actor_id), "target_id": str(target_id)},
                ).mappings().first()
        return dict(row) if row else None

    def purge_user(self, db, user_id: str) -> int:
        result = db.execute(
            text("DELETE FROM swipe_action WHERE actor_id=:id OR target_id=:id"),
            {"id": str(user_id)},
        )
        return int(result.rowcount or 0)
