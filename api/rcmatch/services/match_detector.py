"""Match Detector: turns a reciprocated LIKE into exactly one match per pair.

The like, the reciprocity check and the match insert run in one transaction
that first takes a row lock on ``pair_lock`` for the canonical pair key. Two
users liking each other concurrently are therefore serialized: the second
transaction sees the first one's committed LIKE and creates the match, and the
unique ``pair_key`` makes the insert itself a no-op if the match already exists.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import text

from ..models import LIKE
from .ledger import SwipeLedger
from .pairs import canonical_pair, pair_key
from .store import now_ms, store_guard

logger = logging.getLogger(__name__)


def row_to_match(row: Any) -> dict[str, Any]:
    data = dict(row)
    return {
        "id": str(data["id"]),
        "users": [str(data["user_a_id"]), str(data["user_b_id"])],
        "created_at": int(data["created_at"]),
    }


class MatchDetector:
    def __init__(self, session_factory, ledger: SwipeLedger):
        self._session_factory = session_factory
        self._ledger = ledger

    def on_like(self, actor_id: str, target_id: str) -> dict[str, Any] | None:
        self._ledger.validate(actor_id, target_id, LIKE)
        key = pair_key(actor_id, target_id)
        with store_guard("on_like"):
            with self._session_factory() as db:
                self._lock_pair(db, key)
                self._ledger.record(actor_id, target_id, LIKE, db=db)
                if not self._ledger.has_like(target_id, actor_id, db=db):
                    db.commit()
                    return None
                created = self._insert_match(db, key, actor_id, target_id)
                row = db.execute(
                    text("SELECT id, user_a_id, user_b_id, created_at FROM user_match WHERE pair_key=:pair_key"),
                    {"pair_key": key},
                ).mappings().first()
                db.commit()
        match = row_to_match(row)
        if created:
            logger.info("[match] created id=%s pair=%s", match["id"], key)
        else:
            logger.debug("[match] existing id=%s pair=%s", match["id"], key)
        return match

    def _lock_pair(self, db, key: str) -> None:
        db.execute(
            text("INSERT INTO pair_lock (pair_key, version) VALUES (:pair_key, 0) ON CONFLICT (pair_key) DO NOTHING"),
            {"pair_key": key},
        )
        db.execute(text("UPDATE pair_lock SET version = version + 1 WHERE pair_key=:pair_key"), {"pair_key": key})

    def _insert_match(self, db, key: str, actor_id: str, target_id: str) -> bool:
        a, b = canonical_pair(actor_id, target_id)
        result = db.execute(
            text(
                """
                INSERT INTO user_match (id, pair_key, user_a_id, user_b_id, created_at)
                VALUES (:id, :pair_key, :a, :b, :created_at)
                ON CONFLICT (pair_key) DO NOTHING
                """
            ),
            {"id": str(uuid.uuid4()), "pair_key": key, "a": a, "b": b, "created_at": now_ms()},
        )
        return bool(result.rowcount)

    def get_match(self, user_a_id: str, user_b_id: str) -> dict[str, Any] | None:
        with store_guard("get_match"):
            with self._session_factory() as db:
                row = db.execute(
                    text("SELECT id, user_a_id, user_b_id, created_at FROM user_match WHERE pair_key=:pair_key"),
                    {"pair_key": pair_key(user_a_id, user_b_id)},
                ).mappings().first()
        return row_to_match(row) if row else None

    def count_for_pair(self, user_a_id: str, user_b_id: str) -> int:
        with store_guard("count_matches"):
            with self._session_factory() as db:
                a, b = canonical_pair(user_a_id, user_b_id)
                return int(
                    db.execute(
                        text("SELECT COUNT(1) FROM user_match WHERE user_a_id=:a AND user_b_id=:b"),
                        {"a": a, "b": b},
                    ).scalar_one()
                )

    def purge_user(self, db, user_id: str) -> int:
        uid = str(user_id)
        result = db.execute(
            text("DELETE FROM user_match WHERE user_a_id=:id OR user_b_id=:id"),
            {"id": uid},
        )
        db.execute(
            text("DELETE FROM pair_lock WHERE pair_key LIKE :prefix OR pair_key LIKE :suffix"),
            {"prefix": f"{uid}:%", "suffix": f"%:{uid}"},
        )
        return int(result.rowcount or 0)
