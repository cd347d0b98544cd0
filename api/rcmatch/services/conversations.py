"""Conversation Store: append-only direct messages between two users."""

import logging
import uuid
from typing import Any

from sqlalchemy import text

from ..errors import ContentTooLong, DuplicateActor, EmptyContent, NotFound
from .directory import ProfileDirectory, row_to_profile
from .match_detector import row_to_match
from .store import now_ms, store_guard

logger = logging.getLogger(__name__)

_MESSAGE_COLUMNS = "seq, id, sender_id, receiver_id, content, created_at"


def row_to_message(row: Any) -> dict[str, Any]:
    data = dict(row)
    return {
        "id": str(data["id"]),
        "seq": int(data["seq"]),
        "sender_id": str(data["sender_id"]),
        "receiver_id": str(data["receiver_id"]),
        "content": data["content"],
        "created_at": int(data["created_at"]),
    }


class ConversationStore:
    def __init__(self, session_factory, directory: ProfileDirectory, max_length: int = 2000):
        self._session_factory = session_factory
        self._directory = directory
        self._max_length = max_length

    def append(self, sender_id: str, receiver_id: str, content: str) -> dict[str, Any]:
        body = str(content or "")
        if not body.strip():
            raise EmptyContent()
        if len(body) > self._max_length:
            raise ContentTooLong(f"Message must be {self._max_length} characters or fewer")
        receiver = str(receiver_id or "").strip()
        if not receiver:
            raise NotFound("Receiver not found")
        if receiver == str(sender_id):
            raise DuplicateActor("Cannot message yourself")
        if not self._directory.get_by_id(receiver):
            raise NotFound("Receiver not found")
        if not self._directory.get_by_id(sender_id):
            raise NotFound("Sender not found")

        message_id = str(uuid.uuid4())
        with store_guard("append_message"):
            with self._session_factory() as db:
                db.execute(
                    text(
                        """
                        INSERT INTO chat_message (id, sender_id, receiver_id, content, created_at)
                        VALUES (:id, :sender_id, :receiver_id, :content, :created_at)
                        """
                    ),
                    {
                        "id": message_id,
                        "sender_id": str(sender_id),
                        "receiver_id": receiver,
                        "content": body,
                        "created_at": now_ms(),
                    },
                )
                db.commit()
                row = db.execute(
                    text(f"SELECT {_MESSAGE_COLUMNS} FROM chat_message WHERE id=:id"),
                    {"id": message_id},
                ).mappings().first()
        logger.debug("[chat] message %s from %s to %s", message_id, sender_id, receiver)
        return row_to_message(row)

    def history(self, user_a_id: str, user_b_id: str, after_seq: int | None = None) -> list[dict[str, Any]]:
        with store_guard("history"):
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        f"""
                        SELECT {_MESSAGE_COLUMNS}
                        FROM chat_message
                        WHERE (
                            (sender_id=:a AND receiver_id=:b)
                            OR (sender_id=:b AND receiver_id=:a)
                          )
                          AND (:after_seq IS NULL OR seq > :after_seq)
                        ORDER BY created_at ASC, seq ASC
                        """
                    ),
                    {"a": str(user_a_id), "b": str(user_b_id), "after_seq": after_seq},
                ).mappings().all()
        return [row_to_message(r) for r in rows]

    def matches_for(self, user_id: str) -> list[dict[str, Any]]:
        """Matches of ``user_id`` joined with the counterpart profile.

        A match whose counterpart no longer exists is left out by the join.
        """
        with store_guard("matches_for"):
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        """
                        SELECT
                          m.id AS match_id,
                          m.user_a_id,
                          m.user_b_id,
                          m.created_at AS match_created_at,
                          p.*
                        FROM user_match m
                        JOIN user_profile p
                          ON p.id = (
                            CASE WHEN m.user_a_id = :user_id THEN m.user_b_id ELSE m.user_a_id END
                          )
                        WHERE m.user_a_id = :user_id OR m.user_b_id = :user_id
                        ORDER BY m.created_at DESC
                        """
                    ),
                    {"user_id": str(user_id)},
                ).mappings().all()
        out = []
        for r in rows:
            match = row_to_match(
                {"id": r["match_id"], "user_a_id": r["user_a_id"], "user_b_id": r["user_b_id"], "created_at": r["match_created_at"]}
            )
            out.append({"match": match, "other_user": row_to_profile(r)})
        return out

    def purge_user(self, db, user_id: str) -> int:
        result = db.execute(
            text("DELETE FROM chat_message WHERE sender_id=:id OR receiver_id=:id"),
            {"id": str(user_id)},
        )
        return int(result.rowcount or 0)
