"""Profile Directory: the user records the matching core reads from.

The core never edits descriptive profile fields; it only creates profiles at
registration and relays moderation (block toggle, cascading delete).
"""

import json
import logging
import uuid
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from ..errors import NotFound, UsernameTaken
from ..models import ADMIN
from .store import load_json, now_ms, store_guard

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = (
    "id",
    "username",
    "type",
    "name",
    "tagline",
    "description",
    "topics",
    "skills",
    "projects",
    "image_url",
    "links",
    "blocked",
    "created_at",
)


def row_to_profile(row: Any, *, include_secret: bool = False) -> dict[str, Any]:
    data = dict(row)
    profile = {
        "id": str(data["id"]),
        "username": data["username"],
        "type": data["type"],
        "name": data.get("name") or "",
        "tagline": data.get("tagline") or "",
        "description": data.get("description") or "",
        "topics": load_json(data.get("topics"), []),
        "skills": load_json(data.get("skills"), []),
        "projects": load_json(data.get("projects"), []),
        "image_url": data.get("image_url") or "",
        "links": load_json(data.get("links"), {}),
        "blocked": bool(data.get("blocked")),
        "created_at": int(data["created_at"]) if data.get("created_at") is not None else None,
    }
    if include_secret:
        profile["password_hash"] = data.get("password_hash")
    return profile


def public_profile(profile: dict[str, Any]) -> dict[str, Any]:
    return {k: profile.get(k) for k in PUBLIC_FIELDS}


class ProfileDirectory:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def create_profile(self, draft: dict[str, Any], password_hash: str | None = None) -> dict[str, Any]:
        username = draft["username"]
        if self.get_by_username(username):
            raise UsernameTaken()
        user_id = str(uuid.uuid4())
        params = {
            "id": user_id,
            "username": username,
            "password_hash": password_hash,
            "type": draft["type"],
            "name": draft.get("name") or "",
            "tagline": draft.get("tagline") or "",
            "description": draft.get("description") or "",
            "topics": json.dumps(list(draft.get("topics") or [])),
            "skills": json.dumps(list(draft.get("skills") or [])),
            "projects": json.dumps(list(draft.get("projects") or [])),
            "links": json.dumps(dict(draft.get("links") or {})),
            "image_url": draft.get("image_url") or "",
            "blocked": False,
            "created_at": now_ms(),
        }
        with store_guard("create_profile"):
            try:
                with self._session_factory() as db:
                    db.execute(
                        text(
                            """
                            INSERT INTO user_profile (
                              id, username, password_hash, type, name, tagline, description,
                              topics, skills, projects, links, image_url, blocked, created_at
                            )
                            VALUES (
                              :id, :username, :password_hash, :type, :name, :tagline, :description,
                              :topics, :skills, :projects, :links, :image_url, :blocked, :created_at
                            )
                            """
                        ),
                        params,
                    )
                    db.commit()
            except IntegrityError as exc:
                # Lost a race with a concurrent registration for the same username.
                raise UsernameTaken() from exc
        created = self.get_by_id(user_id)
        if not created:
            raise NotFound("Profile not found after registration")
        logger.info("[directory] profile created id=%s type=%s", user_id, draft["type"])
        return created

    def get_by_id(self, user_id: str) -> dict[str, Any] | None:
        if not user_id:
            return None
        with store_guard("get_profile"):
            with self._session_factory() as db:
                row = db.execute(text("SELECT * FROM user_profile WHERE id=:id"), {"id": str(user_id)}).mappings().first()
        return row_to_profile(row) if row else None

    def get_by_username(self, username: str, *, include_secret: bool = False) -> dict[str, Any] | None:
        with store_guard("get_profile_by_username"):
            with self._session_factory() as db:
                row = db.execute(
                    text("SELECT * FROM user_profile WHERE LOWER(username)=LOWER(:username)"),
                    {"username": username},
                ).mappings().first()
        return row_to_profile(row, include_secret=include_secret) if row else None

    def list_non_admin(self) -> list[dict[str, Any]]:
        with store_guard("list_profiles"):
            with self._session_factory() as db:
                rows = db.execute(
                    text("SELECT * FROM user_profile WHERE type <> :admin ORDER BY created_at ASC, username ASC"),
                    {"admin": ADMIN},
                ).mappings().all()
        return [row_to_profile(r) for r in rows]

    def toggle_blocked(self, user_id: str) -> dict[str, Any]:
        with store_guard("toggle_blocked"):
            with self._session_factory() as db:
                result = db.execute(
                    text("UPDATE user_profile SET blocked = NOT blocked WHERE id=:id AND type <> :admin"),
                    {"id": str(user_id), "admin": ADMIN},
                )
                db.commit()
        if not result.rowcount:
            raise NotFound("User not found")
        profile = self.get_by_id(user_id)
        if not profile:
            raise NotFound("User not found")
        return profile

    def purge_user(self, db, user_id: str) -> int:
        result = db.execute(
            text("DELETE FROM user_profile WHERE id=:id AND type <> :admin"),
            {"id": str(user_id), "admin": ADMIN},
        )
        return int(result.rowcount or 0)
