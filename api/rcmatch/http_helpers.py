import re
from typing import Any

from fastapi import HTTPException

from .models import INDIVIDUAL, ORGANIZATION


def normalize_username(username: str) -> str:
    return username.strip().lower()


def validate_username(username: str) -> str:
    u = normalize_username(username)
    if not re.fullmatch(r"[a-z0-9_]{3,24}", u):
        raise HTTPException(status_code=400, detail="username must be 3-24 chars, lowercase letters/numbers/underscore")
    return u


def _clean_list(values: Any, field: str, *, max_items: int = 20, max_len: int = 80) -> list[str]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise HTTPException(status_code=400, detail=f"{field} must be an array")
    out: list[str] = []
    for value in values:
        item = str(value or "").strip()
        if not item:
            continue
        if len(item) > max_len:
            raise HTTPException(status_code=400, detail=f"Each {field} entry must be {max_len} characters or fewer")
        if item not in out:
            out.append(item)
    if len(out) > max_items:
        raise HTTPException(status_code=400, detail=f"You can provide up to {max_items} {field}")
    return out


def _clean_links(values: Any) -> dict[str, str]:
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise HTTPException(status_code=400, detail="links must be an object")
    links: dict[str, str] = {}
    for key, value in values.items():
        url = str(value or "").strip()
        if not url:
            continue
        if not (url.startswith("http://") or url.startswith("https://")):
            raise HTTPException(status_code=400, detail="Links must start with http:// or https://")
        links[str(key)] = url
    return links


def sanitize_profile_draft(payload: dict[str, Any]) -> dict[str, Any]:
    raw_type = str(payload.get("type") or "").strip().upper()
    if raw_type not in {ORGANIZATION, INDIVIDUAL}:
        raise HTTPException(status_code=400, detail="type must be one of: ORGANIZATION, INDIVIDUAL")

    name = str(payload.get("name") or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="name is required")
    if len(name) > 120:
        raise HTTPException(status_code=400, detail="name must be 120 characters or fewer")

    tagline = str(payload.get("tagline") or "").strip()
    if len(tagline) > 160:
        raise HTTPException(status_code=400, detail="tagline must be 160 characters or fewer")

    image_url = str(payload.get("image_url") or "").strip()
    if image_url and not (image_url.startswith("http://") or image_url.startswith("https://")):
        raise HTTPException(status_code=400, detail="image_url must start with http:// or https://")

    password = payload.get("password")
    return {
        "username": validate_username(str(payload.get("username") or "")),
        "password": str(password) if password else None,
        "type": raw_type,
        "name": name,
        "tagline": tagline,
        "description": str(payload.get("description") or "").strip(),
        "topics": _clean_list(payload.get("topics"), "topics"),
        "skills": _clean_list(payload.get("skills"), "skills"),
        "projects": _clean_list(payload.get("projects"), "projects"),
        "image_url": image_url,
        "links": _clean_links(payload.get("links")),
    }
