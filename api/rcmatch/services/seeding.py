import logging
import random
from typing import Any

from sqlalchemy import text

from ..errors import UsernameTaken
from ..models import INDIVIDUAL, ORGANIZATION
from .core import MatchCore

logger = logging.getLogger(__name__)

TOPICS = [
    "Artificial Intelligence",
    "Biotech",
    "Climate",
    "Energy",
    "FinTech",
    "Materials",
    "Quantum",
    "Robotics",
    "Security",
]

_ORG_PREFIXES = ["Nova", "Helix", "Vector", "Arc", "Lumen", "Quarry", "Tidal", "Ferro"]
_ORG_SUFFIXES = ["Labs", "Systems", "Works", "Dynamics", "Bio", "Analytics"]
_FIRST_NAMES = ["Ada", "Ravi", "Mei", "Lucas", "Amara", "Jonas", "Sofia", "Tariq", "Ines", "Kofi"]
_LAST_NAMES = ["Okafor", "Lindqvist", "Haddad", "Moreau", "Tanaka", "Rossi", "Novak", "Silva"]
_SKILLS = ["Python", "CRISPR", "Spectroscopy", "Control theory", "Statistics", "Rust", "CFD", "Cryptography"]


def _organization_draft(rng: random.Random, idx: int) -> dict[str, Any]:
    name = f"{rng.choice(_ORG_PREFIXES)} {rng.choice(_ORG_SUFFIXES)}"
    topics = rng.sample(TOPICS, k=2)
    return {
        "username": f"org_{idx:03d}",
        "password": "community123",
        "type": ORGANIZATION,
        "name": name,
        "tagline": f"Building in {topics[0].lower()}",
        "description": f"{name} partners with researchers on {topics[0]} and {topics[1]}.",
        "topics": topics,
        "projects": [f"{topics[0]} pilot", f"{topics[1]} study"],
        "image_url": f"https://picsum.photos/seed/org{idx}/400/400",
        "links": {"website": f"https://example.org/{idx}"},
    }


def _individual_draft(rng: random.Random, idx: int) -> dict[str, Any]:
    name = f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}"
    topics = rng.sample(TOPICS, k=rng.randint(1, 3))
    return {
        "username": f"ind_{idx:03d}",
        "password": "community123",
        "type": INDIVIDUAL,
        "name": name,
        "tagline": f"Researcher, {topics[0]}",
        "description": f"{name} works on {', '.join(topics)}.",
        "topics": topics,
        "skills": rng.sample(_SKILLS, k=2),
        "image_url": f"https://picsum.photos/seed/ind{idx}/400/400",
        "links": {"universityProfile": f"https://example.edu/~{idx}"},
    }


def reset_core_tables(db) -> None:
    for table in ("chat_message", "user_match", "pair_lock", "swipe_action"):
        db.execute(text(f"DELETE FROM {table}"))
    db.execute(text("DELETE FROM user_profile WHERE type <> 'ADMIN'"))


def seed_demo_profiles(core: MatchCore, *, n_organizations: int = 8, n_individuals: int = 24, seed: int = 42) -> dict[str, int]:
    rng = random.Random(seed)
    created = 0
    skipped = 0
    drafts = [_organization_draft(rng, i) for i in range(n_organizations)]
    drafts += [_individual_draft(rng, i) for i in range(n_individuals)]
    for draft in drafts:
        try:
            core.register(draft)
            created += 1
        except UsernameTaken:
            skipped += 1
    logger.info("[seed] created=%s skipped=%s", created, skipped)
    return {"created": created, "skipped": skipped}
