from sqlalchemy import BigInteger, Boolean, Column, Index, Integer, String, Text, UniqueConstraint

from .database import Base

ORGANIZATION = "ORGANIZATION"
INDIVIDUAL = "INDIVIDUAL"
ADMIN = "ADMIN"
PROFILE_TYPES = {ORGANIZATION, INDIVIDUAL, ADMIN}

LIKE = "LIKE"
PASS = "PASS"
SWIPE_ACTIONS = {LIKE, PASS}


class UserProfile(Base):
    __tablename__ = "user_profile"

    id = Column(String(36), primary_key=True)
    username = Column(String(64), nullable=False, unique=True)
    password_hash = Column(String, nullable=True)
    type = Column(String(16), nullable=False)
    name = Column(String, nullable=False, default="")
    tagline = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    # JSON-encoded lists/objects; stored as text so the schema works on PostgreSQL and SQLite.
    topics = Column(Text, nullable=False, default="[]")
    skills = Column(Text, nullable=False, default="[]")
    projects = Column(Text, nullable=False, default="[]")
    links = Column(Text, nullable=False, default="{}")
    image_url = Column(String, nullable=False, default="")
    blocked = Column(Boolean, nullable=False, default=False)
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_user_profile_type_blocked", "type", "blocked"),)


class SwipeAction(Base):
    __tablename__ = "swipe_action"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(String(36), nullable=False)
    target_id = Column(String(36), nullable=False)
    action = Column(String(8), nullable=False)
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("actor_id", "target_id", name="uq_swipe_actor_target"),
        Index("idx_swipe_action_target_id", "target_id"),
    )


class UserMatch(Base):
    __tablename__ = "user_match"

    id = Column(String(36), primary_key=True)
    pair_key = Column(String(80), nullable=False, unique=True)
    user_a_id = Column(String(36), nullable=False, index=True)
    user_b_id = Column(String(36), nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False)


class PairLock(Base):
    __tablename__ = "pair_lock"

    pair_key = Column(String(80), primary_key=True)
    version = Column(Integer, nullable=False, default=0)


class ChatMessage(Base):
    __tablename__ = "chat_message"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True)
    sender_id = Column(String(36), nullable=False)
    receiver_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("idx_chat_message_sender_receiver", "sender_id", "receiver_id"),
        Index("idx_chat_message_receiver_id", "receiver_id"),
    )
