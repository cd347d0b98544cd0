from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

Base = declarative_base()


def build_engine(url: str = DATABASE_URL):
    connect_args = {}
    if url.startswith("sqlite"):
        # Requests are served from a threadpool; SQLite connections must be shareable.
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
