import random

import pytest

from rcmatch.database import Base, build_engine, build_session_factory
from rcmatch.models import INDIVIDUAL
from rcmatch.services.core import MatchCore, RequestContext


@pytest.fixture
def core(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'rcmatch.db'}")
    Base.metadata.create_all(engine)
    yield MatchCore(build_session_factory(engine), rng=random.Random(7))
    engine.dispose()


@pytest.fixture
def make_profile(core):
    counter = {"n": 0}

    def _make(type_: str = INDIVIDUAL, **fields):
        counter["n"] += 1
        draft = {
            "username": fields.pop("username", f"user_{counter['n']:03d}"),
            "type": type_,
            "name": fields.pop("name", f"User {counter['n']}"),
        }
        draft.update(fields)
        return core.directory.create_profile(draft)

    return _make


@pytest.fixture
def ctx_of():
    def _ctx(profile) -> RequestContext:
        return RequestContext(user_id=profile["id"], user_type=profile["type"], username=profile["username"])

    return _ctx
