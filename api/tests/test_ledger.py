import pytest
from sqlalchemy import text

from rcmatch.errors import DuplicateActor, InvalidAction
from rcmatch.models import LIKE, ORGANIZATION, PASS


def test_record_rejects_self_swipe(core, make_profile):
    a = make_profile()
    with pytest.raises(DuplicateActor):
        core.ledger.record(a["id"], a["id"], LIKE)
    assert core.ledger.acted_targets(a["id"]) == set()


def test_record_rejects_unknown_action(core, make_profile):
    a, b = make_profile(), make_profile()
    with pytest.raises(InvalidAction):
        core.ledger.record(a["id"], b["id"], "superlike")


def test_actions_are_case_insensitive(core, make_profile):
    a, b = make_profile(), make_profile()
    row = core.ledger.record(a["id"], b["id"], "like")
    assert row["action"] == LIKE
    assert core.ledger.has_like(a["id"], b["id"]) is True
    assert core.ledger.has_like(b["id"], a["id"]) is False


def test_second_swipe_on_same_target_overwrites_first(core, make_profile):
    a, b = make_profile(), make_profile()
    core.ledger.record(a["id"], b["id"], LIKE)
    core.ledger.record(a["id"], b["id"], PASS)

    stored = core.ledger.get(a["id"], b["id"])
    assert stored["action"] == PASS
    assert core.ledger.has_like(a["id"], b["id"]) is False
    with core.session_factory() as db:
        count = db.execute(text("SELECT COUNT(1) FROM swipe_action WHERE actor_id=:a"), {"a": a["id"]}).scalar_one()
    assert count == 1


def test_acted_targets_covers_likes_and_passes(core, make_profile):
    a = make_profile()
    b = make_profile()
    c = make_profile(ORGANIZATION)
    make_profile()
    core.ledger.record(a["id"], b["id"], LIKE)
    core.ledger.record(a["id"], c["id"], PASS)
    assert core.ledger.acted_targets(a["id"]) == {b["id"], c["id"]}
    assert core.ledger.acted_targets(b["id"]) == set()
