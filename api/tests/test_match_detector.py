import threading

import pytest

from rcmatch.errors import DuplicateActor
from rcmatch.models import INDIVIDUAL, ORGANIZATION, PASS


def test_one_sided_like_creates_no_match(core, make_profile):
    a, b = make_profile(), make_profile()
    assert core.detector.on_like(a["id"], b["id"]) is None
    assert core.detector.get_match(a["id"], b["id"]) is None


def test_reciprocal_like_creates_match_with_canonical_pair(core, make_profile):
    org = make_profile(ORGANIZATION, username="org1")
    ind = make_profile(INDIVIDUAL, username="ind1")

    assert core.detector.on_like(org["id"], ind["id"]) is None
    match = core.detector.on_like(ind["id"], org["id"])

    assert match is not None
    assert set(match["users"]) == {org["id"], ind["id"]}
    assert match["users"] == sorted(match["users"])
    assert core.detector.get_match(ind["id"], org["id"])["id"] == match["id"]


def test_repeated_like_returns_existing_match(core, make_profile):
    a, b = make_profile(), make_profile()
    core.detector.on_like(a["id"], b["id"])
    first = core.detector.on_like(b["id"], a["id"])
    again = core.detector.on_like(b["id"], a["id"])
    from_other_side = core.detector.on_like(a["id"], b["id"])

    assert first["id"] == again["id"] == from_other_side["id"]
    assert core.detector.count_for_pair(a["id"], b["id"]) == 1


def test_pass_never_matches(core, make_profile):
    a, b = make_profile(), make_profile()
    core.ledger.record(a["id"], b["id"], PASS)
    assert core.detector.on_like(b["id"], a["id"]) is None


def test_self_like_rejected_before_write(core, make_profile):
    a = make_profile()
    with pytest.raises(DuplicateActor):
        core.detector.on_like(a["id"], a["id"])
    assert core.ledger.acted_targets(a["id"]) == set()


def test_concurrent_mutual_likes_converge_on_one_match(core, make_profile):
    for _ in range(5):
        a, b = make_profile(), make_profile()
        barrier = threading.Barrier(2)
        results: dict[str, object] = {}
        errors: list[BaseException] = []

        def like(actor, target):
            try:
                barrier.wait()
                results[actor] = core.detector.on_like(actor, target)
            except BaseException as exc:  # surfaced below
                errors.append(exc)

        threads = [
            threading.Thread(target=like, args=(a["id"], b["id"])),
            threading.Thread(target=like, args=(b["id"], a["id"])),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        assert core.detector.count_for_pair(a["id"], b["id"]) == 1
        returned = [m for m in results.values() if m is not None]
        assert returned, "the later of the two likes must observe the match"
        stored = core.detector.get_match(a["id"], b["id"])
        assert all(m["id"] == stored["id"] for m in returned)
