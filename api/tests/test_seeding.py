from rcmatch.models import INDIVIDUAL, ORGANIZATION
from rcmatch.services.seeding import TOPICS, reset_core_tables, seed_demo_profiles


def test_seed_creates_both_types_and_is_rerunnable(core):
    summary = seed_demo_profiles(core, n_organizations=3, n_individuals=5, seed=1)
    assert summary == {"created": 8, "skipped": 0}

    users = core.get_all_users()
    assert sum(1 for u in users if u["type"] == ORGANIZATION) == 3
    assert sum(1 for u in users if u["type"] == INDIVIDUAL) == 5
    assert all(set(u["topics"]) <= set(TOPICS) for u in users)
    assert core.login("org_000", "community123") is not None

    assert seed_demo_profiles(core, n_organizations=3, n_individuals=5, seed=1) == {"created": 0, "skipped": 8}


def test_reset_keeps_admin(core):
    core.ensure_admin("admin", "secret")
    seed_demo_profiles(core, n_organizations=1, n_individuals=1)
    with core.session_factory() as db:
        reset_core_tables(db)
        db.commit()
    assert core.get_all_users() == []
    assert core.directory.get_by_username("admin") is not None
