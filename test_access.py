from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from core.access import CallerRole, RosterStatus, classify, lookup_manager
from db.seed import seed_managers
from db.session import make_engine


def test_listed_email_is_manager(session):
    seed_managers(session, ["Boss@Example.com"])

    assert lookup_manager(session, "boss@example.com").status == RosterStatus.LISTED
    assert classify(session, "BOSS@example.com ") == CallerRole.MANAGER


def test_unknown_email_is_worker(session):
    seed_managers(session, ["boss@example.com"])

    assert lookup_manager(session, "ann@example.com").status == RosterStatus.NOT_LISTED
    assert classify(session, "ann@example.com") == CallerRole.WORKER


def test_missing_email_is_worker(session):
    assert classify(session, None) == CallerRole.WORKER
    assert classify(session, "") == CallerRole.WORKER


def test_roster_failure_fails_closed():
    # No tables created, so the roster query itself errors
    broken = make_engine("sqlite://", poolclass=StaticPool)
    with Session(broken) as session:
        lookup = lookup_manager(session, "boss@example.com")
        assert lookup.status == RosterStatus.FAILED
        assert lookup.error
        assert classify(session, "boss@example.com") == CallerRole.WORKER
    broken.dispose()


def test_seed_skips_existing_managers(session):
    assert seed_managers(session, ["boss@example.com", " "]) == ["boss@example.com"]
    assert seed_managers(session, ["BOSS@example.com", "second@example.com"]) == ["second@example.com"]
