from core.config import settings
from scripts.bootstrap_admin import bootstrap_admin


def test_promotes_registered_user(session, registered_user):
    result = bootstrap_admin(registered_user.email)

    assert result["status"] == "promoted"

    session.expire_all()
    assert [role.name for role in registered_user.roles] == [settings.ADMIN_ROLE]


def test_second_run_is_a_no_op(session, registered_user):
    bootstrap_admin(registered_user.email)

    assert bootstrap_admin(registered_user.email)["status"] == "already_admin"


def test_dry_run_writes_nothing(session, registered_user):
    result = bootstrap_admin(registered_user.email, dry_run=True)

    assert result["status"] == "dry_run"

    session.expire_all()
    assert registered_user.roles == []


def test_unknown_user(session):
    assert bootstrap_admin("nobody@example.com")["status"] == "missing_user"
