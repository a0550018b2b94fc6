"""Credential store: registration, activation and login."""
from datetime import timedelta

import pytest
from sqlmodel import Session, select

from app.exceptions import AuthError, DuplicateError, InactiveAccountError, ValidationError
from app.models import User
from app.services.user_service import UserService, generate_activation_code, verify_password
from app.utils.timestamps import as_utc, utc_now
from conftest import RecordingMailer


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def service(session, mailer):
    return UserService(session, mailer)


def test_register_creates_inactive_user_with_hashed_password(service, mailer):
    user = service.register("alice@example.com", "pw123456", "Alice")

    assert user.is_active is False
    assert user.password != "pw123456"
    assert verify_password("pw123456", user.password)
    assert user.role == "user"
    assert mailer.last_code("alice@example.com") == user.code_id
    assert len(user.code_id) == 6 and user.code_id.isdigit()

    window = as_utc(user.code_expire) - utc_now()
    assert timedelta(hours=23, minutes=59) < window <= timedelta(hours=24)


def test_duplicate_email_creates_no_second_row(service, session):
    service.register("alice@example.com", "pw123456", "Alice")

    with pytest.raises(DuplicateError, match="already exists"):
        service.register("alice@example.com", "another-pass", "Impostor")

    rows = session.exec(select(User).where(User.email == "alice@example.com")).all()
    assert len(rows) == 1


def test_activate_with_valid_code(service):
    user = service.register("alice@example.com", "pw123456", "Alice")

    activated = service.activate(user.id, user.code_id)

    assert activated.is_active is True
    # The code is not consumed
    assert activated.code_id is not None


def test_activate_rejects_wrong_code_and_unknown_user(service):
    user = service.register("alice@example.com", "pw123456", "Alice")
    wrong = "000000" if user.code_id != "000000" else "111111"

    with pytest.raises(ValidationError, match="Invalid code"):
        service.activate(user.id, wrong)
    with pytest.raises(ValidationError, match="User not found"):
        service.activate("no-such-user", user.code_id)


def test_expired_code_leaves_account_inactive(service, session):
    user = service.register("alice@example.com", "pw123456", "Alice")
    user.code_expire = utc_now() - timedelta(seconds=1)
    session.add(user)
    session.commit()

    with pytest.raises(ValidationError, match="Code expired"):
        service.activate(user.id, user.code_id)

    session.refresh(user)
    assert user.is_active is False


def test_login_distinguishes_inactive_from_bad_credentials(service):
    user = service.register("alice@example.com", "pw123456", "Alice")

    with pytest.raises(InactiveAccountError):
        service.login("alice@example.com", "pw123456")

    service.activate(user.id, user.code_id)
    assert service.login("alice@example.com", "pw123456").id == user.id


def test_unknown_email_and_wrong_password_fail_the_same_way(service):
    user = service.register("alice@example.com", "pw123456", "Alice")
    service.activate(user.id, user.code_id)

    with pytest.raises(AuthError) as unknown:
        service.login("nobody@example.com", "pw123456")
    with pytest.raises(AuthError) as wrong:
        service.login("alice@example.com", "wrong-password")

    assert type(unknown.value) is type(wrong.value) is AuthError
    assert unknown.value.message == wrong.value.message
    assert unknown.value.code == wrong.value.code == "INVALID_CREDENTIALS"


def test_resend_code_issues_a_fresh_code(service, mailer, session):
    user = service.register("alice@example.com", "pw123456", "Alice")
    user.code_expire = utc_now() - timedelta(hours=1)
    session.add(user)
    session.commit()

    refreshed = service.resend_activation_code("alice@example.com")

    assert len(mailer.sent) == 2
    assert refreshed.code_id == mailer.last_code("alice@example.com")
    assert as_utc(refreshed.code_expire) > utc_now()
    assert service.activate(user.id, refreshed.code_id).is_active is True

    with pytest.raises(ValidationError, match="already active"):
        service.resend_activation_code("alice@example.com")


def test_update_profile_only_touches_profile_fields(service):
    user = service.register("alice@example.com", "pw123456", "Alice")

    updated = service.update_profile(user.id, {"name": "Alice B.", "phone": "555-0100", "is_active": True})

    assert updated.name == "Alice B."
    assert updated.phone == "555-0100"
    assert updated.is_active is False


def test_activation_codes_are_six_digits():
    codes = {generate_activation_code() for _ in range(50)}
    assert all(len(code) == 6 and code.isdigit() for code in codes)


def test_update_profile_accepts_middle_name_and_account_type(service):
    user = service.register("alice@example.com", "pw123456", "Alice")

    updated = service.update_profile(user.id, {"middle_name": "Pleasance", "account_type": "personal"})

    assert updated.middle_name == "Pleasance"
    assert updated.account_type == "personal"


def test_new_users_carry_utc_timestamps():
    user = User(email="alice@example.com", password="x")

    assert user.created_at.tzinfo is not None
    assert user.created_at.utcoffset() == timedelta(0)


def test_activation_compares_expiry_read_back_from_the_database(service, session, engine):
    user = service.register("alice@example.com", "pw123456", "Alice")
    session.expunge_all()

    with Session(engine) as fresh:
        stored = fresh.get(User, user.id)
        assert as_utc(stored.code_expire) > utc_now()

        activated = UserService(fresh, RecordingMailer()).activate(stored.id, stored.code_id)

    assert activated.is_active is True
