from datetime import datetime, timedelta

import pytest
from sqlalchemy import Text

from app.core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    RefreshTokenExpiredError,
    TokenInvalidError,
)
from app.core.security import create_access_token
from app.models.security import RefreshToken
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.auth_service import auth_service
from app.services.token_service import TokenService, token_service
from app.services.user_service import UserService, user_service


def _register(db, email="a@x.com", password="pw1", name=None):
    return auth_service.register(db, UserCreate(email=email, password=password, name=name))


def test_register_returns_session_for_new_email(db):
    session = _register(db, name="Alice")

    assert session.user.email == "a@x.com"
    assert session.user.name == "Alice"
    assert session.token_type == "Bearer"
    assert session.access_token and session.refresh_token
    assert token_service.find_refresh_token(db, session.refresh_token) is not None


def test_register_duplicate_email_fails(db):
    _register(db)
    with pytest.raises(DuplicateEmailError):
        _register(db, password="other")


def test_register_duplicate_email_race_is_reported_as_duplicate(db, monkeypatch):
    first = _register(db)
    # Both registrations pass the existence check; the unique index decides
    monkeypatch.setattr(UserService, "get_user_by_email", staticmethod(lambda db_session, email: None))

    with pytest.raises(DuplicateEmailError):
        _register(db, password="other")

    monkeypatch.undo()
    assert user_service.get_user_by_email(db, "a@x.com").id == first.user.id
    assert db.query(User).count() == 1


def test_register_rolls_back_user_when_session_issue_fails(db, monkeypatch):
    def failing_issue(db_session, user):
        raise RuntimeError("token store unavailable")

    monkeypatch.setattr(TokenService, "issue_token_pair", staticmethod(failing_issue))
    with pytest.raises(RuntimeError):
        _register(db)
    monkeypatch.undo()

    assert user_service.get_user_by_email(db, "a@x.com") is None
    assert _register(db).user.email == "a@x.com"


def test_long_email_refresh_token_is_stored_whole(db):
    email = "u" * 190 + "@x.com"
    session = _register(db, email=email)

    assert len(session.refresh_token) > 512
    assert isinstance(RefreshToken.__table__.c.token.type, Text)
    record = token_service.find_refresh_token(db, session.refresh_token)
    assert record.token == session.refresh_token
    assert auth_service.refresh(db, session.refresh_token).user.email == email


def test_password_is_stored_hashed(db):
    session = _register(db)
    user = user_service.get_user_by_id(db, session.user.id)
    assert user.password_hash != "pw1"


def test_login_with_correct_password(db):
    registered = _register(db)
    session = auth_service.login(db, "a@x.com", "pw1")
    assert session.user.id == registered.user.id


def test_wrong_password_and_unknown_email_fail_identically(db):
    _register(db)
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        auth_service.login(db, "a@x.com", "nope")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        auth_service.login(db, "b@x.com", "pw1")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_unknown_email_still_checks_a_password_hash(db, monkeypatch):
    from app.services import user_service as user_service_module

    _register(db)
    checked = []
    real_verify = user_service_module.verify_password

    def recording_verify(password, digest):
        checked.append(digest)
        return real_verify(password, digest)

    monkeypatch.setattr(user_service_module, "verify_password", recording_verify)

    with pytest.raises(InvalidCredentialsError):
        auth_service.login(db, "nobody@x.com", "pw1")
    with pytest.raises(InvalidCredentialsError):
        auth_service.login(db, "a@x.com", "nope")

    assert len(checked) == 2
    assert all(digest.startswith("$2") for digest in checked)


def test_expires_in_matches_access_token_lifetime(db):
    from app.config import settings
    from app.core.security import decode_access_token

    session = _register(db)
    payload = decode_access_token(session.access_token)
    assert session.expires_in == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert payload["exp"] - payload["iat"] == session.expires_in


def test_refresh_expiry_matches_stored_record(db):
    from app.config import settings

    session = _register(db)
    record = token_service.find_refresh_token(db, session.refresh_token)
    lifetime = record.expires_at.replace(tzinfo=None) - datetime.utcnow()
    assert timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS) - lifetime < timedelta(minutes=1)


def test_refresh_rotates_and_is_single_use(db):
    session = _register(db)

    rotated = auth_service.refresh(db, session.refresh_token)
    assert rotated.refresh_token != session.refresh_token
    assert rotated.user.id == session.user.id
    assert token_service.find_refresh_token(db, session.refresh_token) is None
    assert token_service.find_refresh_token(db, rotated.refresh_token) is not None

    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, session.refresh_token)


def test_refresh_unknown_token(db):
    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, "not-a-token")


def test_expired_refresh_token_is_reaped(db):
    session = _register(db)
    record = token_service.find_refresh_token(db, session.refresh_token)
    record.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    with pytest.raises(RefreshTokenExpiredError):
        auth_service.refresh(db, session.refresh_token)

    assert token_service.find_refresh_token(db, session.refresh_token) is None
    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, session.refresh_token)


def test_stored_access_token_is_rejected_as_refresh_and_revoked(db):
    session = _register(db)
    access_as_refresh = create_access_token({"sub": session.user.id, "email": session.user.email})
    db.add(RefreshToken(
        user_id=session.user.id,
        token=access_as_refresh,
        expires_at=datetime.utcnow() + timedelta(days=1),
    ))
    db.commit()

    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, access_as_refresh)
    assert token_service.find_refresh_token(db, access_as_refresh) is None


def test_refresh_loses_race_when_row_already_consumed(db, monkeypatch):
    session = _register(db)
    original_remove = TokenService.remove_refresh_token
    calls = []

    def concurrent_remove(db_session, token):
        # Another request consumed the row between lookup and delete
        calls.append(token)
        original_remove(db_session, token)
        return 0

    monkeypatch.setattr(TokenService, "remove_refresh_token", staticmethod(concurrent_remove))

    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, session.refresh_token)
    assert calls == [session.refresh_token]


def test_refresh_after_user_deleted_fails(db):
    session = _register(db)
    user_service.delete_user(db, session.user.id)

    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, session.refresh_token)


def test_logout_revokes_refresh_token(db):
    session = _register(db)
    assert auth_service.logout(db, session.user.id, session.refresh_token) is True
    assert token_service.find_refresh_token(db, session.refresh_token) is None

    with pytest.raises(InvalidRefreshTokenError):
        auth_service.refresh(db, session.refresh_token)


def test_logout_is_idempotent(db):
    session = _register(db)
    user_id = session.user.id
    assert auth_service.logout(db, user_id) is False
    assert auth_service.logout(db, user_id, None) is False
    assert auth_service.logout(db, user_id, session.refresh_token) is True
    assert auth_service.logout(db, user_id, session.refresh_token) is False
    assert auth_service.logout(db, user_id, "unknown") is False


def test_logout_ignores_another_users_refresh_token(db):
    owner = _register(db)
    other = _register(db, email="b@x.com")

    assert auth_service.logout(db, other.user.id, owner.refresh_token) is False
    assert token_service.find_refresh_token(db, owner.refresh_token) is not None

    rotated = auth_service.refresh(db, owner.refresh_token)
    assert rotated.user.id == owner.user.id


def test_verify_access_token(db):
    session = _register(db)
    identity = auth_service.verify_access_token(session.access_token)
    assert identity == {"userId": session.user.id, "email": "a@x.com"}


def test_verify_rejects_refresh_token(db):
    session = _register(db)
    with pytest.raises(TokenInvalidError):
        auth_service.verify_access_token(session.refresh_token)


def test_remove_expired_tokens(db):
    live = _register(db)
    stale = _register(db, email="b@x.com")
    record = token_service.find_refresh_token(db, stale.refresh_token)
    record.expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    assert token_service.remove_expired_tokens(db) == 1
    assert token_service.find_refresh_token(db, stale.refresh_token) is None
    assert token_service.find_refresh_token(db, live.refresh_token) is not None
