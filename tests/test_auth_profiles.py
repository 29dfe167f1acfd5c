"""Sign-up, sign-in and profile preferences."""

from __future__ import annotations

import pytest

from fintrack.errors import AuthenticationError, NotFoundError, ValidationError
from fintrack.services import auth, profiles


def test_sign_up_provisions_profile(session_factory, profile_repo):
    user = auth.sign_up(username=" alice ", password="s3cret!!", session_factory=session_factory)

    assert user.username == "alice"
    assert user.password_hash != "s3cret!!"
    profile = profiles.get_profile(profile_repo, user_id=user.id)
    assert profile.display_name == "alice"
    assert profile.username == "alice"
    assert profile.default_currency == "USD"


def test_sign_up_with_display_name_and_currency(session_factory, profile_repo):
    user = auth.sign_up(
        username="bob",
        password="hunter22",
        display_name="Bobby",
        default_currency="eur",
        session_factory=session_factory,
    )
    profile = profiles.get_profile(profile_repo, user_id=user.id)
    assert (profile.display_name, profile.default_currency) == ("Bobby", "EUR")


def test_duplicate_username_rejected(user_factory):
    user_factory("carol")
    with pytest.raises(ValidationError) as excinfo:
        user_factory("carol")
    assert excinfo.value.field == "username"


@pytest.mark.parametrize("username, password, field", [("", "longenough", "username"), ("dave", "123", "password")])
def test_sign_up_validation(session_factory, username, password, field):
    with pytest.raises(ValidationError) as excinfo:
        auth.sign_up(username=username, password=password, session_factory=session_factory)
    assert excinfo.value.field == field


def test_authenticate_success_sets_last_login(user, session_factory):
    signed_in = auth.authenticate(username="tester", password="correct-horse", session_factory=session_factory)

    assert signed_in.id == user.id
    assert signed_in.last_login is not None


@pytest.mark.parametrize("username, password", [("tester", "wrong"), ("nobody", "correct-horse"), ("", "x")])
def test_authenticate_failures(user, session_factory, username, password):
    with pytest.raises(AuthenticationError):
        auth.authenticate(username=username, password=password, session_factory=session_factory)


def test_get_user_by_username(user, session_factory):
    assert auth.get_user_by_username("tester", session_factory).id == user.id
    assert auth.get_user_by_username("ghost", session_factory) is None


def test_update_profile(user, profile_repo):
    updated = profiles.update_profile(profile_repo, user_id=user.id, display_name=" Tess ", default_currency="jpy")

    assert updated.display_name == "Tess"
    assert updated.default_currency == "JPY"


def test_update_profile_rejects_blank_name(user, profile_repo):
    with pytest.raises(ValidationError):
        profiles.update_profile(profile_repo, user_id=user.id, display_name="   ")


def test_profile_missing_for_unknown_user(profile_repo):
    with pytest.raises(NotFoundError):
        profiles.get_profile(profile_repo, user_id=12345)
    with pytest.raises(NotFoundError):
        profiles.update_profile(profile_repo, user_id=12345, display_name="x")


def test_app_context_sign_in_out(config, user):
    from fintrack.context import create_app_context

    app = create_app_context(config)
    try:
        with pytest.raises(RuntimeError):
            app.require_user_id()
        app.sign_in("tester", "correct-horse")
        assert app.require_user_id() == user.id
        app.sign_out()
        assert app.current_user is None
    finally:
        app.engine.dispose()


def test_concurrent_duplicate_sign_up_is_validation_error(monkeypatch, user_factory, session_factory):
    user_factory("erin")
    # the other sign-up committed after this one checked the name
    monkeypatch.setattr(auth, "_username_taken", lambda session, username: False)

    with pytest.raises(ValidationError) as excinfo:
        auth.sign_up(username="erin", password="longenough", session_factory=session_factory)

    assert excinfo.value.field == "username"
    assert "already exists" in str(excinfo.value)
