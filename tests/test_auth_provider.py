import pytest

from agenda.core.exceptions import AuthProviderError, UnauthorizedException
from tests.conftest import PASSWORD


def test_sign_up_signs_in_and_notifies(auth):
    seen = []
    auth.on_auth_state_changed(seen.append)
    user = auth.sign_up("Ana@Example.com", PASSWORD)

    assert auth.current_user == user
    assert user.email == "ana@example.com"
    assert seen == [None, user]


@pytest.mark.parametrize(
    "email,password,code",
    [
        ("not-an-email", PASSWORD, "invalid-email"),
        ("ana@example.com", "123", "weak-password"),
    ],
)
def test_sign_up_rejects_bad_input(auth, email, password, code):
    with pytest.raises(AuthProviderError) as exc:
        auth.sign_up(email, password)
    assert exc.value.code == code
    assert auth.current_user is None


def test_sign_up_duplicate_email(auth):
    auth.sign_up("ana@example.com", PASSWORD)
    with pytest.raises(AuthProviderError) as exc:
        auth.sign_up("ana@example.com", PASSWORD)
    assert exc.value.code == "email-already-in-use"


def test_sign_in_errors(auth):
    auth.sign_up("ana@example.com", PASSWORD)
    auth.sign_out()

    with pytest.raises(AuthProviderError) as exc:
        auth.sign_in("ana@example.com", "errada")
    assert exc.value.code == "wrong-password"

    with pytest.raises(AuthProviderError) as exc:
        auth.sign_in("bia@example.com", PASSWORD)
    assert exc.value.code == "user-not-found"

    user = auth.sign_in("ana@example.com", PASSWORD)
    assert auth.current_user == user


def test_unsubscribe_is_idempotent(auth):
    seen = []
    unsubscribe = auth.on_auth_state_changed(seen.append)
    unsubscribe()
    unsubscribe()
    auth.sign_up("ana@example.com", PASSWORD)
    assert seen == [None]


def test_update_profile_does_not_fire_listeners(auth):
    auth.sign_up("ana@example.com", PASSWORD)
    seen = []
    auth.on_auth_state_changed(seen.append)

    updated = auth.update_profile(display_name="Ana Paula", photo_url="https://img/1.jpg")
    assert updated.display_name == "Ana Paula"
    assert auth.current_user.photo_url == "https://img/1.jpg"
    assert len(seen) == 1


def test_update_profile_requires_user(auth):
    with pytest.raises(UnauthorizedException):
        auth.update_profile(display_name="x")


def test_refresh_token_round_trip(auth):
    user = auth.sign_up("ana@example.com", PASSWORD)
    token = auth.issue_refresh_token()
    auth.sign_out()

    assert auth.sign_in_with_refresh_token(token).uid == user.uid
    assert auth.current_user.uid == user.uid


def test_refresh_token_rejected_when_invalid(auth):
    with pytest.raises(AuthProviderError) as exc:
        auth.sign_in_with_refresh_token("garbage")
    assert exc.value.code == "invalid-credential"


def test_password_reset_invalidates_refresh_tokens(auth):
    auth.sign_up("ana@example.com", PASSWORD)
    refresh = auth.issue_refresh_token()
    auth.sign_out()

    code = auth.send_password_reset("ana@example.com")
    auth.confirm_password_reset(code, "nova-senha")

    with pytest.raises(AuthProviderError) as exc:
        auth.sign_in_with_refresh_token(refresh)
    assert exc.value.code == "invalid-credential"
    assert auth.sign_in("ana@example.com", "nova-senha").email == "ana@example.com"


def test_password_reset_errors(auth):
    with pytest.raises(AuthProviderError) as exc:
        auth.send_password_reset("ninguem@example.com")
    assert exc.value.code == "user-not-found"

    with pytest.raises(AuthProviderError) as exc:
        auth.confirm_password_reset("garbage", "nova-senha")
    assert exc.value.code == "invalid-action-code"

    auth.sign_up("ana@example.com", PASSWORD)
    code = auth.send_password_reset("ana@example.com")
    with pytest.raises(AuthProviderError) as exc:
        auth.confirm_password_reset(code, "123")
    assert exc.value.code == "weak-password"


def test_refresh_token_is_not_a_reset_code(auth):
    auth.sign_up("ana@example.com", PASSWORD)
    refresh = auth.issue_refresh_token()
    with pytest.raises(AuthProviderError):
        auth.confirm_password_reset(refresh, "nova-senha")


def test_access_token_carries_uid(auth):
    user = auth.sign_up("ana@example.com", PASSWORD)
    token = auth.create_access_token()

    assert auth.decode_access_token(token) == user.uid
    assert auth.decode_access_token("garbage") is None
    # A refresh token is not accepted as an access token
    assert auth.decode_access_token(auth.issue_refresh_token()) is None


def test_access_token_requires_session(auth):
    with pytest.raises(UnauthorizedException):
        auth.create_access_token()
