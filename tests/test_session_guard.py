from unittest import mock

import pytest

from profile_intake.session_guard import SessionGuard, constant_time_equals


@pytest.mark.parametrize("candidate", [
    "correct horsf",   # last character differs
    "dorrect horse",   # first character differs
    "correct hors",    # shorter
    "correct horse!",  # longer
    "",
])
def test_constant_time_equals_rejects_any_difference(candidate):
    assert not constant_time_equals(candidate, "correct horse")


def test_constant_time_equals_accepts_identical_and_unicode():
    assert constant_time_equals("correct horse", "correct horse")
    assert constant_time_equals("pässwörd", "pässwörd")
    assert not constant_time_equals("pässwörd", "passwort")


def test_comparison_goes_through_hmac_compare_digest():
    with mock.patch("profile_intake.session_guard.hmac.compare_digest", return_value=True) as compare:
        assert constant_time_equals("a", "b")
    compare.assert_called_once_with(b"a", b"b")


def test_validate_password():
    guard = SessionGuard("secret")
    assert guard.validate_password("secret")
    assert not guard.validate_password("Secret")
    assert not guard.validate_password(None)


def test_no_configured_password_never_validates():
    assert not SessionGuard("").validate_password("")


def test_session_token_shape():
    token = SessionGuard.new_session_token()
    assert len(token) == 64
    assert int(token, 16) >= 0
    assert token != SessionGuard.new_session_token()


def test_is_authenticated_checks_cookie_shape():
    guard = SessionGuard("secret")
    assert guard.is_authenticated({"admin_session": "a" * 64})
    assert not guard.is_authenticated({})
    assert not guard.is_authenticated({"admin_session": "a" * 63})
    assert not guard.is_authenticated({"admin_session": "z" * 64})
    assert not guard.is_authenticated({"other_cookie": "a" * 64})
    assert not guard.is_authenticated({"admin_session": "a" * 64 + "\n"})
    assert not guard.is_authenticated({"admin_session": "A" * 64})


def test_set_session_cookie_flags():
    guard = SessionGuard("secret")
    response = mock.Mock()

    token = guard.set_session_cookie(response)

    response.set_cookie.assert_called_once_with(
        "admin_session", token, max_age=24 * 60 * 60, path="/", secure=True, httponly=True, samesite="Strict"
    )
    assert guard.is_authenticated({"admin_session": token})
