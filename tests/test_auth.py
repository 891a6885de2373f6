"""Unit tests for the login form post and its success check."""

import logging

import pytest
from bs4 import BeautifulSoup

from semidao_core.bills.auth import (
    authenticate,
    build_login_form,
    hash_password,
    is_logged_in,
    login_error_message,
    make_session,
)
from semidao_core.exceptions import AuthenticationError, ConfigError, ExtractionError


def test_hash_password_is_md5_hex() -> None:
    assert hash_password("password") == "5f4dcc3b5aa765d61d8327deb882cf99"
    assert len(hash_password("secret")) == 32


def test_login_form_sends_empty_plaintext_password() -> None:
    form = build_login_form("jdupont", "password")
    assert form == {
        "j_username": "jdupont",
        "password": "",
        "j_password": "5f4dcc3b5aa765d61d8327deb882cf99",
    }


@pytest.mark.parametrize(
    "body, expected",
    [
        ('<div class="fullpage body connected"></div>', True),
        ('<div class="connected body fullpage">x</div>', True),
        ('<div class="fullpage body"></div>', False),
        ("", False),
        (
            '<div class="fullpage body connected"></div><div class="fullpage body connected"></div>',
            False,
        ),
    ],
)
def test_is_logged_in_requires_exactly_one_marker(body: str, expected: bool) -> None:
    assert is_logged_in(BeautifulSoup(body, "html.parser")) is expected


def test_login_error_message(login_failed_page: str) -> None:
    soup = BeautifulSoup(login_failed_page, "html.parser")
    assert login_error_message(soup) == "Identifiant ou mot de passe incorrect"
    assert login_error_message(BeautifulSoup("<p>ok</p>", "html.parser")) == ""


def test_authenticate_posts_hashed_form(portal, site) -> None:
    authenticate(portal, "jdupont", "password", site)

    assert portal.urls("POST") == [site.login_url]
    assert portal.urls("GET") == []
    _, _, kwargs = portal.calls[0]
    assert kwargs["data"]["j_password"] == "5f4dcc3b5aa765d61d8327deb882cf99"
    assert kwargs["data"]["password"] == ""


def test_authenticate_ignores_http_status(
    fake_session_cls, fake_response_cls, connected_page, site
) -> None:
    s = fake_session_cls(
        routes={site.login_url: fake_response_cls(status_code=403, text=connected_page)}
    )
    authenticate(s, "jdupont", "secret", site)


def test_authenticate_failure_carries_page_message(
    fake_session_cls, fake_response_cls, login_failed_page, site
) -> None:
    s = fake_session_cls(routes={site.login_url: fake_response_cls(text=login_failed_page)})
    with pytest.raises(AuthenticationError) as exc_info:
        authenticate(s, "jdupont", "wrong", site)
    assert exc_info.value.message == "Identifiant ou mot de passe incorrect"
    assert "LOGIN_FAILED" in str(exc_info.value)
    assert isinstance(exc_info.value, ExtractionError)


def test_authenticate_failure_without_message(fake_session_cls, fake_response_cls, site) -> None:
    s = fake_session_cls(routes={site.login_url: fake_response_cls(text="<html></html>")})
    with pytest.raises(AuthenticationError) as exc_info:
        authenticate(s, "jdupont", "secret", site)
    assert exc_info.value.message == ""


@pytest.mark.parametrize("user, pwd", [("", "secret"), ("jdupont", "")])
def test_authenticate_requires_credentials(portal, site, user: str, pwd: str) -> None:
    with pytest.raises(ConfigError):
        authenticate(portal, user, pwd, site)
    assert portal.calls == []


def test_make_session_defaults() -> None:
    s = make_session(timeout=5, retries=0)
    assert s.headers["User-Agent"] == "Mozilla/5.0"
    assert s.get_adapter("https://portal.test/").max_retries.total == 0


def test_make_session_opt_in_retries() -> None:
    s = make_session(retries=2)
    assert s.get_adapter("https://portal.test/").max_retries.total == 2


@pytest.mark.parametrize("page_fixture", ["connected_page", "login_failed_page"])
def test_authenticate_never_logs_password(
    request, caplog, fake_session_cls, fake_response_cls, site, page_fixture: str
) -> None:
    page = request.getfixturevalue(page_fixture)
    s = fake_session_cls(routes={site.login_url: fake_response_cls(text=page)})
    caplog.set_level(logging.DEBUG)

    try:
        authenticate(s, "jdupont", "hunter2-plain", site)
    except AuthenticationError:
        pass

    assert caplog.records
    assert "hunter2-plain" not in caplog.text
    assert hash_password("hunter2-plain") not in caplog.text
