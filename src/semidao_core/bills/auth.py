"""Session establishment against the SEMIDAO customer portal.

The portal expects a pre-hashed credential: the MD5 hex digest of the
password travels in ``j_password`` while the plaintext ``password`` field is
sent empty. Success is judged from the returned page only, never from the
HTTP status: exactly one ``div.fullpage.body.connected`` means logged in.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from semidao_core.config import SiteConfig
from semidao_core.exceptions import AuthenticationError, ConfigError

logger = logging.getLogger(__name__)

CONNECTED_MARKER = "div.fullpage.body.connected"
ALERT_SELECTOR = ".alertmsg"
BILLS_MENU_LINK = 'a[href="showDisplayBills.action"]'


def make_session(timeout: float = 60.0, retries: int = 0) -> requests.Session:
    """Create a requests Session with a default timeout.

    Configures the session with:
    - User-Agent header (Mozilla/5.0)
    - HTTPAdapter for HTTP/HTTPS; transport retries are off unless ``retries`` > 0
    - Default timeout for all requests

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of transport-level retry attempts.

    Returns:
        Configured requests.Session object. Its cookie jar carries the
        authenticated session between requests.

    """
    s = requests.Session()
    s.headers.update({"User-Agent": "Mozilla/5.0"})
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def hash_password(password: str) -> str:
    """Return the MD5 hex digest the portal expects in ``j_password``."""
    return hashlib.md5(password.encode("utf-8")).hexdigest()


def build_login_form(username: str, password: str) -> dict[str, str]:
    """Build the URL-encoded login form fields."""
    return {"j_username": username, "password": "", "j_password": hash_password(password)}


def is_logged_in(soup: BeautifulSoup) -> bool:
    """True iff the authenticated-area marker appears exactly once."""
    return len(soup.select(CONNECTED_MARKER)) == 1


def login_error_message(soup: BeautifulSoup) -> str:
    """Return the portal's alert text, "" when the page carries none."""
    return "".join(n.get_text() for n in soup.select(ALERT_SELECTOR)).strip()


def authenticate(
    s: requests.Session,
    username: str,
    password: str,
    site: SiteConfig,
) -> BeautifulSoup:
    """Log into the portal with a single form post.

    Args:
        s: Session whose cookie jar will hold the authenticated session.
        username: Portal login.
        password: Plaintext password (hashed before sending).
        site: Portal configuration.

    Returns:
        The parsed page returned by the login post.

    Raises:
        ConfigError: If username or password is empty.
        AuthenticationError: If the page does not show exactly one
            authenticated-area marker.

    """
    if not username or not password:
        raise ConfigError("Username and password are required to authenticate.")

    r = s.post(site.login_url, data=build_login_form(username, password), allow_redirects=True)
    soup = BeautifulSoup(r.text, "html.parser")

    alert = login_error_message(soup)
    logger.debug("Login response: status=%s, url=%s", r.status_code, r.url)
    logger.debug("Alert message: %r", alert)
    logger.debug("%d links to showDisplayBills.action", len(soup.select(BILLS_MENU_LINK)))
    logger.debug("%d connected body markers", len(soup.select(CONNECTED_MARKER)))

    if not is_logged_in(soup):
        logger.error("Login failed: %s", alert or "no error message on page")
        raise AuthenticationError(alert)
    return soup
