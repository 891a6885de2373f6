"""Shared fixtures: a fake HTTP session and realistic portal pages."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from semidao_core.bills.qualification import DocumentQualifications
from semidao_core.config import Credentials, DataPaths, SiteConfig

BASE_URL = "https://portal.test/wp/"

CONNECTED_PAGE = """
<html><body>
  <div class="fullpage body connected">
    <ul class="menu">
      <li><a href="showDisplayBills.action">Mes factures</a></li>
    </ul>
  </div>
</body></html>
"""

LOGIN_FAILED_PAGE = """
<html><body>
  <div class="fullpage body">
    <p class="alertmsg"> Identifiant ou mot de passe incorrect </p>
    <form action="home.action" method="post"><input name="j_username"/></form>
  </div>
</body></html>
"""

BILLS_PAGE = """
<html><body>
<div class="fullpage body connected">
<table id="billTable">
  <thead>
    <tr><th>Date</th><th>Référence</th><th>Montant</th><th>Statut</th><th>Facture</th></tr>
  </thead>
  <tbody>
    <tr>
      <td>01/02/2023</td><td>REF123</td><td>45.67 €</td><td>Payée</td>
      <td><a href="getFile.action?id=9">PDF</a></td>
    </tr>
    <tr>
      <td>15/11/2022</td><td>REF100</td><td>38,20 €</td><td>Payée</td>
      <td><a href="getFile.action?id=8">PDF</a></td>
    </tr>
    <tr>
      <td>01/08/2022</td><td></td><td>12 €</td><td>En attente</td><td></td>
    </tr>
  </tbody>
</table>
</div>
</body></html>
"""


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = ""
    content: bytes = b""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class FakeSession:
    """Stand-in for requests.Session answering from a url -> response table."""

    routes: dict[str, FakeResponse | Callable[..., FakeResponse]] = field(default_factory=dict)
    calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    def _answer(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404, text="not found", url=url)
        resp = route(**kwargs) if callable(route) else route
        if not resp.url:
            resp.url = url
        return resp

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._answer("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._answer("POST", url, **kwargs)

    def urls(self, method: str) -> list[str]:
        return [u for m, u, _ in self.calls if m == method]


@pytest.fixture
def bills_page() -> str:
    return BILLS_PAGE


@pytest.fixture
def connected_page() -> str:
    return CONNECTED_PAGE


@pytest.fixture
def login_failed_page() -> str:
    return LOGIN_FAILED_PAGE


@pytest.fixture
def fake_session_cls() -> type[FakeSession]:
    return FakeSession


@pytest.fixture
def fake_response_cls() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def site() -> SiteConfig:
    return SiteConfig(base_url=BASE_URL)


@pytest.fixture
def qualifications() -> DocumentQualifications:
    return DocumentQualifications()


@pytest.fixture
def fields() -> Credentials:
    return Credentials(login="jdupont", password="secret")


@pytest.fixture
def paths(tmp_path: Path) -> DataPaths:
    return DataPaths.from_root(tmp_path / "data")


@pytest.fixture
def portal(site: SiteConfig) -> FakeSession:
    """A session where login succeeds and the listing has three bills."""
    return FakeSession(
        routes={
            site.login_url: FakeResponse(text=CONNECTED_PAGE),
            site.bills_url: FakeResponse(text=BILLS_PAGE),
            BASE_URL + "getFile.action?id=9": FakeResponse(content=b"%PDF-1.4 nine"),
            BASE_URL + "getFile.action?id=8": FakeResponse(content=b"%PDF-1.4 eight"),
        }
    )
