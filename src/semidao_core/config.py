"""Configuration for the SEMIDAO bills connector.

Three small dataclasses cover everything a run needs:

- SiteConfig: portal URLs and the constants stamped on every bill
- Credentials: the account fields (login, password, destination folder)
- DataPaths: where downloaded bills, the manifest and run metadata live

Environment (optional):
  SEMIDAO_BASE: portal base URL (a trailing slash is added when missing)
  SEMIDAO_USER / SEMIDAO_PASS: credentials fallback
  SEMIDAO_TIMEOUT=60   # seconds
  SEMIDAO_RETRIES=0    # transport-level retries, off by default
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from semidao_core.exceptions import ConfigError

DEFAULT_BASE = "https://agence-en-ligne.semidao.fr/wp/"
LOGIN_PATH = "home.action"
BILLS_PATH = "displayBills.action"

VENDOR = "semidao"


@dataclass
class SiteConfig:
    """Portal endpoints and per-bill constants.

    Attributes:
        base_url: Portal root; hrefs found on the listing are appended to it verbatim.
        vendor: Vendor identifier stamped on every bill.
        currency: Currency code stamped on every bill.
        identifiers: Strings used downstream to match bank operations.
        qualification_label: Label looked up in the qualification registry.
        timeout: Default per-request timeout in seconds.
        retries: Transport-level retries for the HTTP adapter.

    """

    base_url: str = DEFAULT_BASE
    vendor: str = VENDOR
    currency: str = "EUR"
    identifiers: list[str] = field(default_factory=lambda: [VENDOR])
    qualification_label: str = "water_invoice"
    timeout: float = 60.0
    retries: int = 0

    def __post_init__(self) -> None:
        # Listing hrefs and endpoint paths are appended to base_url as-is
        if not self.base_url.endswith("/"):
            self.base_url += "/"

    @classmethod
    def from_env(cls, base_url: str | None = None) -> SiteConfig:
        """Build a SiteConfig from SEMIDAO_* environment variables.

        Args:
            base_url: Explicit base URL; wins over SEMIDAO_BASE.

        Raises:
            ConfigError: If SEMIDAO_TIMEOUT or SEMIDAO_RETRIES is not a number.

        """
        try:
            timeout = float(os.environ.get("SEMIDAO_TIMEOUT", "60"))
            retries = int(os.environ.get("SEMIDAO_RETRIES", "0"))
        except ValueError as e:
            raise ConfigError(f"Invalid SEMIDAO_TIMEOUT/SEMIDAO_RETRIES: {e}") from e
        return cls(
            base_url=base_url or os.environ.get("SEMIDAO_BASE") or DEFAULT_BASE,
            timeout=timeout,
            retries=retries,
        )

    @property
    def login_url(self) -> str:
        return self.base_url + LOGIN_PATH

    @property
    def bills_url(self) -> str:
        return self.base_url + BILLS_PATH


@dataclass
class Credentials:
    """Account fields supplied at run start.

    Attributes:
        login: Portal username.
        password: Plaintext password; hashed before it leaves the process.
        folder_path: Optional destination folder for downloaded bills.

    """

    login: str
    password: str = field(repr=False)
    folder_path: str | None = None

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Any]) -> Credentials:
        """Build Credentials from a fields mapping, falling back to the environment.

        Raises:
            ConfigError: If login or password ends up empty.

        """
        login = fields.get("login") or os.environ.get("SEMIDAO_USER")
        password = fields.get("password") or os.environ.get("SEMIDAO_PASS")
        if not login or not password:
            raise ConfigError(
                "Login and password are required (fields or SEMIDAO_USER/SEMIDAO_PASS)."
            )
        folder_path = fields.get("folderPath") or fields.get("folder_path")
        return cls(login=str(login), password=str(password), folder_path=folder_path)


def load_fields(
    path: Path | str | None,
    overrides: Mapping[str, Any] | None = None,
) -> Credentials:
    """Load account fields from a dev-config JSON file.

    Supports two JSON shapes:

      {"fields": {"login": "...", "password": "..."}}

    and the bare mapping:

      {"login": "...", "password": "..."}

    Args:
        path: JSON file path, or None to rely on SEMIDAO_USER/SEMIDAO_PASS only.
        overrides: Non-empty values here win over the file (e.g. command-line flags).

    Raises:
        ConfigError: If the file is missing, not valid JSON, or lacks credentials.

    """
    extra = {k: v for k, v in (overrides or {}).items() if v}
    if path is None:
        return Credentials.from_mapping(extra)

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Fields file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to load fields file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("Fields file must be a JSON object")

    fields = raw.get("fields", raw)
    if not isinstance(fields, dict):
        raise ConfigError("'fields' must be a JSON object")
    return Credentials.from_mapping({**fields, **extra})


@dataclass
class DataPaths:
    """Filesystem paths used by the local bill store.

    Directory Structure:
        data_root/
        ├── bills/          # downloaded PDFs
        │   └── bills.csv   # manifest of saved bills
        └── _meta/          # run metadata
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Examples:
            >>> DataPaths.from_root("data").bills_dir
            PosixPath('data/bills')

        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @property
    def bills_dir(self) -> Path:
        return self.data_root / "bills"

    @property
    def manifest_csv(self) -> Path:
        return self.bills_dir / "bills.csv"

    @property
    def meta_dir(self) -> Path:
        return self.data_root / "_meta"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.bills_dir, self.meta_dir]:
            path.mkdir(parents=True, exist_ok=True)
