"""SEMIDAO bills connector.

Logs into the SEMIDAO water utility customer portal, scrapes the bills
listing into typed records and saves them through a pluggable store.

Module Structure:
    semidao_core.bills: Portal login, listing extraction and record model
    semidao_core.store: Persistence boundary and the local CSV/PDF store
    semidao_core.konnector: Run orchestration and the `semidao-bills` CLI
    semidao_core.config: SiteConfig, Credentials and DataPaths

Quick Start:
    >>> from semidao_core import DataPaths, load_fields
    >>> from semidao_core.konnector import run
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> result = run(paths, load_fields("konnector-dev-config.json"))
    >>> len(result.saved)
    12
"""

__version__ = "0.1.0"

from semidao_core.config import Credentials, DataPaths, SiteConfig, load_fields
from semidao_core.exceptions import (
    AuthenticationError,
    ConfigError,
    ExtractionError,
    PersistenceError,
    SemidaoError,
)

__all__ = [
    "AuthenticationError",
    "ConfigError",
    "Credentials",
    "DataPaths",
    "ExtractionError",
    "PersistenceError",
    "SemidaoError",
    "SiteConfig",
    "__version__",
    "load_fields",
]
