#!/usr/bin/env python3
"""SEMIDAO bills connector: log in, list bills, save them.

Examples:
  semidao-bills --fields konnector-dev-config.json --data-root ./data -v

  SEMIDAO_USER=me SEMIDAO_PASS=secret semidao-bills --data-root ./data

The fields file uses the dev-config shape:

  {"fields": {"login": "...", "password": "...", "folderPath": "..."}}
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

import requests

from semidao_core.bills.auth import authenticate, make_session
from semidao_core.bills.extract import fetch_bills
from semidao_core.bills.qualification import QualificationLookup
from semidao_core.config import Credentials, DataPaths, SiteConfig, load_fields
from semidao_core.exceptions import SemidaoError
from semidao_core.metadata import RunMetadata, write_metadata
from semidao_core.store import BillStore, LocalBillStore, SaveResult

logger = logging.getLogger(__name__)


def start(
    fields: Credentials,
    parameters: Mapping[str, Any] | None = None,
    *,
    site: SiteConfig,
    store: BillStore,
    session: requests.Session,
    qualifications: QualificationLookup | None = None,
) -> SaveResult:
    """Run the connector once: authenticate, fetch the listing, save bills.

    Args:
        fields: Account fields.
        parameters: Optional static parameters, independent of the account.
        site: Portal configuration.
        store: Persistence routine receiving the records.
        session: Session used for every request of the run.
        qualifications: Label lookup; defaults to DocumentQualifications.

    Returns:
        What the store reports as saved.

    Raises:
        AuthenticationError: If login fails. Nothing is fetched.
        ExtractionError: If the listing cannot be opened.

    """
    logger.info("Authenticating ...")
    if parameters:
        logger.debug("Found parameters")
    authenticate(session, fields.login, fields.password, site)
    logger.info("Successfully logged in")

    logger.info("Fetching the list of documents")
    documents = fetch_bills(session, site, qualifications)
    logger.info("Found %d document(s)", len(documents))

    logger.info("Saving data")
    return store.save_bills(documents, fields, identifiers=site.identifiers)


def run(
    paths: DataPaths,
    fields: Credentials,
    parameters: Mapping[str, Any] | None = None,
    *,
    site: SiteConfig | None = None,
    session: requests.Session | None = None,
    qualifications: QualificationLookup | None = None,
) -> SaveResult:
    """Run the connector against a local store and record run metadata.

    Args:
        paths: Where bills, the manifest and metadata are written.
        fields: Account fields.
        parameters: Optional static parameters.
        site: Portal configuration; SiteConfig.from_env() if None.
        session: HTTP session; a fresh one from make_session() if None.
        qualifications: Label lookup; defaults to DocumentQualifications.

    Raises:
        Any error from start(), after "failed" metadata has been written.

    """
    site = site or SiteConfig.from_env()
    session = session or make_session(site.timeout, site.retries)
    paths.ensure_dirs()
    store = LocalBillStore(paths, session)
    started = datetime.now().isoformat()

    try:
        result = start(
            fields,
            parameters,
            site=site,
            store=store,
            session=session,
            qualifications=qualifications,
        )
    except Exception as e:
        logger.error("Run failed: %s", e)
        write_metadata(
            paths.meta_dir,
            RunMetadata(vendor=site.vendor, last_run=started, status="failed", error=str(e)),
        )
        raise

    found = len(result.saved) + result.skipped_duplicates + result.skipped_invalid
    write_metadata(
        paths.meta_dir,
        RunMetadata(
            vendor=site.vendor,
            last_run=started,
            status="ok",
            found=found,
            saved=len(result.saved),
        ),
    )
    return result


# ------------------------- CLI -------------------------
@dataclasses.dataclass
class Args:
    fields: Path | None
    data_root: Path
    base: str | None
    user: str | None
    password: str | None
    verbose: bool


def parse_args(argv: list[str] | None = None) -> Args:
    p = argparse.ArgumentParser(description="SEMIDAO bills connector")
    p.add_argument("--fields", type=Path, help="JSON file with account fields")
    p.add_argument("--data-root", default=Path("./data"), type=Path)
    p.add_argument("--base", help="Portal base URL (default: SEMIDAO_BASE or the public portal)")
    p.add_argument("--user", help="Login (overrides the fields file)")
    p.add_argument("--password", help="Password (overrides the fields file)")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)
    return Args(
        fields=args.fields,
        data_root=args.data_root,
        base=args.base,
        user=args.user,
        password=args.password,
        verbose=args.verbose,
    )


def resolve_fields(args: Args) -> Credentials:
    """Merge the fields file, the environment and command-line overrides."""
    return load_fields(args.fields, {"login": args.user, "password": args.password})


def main(argv: list[str] | None = None) -> int:
    """Execute the connector command-line tool.

    Returns:
        Process exit code: 0 on success, 1 on a connector error, 130 on Ctrl-C.
        Transport errors from requests are not caught.

    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        fields = resolve_fields(args)
        site = SiteConfig.from_env(args.base)
        result = run(DataPaths.from_root(args.data_root), fields, site=site)
    except SemidaoError as e:
        logging.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130

    logging.info("Done: %d new bill(s)", len(result.saved))
    return 0


if __name__ == "__main__":
    sys.exit(main())
