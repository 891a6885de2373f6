"""Listing extractor: fetch the bills page and map its rows to records.

Rows of ``table#billTable`` are read positionally:

    column 1  date        dd/mm/yyyy
    column 2  vendorRef   raw text
    column 3  amount      "45.67 €"
    column 4  (unused)
    column 5  fileurl     <a href="getFile.action?id=...">

Extraction never raises per row. Whether the header row is skipped depends
only on the page markup: a header made of <th> cells still produces a
record, with every field degraded (None date, "" reference, NaN amount,
None fileurl).
"""

from __future__ import annotations

import logging
from functools import partial

import requests
from bs4 import BeautifulSoup, Tag

from semidao_core.bills.models import BillingDocument
from semidao_core.bills.parse import (
    build_filename,
    normalize_price,
    parse_date,
    resolve_file_url,
)
from semidao_core.bills.qualification import DocumentQualifications, QualificationLookup
from semidao_core.bills.scrape import FieldRule, first_attr, scrape
from semidao_core.config import SiteConfig
from semidao_core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

BILL_ROWS = "table#billTable tr"


def _file_url(nodes: list[Tag], base_url: str) -> str | None:
    return resolve_file_url(first_attr(nodes, "href"), base_url)


def bill_rules(base_url: str) -> list[FieldRule]:
    """Column extractors for one row of the bills table."""
    return [
        FieldRule("date", sel="td:nth-child(1)", parse=parse_date),
        FieldRule("vendorRef", sel="td:nth-child(2)"),
        FieldRule("amount", sel="td:nth-child(3)", parse=normalize_price),
        FieldRule("fileurl", sel="td:nth-child(5) a", fn=partial(_file_url, base_url=base_url)),
    ]


def parse_documents(
    soup: BeautifulSoup,
    site: SiteConfig,
    qualifications: QualificationLookup | None = None,
) -> list[BillingDocument]:
    """Turn the bills page into BillingDocument records.

    Args:
        soup: Parsed listing page.
        site: Portal configuration (base URL and per-bill constants).
        qualifications: Label lookup; defaults to DocumentQualifications.

    Returns:
        One record per matched table row, in page order.

    """
    qualifications = qualifications or DocumentQualifications()
    qualification = qualifications.get_by_label(site.qualification_label)

    logger.debug("in parse_documents, %d rows", len(soup.select(BILL_ROWS)))
    rows = scrape(soup, bill_rules(site.base_url), BILL_ROWS)

    return [
        BillingDocument(
            date=row["date"],
            vendor_ref=row["vendorRef"],
            amount=row["amount"],
            fileurl=row["fileurl"],
            currency=site.currency,
            filename=build_filename(row["date"], site.vendor, row["amount"], row["vendorRef"]),
            vendor=site.vendor,
            qualification=qualification,
        )
        for row in rows
    ]


def fetch_bills(
    s: requests.Session,
    site: SiteConfig,
    qualifications: QualificationLookup | None = None,
) -> list[BillingDocument]:
    """Fetch the listing page once and parse it.

    Args:
        s: Authenticated session.
        site: Portal configuration.
        qualifications: Label lookup; defaults to DocumentQualifications.

    Raises:
        ExtractionError: If the listing answers with a non-2xx status.
        requests.RequestException: Transport errors propagate unchanged.

    """
    r = s.get(site.bills_url)
    if not (200 <= r.status_code < 300):
        raise ExtractionError(
            f"Failed to open bills listing. HTTP {r.status_code}: {(r.text or '')[:400]}"
        )
    logger.info("Parsing list of documents")
    soup = BeautifulSoup(r.text, "html.parser")
    return parse_documents(soup, site, qualifications)
