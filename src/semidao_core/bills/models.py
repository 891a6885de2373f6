"""Billing document record produced by the listing extractor."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any

from semidao_core.bills.qualification import Qualification


@dataclass(frozen=True)
class BillingDocument:
    """One bill scraped from the listing page.

    Attributes:
        date: Bill date, None when the cell could not be parsed.
        vendor_ref: Raw reference text (may be empty).
        amount: Amount in ``currency``, NaN when the cell could not be parsed.
        fileurl: Absolute PDF URL, None when the row has no link.
        currency: Currency code.
        filename: Deterministic PDF filename.
        vendor: Vendor identifier.
        qualification: Classification tag.

    """

    date: date | None
    vendor_ref: str
    amount: float
    fileurl: str | None
    currency: str
    filename: str
    vendor: str
    qualification: Qualification

    @property
    def is_complete(self) -> bool:
        """True when both date and amount were parsed."""
        return self.date is not None and not math.isnan(self.amount)

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the key names the document store expects."""
        return {
            "date": self.date.isoformat() if self.date else None,
            "vendorRef": self.vendor_ref,
            "amount": self.amount,
            "fileurl": self.fileurl,
            "currency": self.currency,
            "filename": self.filename,
            "vendor": self.vendor,
            "qualification": self.qualification.to_dict(),
        }
