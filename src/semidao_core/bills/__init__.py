"""Bills domain: portal login, listing extraction and record model.

- `bills.auth`: Session Establisher (form post + connected-marker check)
- `bills.extract`: Listing Extractor (one GET, declarative column rules)
- `bills.parse`: field normalisation (dates, prices, URLs, filenames)
- `bills.scrape`: generic FieldRule-driven row extraction
- `bills.qualification`: injected document classification lookup

Example:
    >>> from semidao_core import SiteConfig
    >>> from semidao_core.bills import authenticate, fetch_bills, make_session
    >>>
    >>> site = SiteConfig.from_env()
    >>> s = make_session(site.timeout, site.retries)
    >>> authenticate(s, "login", "password", site)
    >>> bills = fetch_bills(s, site)

"""

from semidao_core.bills.auth import authenticate, make_session
from semidao_core.bills.extract import fetch_bills, parse_documents
from semidao_core.bills.models import BillingDocument
from semidao_core.bills.qualification import DocumentQualifications, Qualification

__all__ = [
    "BillingDocument",
    "DocumentQualifications",
    "Qualification",
    "authenticate",
    "fetch_bills",
    "make_session",
    "parse_documents",
]
