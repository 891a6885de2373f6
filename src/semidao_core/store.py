"""Persistence boundary: save scraped bills.

The connector hands its records to any object implementing BillStore.
LocalBillStore is the bundled implementation: it downloads each bill's PDF
with the authenticated session and keeps a CSV manifest of what was saved.

Dedup keys are (date, amount, vendor), checked against the manifest and
within the batch. Records without a date or with a NaN amount cannot be
saved and are skipped with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

import pandas as pd
import requests

from semidao_core.bills.models import BillingDocument
from semidao_core.config import Credentials, DataPaths
from semidao_core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

MANIFEST_COLUMNS = [
    "date",
    "amount",
    "vendor",
    "vendorRef",
    "currency",
    "filename",
    "fileurl",
    "qualification",
    "identifiers",
    "saved_at",
]

DedupKey = tuple[str, float, str]


@dataclass
class SaveResult:
    """Outcome of a save_bills call."""

    saved: list[BillingDocument] = field(default_factory=list)
    downloaded: int = 0
    skipped_invalid: int = 0
    skipped_duplicates: int = 0


class BillStore(Protocol):
    def save_bills(
        self,
        documents: Sequence[BillingDocument],
        fields: Credentials,
        identifiers: Sequence[str],
    ) -> SaveResult: ...


def dedup_key(doc: BillingDocument) -> DedupKey:
    """Key identifying the same bill across runs."""
    assert doc.date is not None, "only complete documents have a dedup key"
    return (doc.date.isoformat(), round(doc.amount, 2), doc.vendor)


def safe_filename(filename: str) -> str:
    """Keep a filename inside its destination folder."""
    return filename.replace("/", "-").replace("\\", "-")


class LocalBillStore:
    """Save bills to a local folder with a pandas-backed CSV manifest.

    Example:
        >>> store = LocalBillStore(DataPaths.from_root("data"), session)
        >>> result = store.save_bills(documents, fields, ["semidao"])
        >>> result.downloaded
        3

    """

    def __init__(self, paths: DataPaths, session: requests.Session) -> None:
        self.paths = paths
        self.session = session

    def load_manifest(self) -> pd.DataFrame:
        """Read the manifest; an empty frame with the manifest columns if absent."""
        path = self.paths.manifest_csv
        if not path.exists():
            return pd.DataFrame(columns=MANIFEST_COLUMNS)
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
        return df

    def _known_keys(self, manifest: pd.DataFrame) -> set[DedupKey]:
        return {
            (str(d), round(float(a), 2), str(v))
            for d, a, v in zip(manifest["date"], manifest["amount"], manifest["vendor"])
        }

    def _destination(self, fields: Credentials) -> Path:
        folder = Path(fields.folder_path) if fields.folder_path else self.paths.bills_dir
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def _download(self, doc: BillingDocument, folder: Path) -> bool:
        """Download a bill's PDF unless it is already on disk.

        Returns:
            True if a file was written.

        Raises:
            PersistenceError: If the portal answers with a non-2xx status.

        """
        if not doc.fileurl:
            logger.debug("No file url for %s, saving metadata only", doc.filename)
            return False
        out_path = folder / safe_filename(doc.filename)
        if out_path.exists():
            logger.debug("%s already on disk, skipping download", out_path)
            return False
        r = self.session.get(doc.fileurl)
        if not (200 <= r.status_code < 300):
            raise PersistenceError(f"Download failed for {doc.fileurl}. HTTP {r.status_code}")
        out_path.write_bytes(r.content)
        logger.debug("Saved %s (%d bytes)", out_path, len(r.content))
        return True

    def save_bills(
        self,
        documents: Sequence[BillingDocument],
        fields: Credentials,
        identifiers: Sequence[str],
    ) -> SaveResult:
        """Download and record every new, complete bill.

        Args:
            documents: Records from the listing extractor.
            fields: Account fields; ``folder_path`` overrides the destination.
            identifiers: Bank-operation matching strings stored with each bill.

        Returns:
            SaveResult with the saved records and skip counters.

        Raises:
            PersistenceError: If a download fails or the manifest cannot be written.

        """
        self.paths.ensure_dirs()
        manifest = self.load_manifest()
        known = self._known_keys(manifest)
        folder = self._destination(fields)
        result = SaveResult()
        new_rows: list[dict[str, object]] = []

        for doc in documents:
            if not doc.is_complete:
                logger.warning(
                    "Skipping bill without date or amount: ref=%r, date=%s, amount=%s",
                    doc.vendor_ref,
                    doc.date,
                    doc.amount,
                )
                result.skipped_invalid += 1
                continue
            key = dedup_key(doc)
            if key in known:
                logger.debug("Bill %s already saved", doc.filename)
                result.skipped_duplicates += 1
                continue
            known.add(key)

            if self._download(doc, folder):
                result.downloaded += 1
            result.saved.append(doc)
            new_rows.append(
                {
                    "date": doc.date.isoformat() if doc.date else "",
                    "amount": doc.amount,
                    "vendor": doc.vendor,
                    "vendorRef": doc.vendor_ref,
                    "currency": doc.currency,
                    "filename": doc.filename,
                    "fileurl": doc.fileurl or "",
                    "qualification": doc.qualification.label,
                    "identifiers": "|".join(identifiers),
                    "saved_at": datetime.now().isoformat(timespec="seconds"),
                }
            )

        if new_rows:
            added = pd.DataFrame(new_rows, columns=MANIFEST_COLUMNS)
            out = added if manifest.empty else pd.concat([manifest, added], ignore_index=True)
            try:
                out.to_csv(self.paths.manifest_csv, index=False)
            except OSError as e:
                raise PersistenceError(
                    f"Failed to write manifest {self.paths.manifest_csv}: {e}"
                ) from e

        logger.info(
            "Saved %d bill(s): %d downloaded, %d duplicate(s), %d invalid",
            len(result.saved),
            result.downloaded,
            result.skipped_duplicates,
            result.skipped_invalid,
        )
        return result
