"""Run metadata for the connector.

Each run writes one JSON file under ``_meta/`` recording when it ran, how it
ended and how many bills it saw, so a scheduler can tell a failed run from a
quiet one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LAST_RUN_FILE = "last_run.json"


@dataclass
class RunMetadata:
    """Metadata for a connector run.

    Attributes:
        vendor: Vendor identifier.
        last_run: ISO timestamp of when the run started.
        status: "ok" or "failed".
        found: Bills listed on the portal.
        saved: Bills newly saved.
        error: Error text for failed runs.
    """

    vendor: str
    last_run: str
    status: str
    found: int = 0
    saved: int = 0
    error: Optional[str] = None


def write_metadata(meta_dir: Path, metadata: RunMetadata) -> None:
    """Write the metadata file for the latest run."""
    meta_dir.mkdir(parents=True, exist_ok=True)
    path = meta_dir / LAST_RUN_FILE
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Wrote metadata: %s", path)


def read_metadata(meta_dir: Path) -> Optional[RunMetadata]:
    """Read the latest run's metadata, if it exists."""
    path = meta_dir / LAST_RUN_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return RunMetadata(**data)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Error reading metadata %s: %s", path, e)
        return None
