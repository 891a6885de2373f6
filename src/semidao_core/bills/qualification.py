"""Document qualifications attached to saved bills.

The connector only needs the qualification for one label; the lookup is
injected so a caller can plug in its own taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from semidao_core.exceptions import ConfigError


@dataclass(frozen=True)
class Qualification:
    """A classification tag for a stored document."""

    label: str
    purpose: str
    source_category: str
    source_sub_category: str | None = None
    subjects: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "label": self.label,
            "purpose": self.purpose,
            "sourceCategory": self.source_category,
        }
        if self.source_sub_category:
            data["sourceSubCategory"] = self.source_sub_category
        if self.subjects:
            data["subjects"] = list(self.subjects)
        return data


class QualificationLookup(Protocol):
    def get_by_label(self, label: str) -> Qualification: ...


INVOICE_QUALIFICATIONS = (
    Qualification("water_invoice", "invoice", "bill", "water", ("subscription",)),
    Qualification("energy_invoice", "invoice", "bill", "energy", ("subscription",)),
    Qualification("telecom_invoice", "invoice", "bill", "telecom", ("subscription",)),
    Qualification("other_invoice", "invoice", "bill", None, ()),
)


class DocumentQualifications:
    """In-memory qualification registry keyed by label.

    Example:
        >>> DocumentQualifications().get_by_label("water_invoice").purpose
        'invoice'

    """

    def __init__(self, qualifications: tuple[Qualification, ...] = INVOICE_QUALIFICATIONS) -> None:
        self._by_label = {q.label: q for q in qualifications}

    def labels(self) -> list[str]:
        return sorted(self._by_label)

    def get_by_label(self, label: str) -> Qualification:
        """Return the qualification for ``label``.

        Raises:
            ConfigError: If the label is unknown.

        """
        try:
            return self._by_label[label]
        except KeyError:
            raise ConfigError(
                f"Unknown qualification label '{label}'. Known: {', '.join(self.labels())}"
            ) from None
