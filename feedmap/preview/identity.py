"""Best-effort guess of which fields identify and label a record."""
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from feedmap.schema.models import Record

ID_HINTS = ("id", "sku", "code")
LABEL_HINTS = ("title", "name", "product")

DEFAULT_LABEL = "Product"


@dataclass(frozen=True)
class RecordKeys:
    """Field names used to identify and label records, if any were found."""

    id_field: Optional[str] = None
    label_field: Optional[str] = None

    def record_id(self, record: Record, index: int) -> str:
        """Identifier for the record at ``index`` (0-based)."""
        value = record.get(self.id_field) if self.id_field else None
        return value or f"ITEM_{index + 1}"

    def record_label(self, record: Record) -> str:
        value = record.get(self.label_field) if self.label_field else None
        return value or DEFAULT_LABEL


def _first_containing(names: Iterable[str], hints: Sequence[str], skip: Optional[str] = None) -> Optional[str]:
    for name in names:
        if name == skip:
            continue
        lower = name.lower()
        if any(hint in lower for hint in hints):
            return name
    return None


def infer_record_keys(field_names: Sequence[str]) -> RecordKeys:
    """
    Pick the identifier and label fields by case-insensitive substring.

    The identifier is the first name containing id/sku/code, the label the
    first other name containing title/name/product. Either may be None.
    """
    id_field = _first_containing(field_names, ID_HINTS)
    label_field = _first_containing(field_names, LABEL_HINTS, skip=id_field)
    return RecordKeys(id_field, label_field)
