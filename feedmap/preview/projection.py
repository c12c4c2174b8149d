"""Preview of original versus mapped values for one target field."""
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from feedmap.engine.mapping_engine import Mappings, apply_mappings
from feedmap.preview.identity import infer_record_keys
from feedmap.schema.models import Record

NOT_AVAILABLE = "N/A"
ITEMS_PER_PAGE = 5


@dataclass(frozen=True)
class PreviewRow:
    """One record's original and mapped value for the previewed field."""

    record_id: str
    record_label: str
    target_field: str
    original_value: Optional[str]
    mapped_value: Optional[str]

    def to_dict(self) -> Dict[str, str]:
        """Display form, with N/A for absent values."""
        return {
            "record_id": self.record_id,
            "record_label": self.record_label,
            "target_field": self.target_field,
            "original_value": self.original_value or NOT_AVAILABLE,
            "mapped_value": self.mapped_value or NOT_AVAILABLE,
        }


@dataclass(frozen=True)
class PreviewPage:
    rows: List[PreviewRow]
    page: int
    total_pages: int


def _field_names(records: Sequence[Record]) -> List[str]:
    seen: Dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


def build_preview(records: Sequence[Record], mappings: Mappings, target_field: str) -> List[PreviewRow]:
    """
    Project records onto (id, label, field, original value, mapped value).

    Args:
        records: Source records
        mappings: Draft mappings to preview
        target_field: Field to show

    Returns:
        One row per record, in record order
    """
    mapped = apply_mappings(records, mappings)
    keys = infer_record_keys(_field_names(records))

    return [
        PreviewRow(
            record_id=keys.record_id(record, index),
            record_label=keys.record_label(record),
            target_field=target_field,
            original_value=record.get(target_field),
            mapped_value=mapped[index].get(target_field),
        )
        for index, record in enumerate(records)
    ]


def paginate(rows: Sequence[PreviewRow], page: int = 1, per_page: int = ITEMS_PER_PAGE) -> PreviewPage:
    """Slice rows into a page; out-of-range pages are clamped."""
    total_pages = max(1, math.ceil(len(rows) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return PreviewPage(list(rows[start:start + per_page]), page, total_pages)
