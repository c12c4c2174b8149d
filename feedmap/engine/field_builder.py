"""
Field Builder - computes the value of a single target field

Supports:
- Rename (source field -> target field)
- Static values
- Combine (several source fields joined by a separator)
- Empty fields
- OnlyIf conditions on any of the above
"""

from typing import Optional, Tuple

from feedmap.engine.conditions import evaluate_condition
from feedmap.errors import EngineComputeFailure
from feedmap.mapper.mapping import Combine, Empty, Mapping, Rename, Static
from feedmap.schema.models import Record


class FieldBuilder:
    """Builds individual target fields from a source record"""

    def build_field(self, mapping: Mapping, record: Record) -> Tuple[str, Optional[str]]:
        """
        Build a single target field

        Args:
            mapping: Field mapping
            record: Source record

        Returns:
            Tuple of (target_field_name, value); value is None when the
            mapping's condition excludes this record
        """
        if not evaluate_condition(mapping.condition, record):
            return mapping.target_field, None

        return mapping.target_field, self.compute_value(mapping, record)

    @staticmethod
    def compute_value(mapping: Mapping, record: Record) -> str:
        """Value of a mapping for a record, ignoring its condition"""
        kind = mapping.kind

        if isinstance(kind, Rename):
            return record.get(kind.source_field, "")

        elif isinstance(kind, Static):
            return kind.value

        elif isinstance(kind, Combine):
            # Missing fields keep their (empty) slot: ["A", "", "C"] -> "A--C"
            return kind.separator.join(record.get(name, "") for name in kind.fields)

        elif isinstance(kind, Empty):
            return ""

        raise EngineComputeFailure(f"Unknown mapping kind for {mapping.target_field}: {kind!r}")
