"""Models describing parsed feeds and channel schemas."""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

# A flat feed record: field name -> text value
Record = Dict[str, str]


@dataclass
class SchemaEntry:
    """A field discovered in the source feed."""

    name: str
    required: bool = False
    help_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "required": self.required,
            "help_text": self.help_text,
        }


@dataclass(frozen=True)
class ChannelField:
    """A field expected by a target channel's output schema."""

    name: str
    optional: bool = False

    @property
    def required(self) -> bool:
        return not self.optional


@dataclass
class FeedData:
    """Parsed feed: records in document order plus the inferred schema."""

    records: List[Record] = field(default_factory=list)
    schema: List[SchemaEntry] = field(default_factory=list)
    namespaces: Dict[str, str] = field(default_factory=dict)

    def get_entry(self, name: str) -> Optional[SchemaEntry]:
        """Return schema entry by name."""
        for entry in self.schema:
            if entry.name == name:
                return entry
        return None

    def field_names(self) -> List[str]:
        """Return every field name present in any record, first-seen order."""
        seen: Dict[str, None] = {}
        for record in self.records:
            for key in record:
                seen.setdefault(key, None)
        return list(seen)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_records": len(self.records),
            "schema": [entry.to_dict() for entry in self.schema],
            "namespaces": dict(self.namespaces),
        }
