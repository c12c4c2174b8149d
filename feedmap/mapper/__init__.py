"""
Mapping model - how each target field is derived from a source record.

Kinds:
- Rename: copy a source field
- Static: constant value
- Combine: join several source fields with a separator
- Empty: always empty

Any kind may carry an OnlyIf condition.
"""

from .mapping import (
    AllRecords,
    Combine,
    Empty,
    Mapping,
    MappingSet,
    OnlyIf,
    Operator,
    Rename,
    Static,
)
from .builder import MappingBuilder
from .session import MappingSession

__all__ = [
    "AllRecords",
    "Combine",
    "Empty",
    "Mapping",
    "MappingSet",
    "OnlyIf",
    "Operator",
    "Rename",
    "Static",
    "MappingBuilder",
    "MappingSession",
]
