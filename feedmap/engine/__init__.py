"""
Mapping Engine

Applies a mapping set to a record set:
- FieldBuilder: single target field value
- evaluate_condition: OnlyIf predicates
- MappingEngine / apply_mappings: whole record sets
"""

from .conditions import evaluate_condition
from .field_builder import FieldBuilder
from .mapping_engine import MappingEngine, apply_mappings

__all__ = [
    "evaluate_condition",
    "FieldBuilder",
    "MappingEngine",
    "apply_mappings",
]
