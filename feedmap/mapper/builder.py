"""Incremental construction of a single Mapping."""
from typing import List, Optional

from feedmap.errors import MappingError
from feedmap.mapper.mapping import (
    AllRecords,
    Combine,
    Empty,
    Mapping,
    OnlyIf,
    Operator,
    Rename,
    Static,
)


class MappingBuilder:
    """
    Collects one-field-at-a-time edits for a target field.

    Edits are freely reordered and overwritten; nothing is validated until
    build() produces an immutable Mapping.

    Usage:
    ```python
    mapping = (
        MappingBuilder("title")
        .combine(["brand", "name"], separator=" - ")
        .only_if("status", "is equal to", "active")
        .build()
    )
    ```
    """

    def __init__(self, target_field: str, default_separator: str = " "):
        self.target_field = target_field
        self.kind = "empty"
        self.source_field: Optional[str] = None
        self.static_value = ""
        self.fields: List[str] = []
        self.separator = default_separator
        self.condition = "all"
        self.only_if_field: Optional[str] = None
        self.only_if_operator: Optional[str] = None
        self.only_if_value = ""

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "MappingBuilder":
        """Start from an existing mapping."""
        builder = cls(mapping.target_field)
        kind = mapping.kind

        if isinstance(kind, Rename):
            builder.rename(kind.source_field)
        elif isinstance(kind, Static):
            builder.static(kind.value)
        elif isinstance(kind, Combine):
            builder.combine(kind.fields, kind.separator)

        if isinstance(mapping.condition, OnlyIf):
            builder.only_if(
                mapping.condition.field,
                mapping.condition.operator,
                mapping.condition.value,
            )

        return builder

    def rename(self, source_field: str) -> "MappingBuilder":
        self.kind = "rename"
        self.source_field = source_field
        return self

    def static(self, value: str) -> "MappingBuilder":
        self.kind = "static"
        self.static_value = value
        return self

    def combine(self, fields=None, separator: Optional[str] = None) -> "MappingBuilder":
        self.kind = "combine"
        if fields is not None:
            self.fields = list(fields)
        if separator is not None:
            self.separator = separator
        return self

    def add_field(self, name: str) -> "MappingBuilder":
        """Append a field to the combine list."""
        self.kind = "combine"
        self.fields.append(name)
        return self

    def remove_field(self, name: str) -> "MappingBuilder":
        """Drop the first occurrence of a field from the combine list."""
        if name in self.fields:
            self.fields.remove(name)
        return self

    def set_separator(self, separator: str) -> "MappingBuilder":
        self.separator = separator
        return self

    def empty(self) -> "MappingBuilder":
        self.kind = "empty"
        return self

    def only_if(self, field: str, operator, value: str = "") -> "MappingBuilder":
        self.condition = "only_if"
        self.only_if_field = field
        self.only_if_operator = operator
        self.only_if_value = value
        return self

    def all_records(self) -> "MappingBuilder":
        self.condition = "all"
        return self

    def build(self) -> Mapping:
        """
        Produce the Mapping described by the current edits.

        Raises:
            MappingError: If the edits do not yet describe a valid mapping
        """
        if self.kind == "rename":
            kind = Rename(self.source_field)
        elif self.kind == "static":
            kind = Static(self.static_value)
        elif self.kind == "combine":
            if not self.fields:
                raise MappingError(f"Combine mapping for {self.target_field} has no fields")
            kind = Combine(self.fields, self.separator)
        else:
            kind = Empty()

        if self.condition == "only_if":
            if not self.only_if_field or self.only_if_operator is None:
                raise MappingError(f"Condition for {self.target_field} is incomplete")
            condition = OnlyIf(
                self.only_if_field,
                Operator.parse(self.only_if_operator),
                self.only_if_value,
            )
        else:
            condition = AllRecords()

        return Mapping(self.target_field, kind, condition)
