"""Field mapping model."""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import lxml.etree as ET

from feedmap.errors import MappingError

# Anything outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def _require_name(value: Any, what: str) -> None:
    if not isinstance(value, str) or not value:
        raise MappingError(f"{what} must be a non-empty string, got {value!r}")


def _require_str(value: Any, what: str) -> None:
    if not isinstance(value, str):
        raise MappingError(f"{what} must be a string, got {value!r}")


def _require_xml_text(value: Any, what: str) -> None:
    _require_str(value, what)
    if _INVALID_XML_CHARS.search(value):
        raise MappingError(f"{what} contains characters not allowed in XML: {value!r}")


def _require_xml_name(value: Any, what: str) -> None:
    """Element name, optionally prefixed: ``title`` or ``g:id``."""
    _require_name(value, what)

    parts = value.split(":")
    invalid = "{" in value or "}" in value or len(parts) > 2 or parts[0] == "xmlns"
    if not invalid:
        try:
            for part in parts:
                ET.QName(part)
        except ValueError:
            invalid = True

    if invalid:
        raise MappingError(f"{what} must be a valid XML element name, got {value!r}")


class Operator(Enum):
    """Comparison used by an OnlyIf condition."""

    EQUAL_TO = "equal_to"
    NOT_EQUAL_TO = "not_equal_to"
    INCLUDES = "includes"
    EXCLUDES = "excludes"

    @property
    def label(self) -> str:
        return _OPERATOR_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "Operator":
        """Accept an Operator, its value, its name or its UI label."""
        if isinstance(value, Operator):
            return value
        if isinstance(value, str):
            key = value.strip()
            for op in cls:
                if key in (op.value, op.name, op.label):
                    return op
        raise MappingError(f"Unknown condition operator: {value!r}")


_OPERATOR_LABELS = {
    Operator.EQUAL_TO: "is equal to",
    Operator.NOT_EQUAL_TO: "is not equal to",
    Operator.INCLUDES: "includes",
    Operator.EXCLUDES: "doesn't include",
}


# Mapping kinds


@dataclass(frozen=True)
class Rename:
    """Copy a source field verbatim."""

    source_field: str

    def __post_init__(self):
        _require_name(self.source_field, "Rename source_field")


@dataclass(frozen=True)
class Static:
    """Constant value, ignores the record."""

    value: str

    def __post_init__(self):
        _require_xml_text(self.value, "Static value")


@dataclass(frozen=True)
class Combine:
    """Join several source fields with a separator.

    Missing source values contribute an empty segment, so separator count
    and position are always preserved.
    """

    fields: Tuple[str, ...] = ()
    separator: str = " "

    def __post_init__(self):
        if isinstance(self.fields, str) or not isinstance(self.fields, Iterable):
            raise MappingError(f"Combine fields must be a sequence of names, got {self.fields!r}")
        fields = tuple(self.fields)
        for name in fields:
            _require_name(name, "Combine field")
        _require_xml_text(self.separator, "Combine separator")
        object.__setattr__(self, "fields", fields)


@dataclass(frozen=True)
class Empty:
    """Always the empty string."""


MappingKind = Union[Rename, Static, Combine, Empty]

KIND_NAMES = {Rename: "rename", Static: "static", Combine: "combine", Empty: "empty"}


# Conditions


@dataclass(frozen=True)
class AllRecords:
    """Mapping applies to every record."""


@dataclass(frozen=True)
class OnlyIf:
    """Mapping applies only where ``record[field] <operator> value`` holds."""

    field: str
    operator: Operator
    value: str = ""

    def __post_init__(self):
        _require_name(self.field, "OnlyIf field")
        object.__setattr__(self, "operator", Operator.parse(self.operator))
        _require_str(self.value, "OnlyIf value")


Condition = Union[AllRecords, OnlyIf]


@dataclass(frozen=True)
class Mapping:
    """How one target field is derived from a source record."""

    target_field: str
    kind: MappingKind = field(default_factory=Empty)
    condition: Condition = field(default_factory=AllRecords)

    def __post_init__(self):
        _require_xml_name(self.target_field, "target_field")
        if type(self.kind) not in KIND_NAMES:
            raise MappingError(f"Unknown mapping kind for {self.target_field}: {self.kind!r}")
        if not isinstance(self.condition, (AllRecords, OnlyIf)):
            raise MappingError(f"Unknown condition for {self.target_field}: {self.condition!r}")

    @property
    def kind_name(self) -> str:
        return KIND_NAMES[type(self.kind)]

    def source_fields(self) -> List[str]:
        """Source field names this mapping reads, condition included."""
        names: List[str] = []
        if isinstance(self.kind, Rename):
            names.append(self.kind.source_field)
        elif isinstance(self.kind, Combine):
            names.extend(self.kind.fields)
        if isinstance(self.condition, OnlyIf):
            names.append(self.condition.field)
        return names

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a flat dictionary."""
        data: Dict[str, Any] = {
            "target_field": self.target_field,
            "type": self.kind_name,
        }

        if isinstance(self.kind, Rename):
            data["source_field"] = self.kind.source_field
        elif isinstance(self.kind, Static):
            data["value"] = self.kind.value
        elif isinstance(self.kind, Combine):
            data["fields"] = list(self.kind.fields)
            data["separator"] = self.kind.separator

        if isinstance(self.condition, OnlyIf):
            data["condition"] = "only_if"
            data["only_if_field"] = self.condition.field
            data["only_if_operator"] = self.condition.operator.value
            data["only_if_value"] = self.condition.value
        else:
            data["condition"] = "all"

        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mapping":
        """
        Build a Mapping from its dictionary form.

        Raises:
            MappingError: If the dictionary does not describe a valid mapping
        """
        if not isinstance(data, dict):
            raise MappingError(f"Mapping must be an object, got {data!r}")

        kind_name = data.get("type", "empty")
        if kind_name == "rename":
            kind = Rename(data.get("source_field"))
        elif kind_name == "static":
            kind = Static(data.get("value", ""))
        elif kind_name == "combine":
            kind = Combine(data.get("fields") or (), data.get("separator", " "))
        elif kind_name == "empty":
            kind = Empty()
        else:
            raise MappingError(f"Unknown mapping type: {kind_name!r}")

        condition_name = data.get("condition", "all")
        if condition_name in ("only_if", "onlyIf"):
            condition = OnlyIf(
                data.get("only_if_field"),
                data.get("only_if_operator"),
                data.get("only_if_value", ""),
            )
        elif condition_name in ("all", None):
            condition = AllRecords()
        else:
            raise MappingError(f"Unknown condition: {condition_name!r}")

        return cls(data.get("target_field"), kind, condition)


class MappingSet:
    """Mappings ordered by insertion and unique by target field.

    Putting a mapping for a target that already has one replaces it in place.
    """

    def __init__(self, mappings: Optional[Iterable[Mapping]] = None):
        self._mappings: Dict[str, Mapping] = {}
        for mapping in mappings or ():
            self.put(mapping)

    def put(self, mapping: Mapping) -> None:
        """Add or replace the mapping for ``mapping.target_field``."""
        if not isinstance(mapping, Mapping):
            raise MappingError(f"Expected a Mapping, got {mapping!r}")
        self._mappings[mapping.target_field] = mapping

    def remove(self, target_field: str) -> Optional[Mapping]:
        """Remove and return the mapping for a target field, if any."""
        return self._mappings.pop(target_field, None)

    def get(self, target_field: str) -> Optional[Mapping]:
        return self._mappings.get(target_field)

    def target_fields(self) -> List[str]:
        return list(self._mappings)

    def copy(self) -> "MappingSet":
        return MappingSet(self._mappings.values())

    def to_list(self) -> List[Dict[str, Any]]:
        """Convert to a list of mapping dictionaries."""
        return [m.to_dict() for m in self._mappings.values()]

    @classmethod
    def from_list(cls, items: Iterable[Dict[str, Any]]) -> "MappingSet":
        return cls(Mapping.from_dict(item) for item in items)

    def __contains__(self, target_field: object) -> bool:
        return target_field in self._mappings

    def __iter__(self) -> Iterator[Mapping]:
        return iter(list(self._mappings.values()))

    def __len__(self) -> int:
        return len(self._mappings)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MappingSet):
            return list(self._mappings.items()) == list(other._mappings.items())
        return NotImplemented

    def __repr__(self) -> str:
        return f"MappingSet({list(self._mappings.values())!r})"
