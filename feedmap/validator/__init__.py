"""Mapping validation."""

from .mapping_validator import MappingValidator

__all__ = ["MappingValidator"]
