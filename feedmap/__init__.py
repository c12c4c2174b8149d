"""
feedmap - map product feed fields onto ad-channel feed formats.

Pipeline:
- Feed Parser: XML feed -> records + schema
- Mapping Engine: records + mapping set -> derived records
- Feed Serializer: derived records (+ channel schema) -> XML
"""

from .errors import EngineComputeFailure, FeedMapError, MappingError, ParseError, StoreError
from .engine import apply_mappings
from .exporter import generate_xml
from .parser import XmlFeedParser

__version__ = "0.1.0"

__all__ = [
    "FeedMapError",
    "ParseError",
    "MappingError",
    "EngineComputeFailure",
    "StoreError",
    "XmlFeedParser",
    "apply_mappings",
    "generate_xml",
]
