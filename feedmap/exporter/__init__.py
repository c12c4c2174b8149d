"""Feed and mapping exporters."""

from .xml_exporter import XmlExporter, generate_xml, escape_text, suggested_filename
from .json_exporter import JsonMappingExporter

__all__ = [
    "XmlExporter",
    "JsonMappingExporter",
    "generate_xml",
    "escape_text",
    "suggested_filename",
]
