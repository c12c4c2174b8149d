"""XML feed serializer and file exporter."""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from feedmap.schema.models import ChannelField, Record

logger = logging.getLogger(__name__)

ROOT_TAG = "items"
ITEM_TAG = "item"

# Declared for prefixed fields the source feed did not declare itself
KNOWN_NAMESPACES = {
    "g": "http://base.google.com/ns/1.0",
}

# "&" must be replaced first
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_text(value: str) -> str:
    """Replace XML metacharacters with their entities."""
    if value is None:
        return ""

    value = str(value)
    for char, entity in _ESCAPES:
        value = value.replace(char, entity)
    return value


def _element(name: str, value: str) -> str:
    return f"<{name}>{escape_text(value)}</{name}>"


def _item(children: List[str]) -> str:
    if not children:
        return f"<{ITEM_TAG}/>"
    return f"<{ITEM_TAG}>{''.join(children)}</{ITEM_TAG}>"


def generate_xml(
    records: Sequence[Record],
    schema: Optional[Sequence[ChannelField]] = None,
    namespaces: Optional[Dict[str, str]] = None,
) -> str:
    """
    Serialize records as an ``<items>`` document, one ``<item>`` per record.

    Without a schema every key of every record is written in the record's
    own order. With a channel schema, fields follow the schema order; a
    field is written when the record has a non-empty value for it or when
    the field is required (then possibly as an empty element). Records are
    never dropped, even when no field survives.

    Args:
        records: Records in output order
        schema: Optional channel field list
        namespaces: Prefix -> URI declarations for the root element. A
            prefix used by a field but missing here is still declared, from
            KNOWN_NAMESPACES or as ``urn:feedmap:<prefix>``.

    Returns:
        str: The XML document
    """
    items = []
    prefixes = set()

    for record in records:
        if schema is None:
            fields = list(record.items())
        else:
            fields = []
            for channel_field in schema:
                value = record.get(channel_field.name) or ""
                if value or not channel_field.optional:
                    fields.append((channel_field.name, value))

        for name, _ in fields:
            if ":" in name:
                prefixes.add(name.split(":", 1)[0])

        items.append(_item([_element(name, value) for name, value in fields]))

    declared = dict(namespaces or {})
    for prefix in prefixes - set(declared) - {"xml"}:
        declared[prefix] = KNOWN_NAMESPACES.get(prefix, f"urn:feedmap:{prefix}")
        logger.debug(f"Declaring undeclared namespace prefix {prefix} as {declared[prefix]}")

    declarations = "".join(
        f' xmlns:{prefix}="{escape_text(uri)}"'
        for prefix, uri in sorted(declared.items())
    )

    return f"<{ROOT_TAG}{declarations}>{''.join(items)}</{ROOT_TAG}>"


def suggested_filename(shop_name: str, channel_id: str) -> str:
    """Download name for a channel export: ``<shopName>-<channelId>.xml``."""
    return f"{shop_name}-{channel_id}.xml"


class XmlExporter:
    """Export mapped records to an XML file."""

    def export(
        self,
        output_dir: Path,
        shop_name: str,
        channel_id: str,
        records: Sequence[Record],
        schema: Optional[Sequence[ChannelField]] = None,
        namespaces: Optional[Dict[str, str]] = None,
    ) -> Path:
        """Write the XML document and return the file path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        output_file = output_dir / suggested_filename(shop_name, channel_id)
        document = generate_xml(records, schema, namespaces)

        with open(output_file, "w", encoding="utf-8") as f:
            f.write(document)

        logger.info(f"Exported {len(records)} items to {output_file}")
        return output_file
