"""XML product feed parser."""
import logging
from typing import Dict, Iterator, List, Union

import lxml.etree as ET

from feedmap.errors import ParseError
from feedmap.parser.feed_parser import FeedParser
from feedmap.schema.models import FeedData, Record, SchemaEntry

logger = logging.getLogger(__name__)

ITEM_TAG = "item"


def create_safe_xml_parser(encoding: str = None) -> ET.XMLParser:
    """XML parser that never resolves entities or touches the network."""
    return ET.XMLParser(
        encoding=encoding,
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        remove_comments=True,
        remove_pis=True,
    )


def qualified_name(element: ET._Element) -> str:
    """Tag name as written in the document, including any prefix (``g:id``)."""
    local = ET.QName(element).localname
    return f"{element.prefix}:{local}" if element.prefix else local


def child_elements(element: ET._Element) -> Iterator[ET._Element]:
    """Direct element children, skipping entity references and other nodes."""
    for child in element:
        if isinstance(child.tag, str):
            yield child


def text_content(element: ET._Element) -> str:
    """All descendant text concatenated, like DOM ``textContent``."""
    return "".join(element.itertext())


def load_root(content: Union[str, bytes]) -> ET._Element:
    """
    Parse a document into its root element.

    String input is always decoded as UTF-8, ignoring the encoding named in
    the XML declaration; bytes honour the declaration.

    Raises:
        ParseError: If the document is not well-formed
    """
    if isinstance(content, str):
        data = content.encode("utf-8")
        parser = create_safe_xml_parser(encoding="utf-8")
    else:
        data = content
        parser = create_safe_xml_parser()

    try:
        root = ET.fromstring(data, parser=parser)
    except (ET.XMLSyntaxError, ValueError) as e:
        logger.debug(f"XML syntax error: {e}")
        raise ParseError("Could not parse uploaded file: not well-formed XML", detail=str(e)) from e

    if root is None:
        raise ParseError("Could not parse uploaded file: empty document")

    return root


def decode_document(content: Union[str, bytes]) -> str:
    """
    Feed as text. Bytes are decoded with the encoding the document declares.

    Raises:
        ParseError: If the document is not well-formed
    """
    root = load_root(content)
    if isinstance(content, str):
        return content

    encoding = root.getroottree().docinfo.encoding or "utf-8"
    try:
        text = content.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not parse uploaded file: cannot decode as {encoding}", detail=str(e)) from e

    return text.lstrip("\ufeff")


def find_items(root: ET._Element) -> List[ET._Element]:
    """Every ``item`` element at any depth, root included, in document order."""
    return [el for el in root.iter(ET.Element) if qualified_name(el) == ITEM_TAG]


def count_items(content: Union[str, bytes]) -> int:
    """Number of ``item`` elements in a feed."""
    return len(find_items(load_root(content)))


class XmlFeedParser(FeedParser):
    """Parse an XML feed made of repeated ``<item>`` elements."""

    def parse(self, content: Union[str, bytes]) -> FeedData:
        """
        Parse XML content into flat records and a first-sighting schema.

        Children with empty text are left out of their record, so an empty
        field cannot be told apart from an absent one after parsing.

        Args:
            content: XML document as text or bytes

        Returns:
            FeedData: Records in document order, schema and prefixed namespaces

        Raises:
            ParseError: If the document is not well-formed XML
        """
        root = load_root(content)
        items = find_items(root)

        if not items:
            logger.info("No <item> elements found in feed")
            return FeedData()

        records: List[Record] = []
        schema: Dict[str, SchemaEntry] = {}
        namespaces = {prefix: uri for prefix, uri in root.nsmap.items() if prefix}

        for item in items:
            record: Record = {}

            for child in child_elements(item):
                name = qualified_name(child)

                if name not in schema:
                    schema[name] = SchemaEntry(
                        name=name,
                        required="required" in child.attrib,
                        help_text=child.get("description") or None,
                    )

                if child.prefix and child.prefix not in namespaces:
                    namespaces[child.prefix] = child.nsmap[child.prefix]

                text = text_content(child)
                if text:
                    record[name] = text

            records.append(record)

        logger.info(f"Parsed {len(records)} items with {len(schema)} distinct fields")

        return FeedData(
            records=records,
            schema=list(schema.values()),
            namespaces=namespaces,
        )
