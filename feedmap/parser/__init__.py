"""Feed parsers."""

from .feed_parser import FeedParser
from .xml_parser import XmlFeedParser, count_items
from .parser_factory import FeedParserFactory

__all__ = ["FeedParser", "XmlFeedParser", "FeedParserFactory", "count_items"]
