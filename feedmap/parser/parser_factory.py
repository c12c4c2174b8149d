"""Factory for creating the appropriate feed parser based on file type."""
import logging
from pathlib import Path
from typing import Union

from feedmap.errors import ParseError
from feedmap.parser.feed_parser import FeedParser
from feedmap.parser.xml_parser import XmlFeedParser
from feedmap.schema.models import FeedData

logger = logging.getLogger(__name__)


class FeedParserFactory:
    """Factory for creating feed parsers."""

    # Map extensions to parser types
    PARSERS = {
        'xml': 'xml',
        'rss': 'xml',
        'atom': 'xml',
    }

    @staticmethod
    def create_parser(file_path: Union[str, Path]) -> FeedParser:
        """
        Create parser based on file extension.

        Args:
            file_path: Path to feed file

        Returns:
            FeedParser: Appropriate parser instance

        Raises:
            ValueError: If file format is not supported
        """
        file_path = str(file_path).lower()
        ext = file_path.split('.')[-1] if '.' in file_path else ''

        if FeedParserFactory.PARSERS.get(ext) == 'xml':
            return XmlFeedParser()

        raise ValueError(f"Unsupported feed format: {ext}")

    @staticmethod
    def parse_file(file_path: Union[str, Path]) -> FeedData:
        """
        Convenience method to read and parse a feed file in one call.

        Args:
            file_path: Path to feed file

        Returns:
            FeedData: Parsed feed

        Raises:
            ParseError: If the file cannot be read or parsed
        """
        parser = FeedParserFactory.create_parser(file_path)

        try:
            content = Path(file_path).read_bytes()
        except OSError as e:
            logger.debug(f"Cannot read {file_path}: {e}")
            raise ParseError("Could not read uploaded file", detail=str(e)) from e

        return parser.parse(content)
