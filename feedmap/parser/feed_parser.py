"""Abstract base class for feed parsers."""
from abc import ABC, abstractmethod
from typing import Union

from feedmap.schema.models import FeedData


class FeedParser(ABC):
    """Abstract base class for product feed parsers."""

    @abstractmethod
    def parse(self, content: Union[str, bytes]) -> FeedData:
        """
        Parse feed content and return records plus schema.

        Args:
            content: Raw feed document

        Returns:
            FeedData: Parsed records and inferred schema

        Raises:
            ParseError: If the document cannot be parsed
        """
        pass

    @staticmethod
    def detect_format(file_path: str) -> str:
        """Detect file format from extension."""
        ext = file_path.lower().split('.')[-1]
        return ext
