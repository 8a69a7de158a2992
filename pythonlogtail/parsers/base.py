"""Base abstract class for all line parsers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..extractors import TimestampExtractor
from ..models import LogEvent, RawLine


class ParseError(Exception):
    """Raised when a line does not match the parser's format."""

    pass


@dataclass
class ParserOptions:
    """Per-parser configuration."""

    time_field: Optional[str] = None
    time_format: Optional[str] = None
    pattern: Optional[str] = None


class LineParser(ABC):
    """Base abstract class for all line parsers."""

    name = ""

    def __init__(self, options: Optional[ParserOptions] = None, nower=None):
        self.options = options or ParserOptions()
        self.extractor = TimestampExtractor(
            time_field=self.options.time_field,
            time_format=self.options.time_format,
            nower=nower,
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse_line(self, line: str) -> Dict[str, Any]:
        """Turn one raw line into a field mapping (implemented by subclasses)."""
        pass

    def get_timestamp(self, fields: Dict[str, Any]):
        return self.extractor.extract(fields)

    def parse(self, raw: RawLine) -> LogEvent:
        """Parse a raw line into an event stamped with its event time.

        Raises:
            ParseError: If the line is malformed for this format
        """
        fields = self.parse_line(raw.text)
        return LogEvent(
            fields=fields, timestamp=self.get_timestamp(fields), source=raw.source
        )
