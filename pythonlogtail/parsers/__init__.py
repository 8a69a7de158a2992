"""Line parser implementations for different log formats."""

from typing import Optional

from .base import LineParser, ParseError, ParserOptions
from .jsonl import JSONLineParser
from .regex import RegexLineParser, NginxLineParser

# Dictionary of available parser types
PARSER_TYPES = {
    JSONLineParser.name: JSONLineParser,
    RegexLineParser.name: RegexLineParser,
    NginxLineParser.name: NginxLineParser,
}


def create_parser(
    name: str, options: Optional[ParserOptions] = None, nower=None
) -> LineParser:
    """Create the parser registered under a name."""
    parser_cls = PARSER_TYPES.get(name)
    if not parser_cls:
        raise ValueError(
            f"Unsupported parser: {name} (available: {', '.join(sorted(PARSER_TYPES))})"
        )
    return parser_cls(options, nower)


__all__ = [
    "LineParser",
    "ParseError",
    "ParserOptions",
    "JSONLineParser",
    "RegexLineParser",
    "NginxLineParser",
    "PARSER_TYPES",
    "create_parser",
]
