"""Parsers for unstructured lines using regular expressions."""

import re
from typing import Any, Dict, Optional

from .base import LineParser, ParseError, ParserOptions

# nginx "combined" log_format
NGINX_COMBINED_PATTERN = (
    r'^(?P<remote_addr>\S+) - (?P<remote_user>\S+) \[(?P<time_local>[^\]]+)\] '
    r'"(?P<request>[^"]*)" (?P<status>\d{3}) (?P<body_bytes_sent>\d+|-) '
    r'"(?P<http_referer>[^"]*)" "(?P<http_user_agent>[^"]*)"'
)
NGINX_TIME_FIELD = "time_local"
NGINX_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"
NGINX_NUMERIC_FIELDS = ("status", "body_bytes_sent")


class RegexLineParser(LineParser):
    """Extracts the named groups of a regular expression as fields."""

    name = "regex"

    def __init__(self, options: Optional[ParserOptions] = None, nower=None):
        super().__init__(options, nower)
        if not self.options.pattern:
            raise ValueError("The regex parser requires a pattern")
        self.pattern = re.compile(self.options.pattern)
        if not self.pattern.groupindex:
            raise ValueError("The regex parser pattern needs named groups")

    def parse_line(self, line: str) -> Dict[str, Any]:
        match = self.pattern.search(line)
        if not match:
            raise ParseError("Line does not match pattern")
        return {
            key: value for key, value in match.groupdict().items() if value is not None
        }


class NginxLineParser(RegexLineParser):
    """Parses nginx access logs written in the combined format."""

    name = "nginx"

    def __init__(self, options: Optional[ParserOptions] = None, nower=None):
        options = options or ParserOptions()
        options = ParserOptions(
            time_field=options.time_field or NGINX_TIME_FIELD,
            time_format=options.time_format or NGINX_TIME_FORMAT,
            pattern=options.pattern or NGINX_COMBINED_PATTERN,
        )
        super().__init__(options, nower)

    def parse_line(self, line: str) -> Dict[str, Any]:
        fields = super().parse_line(line)

        for key in NGINX_NUMERIC_FIELDS:
            if key in fields and fields[key].isdigit():
                fields[key] = float(fields[key])

        parts = fields.get("request", "").split(" ")
        if len(parts) == 3:
            (
                fields["request_method"],
                fields["request_uri"],
                fields["request_protocol"],
            ) = parts
        return fields
