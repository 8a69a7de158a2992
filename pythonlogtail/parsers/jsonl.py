"""Parser for lines holding one JSON object each."""

import json
from typing import Any, Dict

from .base import LineParser, ParseError


def _flatten(value: Any) -> Any:
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    # Nested arrays and objects are kept as their compact JSON text
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


class JSONLineParser(LineParser):
    """Parses JSON object lines into flat records."""

    name = "json"

    def parse_line(self, line: str) -> Dict[str, Any]:
        try:
            data = json.loads(line, parse_constant=_reject_constant)
        except ValueError as e:
            raise ParseError(f"Invalid JSON: {e}")

        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

        try:
            return {key: _flatten(value) for key, value in data.items()}
        except OverflowError as e:
            raise ParseError(f"Number out of range: {e}")
