"""Data models for log processing."""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

STDIN_MARKER = "-"

# Read modes
READ_FROM_START = "start"
READ_FROM_END = "end"
READ_FROM_STATE = "resume"
READ_MODES = (READ_FROM_START, READ_FROM_END, READ_FROM_STATE)
READ_MODE_ALIASES = {"last": READ_FROM_STATE}


@dataclass(frozen=True)
class LogSource:
    """One log file (after glob expansion) or the standard input stream."""

    path: str
    inode: Optional[int] = None

    @property
    def is_stdin(self) -> bool:
        return self.path == STDIN_MARKER

    @property
    def name(self) -> str:
        return "stdin" if self.is_stdin else self.path


@dataclass
class TailState:
    """Persisted read position of a single log file."""

    inode: int = 0
    offset: int = 0

    def matches(self, inode: int) -> bool:
        return self.inode == inode

    def to_json(self) -> str:
        return json.dumps({"INode": self.inode, "Offset": self.offset})

    @classmethod
    def from_json(cls, text: str) -> "TailState":
        """Build a state from its JSON form, raising ValueError if malformed."""
        try:
            data = json.loads(text)
            state = cls(inode=int(data["INode"]), offset=int(data["Offset"]))
        except (TypeError, KeyError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid tail state: {e}")

        if state.inode < 0 or state.offset < 0:
            raise ValueError(f"Invalid tail state: negative value in {text.strip()}")
        return state


@dataclass
class RawLine:
    """A single line read from a log source, without its terminator."""

    text: str
    source: str


@dataclass
class LogEvent:
    """Represents a structured event with its fields, event time and sample rate."""

    fields: Dict[str, Any]
    timestamp: datetime
    source: str = ""
    sample_rate: int = 1

    def to_json(self) -> str:
        """Serialize the fields as compact JSON with sorted keys."""
        return json.dumps(self.fields, separators=(",", ":"), sort_keys=True)
