"""Run configuration and its startup validation."""

import glob
import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from .clients import DEFAULT_API_HOST
from .dispatch import DEFAULT_POOL_SIZE
from .models import (
    READ_FROM_END,
    READ_FROM_START,
    READ_MODE_ALIASES,
    READ_MODES,
    STDIN_MARKER,
)
from .parsers import ParserOptions, create_parser
from .tailers.file import DEFAULT_EVERY_N, DEFAULT_POLL_INTERVAL

DEFAULT_STATUS_INTERVAL = 60


class ConfigurationError(Exception):
    """Custom exception for configuration-related errors."""

    pass


def parse_add_fields(specs: List[str]) -> Dict[str, str]:
    """Turn `key=value` specs into the fields added to every event."""
    added = {}
    for spec in specs:
        key, sep, value = spec.partition("=")
        if not sep or not key:
            raise ConfigurationError(
                f"Invalid add field '{spec}', expected key=value"
            )
        added[key] = value
    return added


@dataclass
class TailOptions:
    """How log sources are read."""

    read_from: str = READ_FROM_START
    stop: bool = False
    state_file: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    every_n: int = DEFAULT_EVERY_N


@dataclass
class Options:
    """Everything a pipeline run needs."""

    parser_name: str = ""
    log_files: List[str] = field(default_factory=list)
    write_key: str = ""
    dataset: str = ""
    api_host: str = DEFAULT_API_HOST
    sample_rate: int = 1
    pool_size: int = DEFAULT_POOL_SIZE
    status_interval: float = DEFAULT_STATUS_INTERVAL
    scrub_fields: List[str] = field(default_factory=list)
    drop_fields: List[str] = field(default_factory=list)
    add_fields: List[str] = field(default_factory=list)
    tail: TailOptions = field(default_factory=TailOptions)
    parser_options: ParserOptions = field(default_factory=ParserOptions)
    debug: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Options":
        """Build options from a decoded configuration file."""
        data = dict(data)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )

        try:
            tail = TailOptions(**data.pop("tail", {}))
            parser_options = ParserOptions(**data.pop("parser_options", {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid nested configuration: {e}")

        if isinstance(data.get("log_files"), str):
            data["log_files"] = [data["log_files"]]

        return cls(tail=tail, parser_options=parser_options, **data)

    @property
    def read_from(self) -> str:
        return READ_MODE_ALIASES.get(self.tail.read_from, self.tail.read_from)

    def validate(self) -> None:
        """Reject invalid option combinations before any tailing begins.

        Raises:
            ConfigurationError: On the first problem found
        """
        if not self.parser_name:
            raise ConfigurationError("parser required")
        try:
            create_parser(self.parser_name, self.parser_options)
        except (ValueError, re.error) as e:
            raise ConfigurationError(f"Invalid parser configuration: {e}")

        if not self.write_key or self.write_key == "NULL":
            raise ConfigurationError("write key required")
        if not self.log_files:
            raise ConfigurationError(f"log file name or '{STDIN_MARKER}' required")
        if not self.dataset:
            raise ConfigurationError("dataset name required")
        if self.read_from not in READ_MODES:
            raise ConfigurationError(
                f"Unknown read mode: {self.tail.read_from} "
                f"(expected one of {', '.join(READ_MODES)})"
            )
        if self.read_from == READ_FROM_END and self.tail.stop:
            raise ConfigurationError(
                "Reading from the end and stopping when we get there "
                "would process zero lines"
            )
        if self.tail.state_file:
            if len(self.log_files) > 1:
                raise ConfigurationError(
                    "State file can not be set when tailing from multiple files"
                )
            if len(glob.glob(self.log_files[0])) > 1:
                raise ConfigurationError(
                    "State file can not be set when tailing from multiple files"
                )
        if self.sample_rate < 1:
            raise ConfigurationError("sample rate must be at least 1")
        if self.pool_size < 1:
            raise ConfigurationError("pool size must be at least 1")
        if self.tail.poll_interval <= 0:
            raise ConfigurationError("poll interval must be positive")

        parse_add_fields(self.add_fields)
