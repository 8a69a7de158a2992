"""Field transformations and sampling applied to parsed events."""

import hashlib
import random
import threading
import time
from typing import Any, Dict, Iterable, Optional

from .models import LogEvent


def _text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def scrub_value(value: Any) -> str:
    """Return the SHA-256 hex digest of a field value's text."""
    return hashlib.sha256(_text(value).encode("utf-8")).hexdigest()


class Transformer:
    """Scrubs, drops and adds fields, then decides whether an event is sent."""

    def __init__(
        self,
        drop_fields: Iterable[str] = (),
        scrub_fields: Iterable[str] = (),
        add_fields: Optional[Dict[str, str]] = None,
        sample_rate: int = 1,
        rng: Optional[random.Random] = None,
    ):
        self.drop_fields = list(drop_fields)
        self.scrub_fields = list(scrub_fields)
        self.add_fields = dict(add_fields or {})
        self.sample_rate = sample_rate
        self.rng = rng or random.Random(time.time_ns())
        self._rng_lock = threading.Lock()

    def transform(self, event: LogEvent) -> LogEvent:
        """Apply scrub, drop and add to the event's fields, in that order."""
        fields = event.fields
        for name in self.scrub_fields:
            if name in fields:
                fields[name] = scrub_value(fields[name])
        for name in self.drop_fields:
            fields.pop(name, None)
        fields.update(self.add_fields)
        return event

    def sample(self, event: LogEvent) -> bool:
        """Keep 1 in sample_rate events, marking kept ones with the rate."""
        if self.sample_rate > 1:
            with self._rng_lock:
                keep = self.rng.randrange(self.sample_rate) == 0
            if not keep:
                return False
        event.sample_rate = self.sample_rate
        return True

    def process(self, event: LogEvent) -> Optional[LogEvent]:
        """Transform an event, returning None when sampling discards it."""
        self.transform(event)
        if not self.sample(event):
            return None
        return event
