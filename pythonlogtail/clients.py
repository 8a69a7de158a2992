"""Client for sending events to Honeycomb using simple POST requests."""

import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

import requests

from .models import LogEvent
from .utils import get_version

DEFAULT_API_HOST = "https://api.honeycomb.io/"
REQUEST_TIMEOUT = 10


class EventSink(ABC):
    """Destination of finished events."""

    @abstractmethod
    def send(self, event: LogEvent) -> bool:
        """Deliver one event, returning False if it could not be delivered."""
        pass

    def close(self) -> None:
        pass


class HoneycombClient(EventSink):
    """Client for sending events to Honeycomb."""

    def __init__(self, write_key: str, dataset: str, api_host: str = None):
        """Initialize the Honeycomb client.

        Args:
            write_key: Team write key
            dataset: Name of the dataset events are sent to
            api_host: URL of the Honeycomb API
        """
        self.write_key = write_key
        self.dataset = dataset
        self.api_host = api_host or DEFAULT_API_HOST
        self.events_url = (
            f"{self.api_host.rstrip('/')}/1/events/{quote(self.dataset, safe='')}"
        )
        self.user_agent = f"pythonlogtail/{get_version()}"
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.info(f"Initialized Honeycomb client with URL: {self.events_url}")

    def send(self, event: LogEvent) -> bool:
        """Send an event to Honeycomb.

        Args:
            event: The event to send, its sample rate goes in a header

        Returns:
            bool: True if the event was sent successfully, False otherwise
        """
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
            "X-Honeycomb-Team": self.write_key,
            "X-Honeycomb-Samplerate": str(event.sample_rate),
            "X-Honeycomb-Event-Time": event.timestamp.isoformat(),
        }
        try:
            response = requests.post(
                self.events_url,
                data=event.to_json().encode("utf-8"),
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return True

        except requests.exceptions.RequestException as e:
            self.logger.error(f"Failed to send event to Honeycomb: {str(e)}")
            return False
