"""Utility functions and helper classes for log tailing."""

from typing import Optional
import os
import threading
import logging

from .models import TailState

STATE_SUFFIX = ".leash.state"


class StateStoreError(Exception):
    """Base exception for state store operations."""

    pass


class DirectoryError(Exception):
    """Exception raised when directory operations fail."""

    pass


def ensure_dir(directory: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: Path to the directory to create

    Raises:
        DirectoryError: If directory creation fails
    """
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise DirectoryError(f"Failed to create directory {directory}: {e}")


def default_state_path(log_path: str) -> str:
    """State file used when resuming a log file without a configured one."""
    return os.path.splitext(log_path)[0] + STATE_SUFFIX


def get_version() -> str:
    """Build identifier from the environment, or "dev"."""
    return os.environ.get("BUILD_ID") or "dev"


class StateStore:
    """Thread-safe store for the tail state of a single log file."""

    def __init__(self, path: str):
        """
        Initialize the state store.

        Args:
            path: Path to the JSON state file
        """
        self.path = path
        self.lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def read(self) -> Optional[TailState]:
        """
        Read the stored tail state.

        Returns:
            TailState: The stored state, or None if missing or unreadable
        """
        try:
            with self.lock:
                with open(self.path, "r", encoding="utf-8") as f:
                    return TailState.from_json(f.read())
        except FileNotFoundError:
            self.logger.debug(f"No state file at {self.path}")
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
        return None

    def write(self, state: TailState) -> None:
        """
        Write the tail state, replacing the previous file atomically.

        Args:
            state: State to store

        Raises:
            StateStoreError: If write operation fails
        """
        directory = os.path.dirname(self.path)
        tmp_path = f"{self.path}.tmp"
        try:
            if directory:
                ensure_dir(directory)
            with self.lock:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(state.to_json())
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
        except (OSError, DirectoryError) as e:
            raise StateStoreError(f"Failed to write state file {self.path}: {e}")
