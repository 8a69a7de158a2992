"""Entry point for the log shipping application."""

from typing import Any, Dict
import os
import json
import signal
import logging

from pythonlogtail.clients import HoneycombClient
from pythonlogtail.config import ConfigurationError, Options
from pythonlogtail.pipeline import Pipeline
from pythonlogtail.tailers import SourceError
from pythonlogtail.utils import DirectoryError, ensure_dir, get_version

# Configuration Constants
DEFAULT_CONFIG_PATH = "logtail.json"
DEFAULT_DATA_DIR = "data"
DEFAULT_LOG_LEVEL = "INFO"

# Environment variables that override keys of the configuration file
ENV_OVERRIDES = {
    "HONEYCOMB_WRITEKEY": "write_key",
    "HONEYCOMB_DATASET": "dataset",
    "HONEYCOMB_API_HOST": "api_host",
}


class ConfigManager:
    """Manages application configuration and logging setup."""

    def __init__(self):
        self.config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)
        self.data_dir = os.environ.get("DATA_DIR", DEFAULT_DATA_DIR)
        self.logger = logging.getLogger("PythonLogTail")

    def setup_logging(self, log_level: str = DEFAULT_LOG_LEVEL) -> None:
        """Configure application logging with file and console handlers."""
        numeric_level = getattr(logging, log_level.upper(), logging.INFO)
        log_file = os.path.join(self.data_dir, "logtail.log")
        handlers = [logging.StreamHandler()]

        try:
            ensure_dir(self.data_dir)
            handlers.append(logging.FileHandler(log_file))
        except (OSError, DirectoryError) as e:
            self.logger.warning(f"Failed to setup file logging: {e}")

        logging.basicConfig(
            level=numeric_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=handlers,
        )

    def read_config(self) -> Dict[str, Any]:
        """Read the configuration file and apply environment overrides."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}"
            )
        except json.JSONDecodeError:
            raise ConfigurationError(
                f"Invalid JSON in configuration file: {self.config_path}"
            )

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file must hold a JSON object: {self.config_path}"
            )

        for env_name, key in ENV_OVERRIDES.items():
            if value := os.environ.get(env_name):
                config[key] = value
        return config

    def load_options(self) -> Options:
        """Load and validate run options from configuration file."""
        options = Options.from_dict(self.read_config())
        options.validate()
        return options


def main() -> None:
    """Main entry point for the application."""
    config_manager = ConfigManager()
    config_manager.setup_logging(os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL))
    logger = logging.getLogger("PythonLogTail")

    try:
        logger.info(f"Loading configuration from: {config_manager.config_path}")
        options = config_manager.load_options()
        if options.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        client = HoneycombClient(options.write_key, options.dataset, options.api_host)
        pipeline = Pipeline(options, client)
        signal.signal(signal.SIGTERM, lambda signum, frame: pipeline.stop())

        logger.info(f"Starting pythonlogtail version {get_version()}")
        pipeline.start()
        try:
            pipeline.wait()
        except KeyboardInterrupt:
            logger.info("Shutting down, sending queued events...")
            pipeline.stop()
            pipeline.wait()
        finally:
            pipeline.close()
            client.close()
        logger.info("Shutdown complete.")

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise SystemExit(1)
    except SourceError as e:
        logger.error(f"Source error: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
