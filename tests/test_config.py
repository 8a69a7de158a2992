"""Tests for run options, their validation and the configuration file."""

import json

import pytest

from main import ConfigManager
from pythonlogtail.config import (
    ConfigurationError,
    Options,
    TailOptions,
    parse_add_fields,
)
from pythonlogtail.parsers import ParserOptions


@pytest.fixture()
def log_file(tmp_path):
    path = tmp_path / "app.log"
    path.write_text('{"a":1}\n', encoding="utf-8")
    return str(path)


@pytest.fixture()
def valid(options, log_file) -> Options:
    options.log_files = [log_file]
    return options


class TestParseAddFields:
    def test_pairs(self):
        assert parse_add_fields(["env=prod", "empty=", "eq=a=b"]) == {
            "env": "prod",
            "empty": "",
            "eq": "a=b",
        }

    @pytest.mark.parametrize("spec", ["novalue", "=value"])
    def test_invalid(self, spec):
        with pytest.raises(ConfigurationError):
            parse_add_fields([spec])


class TestValidate:
    def test_valid_options(self, valid):
        valid.validate()

    def test_parser_required(self, valid):
        valid.parser_name = ""
        with pytest.raises(ConfigurationError, match="parser required"):
            valid.validate()

    def test_unknown_parser(self, valid):
        valid.parser_name = "xml"
        with pytest.raises(ConfigurationError, match="Unsupported parser"):
            valid.validate()

    def test_regex_parser_needs_pattern(self, valid):
        valid.parser_name = "regex"
        with pytest.raises(ConfigurationError):
            valid.validate()

    @pytest.mark.parametrize("write_key", ["", "NULL"])
    def test_write_key_required(self, valid, write_key):
        valid.write_key = write_key
        with pytest.raises(ConfigurationError, match="write key required"):
            valid.validate()

    def test_log_files_required(self, valid):
        valid.log_files = []
        with pytest.raises(ConfigurationError, match="log file name"):
            valid.validate()

    def test_dataset_required(self, valid):
        valid.dataset = ""
        with pytest.raises(ConfigurationError, match="dataset name required"):
            valid.validate()

    def test_unknown_read_mode(self, valid):
        valid.tail.read_from = "middle"
        with pytest.raises(ConfigurationError, match="Unknown read mode"):
            valid.validate()

    def test_last_is_resume(self, valid):
        valid.tail.read_from = "last"
        valid.validate()
        assert valid.read_from == "resume"

    def test_end_and_stop(self, valid):
        valid.tail = TailOptions(read_from="end", stop=True)
        with pytest.raises(ConfigurationError, match="zero lines"):
            valid.validate()

    def test_end_and_follow(self, valid):
        valid.tail = TailOptions(read_from="end", stop=False)
        valid.validate()

    def test_state_file_with_single_file(self, valid, tmp_path):
        valid.tail.state_file = str(tmp_path / "state")
        valid.validate()

    def test_state_file_with_multiple_files(self, valid, log_file, tmp_path):
        valid.log_files = [log_file, log_file + ".1"]
        valid.tail.state_file = str(tmp_path / "state")
        with pytest.raises(ConfigurationError, match="multiple files"):
            valid.validate()

    def test_state_file_with_glob(self, valid, tmp_path):
        (tmp_path / "other.log").write_text("{}\n", encoding="utf-8")
        valid.log_files = [str(tmp_path / "*.log")]
        valid.tail.state_file = str(tmp_path / "state")
        with pytest.raises(ConfigurationError, match="multiple files"):
            valid.validate()

    @pytest.mark.parametrize(
        "attr,value",
        [("sample_rate", 0), ("pool_size", 0)],
    )
    def test_positive_numbers(self, valid, attr, value):
        setattr(valid, attr, value)
        with pytest.raises(ConfigurationError, match="at least 1"):
            valid.validate()

    def test_poll_interval(self, valid):
        valid.tail.poll_interval = 0
        with pytest.raises(ConfigurationError, match="poll interval"):
            valid.validate()

    def test_invalid_add_field(self, valid):
        valid.add_fields = ["novalue"]
        with pytest.raises(ConfigurationError, match="novalue"):
            valid.validate()


class TestFromDict:
    def test_nested_sections(self):
        options = Options.from_dict(
            {
                "parser_name": "nginx",
                "log_files": "/var/log/nginx/access.log",
                "write_key": "key",
                "dataset": "web",
                "sample_rate": 5,
                "tail": {"read_from": "last", "stop": True},
                "parser_options": {"time_field": "time_local"},
            }
        )
        assert options.log_files == ["/var/log/nginx/access.log"]
        assert options.tail == TailOptions(read_from="last", stop=True)
        assert options.parser_options == ParserOptions(time_field="time_local")
        assert options.read_from == "resume"
        assert options.sample_rate == 5

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            Options.from_dict({"parser_name": "json", "writekey": "x"})

    def test_unknown_nested_key(self):
        with pytest.raises(ConfigurationError, match="Invalid nested"):
            Options.from_dict({"tail": {"from": "start"}})


class TestConfigManager:
    def write_config(self, tmp_path, monkeypatch, content):
        path = tmp_path / "logtail.json"
        path.write_text(content, encoding="utf-8")
        monkeypatch.setenv("CONFIG_PATH", str(path))
        return path

    def test_load_options(self, tmp_path, monkeypatch, log_file):
        config = {
            "parser_name": "json",
            "log_files": [log_file],
            "write_key": "key",
            "dataset": "pika",
        }
        self.write_config(tmp_path, monkeypatch, json.dumps(config))

        options = ConfigManager().load_options()

        assert options.parser_name == "json"
        assert options.log_files == [log_file]

    def test_environment_overrides(self, tmp_path, monkeypatch):
        self.write_config(
            tmp_path, monkeypatch, json.dumps({"write_key": "file", "dataset": "a"})
        )
        monkeypatch.setenv("HONEYCOMB_WRITEKEY", "env-key")
        monkeypatch.setenv("HONEYCOMB_API_HOST", "http://localhost:9999")
        monkeypatch.delenv("HONEYCOMB_DATASET", raising=False)

        config = ConfigManager().read_config()

        assert config["write_key"] == "env-key"
        assert config["api_host"] == "http://localhost:9999"
        assert config["dataset"] == "a"

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.json"))
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigManager().read_config()

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_invalid_file(self, tmp_path, monkeypatch, content):
        self.write_config(tmp_path, monkeypatch, content)
        with pytest.raises(ConfigurationError):
            ConfigManager().read_config()

    def test_invalid_options_fail_validation(self, tmp_path, monkeypatch):
        self.write_config(tmp_path, monkeypatch, json.dumps({"parser_name": "json"}))
        monkeypatch.delenv("HONEYCOMB_WRITEKEY", raising=False)
        with pytest.raises(ConfigurationError, match="write key required"):
            ConfigManager().load_options()
