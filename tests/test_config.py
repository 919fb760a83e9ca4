import logging

import pytest

from scollector.core.config import Config, get_config
from scollector.core.log import configure_logging
from scollector.core.pattern import DEFAULT_PATTERN, ExtractionPattern


def test_missing_file_gives_defaults(tmp_path):
    config = Config.load(tmp_path / "nope.yaml")

    assert config.poll.command == "show device info"
    assert config.poll.pattern == DEFAULT_PATTERN
    assert config.poll.port == 22
    assert config.workbook.host_column == "B"
    assert config.workbook.result_column == "C"
    assert config.workbook.write_errors is False


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("poll:\n  max_workers: 5\n")
    monkeypatch.setenv("SCOLLECTOR_CONFIG", str(path))

    assert Config.load().poll.max_workers == 5


def test_partial_sections_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "poll:\n"
        "  command: show inventory\n"
        "  command_timeout: 15\n"
        "workbook:\n"
        "  result_column: d\n"
        "  write_errors: true\n"
    )

    config = Config.load(path)

    assert config.poll.command == "show inventory"
    assert config.poll.command_timeout == 15
    assert config.poll.connect_timeout == 30
    assert config.workbook.result_column == "D"
    assert config.workbook.host_column == "B"
    assert config.workbook.write_errors is True


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("poll: [unclosed\n")

    with pytest.raises(ValueError):
        Config.load(path)


def test_default_config_round_trips(tmp_path):
    path = tmp_path / "sub" / "config.yaml"
    config = Config.load(path)

    assert config.save_default_config() is True
    assert config.save_default_config() is False

    loaded = Config.load(path)
    assert loaded.poll == config.poll
    assert loaded.workbook == config.workbook
    ExtractionPattern.compile(loaded.poll.pattern)


def test_executor_options_follow_poll_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("poll:\n  port: 2222\n  max_workers: 4\n")

    options = Config.load(path).executor_options()

    assert options.port == 2222
    assert options.max_workers == 4
    assert options.command == "show device info"


def test_get_config_with_path_reloads(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("poll:\n  max_workers: 3\n")

    assert get_config(config_path=path).poll.max_workers == 3
    assert get_config().poll.max_workers == 3


def test_configure_logging_accepts_level_names(tmp_path):
    log_file = tmp_path / "logs" / "scollector.log"

    logger = configure_logging(level="debug", log_file=log_file)
    logging.getLogger("scollector.ssh.executor").debug("hello")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text()

    configure_logging(level=logging.WARNING)
    assert len(logger.handlers) == 1
