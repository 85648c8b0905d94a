import logging

import pytest

from statement_analyzer.logger import ColourizedFormatter, get_logging_config


def _record(level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord("statement_analyzer.test", level, __file__, 1, "[INGEST] %s", ("hello",), None)


def test_colours_level_name_and_restores_record():
    formatter = ColourizedFormatter(fmt="%(levelname)s %(message)s", use_colors=True)
    record = _record()

    output = formatter.format(record)

    assert output == "\x1b[33mWARNING\x1b[0m [INGEST] hello"
    assert record.levelname == "WARNING"


def test_plain_output_without_colours():
    formatter = ColourizedFormatter(fmt="%(levelname)s %(message)s", use_colors=False)
    assert formatter.format(_record(logging.ERROR)) == "ERROR [INGEST] hello"


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("0", False), ("", None)])
def test_log_color_setting(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool | None) -> None:
    monkeypatch.setenv("LOG_COLOR", raw)
    monkeypatch.delenv("LOG_DIR", raising=False)

    config = get_logging_config()

    assert config["formatters"]["colour"]["use_colors"] is expected
    assert "file" not in config["handlers"]


def test_file_handler_under_log_dir(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

    config = get_logging_config()

    assert config["handlers"]["file"]["filename"] == str(tmp_path / "logs" / "statement-analyzer.log")
    assert config["loggers"][""]["handlers"] == ["console", "file"]
    assert (tmp_path / "logs").is_dir()
