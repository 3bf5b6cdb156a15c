import logging
import os


def test_logger_creates_command_log(tmp_path, monkeypatch):
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("CRUSADER_COMMAND", "run")

    from crusader.logger import init_logging, get_logger

    init_logging()
    get_logger("test").info("hello")

    logs = list(tmp_path.rglob("*.log"))
    assert len(logs) == 1
    assert "run" in logs[0].parts
    assert logs[0].name.startswith("run-")


def test_init_logging_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))

    from crusader.logger import init_logging

    init_logging()
    init_logging()

    root = logging.getLogger()
    assert sum(isinstance(h, logging.FileHandler) for h in root.handlers) == 1


def test_verbose_forces_debug(tmp_path, monkeypatch):
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("CRUSADER_VERBOSE", "1")

    from crusader.logger import init_logging, get_logger

    init_logging()
    get_logger("crusader.test").debug("cache hit: foo-0.3.0.crate")

    assert logging.getLogger().level == logging.DEBUG
    text = next(tmp_path.rglob("*.log")).read_text()
    assert "[DEBUG]" in text
    assert "cache hit: foo-0.3.0.crate" in text


def test_quiet_has_no_console_handler(tmp_path, monkeypatch):
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("CRUSADER_QUIET", "1")

    from crusader.logger import init_logging

    init_logging()

    handlers = logging.getLogger().handlers
    assert all(isinstance(h, logging.FileHandler) for h in handlers)


def _file_handler():
    return next(
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    )


def test_reinit_moves_file_handler_to_new_command(tmp_path, monkeypatch):
    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))
    monkeypatch.setenv("CRUSADER_COMMAND", "run")

    from crusader.logger import init_logging

    init_logging()
    first = _file_handler()

    monkeypatch.setenv("CRUSADER_COMMAND", "env")
    init_logging()
    second = _file_handler()

    assert second is first
    assert second.baseFilename.endswith(".log")
    assert os.path.basename(os.path.dirname(second.baseFilename)) == "env"


def test_log_records_carry_worker_thread_name(tmp_path, monkeypatch):
    import threading

    monkeypatch.setenv("CRUSADER_LOGS_DIR", str(tmp_path))

    from crusader.logger import init_logging, get_logger

    init_logging()
    worker = threading.Thread(
        target=lambda: get_logger("crusader.runner").info("testing crate foo"),
        name="crusader_3",
    )
    worker.start()
    worker.join()

    text = next(tmp_path.rglob("*.log")).read_text()
    assert "| crusader_3 | crusader.runner | testing crate foo" in text
