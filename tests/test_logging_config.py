"""Tests for the indented logger."""

import logging
import threading

from anchoring.logging_config import LOGGER_NAME, IndentLogger, ThreadIndent, setup_logging


class TestThreadIndent:
    """Tests for ThreadIndent tree prefixes."""

    def test_no_indent_at_top_level(self) -> None:
        assert ThreadIndent.get_indent() == ""

    def test_nested_levels(self) -> None:
        ThreadIndent.increase()
        assert ThreadIndent.get_indent() == "├──"
        ThreadIndent.increase()
        assert ThreadIndent.get_indent() == "│   ├──"
        ThreadIndent.decrease()
        ThreadIndent.decrease()
        assert ThreadIndent.get_indent() == ""

    def test_decrease_at_top_level_is_harmless(self) -> None:
        ThreadIndent.decrease()
        assert ThreadIndent.get_indent() == ""

    def test_state_is_per_thread(self) -> None:
        ThreadIndent.increase()
        seen: list[str] = []
        worker = threading.Thread(target=lambda: seen.append(ThreadIndent.get_indent()))
        worker.start()
        worker.join()
        assert seen == [""]
        assert ThreadIndent.get_indent() == "├──"


class TestIndentLogger:
    """Tests for IndentLogger."""

    def test_indent_block_prefixes_messages(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="anchoring.test")
        log = IndentLogger(logging.getLogger("anchoring.test"))
        with log.indent_block("outer"):
            log.debug("inner")
        log.debug("after")
        assert [r.getMessage() for r in caplog.records] == ["outer", "├──inner", "after"]

    def test_block_unwinds_on_error(self) -> None:
        log = IndentLogger(logging.getLogger("anchoring.test"))
        try:
            with log.indent_block():
                raise ValueError("boom")
        except ValueError:
            pass
        assert ThreadIndent.get_indent() == ""


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_single_handler(self) -> None:
        base = logging.getLogger(LOGGER_NAME)
        saved_handlers, saved_level = base.handlers[:], base.level
        try:
            setup_logging(logging.DEBUG)
            configured = setup_logging(logging.DEBUG)
            assert isinstance(configured, IndentLogger)
            assert len(base.handlers) == 1
            assert base.level == logging.DEBUG
        finally:
            base.handlers = saved_handlers
            base.setLevel(saved_level)
