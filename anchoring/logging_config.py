"""
Logging configuration for anchoring

Includes IndentLogger for tree-style tracing of resolution attempts.
"""

import io
import logging
import sys
import threading
from contextlib import contextmanager

LOGGER_NAME = "anchoring"

_TREE_CHARS = {
    "pipe": "│",
    "branch": "├──",
    "leaf": "└──",
}


class _IndentState(threading.local):
    """Per-thread indentation state, so concurrent resolutions don't interleave"""

    def __init__(self) -> None:
        self.level = 0
        self.active: set[int] = set()


class ThreadIndent:
    """Indentation and tree state for hierarchical logging"""

    _state = _IndentState()

    @classmethod
    def increase(cls) -> None:
        """Increase indentation level"""
        cls._state.level += 1
        cls._state.active.add(cls._state.level - 1)

    @classmethod
    def decrease(cls) -> None:
        """Decrease indentation level"""
        if cls._state.level > 0:
            cls._state.active.discard(cls._state.level - 1)
            cls._state.level -= 1

    @classmethod
    def reset(cls) -> None:
        """Reset indentation state (useful for tests)"""
        cls._state.level = 0
        cls._state.active = set()

    @classmethod
    def get_indent(cls) -> str:
        """Get current indentation string with tree characters"""
        level = cls._state.level
        if level == 0:
            return ""

        parts = []
        for i in range(level - 1):
            parts.append(f"{_TREE_CHARS['pipe']}   " if i in cls._state.active else "    ")

        is_end = (level - 1) not in cls._state.active
        parts.append(_TREE_CHARS["leaf"] if is_end else _TREE_CHARS["branch"])
        return "".join(parts)


class IndentLogger:
    """Logger wrapper that prefixes messages with the current indentation"""

    def __init__(self, base_logger: logging.Logger) -> None:
        self._logger = base_logger

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(f"{self.indent}{msg}", *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(f"{self.indent}{msg}", *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(f"{self.indent}{msg}", *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(f"{self.indent}{msg}", *args, **kwargs)

    @property
    def indent(self) -> str:
        """Get current indentation string"""
        return ThreadIndent.get_indent()

    @contextmanager
    def indent_block(self, initial_message: str | None = None):
        """
        Context manager for handling indentation blocks

        Args:
            initial_message: Optional message to log at block start
        """
        if initial_message:
            self.debug(initial_message)
        ThreadIndent.increase()
        try:
            yield
        finally:
            ThreadIndent.decrease()


def setup_logging(level=logging.INFO):
    """
    Configure logging for anchoring

    Args:
        level: Logging level (default: INFO)

    Returns:
        IndentLogger: Configured logger with indentation support
    """
    base_logger = logging.getLogger(LOGGER_NAME)
    base_logger.setLevel(level)
    base_logger.handlers = []

    # UTF-8 stream so the tree characters survive cp1252 consoles
    stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)8s %(message)s"))
    base_logger.addHandler(handler)

    return IndentLogger(base_logger)


logger = IndentLogger(logging.getLogger(LOGGER_NAME))
