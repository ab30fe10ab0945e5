"""Console logging utilities for the interpreter and its front ends.

Messages are prefixed with the time elapsed since the logger was created,
the level and the logger name. Colours are only used when the output
stream is a terminal.
"""

import sys
import time
from typing import Optional, TextIO


class ConsoleLogger:
    """Levelled console logger."""

    level_order = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3,
        "CRITICAL": 4,
    }

    colors = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m"
    }

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.set_level(log_level)
        self.use_colors = use_colors
        self.show_timestamps = show_timestamps
        self._stream = stream
        self.start_time = time.time()

    @property
    def stream(self) -> TextIO:
        # Resolved on every call so redirected stderr is honoured
        return self._stream if self._stream is not None else sys.stderr

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        log_level = log_level.upper()
        if log_level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order)}"
            )
        self.log_level = log_level

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors and hasattr(self.stream, "isatty") and self.stream.isatty():
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)
