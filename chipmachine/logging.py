"""Console logging utilities for chipmachine.

The engine itself never logs from traced code. Loading, timing drivers and
the front end report through a :class:`ConsoleLogger`.
"""

import time
import sys

LEVEL_ORDER = {
    "DEBUG": 0,
    "INFO": 1,
    "WARNING": 2,
    "ERROR": 3,
    "CRITICAL": 4,
}


class ConsoleLogger:
    """Console logger with levels, colored tags and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chipmachine",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.set_level(log_level)
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {k: "" for k in [*LEVEL_ORDER, "RESET"]}
        )

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        level = log_level.upper()
        if level not in LEVEL_ORDER:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(LEVEL_ORDER)}"
            )
        self.log_level = level

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return LEVEL_ORDER.get(level.upper(), 1) >= LEVEL_ORDER[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


logger = ConsoleLogger()
