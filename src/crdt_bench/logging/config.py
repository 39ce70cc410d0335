"""Configuration classes and enums for logging."""

from enum import IntEnum


class LogLevel(IntEnum):
    """Log level enumeration."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


class LoggerConfig:
    """Configuration for the buffered logger."""

    def __init__(
        self,
        base_level: LogLevel = LogLevel.INFO,
        do_stdout: bool = True,
        str_format: str = "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        flush_interval_s: float = 1.0,
        buffer_size: int = 256,
    ):
        """Initializes the LoggerConfig.

        Args:
            base_level (LogLevel): The minimum log level that will be logged.
                Defaults to LogLevel.INFO.
            do_stdout (bool): If True, logs are also printed to stdout. Defaults to True.
            str_format (str): The format string for log messages.
                Supports %(asctime)s, %(levelname)s, %(name)s, and %(message)s.
            flush_interval_s (float): Maximum time (in seconds) a message may sit
                in the buffer before a flush. Must be > 0. Defaults to 1.0.
            buffer_size (int): Number of messages buffered before a forced flush.
                Defaults to 256.

        Raises:
            ValueError: If flush_interval_s <= 0.
            ValueError: If str_format does not contain '%(message)s' placeholder.
            ValueError: If buffer_size <= 0.

        """
        self.base_level = base_level
        self.do_stdout = do_stdout

        self.flush_interval_s = flush_interval_s
        if self.flush_interval_s <= 0.0:
            raise ValueError(
                f"Invalid flush interval; expected >0 but got {self.flush_interval_s}"
            )

        self.str_format = str_format
        if "%(message)s" not in self.str_format:
            raise ValueError("Format string must contain '%(message)s' placeholder")

        self.buffer_size = buffer_size
        if self.buffer_size <= 0:
            raise ValueError(
                f"Invalid buffer size; expected >0 but got {self.buffer_size}"
            )
