from abc import ABC, abstractmethod

from crdt_bench.logging.config import LoggerConfig


class BaseLogHandler(ABC):
    """
    Abstract base class for log handlers, defining how buffered log messages
    are pushed to their destination.
    """

    def __init__(self):
        self._primary_config = None

    @property
    def primary_config(self):
        """Get the primary config."""
        return self._primary_config

    def add_primary_config(self, config: LoggerConfig):
        """
        Add the primary configuration to the handler.
        """
        self._primary_config = config

    def close(self) -> None:
        """Release any resources held by the handler."""

    @abstractmethod
    def push(self, buffer: list[str]) -> None:
        """
        Flushes the given buffer of log entries in some way.

        Args:
            buffer (list[str]): The list of formatted log messages to push.
        """
        pass
