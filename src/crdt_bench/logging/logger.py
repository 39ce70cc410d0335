"""Buffered single-process logger implementation.

Loggers returned by :func:`get_logger` write into one shared :class:`LogSink`,
so records from different names reach stdout and the handlers in the order
they were logged. The output format, flush policy and handlers belong to the
sink. The base level belongs to each logger.
"""

import atexit
import copy
import sys
import time
import traceback
from datetime import datetime, timezone

from crdt_bench.logging.config import LoggerConfig, LogLevel
from crdt_bench.logging.handlers import BaseLogHandler


class LogSink:
    """Buffer of formatted lines pushed to stdout and handlers in batches.

    A flush happens once the buffer is full, the flush interval elapsed, or a
    line of WARNING or higher arrives.
    """

    def __init__(
        self,
        config: LoggerConfig | None = None,
        handlers: list[BaseLogHandler] | None = None,
    ):
        self._config = config if config is not None else LoggerConfig()
        self._handlers: list[BaseLogHandler] = []
        for handler in handlers or []:
            self.add_handler(handler)

        self._buffer: list[str] = []
        self._buffer_start_time_s = time.monotonic()

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def handlers(self) -> list[BaseLogHandler]:
        return list(self._handlers)

    def add_handler(self, handler: BaseLogHandler) -> None:
        """Attach a handler, forwarding the sink config to it.

        Raises:
            TypeError: If the handler does not inherit from BaseLogHandler.
        """
        if not isinstance(handler, BaseLogHandler):
            raise TypeError(
                f"Invalid handler; expected BaseLogHandler but got {type(handler).__name__}"
            )
        handler.add_primary_config(self._config)
        self._handlers.append(handler)

    def set_config(self, config: LoggerConfig) -> None:
        """Replace the configuration, flushing anything buffered under the old one."""
        self.flush()
        self._config = config
        for handler in self._handlers:
            handler.add_primary_config(config)

    def replace_handlers(self, handlers: list[BaseLogHandler]) -> None:
        """Flush, close the current handlers and attach ``handlers`` instead."""
        self.flush()
        previous, self._handlers = self._handlers, []
        for handler in previous:
            handler.close()
        for handler in handlers:
            self.add_handler(handler)

    def write(self, level: LogLevel, name: str, msg: str) -> None:
        """Format a record, buffer it and flush when required."""
        if not self._buffer:
            self._buffer_start_time_s = time.monotonic()

        self._buffer.append(
            self._config.str_format
            % {
                "asctime": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
                "name": name,
                "levelname": level.name,
                "message": msg,
            }
        )

        if (
            level >= LogLevel.WARNING
            or len(self._buffer) >= self._config.buffer_size
            or (time.monotonic() - self._buffer_start_time_s)
            >= self._config.flush_interval_s
        ):
            self.flush()

    def flush(self) -> None:
        """Flushes the buffer to stdout and all handlers."""
        if not self._buffer:
            return

        buffer, self._buffer = self._buffer, []
        self._buffer_start_time_s = time.monotonic()

        if self._config.do_stdout:
            for line in buffer:
                print(line, flush=True)

        for handler in self._handlers:
            try:
                handler.push(buffer)
            except Exception:
                traceback.print_exc(file=sys.stderr)

    def close(self) -> None:
        """Flushes remaining lines and closes all handlers."""
        self.flush()
        for handler in self._handlers:
            handler.close()


class Logger:
    """A simple logger that buffers messages and pushes them to configured
    handlers once the buffer is full, the flush interval elapsed, or a
    message of WARNING or higher arrives.
    """

    def __init__(
        self,
        name: str = "",
        config: LoggerConfig | None = None,
        handlers: list[BaseLogHandler] | None = None,
        sink: LogSink | None = None,
    ):
        """Initializes a Logger with specified configuration and handlers.

        Args:
            name (str): Name of the logger. Defaults to an empty string.
            config (LoggerConfig): Configuration settings for the logger (base level, stdout, buffer size, etc.).
            handlers (list[BaseLogHandler], optional): A list of handler objects that inherit from BaseLogHandler.
                Defaults to an empty list if not provided.
            sink (LogSink, optional): Sink shared with other loggers. When given, ``config``
                only sets this logger's base level and ``handlers`` are added to the sink.
                When omitted the logger owns a private sink.

        Raises:
            TypeError: If one of the provided handlers does not inherit from BaseLogHandler.

        """
        self._name = name
        self._config = config if config is not None else LoggerConfig()
        self._owns_sink = sink is None
        self._sink = LogSink(self._config) if sink is None else sink
        for handler in handlers or []:
            self.add_handler(handler)
        self._is_running = True

    def add_handler(self, handler: BaseLogHandler) -> None:
        """Attach a handler to this logger's sink.

        Raises:
            TypeError: If the handler does not inherit from BaseLogHandler.
        """
        self._sink.add_handler(handler)

    def flush(self) -> None:
        """Flushes the sink buffer to stdout and all handlers."""
        self._sink.flush()

    def _is_enabled(self, level: LogLevel) -> bool:
        return self._is_running and self._config.base_level <= level

    def set_log_level(self, level: LogLevel) -> None:
        """Modify this logger's base log level at runtime.

        Other loggers sharing the sink keep their own level.

        Args:
            level (LogLevel): The new base log level.

        """
        self.debug(f"Changing base log level from {self._config.base_level.name} to {level.name}")
        self._config = copy.copy(self._config)
        self._config.base_level = level
        if self._owns_sink:
            self._sink.set_config(self._config)

    def set_config(self, config: LoggerConfig) -> None:
        """Replace the configuration, flushing anything buffered under the old one.

        A logger on a shared sink only takes the base level from ``config``.
        """
        self._sink.flush()
        self._config = config
        if self._owns_sink:
            self._sink.set_config(config)

    def trace(self, msg: str) -> None:
        """Send a trace-level log message."""
        if self._is_enabled(LogLevel.TRACE):
            self._sink.write(LogLevel.TRACE, self._name, msg)

    def debug(self, msg: str) -> None:
        """Send a debug-level log message."""
        if self._is_enabled(LogLevel.DEBUG):
            self._sink.write(LogLevel.DEBUG, self._name, msg)

    def info(self, msg: str) -> None:
        """Send an info-level log message."""
        if self._is_enabled(LogLevel.INFO):
            self._sink.write(LogLevel.INFO, self._name, msg)

    def warning(self, msg: str) -> None:
        """Send a warning-level log message."""
        if self._is_enabled(LogLevel.WARNING):
            self._sink.write(LogLevel.WARNING, self._name, msg)

    def error(self, msg: str) -> None:
        """Send an error-level log message."""
        if self._is_enabled(LogLevel.ERROR):
            self._sink.write(LogLevel.ERROR, self._name, msg)

    def shutdown(self) -> None:
        """Flushes remaining messages and stops logging.

        Handlers are closed only when the sink is private to this logger.
        """
        if not self._is_running:
            return
        self._is_running = False
        if self._owns_sink:
            self._sink.close()
        else:
            self._sink.flush()

    def is_running(self) -> bool:
        """Check if the logger is running."""
        return self._is_running

    def get_name(self) -> str:
        """Get the name of the logger."""
        return self._name

    def get_config(self) -> LoggerConfig:
        """Get the configuration of the logger."""
        return self._config

    def get_sink(self) -> LogSink:
        return self._sink


_shared_sink = LogSink()
_loggers: dict[str, Logger] = {}


def get_logger(name: str) -> Logger:
    """Return the shared logger for ``name``, creating it on first use."""
    logger = _loggers.get(name)
    if logger is None:
        logger = Logger(name=name, config=copy.copy(_shared_sink.config), sink=_shared_sink)
        _loggers[name] = logger
    return logger


def configure(config: LoggerConfig, handlers: list[BaseLogHandler] | None = None) -> None:
    """Apply a configuration to the shared sink and every shared logger.

    Each logger gets its own copy of ``config``, so a later
    :meth:`Logger.set_log_level` stays local to that logger. When
    ``handlers`` is given it replaces (and closes) the current shared handlers.
    """
    _shared_sink.set_config(config)
    if handlers is not None:
        _shared_sink.replace_handlers(handlers)
    for logger in _loggers.values():
        logger.set_config(copy.copy(config))


@atexit.register
def _flush_all() -> None:
    _shared_sink.flush()
