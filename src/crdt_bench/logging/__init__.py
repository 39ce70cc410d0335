"""Buffered logging used across the package."""

from .config import (
    LoggerConfig as LoggerConfig,
)
from .config import (
    LogLevel as LogLevel,
)
from .handlers import (
    BaseLogHandler as BaseLogHandler,
)
from .handlers import (
    FileLogHandler as FileLogHandler,
)
from .logger import (
    Logger as Logger,
)
from .logger import (
    get_logger as get_logger,
)
from .logger import (
    configure as configure,
)
from .logger import (
    LogSink as LogSink,
)
