"""Throughput comparison of CRDT implementations on a fixed operation catalogue."""

from .errors import (
    BenchError as BenchError,
)
from .errors import (
    ConfigurationError as ConfigurationError,
)
from .errors import (
    ProtocolError as ProtocolError,
)
from .errors import (
    TaskExecutionError as TaskExecutionError,
)
from .harness import (
    HarnessConfig as HarnessConfig,
)
from .harness import (
    TimingHarness as TimingHarness,
)
from .keys import (
    TaskKey as TaskKey,
)
from .results import (
    BenchmarkResult as BenchmarkResult,
)
from .results import (
    ResultMerger as ResultMerger,
)
from .results import (
    merge_results as merge_results,
)
from .suite import (
    SuiteConfig as SuiteConfig,
)
from .suite import (
    SuiteOrchestrator as SuiteOrchestrator,
)
from .suite import (
    TaskRegistry as TaskRegistry,
)
from .suite import (
    build_default_registry as build_default_registry,
)

__version__ = "0.1.0"
