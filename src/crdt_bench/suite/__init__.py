"""Suite orchestration: configuration, task registry and catalogue."""

from __future__ import annotations

__all__ = [
    "CATALOGUE",
    "ProgressCallback",
    "SuiteConfig",
    "SuiteOrchestrator",
    "TaskDescriptor",
    "TaskRegistry",
    "build_default_registry",
    "register_adapter",
]

from .catalogue import CATALOGUE, build_default_registry, register_adapter
from .config import SuiteConfig
from .orchestrator import ProgressCallback, SuiteOrchestrator
from .registry import TaskDescriptor, TaskRegistry
