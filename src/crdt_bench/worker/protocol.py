"""Messages exchanged with the benchmark worker.

Messages are JSON objects tagged by a ``type`` field with camelCase fields.
Inbound, the bare string ``"start"`` is accepted as a full run with the
default configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import msgspec
from msgspec import Struct

from crdt_bench.errors import ProtocolError
from crdt_bench.harness import HarnessConfig
from crdt_bench.logging import get_logger
from crdt_bench.results import BenchmarkResult
from crdt_bench.suite import SuiteConfig

START = "start"

_SUITE_FIELDS = ("op_size", "sync_iterations", "sync_concurrent_docs", "sync_concurrent_ops")
_HARNESS_FIELDS = ("timeout_ms", "max_iterations", "warmup_iterations")

logger = get_logger("crdt_bench.worker")


class _RunRequest(Struct, tag_field="type", rename="camel", kw_only=True, omit_defaults=True):
    """Optional overrides shared by every run request."""

    op_size: int | None = None
    sync_iterations: int | None = None
    sync_concurrent_docs: int | None = None
    sync_concurrent_ops: int | None = None
    timeout_ms: float | None = None
    max_iterations: int | None = None
    warmup_iterations: int | None = None

    def suite_config(self, base: SuiteConfig) -> SuiteConfig:
        """``base`` with this request's workload overrides applied."""
        return base.with_overrides(**{f: getattr(self, f) for f in _SUITE_FIELDS})

    def harness_config(self, base: HarnessConfig) -> HarnessConfig:
        """``base`` with this request's measurement overrides applied."""
        values = msgspec.structs.asdict(base)
        for field in _HARNESS_FIELDS:
            value = getattr(self, field)
            if value is not None:
                values[field] = value
        return HarnessConfig(**values)


class StartMessage(_RunRequest, tag="start"):
    """Run the full suite."""


class RunSingleMessage(_RunRequest, tag="runSingle"):
    """Run one category."""

    operation: str


class StatusMessage(Struct, tag="status", tag_field="type"):
    message: str


class ProgressMessage(Struct, tag="progress", tag_field="type"):
    results: list[BenchmarkResult]
    message: str


class CompleteMessage(Struct, tag="complete", tag_field="type"):
    results: list[BenchmarkResult]
    message: str


class ErrorMessage(Struct, tag="error", tag_field="type", omit_defaults=True):
    error: str
    stack: str | None = None


InboundMessage = StartMessage | RunSingleMessage
OutboundMessage = StatusMessage | ProgressMessage | CompleteMessage | ErrorMessage

_encoder = msgspec.json.Encoder()
_inbound_decoder = msgspec.json.Decoder(type=InboundMessage)
_outbound_decoder = msgspec.json.Decoder(type=OutboundMessage)


def encode(message: InboundMessage | OutboundMessage) -> bytes:
    """Encode a message as JSON."""
    return _encoder.encode(message)


def decode_inbound_strict(raw: bytes | bytearray | memoryview | str | Mapping[str, Any]) -> InboundMessage:
    """Decode an inbound message.

    Accepts raw JSON (bytes or str), an already parsed mapping, or the bare
    ``"start"`` signal (with or without JSON quotes).

    Raises:
        ProtocolError: If the message matches no known shape.
    """
    if isinstance(raw, (bytearray, memoryview)):
        raw = bytes(raw)
    if isinstance(raw, str):
        raw = raw.encode()

    try:
        if isinstance(raw, bytes):
            if raw.strip() in (START.encode(), f'"{START}"'.encode()):
                return StartMessage()
            return _inbound_decoder.decode(raw)
        if isinstance(raw, Mapping):
            return msgspec.convert(dict(raw), InboundMessage)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise ProtocolError(f"Unrecognized message; {exc}") from exc
    raise ProtocolError(f"Unrecognized message type; got {type(raw).__name__}")


def decode_inbound(raw: bytes | bytearray | memoryview | str | Mapping[str, Any]) -> InboundMessage | None:
    """Lenient form of ``decode_inbound_strict``: unknown messages yield None."""
    try:
        return decode_inbound_strict(raw)
    except ProtocolError as exc:
        logger.warning(f"Ignoring inbound message; {exc}")
        return None


def decode_outbound(raw: bytes) -> OutboundMessage:
    """Decode a message emitted by the worker.

    Raises:
        ProtocolError: If the payload is not a known outbound message.
    """
    try:
        return _outbound_decoder.decode(raw)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise ProtocolError(f"Unrecognized worker message; {exc}") from exc
