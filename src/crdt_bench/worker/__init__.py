from crdt_bench.worker.context import ContextState, ExecutionContext
from crdt_bench.worker.process import BenchmarkWorker, worker_main
from crdt_bench.worker.protocol import (
    START,
    CompleteMessage,
    ErrorMessage,
    InboundMessage,
    OutboundMessage,
    ProgressMessage,
    RunSingleMessage,
    StartMessage,
    StatusMessage,
    decode_inbound,
    decode_inbound_strict,
    decode_outbound,
    encode,
)
from crdt_bench.worker.transport import ChannelConfig, MessageReceiver, MessageSender

__all__ = [
    "START",
    "BenchmarkWorker",
    "ChannelConfig",
    "CompleteMessage",
    "ContextState",
    "ErrorMessage",
    "ExecutionContext",
    "InboundMessage",
    "MessageReceiver",
    "MessageSender",
    "OutboundMessage",
    "ProgressMessage",
    "RunSingleMessage",
    "StartMessage",
    "StatusMessage",
    "decode_inbound",
    "decode_inbound_strict",
    "decode_outbound",
    "encode",
    "worker_main",
]
