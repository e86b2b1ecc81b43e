"""
Core package for EVM Latency Bench.
"""

from .builder import SignedTransfer, TransactionBuilder
from .identity import AccountState
from .recorder import LatencyRecorder, LatencyStats, ResultRecord, compute_stats
from .strategies import STRATEGIES, AsyncStrategy, SubmissionStrategy, SyncStrategy

__all__ = [
    "AccountState",
    "AsyncStrategy",
    "LatencyRecorder",
    "LatencyStats",
    "ResultRecord",
    "STRATEGIES",
    "SignedTransfer",
    "SubmissionStrategy",
    "SyncStrategy",
    "TransactionBuilder",
    "compute_stats",
]
