"""
Error taxonomy for EVM Latency Bench.

`BenchmarkError` and its subclasses abort the whole run. `RpcError` is raised
by the client for JSON-RPC error objects; the sync strategy treats it as a
per-iteration failure.
"""
import typing as t


class BenchmarkError(Exception):
    """Fatal, run-aborting failure."""


class ConfigError(BenchmarkError):
    """Configuration missing or invalid."""


class BuildError(BenchmarkError):
    """Nonce, fee, chain id or signing could not be obtained."""


class SubmissionError(BenchmarkError):
    """Async submission was rejected or could not be delivered."""


class PollError(BenchmarkError):
    """Receipt polling failed too many times in a row."""


class ConfirmationTimeout(BenchmarkError):
    """Receipt polling exceeded its attempt or duration bound."""


class BenchmarkCancelled(BenchmarkError):
    """The cancel signal was set while the run was in progress."""


class NoResultsError(ValueError):
    """Statistics were requested over an empty result sequence."""


class RpcError(Exception):
    """JSON-RPC error object returned by the node."""

    def __init__(self, code: t.Optional[int], message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
