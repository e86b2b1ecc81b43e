"""
RPC response-time baseline for EVM Latency Bench.
Times repeated eth_blockNumber calls against the benchmark endpoint.
"""
import sys
import time
import typing as t

from tqdm import tqdm

from .errors import BenchmarkError


class BlockNumberSource(t.Protocol):
    def block_number(self) -> int:
        ...


def measure_rpc_time(
    client: BlockNumberSource,
    calls: int,
    interval: float,
    skip_errors: bool = False,
    progress: bool = True,
) -> t.List[float]:
    """
    Call eth_blockNumber `calls` times, `interval` seconds apart.

    Args:
        client: RPC capability exposing `block_number()`.
        calls: Number of calls to make.
        interval: Pause between two calls, in seconds.
        skip_errors: Log and skip failed calls instead of aborting.
        progress: Show a tqdm progress bar.

    Returns:
        Durations of the successful calls, in milliseconds.
    """
    times: t.List[float] = []
    for i in tqdm(range(calls), unit="call", desc="eth_blockNumber", disable=not progress):
        start = time.perf_counter()
        try:
            client.block_number()
        except Exception as e:
            if not skip_errors:
                raise BenchmarkError(f"failed to extract RPC response time metrics: {e}") from e
            tqdm.write(f"[Baseline] Call {i + 1} failed: {e}", file=sys.stderr)
        else:
            times.append((time.perf_counter() - start) * 1000)

        if i < calls - 1:
            time.sleep(interval)
    return times
