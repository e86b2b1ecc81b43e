"""
eth_blockNumber response time.

Usage: `evmbench resp-time --count 10 --interval 500ms`
"""
import typing as t

from evmbench import config as cfg
from evmbench.baseline import measure_rpc_time
from evmbench.errors import ConfigError
from evmbench.network import connect
from evmbench.recorder import Summary, summarize
from evmbench.report import print_rpc_time

from .common import close_client


def run(
    rpc_endpoint: str,
    count: int = cfg.RESP_TIME_CALLS,
    interval: float = cfg.RESP_TIME_INTERVAL,
    client: t.Optional[t.Any] = None,
) -> t.Optional[Summary]:
    """
    Returns:
        The call time summary, or None when no call succeeded.
    """
    if count < 1:
        raise ConfigError(f"count must be at least 1, got {count}")

    client = client if client is not None else connect(rpc_endpoint)
    print(f"Calling eth_blockNumber {count} times with {interval * 1000:.0f}ms interval...")
    try:
        times = measure_rpc_time(client, count, interval, skip_errors=True)
    finally:
        close_client(client)

    for i, elapsed in enumerate(times, start=1):
        print(f"Sample {i}: {elapsed:.3f} ms")

    if not times:
        print("No successful calls to measure.")
        return None

    summary = summarize(times)
    print_rpc_time(summary)
    return summary
