"""
Async versus sync comparison.

Runs the async benchmark, then the sync benchmark with the same settings, and
prints total times side by side.

Usage: `evmbench compare -n 10 --plot`
"""
import dataclasses
import threading
import typing as t

from evmbench import config as cfg
from evmbench.config import BenchConfig
from evmbench.charts import plot_comparison
from evmbench.errors import BenchmarkError
from evmbench.recorder import ResultRecord
from evmbench.report import print_comparison

from .bench import select_strategy
from .common import close_client, open_client, plot_path, prepare_account, rpc_baseline, save_chart


def run(
    config: BenchConfig,
    plot: bool = False,
    plot_dir: str = cfg.DEFAULT_PLOT_DIR,
    plot_prefix: str = cfg.DEFAULT_PLOT_PREFIX,
    baseline_calls: int = cfg.COMPARE_BASELINE_CALLS,
    baseline_interval: float = cfg.COMPARE_BASELINE_INTERVAL,
    stop_event: t.Optional[threading.Event] = None,
    client: t.Optional[t.Any] = None,
) -> t.Tuple[t.List[ResultRecord], t.List[ResultRecord]]:
    print(f"=== EVM Latency Bench: async vs sync ({config.tx_count} txs) ===")

    client = open_client(config, client)
    try:
        rpc_time = rpc_baseline(client, baseline_calls, baseline_interval)

        outcome: t.Dict[str, t.List[ResultRecord]] = {}
        for mode in cfg.MODES:
            print(f"\nRunning {mode} benchmark...")
            mode_config = dataclasses.replace(config, mode=mode)
            # Each run starts from the node's pending nonce
            signer, account = prepare_account(client, mode_config)
            strategy = select_strategy(mode, client, signer, mode_config, stop_event)
            try:
                outcome[mode] = strategy.run(account, mode_config.tx_count)
            except BenchmarkError as e:
                raise type(e)(f"{mode} benchmark failed: {e}") from e
    finally:
        close_client(client)

    async_results, sync_results = outcome["async"], outcome["sync"]
    print_comparison(async_results, sync_results)

    if plot:
        save_chart(
            plot_comparison,
            async_results,
            sync_results,
            plot_path(plot_dir, plot_prefix),
            rpc_median_ms=rpc_time.median,
        )
    return async_results, sync_results
