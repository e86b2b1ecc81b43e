"""
Latency benchmark for a single submission mode.

Measures the eth_blockNumber baseline, sends `tx_count` sequential
self-transfers in async or sync mode, and prints per-transaction and
aggregate latency.

Usage: `evmbench bench -n 10 --mode async`
"""
import threading
import typing as t

from eth_account.signers.local import LocalAccount

from evmbench import config as cfg
from evmbench.config import BenchConfig
from evmbench.charts import plot_metrics
from evmbench.errors import ConfigError
from evmbench.recorder import ResultRecord
from evmbench.report import print_report
from evmbench.strategies import STRATEGIES, SubmissionStrategy

from .common import close_client, open_client, plot_path, prepare_account, rpc_baseline, save_chart


def select_strategy(
    mode: str,
    client: t.Any,
    signer: LocalAccount,
    config: BenchConfig,
    stop_event: t.Optional[threading.Event] = None,
) -> SubmissionStrategy:
    """Instantiate the strategy registered under `mode`."""
    try:
        strategy_cls = STRATEGIES[mode]
    except KeyError:
        raise ConfigError(f"invalid mode: {mode}, must be 'async' or 'sync'") from None
    return strategy_cls(client, signer, config, stop_event=stop_event)


def run(
    config: BenchConfig,
    plot: bool = False,
    plot_dir: str = cfg.DEFAULT_PLOT_DIR,
    plot_prefix: str = cfg.DEFAULT_PLOT_PREFIX,
    baseline_calls: int = cfg.BENCH_BASELINE_CALLS,
    baseline_interval: float = cfg.BENCH_BASELINE_INTERVAL,
    stop_event: t.Optional[threading.Event] = None,
    client: t.Optional[t.Any] = None,
) -> t.List[ResultRecord]:
    print(f"=== EVM Latency Bench ({config.mode} mode, {config.tx_count} txs) ===")

    client = open_client(config, client)
    try:
        rpc_time = rpc_baseline(client, baseline_calls, baseline_interval)

        signer, account = prepare_account(client, config)
        strategy = select_strategy(config.mode, client, signer, config, stop_event)
        results = strategy.run(account, config.tx_count)
    finally:
        close_client(client)

    print_report(results)

    if plot:
        save_chart(
            plot_metrics,
            results,
            plot_path(plot_dir, plot_prefix),
            rpc_median_ms=rpc_time.median,
            title=f"Benchmark Time Metrics ({config.mode.capitalize()})",
        )
    return results
