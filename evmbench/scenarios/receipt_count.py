"""
Receipt call counting.

Sends transactions in async mode and reports how many
eth_getTransactionReceipt calls each one needed before its receipt appeared.

Usage: `evmbench receiptcount -n 20 --poll-interval 5ms`
"""
import dataclasses
import threading
import typing as t

from evmbench import config as cfg
from evmbench.config import BenchConfig
from evmbench.charts import plot_receipt_calls
from evmbench.recorder import ResultRecord
from evmbench.report import print_receipt_calls
from evmbench.strategies import AsyncStrategy

from .common import close_client, open_client, plot_path, prepare_account, save_chart


def run(
    config: BenchConfig,
    plot: bool = False,
    plot_dir: str = cfg.DEFAULT_PLOT_DIR,
    plot_prefix: str = cfg.DEFAULT_PLOT_PREFIX,
    stop_event: t.Optional[threading.Event] = None,
    client: t.Optional[t.Any] = None,
) -> t.List[ResultRecord]:
    config = dataclasses.replace(config, mode=AsyncStrategy.name)
    print(f"Sending {config.tx_count} transactions and counting receipt polling calls...")

    client = open_client(config, client)
    try:
        signer, account = prepare_account(client, config)
        results = AsyncStrategy(client, signer, config, stop_event=stop_event).run(
            account, config.tx_count
        )
    finally:
        close_client(client)

    print_receipt_calls(results)

    if plot:
        save_chart(plot_receipt_calls, results, plot_path(plot_dir, plot_prefix))
    return results
