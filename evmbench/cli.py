"""
Command line entry point for EVM Latency Bench.

Usage examples:
  evmbench bench -n 20 --mode async --plot
  evmbench bench -n 20 --mode sync --env-file testnet.env
  evmbench compare -n 10 --poll-interval 5ms
  evmbench receiptcount -n 10
  evmbench resp-time --count 20 --interval 250ms

Settings:
- RPC_ENDPOINT and PRIVATE_KEYS come from the env file (default .env).
- POLL_INTERVAL_MS in the environment sets the poll interval when
  --poll-interval is not given.
- Ctrl+C stops the run at the next poll or iteration boundary.
"""
import argparse
import signal
import sys
import threading
import typing as t

from evmbench import config as cfg
from evmbench.errors import BenchmarkError
from evmbench.scenarios import bench, compare, receipt_count, resp_time


def _duration(value: str) -> float:
    try:
        return cfg.parse_duration(value)
    except BenchmarkError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _bench_flags() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("-n", "--txcount", type=int, default=cfg.DEFAULT_TX_COUNT,
                        help="Number of transactions to send sequentially")
    parser.add_argument("--poll-interval", type=_duration, default=None,
                        help="Polling interval for receipt queries, async mode only (default 1ms)")
    parser.add_argument("--env-file", default=cfg.DEFAULT_ENV_FILE,
                        help="Path to .env file with RPC_ENDPOINT and PRIVATE_KEYS")
    parser.add_argument("--mode", default=cfg.DEFAULT_MODE,
                        help="Transaction submission mode: 'async' or 'sync'")
    parser.add_argument("--plot", action="store_true",
                        help="Generate a PNG chart for the benchmark results")
    parser.add_argument("--plot-prefix", default=cfg.DEFAULT_PLOT_PREFIX,
                        help="Filename prefix for the output PNG chart")
    parser.add_argument("--plot-dir", default=cfg.DEFAULT_PLOT_DIR,
                        help="Directory to save PNG chart files")
    parser.add_argument("--max-poll-attempts", type=int, default=None,
                        help="Give up on a receipt after this many calls (default: unbounded)")
    parser.add_argument("--max-poll-duration", type=_duration, default=None,
                        help="Give up on a receipt after this long (default: unbounded)")
    parser.add_argument("--max-poll-errors", type=int, default=None,
                        help="Abort after this many consecutive unreachable-node receipt calls "
                             f"(default {cfg.DEFAULT_MAX_POLL_ERRORS}, 0 = retry forever)")
    return parser


def parse_args(argv: t.Optional[t.List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="evmbench",
        description="Benchmark EVM transaction submission and receipt latency.",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    flags = _bench_flags()

    bench_cmd = commands.add_parser("bench", parents=[flags],
                                    help="Benchmark one submission mode")
    bench_cmd.add_argument("--baseline-calls", type=int, default=cfg.BENCH_BASELINE_CALLS,
                           help="eth_blockNumber calls for the RPC baseline")
    bench_cmd.add_argument("--baseline-interval", type=_duration, default=cfg.BENCH_BASELINE_INTERVAL,
                           help="Pause between baseline calls (default 500ms)")

    compare_cmd = commands.add_parser("compare", parents=[flags],
                                        help="Compare async and sync modes")
    compare_cmd.add_argument("--baseline-calls", type=int, default=cfg.COMPARE_BASELINE_CALLS,
                             help="eth_blockNumber calls for the RPC baseline")
    compare_cmd.add_argument("--baseline-interval", type=_duration, default=cfg.COMPARE_BASELINE_INTERVAL,
                             help="Pause between baseline calls (default 100ms)")

    commands.add_parser("receiptcount", parents=[flags],
                        help="Count eth_getTransactionReceipt calls per transaction")

    resp_time_cmd = commands.add_parser("resp-time", help="Measure eth_blockNumber call time")
    resp_time_cmd.add_argument("--env-file", default=cfg.DEFAULT_ENV_FILE,
                               help="Path to .env file with RPC_ENDPOINT")
    resp_time_cmd.add_argument("--count", type=int, default=cfg.RESP_TIME_CALLS,
                               help="Number of times to call eth_blockNumber")
    resp_time_cmd.add_argument("--interval", type=_duration, default=cfg.RESP_TIME_INTERVAL,
                               help="Interval between calls (default 500ms)")
    return parser.parse_args(argv)


def _install_interrupt_handler(stop_event: threading.Event) -> None:
    def handle_sigint(sig, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt
        print("\nStopping… (Ctrl+C again to force)", file=sys.stderr)
        stop_event.set()
    signal.signal(signal.SIGINT, handle_sigint)


def _config_from_args(args: argparse.Namespace) -> cfg.BenchConfig:
    return cfg.load_config(
        args.env_file,
        tx_count=args.txcount,
        mode=args.mode,
        poll_interval=args.poll_interval,
        max_poll_attempts=args.max_poll_attempts,
        max_poll_duration=args.max_poll_duration,
        max_poll_errors=args.max_poll_errors,
    )


def run(args: argparse.Namespace) -> None:
    if args.command == "resp-time":
        rpc_endpoint, _ = cfg.load_env(args.env_file)
        resp_time.run(rpc_endpoint, count=args.count, interval=args.interval)
        return

    config = _config_from_args(args)
    stop_event = threading.Event()
    _install_interrupt_handler(stop_event)
    plot_kwargs = {
        "plot": args.plot,
        "plot_dir": args.plot_dir,
        "plot_prefix": args.plot_prefix,
        "stop_event": stop_event,
    }

    if args.command == "bench":
        bench.run(
            config,
            baseline_calls=args.baseline_calls,
            baseline_interval=args.baseline_interval,
            **plot_kwargs,
        )
    elif args.command == "compare":
        compare.run(
            config,
            baseline_calls=args.baseline_calls,
            baseline_interval=args.baseline_interval,
            **plot_kwargs,
        )
    elif args.command == "receiptcount":
        receipt_count.run(config, **plot_kwargs)


def main(argv: t.Optional[t.List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        run(args)
    except BenchmarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
