"""
Receipt polling for EVM Latency Bench.
Foreground confirm-detection loop used by the async strategy.
"""
import sys
import threading
import time
import typing as t
from dataclasses import dataclass

import requests

from .errors import BenchmarkCancelled, ConfirmationTimeout, PollError

DEFAULT_MAX_POLL_ERRORS: int = 20
DEBUG_PRINT_INTERVAL: float = 5.0

# Node unreachable or not answering; error replies are retried like "not found"
TRANSPORT_ERRORS: t.Tuple[t.Type[BaseException], ...] = (
    requests.RequestException,
    ConnectionError,
    TimeoutError,
)


class ReceiptSource(t.Protocol):
    def get_receipt(self, tx_hash: str) -> t.Optional[t.Mapping[str, t.Any]]:
        ...


@dataclass(frozen=True)
class PollSettings:
    """
    Polling cadence and optional bounds.

    With `max_attempts` and `max_duration` unset the loop never gives up on a
    transaction the node does not know yet. `max_errors` bounds consecutive
    transport failures (node unreachable, timeouts); 0 disables the bound.
    Error replies from the node count as "not found".
    """
    interval: float = 0.001
    max_attempts: t.Optional[int] = None
    max_duration: t.Optional[float] = None
    max_errors: int = DEFAULT_MAX_POLL_ERRORS


@dataclass(frozen=True)
class PollOutcome:
    receipt: t.Mapping[str, t.Any]
    calls: int
    elapsed: float


class ReceiptPoller:
    """
    Polls `get_receipt` until the node returns a receipt.

    Usage:
        poller = ReceiptPoller(client, PollSettings(interval=0.001))
        outcome = poller.wait("0xabc...", label="Tx 1")
        outcome.elapsed, outcome.calls
    """

    def __init__(
        self,
        client: ReceiptSource,
        settings: PollSettings,
        stop_event: t.Optional[threading.Event] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self._stop_event = stop_event or threading.Event()
        self._last_debug_print: t.Dict[str, float] = {}

    def wait(self, tx_hash: str, label: str = "") -> PollOutcome:
        """
        Block until a receipt for `tx_hash` is available.

        Returns:
            The receipt, the number of receipt calls made (including the
            successful one) and the seconds elapsed since the first call.

        Raises:
            BenchmarkCancelled: the stop event was set.
            ConfirmationTimeout: an attempt or duration bound was exceeded.
            PollError: too many consecutive transport failures.
        """
        label = label or tx_hash[:10]
        settings = self.settings
        calls = 0
        consecutive_errors = 0
        last_node_error: t.Optional[str] = None
        start = time.perf_counter()

        while True:
            if self._stop_event.is_set():
                self._last_debug_print.pop(tx_hash, None)
                raise BenchmarkCancelled(f"{label}: cancelled while waiting for receipt")

            calls += 1
            try:
                receipt = self.client.get_receipt(tx_hash)
            except TRANSPORT_ERRORS as e:
                consecutive_errors += 1
                self._debug(
                    tx_hash,
                    f"[Poller] {label}: receipt call {calls} failed "
                    f"({consecutive_errors} in a row): {e}",
                    force=consecutive_errors == 1,
                    error=True,
                )
                if settings.max_errors and consecutive_errors >= settings.max_errors:
                    self._last_debug_print.pop(tx_hash, None)
                    raise PollError(
                        f"{label}: receipt polling failed {consecutive_errors} times in a row: {e}"
                    ) from e
            except Exception as e:
                consecutive_errors = 0
                message = str(e)
                self._debug(
                    tx_hash,
                    f"[Poller] {label}: receipt not available (attempt {calls}): {message}",
                    force=message != last_node_error,
                    error=True,
                )
                last_node_error = message
            else:
                consecutive_errors = 0
                if receipt:
                    elapsed = time.perf_counter() - start
                    self._last_debug_print.pop(tx_hash, None)
                    return PollOutcome(receipt=receipt, calls=calls, elapsed=elapsed)
                self._debug(tx_hash, f"[Poller] {label}: polling receipt attempt {calls}")

            if settings.max_attempts is not None and calls >= settings.max_attempts:
                self._last_debug_print.pop(tx_hash, None)
                raise ConfirmationTimeout(
                    f"{label}: no receipt after {calls} attempts"
                )
            if settings.max_duration is not None:
                waited = time.perf_counter() - start
                if waited >= settings.max_duration:
                    self._last_debug_print.pop(tx_hash, None)
                    raise ConfirmationTimeout(
                        f"{label}: no receipt after {waited:.3f}s"
                    )

            time.sleep(settings.interval)

    def _debug(
        self, tx_hash: str, message: str, force: bool = False, error: bool = False
    ) -> None:
        """Print at most one progress line per transaction every few seconds."""
        now = time.monotonic()
        last_print = self._last_debug_print.get(tx_hash)
        if force or last_print is None or now - last_print >= DEBUG_PRINT_INTERVAL:
            print(message, file=sys.stderr if error else sys.stdout)
            self._last_debug_print[tx_hash] = now
