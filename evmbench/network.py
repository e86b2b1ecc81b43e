"""
Network layer for EVM Latency Bench.
Web3 connection management and the RPC capability used by the engine.
"""
import typing as t

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.providers import HTTPProvider

from .errors import BenchmarkError, RpcError

DEFAULT_REQUEST_TIMEOUT: int = 120


def create_session(retries: int = 3, backoff_factor: float = 0.2) -> requests.Session:
    """
    Creates the HTTP session shared by every RPC call of a run.

    Connection-level failures are retried by urllib3. Status retries only apply
    to idempotent methods, so a JSON-RPC POST is never replayed on a 5xx and a
    signed transaction is never submitted twice by the transport.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=1,
        max_retries=Retry(
            total=retries,
            backoff_factor=backoff_factor,
            status_forcelist=[500, 502, 503, 504],
        ),
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class RpcClient:
    """
    Thin capability wrapper around a Web3 HTTP connection.

    The strategies only talk to the node through these methods, which keeps
    them testable against an in-memory fake.
    """

    def __init__(
        self,
        endpoint: str,
        session: t.Optional[requests.Session] = None,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self._session = session or create_session()
        provider = HTTPProvider(
            endpoint,
            session=self._session,
            request_kwargs={"timeout": timeout},
        )
        self.w3 = Web3(provider)

    def is_connected(self) -> bool:
        return self.w3.is_connected()

    def pending_nonce(self, address: str) -> int:
        return self.w3.eth.get_transaction_count(address, "pending")

    def chain_id(self) -> int:
        return int(self.w3.eth.chain_id)

    def gas_price(self) -> int:
        return int(self.w3.eth.gas_price)

    def gas_tip_cap(self) -> int:
        return int(self.w3.eth.max_priority_fee)

    def block_number(self) -> int:
        return int(self.w3.eth.block_number)

    def send_raw_transaction(self, raw_transaction: bytes) -> str:
        return Web3.to_hex(self.w3.eth.send_raw_transaction(raw_transaction))

    def get_receipt(self, tx_hash: str) -> t.Optional[t.Mapping[str, t.Any]]:
        """
        Returns the receipt, or None while the node does not know it yet.

        Any other failure propagates so the caller can classify it.
        """
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    def send_raw_transaction_sync(self, raw_tx_hex: str, method: str) -> t.Any:
        """
        Submits through a submit-and-wait method and returns its raw result.

        Raises:
            RpcError: the node answered with a JSON-RPC error object.
        """
        response = self.w3.provider.make_request(method, [raw_tx_hex])
        error = response.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(error.get("code"), str(error.get("message", "")))
            raise RpcError(None, str(error))
        return response.get("result")

    def close(self) -> None:
        self._session.close()


def connect(
    endpoint: str,
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
    session: t.Optional[requests.Session] = None,
) -> RpcClient:
    """
    Opens a client and checks the endpoint answers before any benchmark work.

    Raises:
        BenchmarkError: the endpoint is unreachable.
    """
    client = RpcClient(endpoint, session=session, timeout=timeout)
    try:
        connected = client.is_connected()
    except requests.RequestException as e:
        client.close()
        raise BenchmarkError(f"failed to connect to RPC endpoint {endpoint}: {e}") from e
    if not connected:
        client.close()
        raise BenchmarkError(f"failed to connect to RPC endpoint {endpoint}")
    print(f"[Network] Connected to {endpoint}")
    return client
