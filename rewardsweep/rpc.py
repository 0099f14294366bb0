"""Solana RPC client construction with 429 throttling."""

import logging
import time

import httpx
from solana.rpc.api import Client as SolanaHTTPClient  # type: ignore[import-untyped]
from solana.rpc.commitment import Commitment  # type: ignore[import-untyped]

from rewardsweep.config import DEFAULT_COMMITMENT

logger = logging.getLogger(__name__)

_DEFAULT_MAX_RETRIES = 5
_MAX_RETRY_AFTER_SECONDS = 30.0


def _backoff_seconds(response: httpx.Response, attempt: int) -> float:
    """Server-provided Retry-After (seconds) when present, else linear backoff."""
    header = response.headers.get("retry-after")
    if header:
        try:
            return min(max(float(header), 0.0), _MAX_RETRY_AFTER_SECONDS)
        except ValueError:
            pass  # HTTP-date form; fall back to linear backoff
    return float((attempt + 1) * 2)


class _RateLimitTransport(httpx.BaseTransport):
    """Waits and resends while the node answers 429 Too Many Requests.

    Any other status, and every transport error, goes straight back to the
    caller. Stages are never retried above this layer.
    """

    def __init__(
        self,
        wrapped: httpx.BaseTransport | None = None,
        max_retries: int = _DEFAULT_MAX_RETRIES,
    ) -> None:
        self._wrapped = wrapped or httpx.HTTPTransport()
        self._max_retries = max_retries

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            response = self._wrapped.handle_request(request)
            if response.status_code != 429 or attempt >= self._max_retries:
                return response
            delay = _backoff_seconds(response, attempt)
            response.close()
            logger.debug("rate limited by %s, waiting %.1fs", request.url.host, delay)
            time.sleep(delay)
            attempt += 1

    def close(self) -> None:
        self._wrapped.close()


def new_rpc_client(
    url: str,
    commitment: str = DEFAULT_COMMITMENT,
    timeout: float = 30,
    max_retries: int = _DEFAULT_MAX_RETRIES,
) -> SolanaHTTPClient:
    client = SolanaHTTPClient(url, commitment=Commitment(commitment), timeout=timeout)
    client._provider.session = httpx.Client(
        timeout=timeout,
        transport=_RateLimitTransport(httpx.HTTPTransport(), max_retries),
    )
    return client
