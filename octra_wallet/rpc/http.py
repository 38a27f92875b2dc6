"""
HTTP client for the Octra remote endpoint.

This adapter is intentionally small. It provides:
- an async transport over HTTP(S) built on `httpx.AsyncClient`
- typed methods for the three endpoints the wallet uses:
  * ``GET balance/{address}``  → BalanceInfo
  * ``GET address/{address}``  → list[HistoryEntry]
  * ``POST send-tx``           → decoded response body
- transparent routing through the relay (``/api/proxy?path=...``)

Notes
-----
* There are no retries. Every failure is surfaced once as a typed error:
  a timeout raises RemoteTimeout, a connection error or a non-JSON body
  raises TransportFailure.
* ``send-tx`` returns the JSON body even for non-2xx statuses so the caller
  can classify it and pull out the ``error`` field; reads treat any non-2xx
  status as a TransportFailure.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from ..errors import RemoteTimeout, TransportFailure
from ..types import BalanceInfo, HistoryEntry, TransactionRecord
from ..version import user_agent

log = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://octra.network"
PROXY_ROUTE = "/api/proxy"


# ----------------------------- Helpers --------------------------------------


def _build_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    hdrs = {
        "accept": "application/json",
        "user-agent": user_agent(),
    }
    if extra:
        hdrs.update(extra)
    return hdrs


def _snippet(text: str, limit: int = 256) -> str:
    return text if len(text) <= limit else text[:limit] + "…"


# ----------------------------- Client ---------------------------------------


@dataclass
class EndpointConfig:
    rpc_url: str = DEFAULT_RPC_URL
    use_proxy: bool = False
    proxy_url: str = ""
    timeout_s: float = 10.0
    headers: Optional[Dict[str, str]] = None

    def route(self, endpoint: str) -> Tuple[str, Optional[Dict[str, str]]]:
        """
        Resolve an endpoint path (e.g. ``balance/oct...``) to a URL and query.

        Direct mode yields ``{rpc_url}/{endpoint}``; relay mode yields
        ``{proxy_url}/api/proxy`` with ``path=endpoint`` as a query parameter.
        """
        endpoint = endpoint.lstrip("/")
        if self.use_proxy:
            return self.proxy_url.rstrip("/") + PROXY_ROUTE, {"path": endpoint}
        return f"{self.rpc_url.rstrip('/')}/{endpoint}", None


class RemoteEndpoint:
    """
    Minimal async client for the Octra HTTP JSON endpoint.

    Use as an async context manager, or call `start()` / `close()`. An
    existing `httpx.AsyncClient` may be injected; it is then not closed here.
    """

    def __init__(
        self,
        config: Optional[EndpointConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or EndpointConfig()
        self._client = client
        self._owns_client = client is None

    # ---------- lifecycle ----------

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout_s,
                headers=_build_headers(self.config.headers),
            )
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "RemoteEndpoint":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---------- core transport ----------

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[int, Any]:
        """
        Perform one request and decode the JSON body.

        Returns ``(http_status, decoded_body)``. Raises RemoteTimeout or
        TransportFailure when no decodable response was received.
        """
        if self._client is None:
            await self.start()
        assert self._client is not None  # for type-checkers

        url, params = self.config.route(endpoint)
        log.debug("%s %s params=%s", method, url, params)
        try:
            resp = await self._client.request(
                method,
                url,
                params=params,
                json=body,
                timeout=self.config.timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise RemoteTimeout(
                f"{method} {endpoint} timed out after {self.config.timeout_s}s",
                url=url,
                detail=str(exc) or None,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(
                f"{method} {endpoint} failed", url=url, detail=str(exc) or type(exc).__name__
            ) from exc

        text = resp.text
        try:
            data = json.loads(text) if text else None
        except ValueError as exc:
            raise TransportFailure(
                "response is not JSON",
                url=url,
                http_status=resp.status_code,
                detail=_snippet(text),
            ) from exc
        return resp.status_code, data

    async def _get(self, endpoint: str) -> Dict[str, Any]:
        status, data = await self._request("GET", endpoint)
        if not 200 <= status < 300:
            raise TransportFailure(
                f"GET {endpoint} returned HTTP {status}",
                http_status=status,
                detail=_snippet(json.dumps(data)) if data is not None else None,
            )
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise TransportFailure(
                f"GET {endpoint} returned an unexpected body",
                http_status=status,
                detail=_snippet(json.dumps(data)),
            )
        return data

    # ---------- typed methods ----------

    async def get_balance(self, address: str) -> BalanceInfo:
        return BalanceInfo.from_wire(await self._get(f"balance/{address}"))

    async def get_history(self, address: str) -> List[HistoryEntry]:
        data = await self._get(f"address/{address}")
        items = data.get("recent_transactions") or []
        return [HistoryEntry.from_wire(item) for item in items if isinstance(item, dict)]

    async def send_tx(self, record: TransactionRecord) -> Dict[str, Any]:
        """
        Submit a signed record. Returns the decoded JSON object regardless of
        HTTP status; a body that is not a JSON object raises TransportFailure.
        """
        status, data = await self._request("POST", "send-tx", body=record.to_wire())
        if not isinstance(data, dict):
            raise TransportFailure(
                "send-tx returned an unexpected body",
                http_status=status,
                detail=_snippet(json.dumps(data)) if data is not None else None,
            )
        if not 200 <= status < 300:
            log.info("send-tx answered HTTP %d nonce=%d", status, record.nonce)
        return data


__all__ = [
    "DEFAULT_RPC_URL",
    "PROXY_ROUTE",
    "EndpointConfig",
    "RemoteEndpoint",
]
