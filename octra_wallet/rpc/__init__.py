"""
octra_wallet.rpc
================

Async HTTP client for the Octra remote endpoint (direct or through the relay).
"""

from .http import DEFAULT_RPC_URL, PROXY_ROUTE, EndpointConfig, RemoteEndpoint

__all__ = [
    "DEFAULT_RPC_URL",
    "PROXY_ROUTE",
    "EndpointConfig",
    "RemoteEndpoint",
]
