"""Lightweight HTTP client for the chain node API.

This module provides:
- `ChainRPC`: an async client with sane timeouts/connection limits

It is used only to fetch account stake metadata.
"""

from __future__ import annotations

from typing import Any

import httpx

from prism.core.config import ChainConfig
from prism.core.interfaces import IChainClient

GET_ACCOUNT_PATH = "/v1/chain/get_account"


class ChainRPC(IChainClient):
    """Minimal async chain client.

    Parameters
    ----------
    url : str
        Node base URL (e.g. ``http://localhost:8888``).
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    client : httpx.AsyncClient | None
        Pre-built client (tests pass one with a mock transport).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 16,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=True,
        )

    @classmethod
    def from_config(cls, config: ChainConfig) -> ChainRPC:
        return cls(config.rpc_url, timeout_s=config.timeout_s, max_connections=config.max_connections)

    async def fetch_account(self, user_id: str) -> dict[str, Any]:
        """Return the raw account object for `user_id`."""
        r = await self.client.post(self.url + GET_ACCOUNT_PATH, json={"account_name": user_id})
        r.raise_for_status()
        data = r.json()
        if isinstance(data, dict) and "error" in data:
            e = data["error"]
            raise RuntimeError(f"RPC error: {e.get('code')} {e.get('message') or e.get('what')}")
        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
