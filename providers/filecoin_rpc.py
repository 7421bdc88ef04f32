"""
Module 07 - Providers
File: filecoin_rpc.py

Minimal JSON-RPC 2.0 client for a Filecoin node (Lotus API and the
Ethereum-compatible methods it exposes).
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

from core.http import HttpClient, HttpError
from core.schemas import RpcError

logger = logging.getLogger(__name__)


class FilecoinRpcClient:
    """
    Usage:
        rpc = FilecoinRpcClient(http, "https://api.node.glif.io/", auth_token)
        head = rpc.call("Filecoin.ChainHead")
    """

    def __init__(
        self,
        http: HttpClient,
        url: str,
        auth_token: Optional[str] = None,
        *,
        timeout: float = 60.0,
    ) -> None:
        self.http = http
        self.url = url
        self.auth_token = auth_token
        self.timeout = timeout
        self._ids = itertools.count(1)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def call(self, method: str, *params: Any) -> Any:
        """
        Invoke `method` and return its `result`.

        Raises:
            RpcError: On transport failure, non-2xx status or an error reply
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        logger.debug("JSON-RPC %s %s", method, params)

        try:
            response = self.http.post(
                self.url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except HttpError as e:
            raise RpcError(f"JSON RPC {method} failed: {e}") from e

        if not response.ok:
            raise RpcError(
                f"JSON RPC failed with {response.status_code}: {response.text.rstrip()}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RpcError(
                f"JSON RPC {method} returned invalid JSON",
                status_code=response.status_code,
            ) from e

        error = body.get("error")
        if error:
            raise RpcError(
                error.get("message", str(error)),
                status_code=response.status_code,
                rpc_code=error.get("code"),
            )
        return body.get("result")
