"""
Wallet provider interface.

A provider answers EIP-1193 style `request(method, params)` calls. Browser
wallets are one implementation; HttpJsonRpcProvider talks JSON-RPC 2.0 to
a node over HTTP (read calls, or a node that manages its own accounts).
"""

import itertools
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog

from comptara.sync.errors import NetworkUnavailableError


logger = structlog.get_logger(__name__)

USER_REJECTED = 4001
UNRECOGNIZED_CHAIN = 4902
REQUEST_PENDING = -32002


class ProviderRpcError(Exception):
    """Error object returned by a provider."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __repr__(self) -> str:
        return f"ProviderRpcError(code={self.code}, message={self.message!r})"


class WalletProvider(ABC):
    """Minimal EIP-1193 request interface."""

    @abstractmethod
    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Send one RPC request.

        Raises:
            ProviderRpcError: When the provider answers with an error
        """
        pass


class HttpJsonRpcProvider(WalletProvider):
    """JSON-RPC 2.0 over HTTP POST."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
            ) as client:
                response = await client.post(self._url, json=body)
                response.raise_for_status()
        except httpx.TransportError as e:
            logger.warning("rpc_unreachable", url=self._url, method=method, error=str(e))
            raise NetworkUnavailableError(str(e)) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "rpc_http_error",
                url=self._url,
                method=method,
                status=e.response.status_code,
            )
            raise ProviderRpcError(
                code=-32603,
                message=f"RPC endpoint returned HTTP {e.response.status_code}",
            ) from e

        payload = response.json()
        error = payload.get("error")
        if error:
            raise ProviderRpcError(
                code=error.get("code", -32603),
                message=error.get("message", "RPC error"),
                data=error.get("data"),
            )
        return payload.get("result")
