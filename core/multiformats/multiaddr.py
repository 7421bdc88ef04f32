"""
Module 03 - Multiformats
File: multiaddr.py

Address resolver: turns a provider's HTTP multiaddr into a URL.

Accepted shape:

    /<host-type>/<host>[/tcp/<port>]/<http|https>[/http-path/<percent-encoded path>]

Examples:
    /ip4/127.0.0.1/tcp/80/http                    -> http://127.0.0.1
    /ip6/::1/tcp/443/https                        -> https://[::1]
    /dns/example.com/tcp/8080/http/http-path/%2Fx -> http://example.com:8080/x

Parsing is pure; failures raise AddressError carrying an AddressErrorCode.
"""

from __future__ import annotations

import re
from enum import Enum
from urllib.parse import unquote_to_bytes, urlencode

HOST_TYPES = ("ip4", "ip6", "dns", "dns4", "dns6")
SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": "80", "https": "443"}
HTTP_PATH = "http-path"

_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class AddressErrorCode(str, Enum):
    """Reasons an address cannot be resolved to a URL."""

    UNSUPPORTED_HOST_TYPE = "UNSUPPORTED_HOST_TYPE"
    UNSUPPORTED_TRANSPORT = "UNSUPPORTED_TRANSPORT"
    UNSUPPORTED_SCHEME = "UNSUPPORTED_SCHEME"
    TOO_MANY_PARTS = "TOO_MANY_PARTS"
    INVALID_PATH = "INVALID_PATH"


class AddressError(ValueError):
    """Raised when a multiaddr cannot be converted to an HTTP URL."""

    def __init__(self, code: AddressErrorCode, address: str, reason: str) -> None:
        super().__init__(f'Cannot parse "{address}": {reason}')
        self.code = code
        self.address = address


def _format_host(host_type: str, host_value: str, address: str) -> str:
    if host_type not in HOST_TYPES:
        raise AddressError(
            AddressErrorCode.UNSUPPORTED_HOST_TYPE,
            address,
            f'unsupported host type "{host_type}"',
        )
    if host_type == "ip6":
        # RFC 2732: literal IPv6 addresses are bracketed in URLs
        return f"[{host_value}]"
    return host_value


def _decode_path(encoded: str, address: str) -> str:
    if _INVALID_ESCAPE.search(encoded):
        raise AddressError(AddressErrorCode.INVALID_PATH, address, "invalid http path")
    try:
        path = unquote_to_bytes(encoded).decode("utf-8")
    except UnicodeDecodeError:
        raise AddressError(
            AddressErrorCode.INVALID_PATH, address, "invalid http path"
        ) from None
    if not path:
        raise AddressError(AddressErrorCode.INVALID_PATH, address, "empty http path")
    return "/" + path.lstrip("/")


def multiaddr_to_http_url(address: str) -> str:
    """
    Convert an HTTP(S) multiaddr into a URL.

    Raises:
        AddressError: With one of the AddressErrorCode values
    """
    parts = address.split("/")
    if parts and parts[0] == "":
        parts = parts[1:]

    host_type = parts.pop(0) if parts else ""
    host_value = parts.pop(0) if parts else ""
    host = _format_host(host_type, host_value, address)

    port: str | None = None
    if parts and parts[0] not in SCHEMES and len(parts) >= 2:
        transport = parts.pop(0)
        port = parts.pop(0)
        if transport != "tcp":
            raise AddressError(
                AddressErrorCode.UNSUPPORTED_TRANSPORT,
                address,
                f'unsupported protocol "{transport}"',
            )

    scheme = parts.pop(0) if parts else ""
    if scheme not in SCHEMES:
        raise AddressError(
            AddressErrorCode.UNSUPPORTED_SCHEME,
            address,
            f'unsupported scheme "{scheme}"',
        )

    path = ""
    if parts and parts[0] == HTTP_PATH:
        parts.pop(0)
        path = _decode_path(parts.pop(0) if parts else "", address)

    if parts:
        raise AddressError(AddressErrorCode.TOO_MANY_PARTS, address, "too many parts")

    url = f"{scheme}://{host}"
    if port is not None and DEFAULT_PORTS[scheme] != port:
        url += f":{port}"
    return url + path


def get_retrieval_url(protocol: str, address: str, cid: str) -> str:
    """
    Build the URL that fetches the top-level block of `cid`.

    For HTTP providers this is a trustless-gateway URL on the provider. For
    GraphSync the result is an ipfs:// descriptor naming the provider; the
    GraphSync transport hands it to the external fetcher.
    """
    if protocol == "http":
        base = multiaddr_to_http_url(address).rstrip("/")
        return f"{base}/ipfs/{cid}?dag-scope=block"

    query = urlencode(
        {
            # Only the target block is returned (no DAG)
            "dag-scope": "block",
            "protocols": protocol,
            "providers": address,
        }
    )
    return f"ipfs://{cid}?{query}"
