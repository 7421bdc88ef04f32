"""
Module 07 - Providers
File: ipni_client.py

Content index lookup: asks an IPNI indexer which providers advertise a CID
and over which transport, then picks the advertisement made by the assigned
provider.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import quote

from core.http import HttpClient, HttpError
from core.multiformats import MultiformatError, decode_varint
from core.schemas import IndexerResult, ProviderLookupError

from .retry import RetryPolicy, retry_call

logger = logging.getLogger(__name__)

# Multicodec codes of the transport metadata in an advertisement
PROTOCOL_CODES = {
    0x0900: "bitswap",
    0x0910: "graphsync",
    0x0920: "http",
    0x3F0000: "graphsync",
}


@dataclass(frozen=True)
class IndexProvider:
    id: str
    address: str
    protocol: Optional[str]
    context_id: Optional[str] = None


@dataclass
class IndexResult:
    indexer_result: str
    provider: Optional[IndexProvider] = None
    alternative_providers: list[IndexProvider] = field(default_factory=list)


def decode_protocol(metadata: Optional[str]) -> Optional[str]:
    """Transport named by the leading varint of base64 metadata, if known."""
    if not metadata:
        return None
    try:
        code, _ = decode_varint(base64.b64decode(metadata, validate=True))
    except (binascii.Error, MultiformatError, ValueError):
        return None
    return PROTOCOL_CODES.get(code)


def format_provider_address(peer_id: str, address: str, protocol: Optional[str]) -> str:
    # Non-HTTP fetchers dial the peer, so the address must name it
    return address if protocol == "http" else f"{address}/p2p/{peer_id}"


def _json_list(obj: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """`obj[key]` as a list of objects; a missing or null key is empty."""
    items = obj.get(key) or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValueError(f"Malformed IPNI response: {key} is not a list of objects")
    return items


class IpniClient:
    """
    Usage:
        client = IpniClient(http, "https://cid.contact")
        result = client.query_the_index(cid, peer_id)
    """

    def __init__(
        self,
        http: HttpClient,
        url: str = "https://cid.contact",
        policy: Optional[RetryPolicy] = None,
        *,
        timeout: float = 30.0,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.http = http
        self.url = url.rstrip("/")
        self.policy = policy or RetryPolicy(max_attempts=6, min_delay_s=1.0, multiplier=2.0)
        self.timeout = timeout
        self._retry_kwargs = {"sleep": sleep} if sleep is not None else {}

    def get_retrieval_providers(self, cid: str) -> list[dict[str, Any]]:
        """
        Raises:
            ProviderLookupError: With status_code set for HTTP failures
        """
        url = f"{self.url}/cid/{quote(cid, safe='')}"
        try:
            response = self.http.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        except HttpError as e:
            raise ProviderLookupError(f"IPNI query failed: {e}") from e
        if not response.ok:
            raise ProviderLookupError(
                f"IPNI query failed with {response.status_code}: {response.text.rstrip()}",
                status_code=response.status_code,
            )
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
        results = []
        for multihash_result in _json_list(body, "MultihashResults"):
            results.extend(_json_list(multihash_result, "ProviderResults"))
        return results

    def query_the_index(self, cid: str, provider_id: str) -> IndexResult:
        """
        Find how `provider_id` advertises `cid`.

        Never raises: lookup failures become ERROR_<status> or ERROR_FETCH.
        """
        try:
            results = retry_call(
                lambda: self.get_retrieval_providers(cid),
                self.policy,
                should_retry=lambda e: (getattr(e, "status_code", None) or 0) >= 500,
                description="IPNI query",
                **self._retry_kwargs,
            )
        except ProviderLookupError as e:
            logger.error("IPNI query failed: %s", e)
            if e.status_code is not None:
                return IndexResult(IndexerResult.for_http_error(e.status_code))
            return IndexResult(IndexerResult.ERROR_FETCH)
        except ValueError as e:
            logger.error("IPNI returned an invalid response: %s", e)
            return IndexResult(IndexerResult.ERROR_FETCH)

        logger.info("IPNI returned %d provider results", len(results))

        graphsync_provider: Optional[IndexProvider] = None
        alternatives: list[IndexProvider] = []
        for result in results:
            peer = result.get("Provider") or {}
            addrs = peer.get("Addrs") if isinstance(peer, dict) else None
            if not addrs or not isinstance(addrs, list):
                continue
            peer_id = peer.get("ID", "")
            protocol = decode_protocol(result.get("Metadata"))
            provider = IndexProvider(
                id=peer_id,
                address=format_provider_address(peer_id, addrs[0], protocol),
                protocol=protocol,
                context_id=result.get("ContextID"),
            )

            if peer_id != provider_id:
                alternatives.append(provider)
                continue
            if protocol == "http":
                return IndexResult(IndexerResult.OK, provider)
            if protocol == "graphsync" and graphsync_provider is None:
                graphsync_provider = provider

        if graphsync_provider is not None:
            logger.info("HTTP protocol is not advertised, falling back to Graphsync.")
            return IndexResult(IndexerResult.HTTP_NOT_ADVERTISED, graphsync_provider)

        logger.info("All advertisements are from other miners or for unsupported protocols.")
        return IndexResult(IndexerResult.NO_VALID_ADVERTISEMENT, alternative_providers=alternatives)
