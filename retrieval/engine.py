"""
Module 06 - Retrieval
File: engine.py

Executes one retrieval check and fills its RetrievalStats.

Stages:
1. Resolve the provider's peer id (chain and contract).
2. Ask the content index how that peer advertises the CID.
3. Resolve the advertised address into a transport URL.
4. HEAD probe (HTTP providers only).
5. Bounded streaming GET of a CAR holding the CID's block.
6. Verify the CAR and record the checksum.

Every failure ends as a value in the record (StatusCode / IndexerResult);
nothing raised by a stage escapes `check`.
"""

from __future__ import annotations

import logging
import socket
from typing import Any, Iterator, Optional

import requests
from urllib3.exceptions import NameResolutionError, ReadTimeoutError

from core.crypto import car_checksum
from core.http import HttpError
from core.multiformats import AddressError, get_retrieval_url
from core.schemas import Assignment, IndexerResult, RetrievalStats, StatusCode
from providers import (
    FilecoinRpcClient,
    IpniClient,
    MinerInfoClient,
    RetryPolicy,
    SmartContractClient,
)
from station.context import StationContext

from .transports import BaseTransport, Protocol, build_transports
from .verification import VerificationError, verify_car

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
ERROR_BODY_LIMIT = 1000
RAW_MEDIA_TYPE = "application/vnd.ipld.raw"


class RetrievalTimeout(Exception):
    """Raised when a fetch runs past its overall deadline."""


def _iter_chain(error: BaseException) -> Iterator[BaseException]:
    """The error, its causes and contexts, and exceptions carried in args/reason."""
    seen: set[int] = set()
    pending = [error]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        linked = [current.__cause__, current.__context__, getattr(current, "reason", None)]
        linked.extend(current.args)
        pending.extend(e for e in linked if isinstance(e, BaseException))


def read_body_prefix(response: Any, limit: int) -> str:
    """At most `limit` bytes of a streamed body, decoded for logging."""
    prefix = bytearray()
    for chunk in response.iter_content(chunk_size=limit):
        prefix += chunk
        if len(prefix) >= limit:
            break
    return prefix[:limit].decode("utf-8", errors="replace").rstrip()


def is_timeout(error: BaseException) -> bool:
    return any(
        isinstance(e, (RetrievalTimeout, requests.Timeout, ReadTimeoutError, socket.timeout))
        for e in _iter_chain(error)
    )


def map_error_to_status_code(error: BaseException) -> StatusCode:
    """Collapse a stage failure into its outcome code."""
    chain = list(_iter_chain(error))
    for e in chain:
        if isinstance(e, VerificationError):
            return e.status_code
        if isinstance(e, AddressError):
            return StatusCode[e.code.value]
    for e in chain:
        if isinstance(e, (NameResolutionError, socket.gaierror)):
            return StatusCode.DNS_ERROR
    for e in chain:
        if isinstance(e, ConnectionRefusedError):
            return StatusCode.CONNECTION_REFUSED
    return StatusCode.FETCH_FAILED


class RetrievalEngine:
    """
    Usage:
        engine = RetrievalEngine(ctx)
        stats = new_stats()
        engine.check(assignment, stats)
        stats.mark_complete()
    """

    def __init__(
        self,
        ctx: StationContext,
        *,
        miner_info: Optional[MinerInfoClient] = None,
        index: Optional[IpniClient] = None,
        transports: Optional[dict[Protocol, BaseTransport]] = None,
    ) -> None:
        self.ctx = ctx
        config = ctx.config

        if miner_info is None:
            rpc = FilecoinRpcClient(
                ctx.http, config.rpc.url, config.rpc.auth_token, timeout=config.rpc.timeout_s
            )
            miner_info = MinerInfoClient(
                rpc,
                SmartContractClient(rpc, config.rpc.contract_address),
                RetryPolicy(
                    max_attempts=config.rpc.max_attempts,
                    min_delay_s=config.rpc.min_delay_s,
                    multiplier=config.rpc.multiplier,
                ),
            )
        if index is None:
            index = IpniClient(
                ctx.http,
                config.index.url,
                RetryPolicy(
                    max_attempts=config.index.max_attempts,
                    min_delay_s=config.index.min_delay_s,
                    multiplier=2.0,
                ),
                timeout=config.index.timeout_s,
            )

        self.miner_info = miner_info
        self.index = index
        self.transports = transports or build_transports(ctx.http, config.lassie.url)

    def check(
        self,
        assignment: Assignment,
        stats: RetrievalStats,
        *,
        peer_id: Optional[str] = None,
    ) -> RetrievalStats:
        """
        Run the full check for `assignment`, writing into `stats`.

        Args:
            peer_id: Skip identity resolution and use this peer id
        """
        cid, provider_id = assignment.content_id, assignment.provider_id
        self.ctx.metrics.record_retrieval(cid, provider_id)
        logger.info("Checking %s", assignment)

        try:
            self._run_check(cid, provider_id, stats, peer_id)
        except Exception:
            logger.exception("Retrieval check of %s failed unexpectedly", assignment)
            if stats.status_code is None:
                stats.status_code = int(StatusCode.FETCH_FAILED)
        if stats.end_at is None:
            stats.end_at = self.ctx.now()

        if not stats.succeeded:
            self.ctx.metrics.record_failure()
        return stats

    def _run_check(
        self,
        cid: str,
        provider_id: str,
        stats: RetrievalStats,
        peer_id: Optional[str],
    ) -> None:
        if peer_id is None:
            try:
                peer_id = self.miner_info.get_miner_peer_id(provider_id)
            except Exception as e:
                logger.error("Cannot resolve peer id of %s: %s", provider_id, e)
                stats.indexer_result = IndexerResult.ERROR_FETCHING_PEER_ID
                return
        stats.provider_id = peer_id
        logger.info("Found peer id %s for %s", peer_id, provider_id)

        result = self.index.query_the_index(cid, peer_id)
        stats.indexer_result = result.indexer_result
        provider = result.provider
        if not IndexerResult.provider_found(result.indexer_result) or provider is None:
            logger.info("No usable advertisement for %s from %s: %s", cid, provider_id, result.indexer_result)
            return

        stats.protocol = provider.protocol
        stats.provider_address = provider.address
        self.fetch_car(provider.protocol, provider.address, cid, stats)

    def fetch_car(self, protocol: str, address: str, cid: str, stats: RetrievalStats) -> None:
        """Resolve, probe, fetch and verify; outcomes land in `stats`."""
        stats.start_at = self.ctx.now()
        transport = self.transports[Protocol(protocol)]
        try:
            url = transport.retrieval_url(address, cid)
        except AddressError as e:
            logger.warning("%s", e)
            stats.status_code = int(map_error_to_status_code(e))
            stats.end_at = self.ctx.now()
            return

        if transport.protocol is Protocol.HTTP:
            self.test_head_request(address, cid, stats)

        try:
            self._fetch_and_verify(transport, url, cid, stats)
        except Exception as e:
            self._record_error(e, stats)
        finally:
            stats.end_at = self.ctx.now()

    def _fetch_and_verify(
        self,
        transport: BaseTransport,
        url: str,
        cid: str,
        stats: RetrievalStats,
    ) -> None:
        limits = self.ctx.config.station
        deadline = self.ctx.clock.monotonic() + limits.max_request_duration_s
        body = bytearray()

        logger.info("Fetching %s", url)
        with transport.fetch_block(url, timeout=limits.fetch_timeout_s) as response:
            stats.status_code = response.status_code
            if not response.ok:
                logger.warning(
                    "Provider returned %d: %s",
                    response.status_code,
                    read_body_prefix(response, ERROR_BODY_LIMIT),
                )
                return

            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                if stats.first_byte_at is None:
                    stats.first_byte_at = self.ctx.now()
                stats.byte_length += len(chunk)
                if stats.byte_length > limits.max_car_size:
                    stats.car_too_large = True
                    logger.warning("CAR from %s exceeds %d bytes, aborting", url, limits.max_car_size)
                    break
                body.extend(chunk)
                if self.ctx.clock.monotonic() > deadline:
                    raise RetrievalTimeout(
                        f"Retrieval took longer than {limits.max_request_duration_s}s"
                    )

        if stats.car_too_large:
            return

        data = bytes(body)
        verify_car(cid, data)
        stats.car_checksum = car_checksum(data)
        logger.info("Retrieved and verified %s (%d bytes)", cid, stats.byte_length)

    def _record_error(self, error: Exception, stats: RetrievalStats) -> None:
        logger.warning("Retrieval failed: %s", error)
        if is_timeout(error):
            stats.timeout = True
        # Keep an upstream error status; a 200 is replaced by the failure
        if stats.status_code is None or stats.status_code == StatusCode.OK:
            stats.status_code = int(map_error_to_status_code(error))

    def test_head_request(self, address: str, cid: str, stats: RetrievalStats) -> None:
        """Record the provider's answer to a HEAD for the block, 600 if it failed."""
        try:
            url = get_retrieval_url(Protocol.HTTP.value, address, cid)
            response = self.ctx.http.head(
                url,
                headers={"Accept": RAW_MEDIA_TYPE},
                timeout=self.ctx.config.station.head_timeout_s,
            )
        except (AddressError, HttpError) as e:
            logger.warning("HEAD request failed: %s", e)
            stats.head_status_code = int(StatusCode.FETCH_FAILED)
            return
        stats.head_status_code = response.status_code
