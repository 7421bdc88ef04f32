"""
Module 07 - Providers
File: miner_info.py

Resolves a storage provider's libp2p peer id.

Two sources are queried together: the node's StateMinerInfo and the peer id
mapping contract. A non-empty contract answer wins, then the chain answer;
if neither produced a peer id the lookup fails.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from core.schemas import ProviderLookupError, RpcError

from .filecoin_rpc import FilecoinRpcClient
from .retry import RetryPolicy, retry_call
from .smart_contract import SmartContractClient

logger = logging.getLogger(__name__)


def _should_retry(error: Exception) -> bool:
    return isinstance(error, RpcError) and error.retryable


class MinerInfoClient:
    def __init__(
        self,
        rpc: FilecoinRpcClient,
        contract: SmartContractClient,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.rpc = rpc
        self.contract = contract
        self.policy = policy or RetryPolicy()
        self._retry_kwargs = {"sleep": sleep} if sleep is not None else {}

    def _retrying(self, description: str, fn: Callable[[], object]):
        return retry_call(
            fn,
            self.policy,
            should_retry=_should_retry,
            description=description,
            **self._retry_kwargs,
        )

    def get_chain_head(self) -> list:
        try:
            head = self._retrying("Filecoin.ChainHead", lambda: self.rpc.call("Filecoin.ChainHead"))
        except RpcError as e:
            raise ProviderLookupError(f"Cannot obtain chain head: {e}", status_code=e.status_code) from e
        return head["Cids"]

    def get_peer_id_from_miner_info(self, miner_id: str) -> str:
        """Peer id recorded on chain for `miner_id`."""
        chain_head = self.get_chain_head()
        try:
            info = self._retrying(
                "Filecoin.StateMinerInfo",
                lambda: self.rpc.call("Filecoin.StateMinerInfo", miner_id, chain_head),
            )
        except RpcError as e:
            raise ProviderLookupError(
                f"Cannot obtain miner info for {miner_id}: {e}",
                status_code=e.status_code,
            ) from e
        return info.get("PeerId") or ""

    def get_miner_peer_id(self, miner_id: str) -> str:
        """
        Raises:
            ProviderLookupError: If neither source produced a peer id
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="miner-info") as pool:
            chain_future = pool.submit(self.get_peer_id_from_miner_info, miner_id)
            contract_future = pool.submit(self.contract.get_peer_id, miner_id)

        contract_error = contract_future.exception()
        if contract_error is None and contract_future.result():
            logger.info("Using PeerID from the smart contract.")
            return contract_future.result()

        chain_error = chain_future.exception()
        if chain_error is None and chain_future.result():
            logger.info("Using PeerID from FilecoinMinerInfo.")
            return chain_future.result()

        raise ProviderLookupError(
            f"Failed to obtain Miner's Index Provider PeerID. "
            f"SmartContract query error: {contract_error}. "
            f"StateMinerInfo query error: {chain_error}",
            details={"miner_id": miner_id},
        )
