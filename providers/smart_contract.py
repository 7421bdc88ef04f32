"""
Module 07 - Providers
File: smart_contract.py

Reads a miner's peer id from the MinerPeerIDMapping contract on the Filecoin
EVM with a plain `eth_call`.

    getPeerData(uint64 minerID) returns (tuple(string peerID, bytes signature))

The call data and return value use the Solidity ABI encoding; only the two
shapes needed here are implemented.
"""

from __future__ import annotations

import logging

from core.crypto import from_hex
from core.schemas import ErrorCodes, ProviderLookupError

from .filecoin_rpc import FilecoinRpcClient

logger = logging.getLogger(__name__)

# keccak256("getPeerData(uint64)")[:4]
GET_PEER_DATA_SELECTOR = "3e2eac07"

WORD = 32


def parse_miner_number(miner_id: str) -> int:
    """`f01234` -> 1234"""
    digits = miner_id[2:] if miner_id[:2] in ("f0", "t0") else miner_id
    if not digits.isdigit():
        raise ValueError(f"Not a miner actor id: {miner_id!r}")
    return int(digits)


def encode_get_peer_data(miner_number: int) -> str:
    if not 0 <= miner_number < 2**64:
        raise ValueError(f"Miner number out of uint64 range: {miner_number}")
    return "0x" + GET_PEER_DATA_SELECTOR + miner_number.to_bytes(WORD, "big").hex()


def _word(data: bytes, offset: int) -> int:
    if offset + WORD > len(data):
        raise ValueError("ABI data truncated")
    return int.from_bytes(data[offset:offset + WORD], "big")


def decode_peer_data(data: bytes) -> str:
    """Return the peerID field of an ABI-encoded PeerData tuple."""
    if not data:
        return ""
    tuple_start = _word(data, 0)
    string_start = tuple_start + _word(data, tuple_start)
    length = _word(data, string_start)
    begin = string_start + WORD
    if begin + length > len(data):
        raise ValueError("ABI string truncated")
    return data[begin:begin + length].decode("utf-8")


class SmartContractClient:
    """Read-only client for the peer id mapping contract."""

    def __init__(self, rpc: FilecoinRpcClient, contract_address: str) -> None:
        self.rpc = rpc
        self.contract_address = contract_address

    def get_peer_id(self, miner_id: str) -> str:
        """
        Returns:
            The registered peer id, or "" if the miner has no mapping

        Raises:
            ProviderLookupError: If the call or decoding fails
        """
        try:
            call = {
                "to": self.contract_address,
                "data": encode_get_peer_data(parse_miner_number(miner_id)),
            }
            result = self.rpc.call("eth_call", call, "latest")
            peer_id = decode_peer_data(from_hex(result or "0x"))
        except Exception as e:
            raise ProviderLookupError(
                f"Error fetching peer ID from contract for miner {miner_id}: {e}",
                details={"code": ErrorCodes.CONTRACT_CALL_FAILED},
            ) from e
        # TODO: verify PeerData.signature once the signing scheme is published
        return peer_id
