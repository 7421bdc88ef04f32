"""
Providers Module

Collaborators used by a retrieval check: provider identity resolution,
content index lookup and the JSON-RPC plumbing under them.
"""

from .filecoin_rpc import FilecoinRpcClient
from .ipni_client import IndexProvider, IndexResult, IpniClient, decode_protocol
from .miner_info import MinerInfoClient
from .retry import RetryPolicy, retry_call
from .smart_contract import SmartContractClient, decode_peer_data, encode_get_peer_data

__all__ = [
    "FilecoinRpcClient",
    "IndexProvider",
    "IndexResult",
    "IpniClient",
    "decode_protocol",
    "MinerInfoClient",
    "RetryPolicy",
    "retry_call",
    "SmartContractClient",
    "decode_peer_data",
    "encode_get_peer_data",
]
