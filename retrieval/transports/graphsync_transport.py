"""
Module 06 - Retrieval Transports
File: graphsync_transport.py

GraphSync retrieval through a local Lassie daemon. The daemon speaks the
trustless-gateway HTTP API and dials the provider named in `providers`.
"""

from urllib.parse import urlencode

from core.http import HttpClient

from .base import BaseTransport, Protocol


class GraphsyncTransport(BaseTransport):
    protocol = Protocol.GRAPHSYNC

    def __init__(self, http: HttpClient, lassie_url: str) -> None:
        super().__init__(http)
        self.lassie_url = lassie_url.rstrip("/")

    def retrieval_url(self, address: str, cid: str) -> str:
        query = urlencode(
            {
                "dag-scope": "block",
                "protocols": self.protocol.value,
                "providers": address,
            }
        )
        return f"{self.lassie_url}/ipfs/{cid}?{query}"
