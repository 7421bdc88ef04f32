"""
Module 06 - Retrieval Transports
File: http_transport.py

Trustless-gateway retrieval straight from the provider's HTTP endpoint.
"""

from core.multiformats import get_retrieval_url

from .base import BaseTransport, Protocol


class HttpTransport(BaseTransport):
    protocol = Protocol.HTTP

    def retrieval_url(self, address: str, cid: str) -> str:
        return get_retrieval_url(self.protocol.value, address, cid)
