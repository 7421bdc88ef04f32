"""
Retrieval transports: one implementation per supported wire protocol.
"""

from core.http import HttpClient

from .base import CAR_MEDIA_TYPE, BaseTransport, Protocol
from .graphsync_transport import GraphsyncTransport
from .http_transport import HttpTransport


def build_transports(http: HttpClient, lassie_url: str) -> dict[Protocol, BaseTransport]:
    return {
        Protocol.HTTP: HttpTransport(http),
        Protocol.GRAPHSYNC: GraphsyncTransport(http, lassie_url),
    }


__all__ = [
    "CAR_MEDIA_TYPE",
    "BaseTransport",
    "GraphsyncTransport",
    "HttpTransport",
    "Protocol",
    "build_transports",
]
