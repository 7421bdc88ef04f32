"""
Module 06 - Retrieval Transports
File: base.py

Defines the transport interface. A transport turns a provider address and
a CID into a streaming GET that returns a CAR holding the CID's block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from enum import Enum
from typing import Optional

import requests

from core.http import HttpClient
from core.http.client import Timeout

CAR_MEDIA_TYPE = "application/vnd.ipld.car"


class Protocol(str, Enum):
    """Wire protocols a provider can be retrieved over."""

    HTTP = "http"
    GRAPHSYNC = "graphsync"


class BaseTransport(ABC):
    """
    Abstract base class for retrieval transports.

    Subclasses only decide which URL to request; the request itself always
    goes through the shared HttpClient.
    """

    protocol: Protocol

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    @abstractmethod
    def retrieval_url(self, address: str, cid: str) -> str:
        """
        URL that returns a CAR with the top-level block of `cid`.

        Raises:
            AddressError: If the address cannot be used by this transport
        """

    def fetch_block(
        self,
        url: str,
        *,
        timeout: Optional[Timeout] = None,
    ) -> AbstractContextManager[requests.Response]:
        """Open a streaming GET for a URL built by `retrieval_url`."""
        return self.http.stream(
            "GET",
            url,
            headers={"Accept": CAR_MEDIA_TYPE},
            timeout=timeout,
        )
