"""HTTP transport used for every request the SDK makes."""

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

import requests


@dataclass
class TransportResponse:
    """Status code and body text of an HTTP response."""

    status: int
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Anything that can perform an HTTP request.

    Swap in a fake implementation to test without a network.
    """

    def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[str] = None,
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """Transport backed by a :class:`requests.Session`."""

    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[str] = None,
    ) -> TransportResponse:
        """Make an HTTP request."""
        response = self.session.request(
            method=method.upper(),
            url=url,
            headers=dict(headers),
            data=body.encode("utf-8") if body is not None else None,
            timeout=self.timeout,
        )

        return TransportResponse(status=response.status_code, text=response.text)
