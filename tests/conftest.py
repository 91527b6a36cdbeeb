"""Shared fixtures: an in-memory transport and a client wired to it."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from openapi2sdk import create_sdk
from openapi2sdk.transport import TransportResponse

FIXTURES = Path(__file__).parent / "fixtures"

OPENAPI_URL = "https://api.local/openapi.json"
BASE_URL = "https://api.local"


@dataclass
class Call:
    """A request seen by FakeTransport."""

    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None


class FakeTransport:
    """Transport that records requests and replays canned responses.

    Unrouted requests get ``200 {"ok": true}``. When several responses are
    queued for one route they are served in order and the last one repeats.
    """

    def __init__(self):
        self.calls: List[Call] = []
        self.routes: Dict[Tuple[str, str], List[TransportResponse]] = {}

    def add(self, method: str, url: str, data=None, status: int = 200, text: Optional[str] = None):
        if text is None:
            text = "" if data is None else json.dumps(data)
        self.routes.setdefault((method.upper(), url), []).append(
            TransportResponse(status=status, text=text)
        )
        return self

    def request(self, method, url, headers, body=None):
        self.calls.append(Call(method=method, url=url, headers=dict(headers), body=body))

        queue = self.routes.get((method.upper(), url))
        if not queue:
            return TransportResponse(status=200, text=json.dumps({"ok": True}))
        return queue.pop(0) if len(queue) > 1 else queue[0]

    @property
    def api_calls(self) -> List[Call]:
        """Calls other than the bootstrap document fetch."""
        return [c for c in self.calls if c.url != OPENAPI_URL]


@pytest.fixture
def spec_document() -> dict:
    return json.loads((FIXTURES / "openapi.json").read_text())


@pytest.fixture
def transport(spec_document) -> FakeTransport:
    return FakeTransport().add("GET", OPENAPI_URL, spec_document)


@pytest.fixture
def sdk(transport):
    return create_sdk(OPENAPI_URL, transport=transport)
