"""Execution of resolved calls against the API."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .cache import ResourceCache
from .errors import InvalidResponseBody, UnsupportedMethod
from .logs import redact_headers
from .matcher import resolve_template
from .parser import Specification
from .tokens import TokenStore
from .transport import Transport, TransportResponse
from .urls import build_cache_key, build_query_string, build_url

logger = logging.getLogger(__name__)

VERBS = ("get", "post", "put", "patch", "delete")
BODY_VERBS = ("post", "put", "patch")


@dataclass
class ServerError:
    """A non-2xx response, returned to the caller instead of raised.

    Falsy, so ``if not result:`` separates failures from data.
    """

    status: int
    error: Any
    path: str
    method: str

    ok = False

    def __bool__(self) -> bool:
        return False


def is_server_error(result: Any) -> bool:
    return isinstance(result, ServerError)


@dataclass
class PreparedRequest:
    """Everything needed to send one call over the transport."""

    path: str
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None


class RequestExecutor:
    """Turns an access chain and a verb into an HTTP call and its result."""

    def __init__(
        self,
        spec: Specification,
        base_url: str,
        transport: Transport,
        tokens: TokenStore,
        cache: ResourceCache,
    ):
        self.spec = spec
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.tokens = tokens
        self.cache = cache

    def prepare(self, chain: Sequence[str], method: str, payload: Any = None) -> PreparedRequest:
        """Resolve the endpoint and build URL, headers and body without sending anything."""
        method = method.lower()
        path = resolve_template(self.spec.paths, chain)

        template = self.spec.template(path)
        if template is None or template.operation(method) is None:
            raise UnsupportedMethod(method, path)

        url = build_url(self.base_url, path, chain)

        # GET payload -> query parameters
        if method == "get" and payload is not None:
            url += build_query_string(payload)

        headers = self.tokens.authorization_header()

        body = None
        if method in BODY_VERBS and payload is not None:
            headers["Content-Type"] = "application/json"
            # Compact: no whitespace after separators
            body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

        return PreparedRequest(path=path, method=method, url=url, headers=headers, body=body)

    def execute(self, chain: Sequence[str], method: str, payload: Any = None) -> Any:
        """Make the call and interpret the response.

        Returns the cached resource for GET, the parsed body for other
        verbs, or a :class:`ServerError` for non-2xx responses.
        """
        request = self.prepare(chain, method, payload)

        logger.debug(
            "%s %s headers=%s",
            request.method.upper(),
            request.url,
            redact_headers(request.headers),
        )
        response = self.transport.request(
            request.method.upper(), request.url, request.headers, request.body
        )
        data = self._parse_body(response)

        if not response.ok:
            logger.debug("%s %s -> %s", request.method.upper(), request.url, response.status)
            return ServerError(
                status=response.status,
                error=data,
                path=request.path,
                method=request.method,
            )

        if request.method == "get":
            key = build_cache_key(request.path, chain, payload)
            return self.cache.get_or_create(key, data)

        return data

    def _parse_body(self, response: TransportResponse) -> Any:
        if not response.text:
            return None

        try:
            return json.loads(response.text)
        except json.JSONDecodeError as e:
            raise InvalidResponseBody(response.status, response.text) from e
