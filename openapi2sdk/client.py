"""The dynamic client.

Attribute and item access build up a path; a verb call sends it::

    sdk = create_sdk("https://api.example.com/openapi.json")
    sdk.auth.login.post({"email": "me@example.com", "password": "secret"})
    user = sdk.users[42].get()
    sdk.users[42].patch(email="new@example.com")

Nothing is checked against the OpenAPI document until the verb is
called. Path segments that clash with the reserved names below (or start
with an underscore) are reached with item access: ``sdk["get"]``.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, MutableMapping, Optional, Union

from .cache import CacheEntry, ResourceCache
from .errors import SDKError
from .parser import OpenAPIParser, Specification
from .runtime import RequestExecutor
from .tokens import KeyValueStore, TokenStore
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)


class Endpoint:
    """A position in the API's path tree, bound to one client."""

    __slots__ = ("_executor", "_chain")

    def __init__(self, executor: RequestExecutor, chain: Iterable[str] = ()):
        self._executor = executor
        self._chain = tuple(chain)

    def _child(self, segment: str) -> "Endpoint":
        return Endpoint(self._executor, self._chain + (segment,))

    def __getattr__(self, name: str) -> "Endpoint":
        # Keeps copy, pickle and friends from probing for dunders as paths
        if name.startswith("_"):
            raise AttributeError(name)
        return self._child(name)

    def __getitem__(self, segment: Any) -> "Endpoint":
        return self._child(str(segment))

    def __iter__(self):
        raise TypeError("Endpoint is not iterable")

    def __repr__(self) -> str:
        return f"<Endpoint /{'/'.join(self._chain)}>"

    # Token and cache controls

    @property
    def token(self) -> Optional[str]:
        return self._executor.tokens.get()

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self._executor.tokens.set(value)

    def get_token(self) -> Optional[str]:
        """Return the current bearer token, or None."""
        return self._executor.tokens.get()

    def set_token(self, value: Optional[str]) -> None:
        """Set the bearer token sent with every request; None clears it."""
        self._executor.tokens.set(value)

    def clear(self) -> None:
        """Empty the resource cache."""
        self._executor.cache.clear()

    # Verbs

    def _call(self, method: str, payload: Any, fields: dict) -> Any:
        if fields:
            if payload is None:
                payload = fields
            elif isinstance(payload, Mapping):
                payload = {**payload, **fields}
            else:
                raise TypeError("Keyword fields can only be combined with a mapping payload")
        return self._executor.execute(self._chain, method, payload)

    def get(self, payload: Any = None, /, **fields: Any) -> Any:
        """Send a GET; the payload becomes the query string."""
        return self._call("get", payload, fields)

    def post(self, payload: Any = None, /, **fields: Any) -> Any:
        """Send a POST with the payload as JSON body."""
        return self._call("post", payload, fields)

    def put(self, payload: Any = None, /, **fields: Any) -> Any:
        """Send a PUT with the payload as JSON body."""
        return self._call("put", payload, fields)

    def patch(self, payload: Any = None, /, **fields: Any) -> Any:
        """Send a PATCH with the payload as JSON body."""
        return self._call("patch", payload, fields)

    def delete(self, payload: Any = None, /, **fields: Any) -> Any:
        """Send a DELETE. Any payload is ignored; DELETE requests carry no body."""
        return self._call("delete", payload, fields)


@dataclass
class ClientOptions:
    """Settings for :func:`create_sdk`."""

    base_url: Optional[str] = None
    cache: Optional[MutableMapping[str, CacheEntry]] = None
    storage_key: Optional[str] = None
    token: Optional[str] = None
    store: Optional[KeyValueStore] = None
    transport: Optional[Transport] = None
    timeout: int = 30


def default_base_url(source: Union[str, Path], spec: Specification) -> str:
    """Base URL used when none is configured.

    For a URL source this is the source with a trailing ``/openapi.json``
    removed; for a file it is the document's first server URL.
    """
    source = str(source)
    if source.startswith(("http://", "https://")):
        return re.sub(r"/openapi\.json$", "", source)
    if spec.base_url:
        return spec.base_url
    raise SDKError(f"No base URL for {source}: pass base_url or declare servers in the document")


def sdk_from_spec(spec: Specification, base_url: str, options: Optional[ClientOptions] = None) -> Endpoint:
    """Build a client for an already parsed document."""
    options = options or ClientOptions()

    transport = options.transport or RequestsTransport(timeout=options.timeout)
    tokens = TokenStore(
        token=options.token,
        storage_key=options.storage_key,
        store=options.store,
    )
    cache = options.cache if isinstance(options.cache, ResourceCache) else ResourceCache(options.cache)

    executor = RequestExecutor(
        spec=spec,
        base_url=base_url,
        transport=transport,
        tokens=tokens,
        cache=cache,
    )
    return Endpoint(executor)


def create_sdk(
    source: Union[str, Path],
    options: Optional[ClientOptions] = None,
    **kwargs: Any,
) -> Endpoint:
    """Load an OpenAPI document and return the root :class:`Endpoint`.

    ``source`` is a URL (fetched once through the transport) or a local
    JSON/YAML file. Settings come from ``options`` or, equivalently, from
    keyword arguments named like the :class:`ClientOptions` fields.
    """
    if options is None:
        options = ClientOptions(**kwargs)
    elif kwargs:
        raise TypeError("Pass either options or keyword settings, not both")

    if options.transport is None:
        options = replace(options, transport=RequestsTransport(timeout=options.timeout))

    spec = OpenAPIParser(options.transport).parse(source)
    logger.debug("Loaded %s v%s with %d paths", spec.title, spec.version, len(spec.templates))

    base_url = options.base_url or default_base_url(source, spec)
    return sdk_from_spec(spec, base_url, options)
