"""Identity-preserving cache for read results.

Every successful read with the same cache key returns the same Python
object. Later reads update that object in place, so code holding on to a
fetched value always sees the latest server state::

    users = sdk.users.get()
    sdk.users.get()          # refreshes ``users``, returns ``users``

Resources come in three shapes, fixed when first created: ``ResourceList``
for JSON arrays, ``ResourceDict`` for JSON objects and ``ResourceBox`` for
everything else (strings, numbers, booleans, ``None``).
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterator, MutableMapping, Optional, Union

logger = logging.getLogger(__name__)


class ResourceList(list):
    """A cached JSON array."""


class ResourceDict(dict):
    """A cached JSON object."""


class ResourceBox:
    """A cached scalar, reachable as ``.value``."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResourceBox):
            return self.value == other.value
        return NotImplemented

    def __repr__(self) -> str:
        return f"ResourceBox({self.value!r})"


Resource = Union[ResourceList, ResourceDict, ResourceBox]


def _is_sequence(data: Any) -> bool:
    return isinstance(data, (list, tuple))


def _is_record(data: Any) -> bool:
    return isinstance(data, Mapping)


def create_resource(data: Any) -> Resource:
    """Build a new resource whose shape follows ``data``."""
    if _is_sequence(data):
        return ResourceList(data)
    if _is_record(data):
        return ResourceDict(data)
    return ResourceBox(data)


def shape_matches(resource: Resource, data: Any) -> bool:
    """Whether ``data`` can be synchronized into ``resource`` without changing its shape."""
    if isinstance(resource, ResourceList):
        return _is_sequence(data)
    if isinstance(resource, ResourceDict):
        return _is_record(data)
    return not (_is_sequence(data) or _is_record(data))


def sync_resource(resource: Resource, data: Any) -> Resource:
    """Overwrite the contents of ``resource`` with ``data``, keeping its identity.

    Callers must check :func:`shape_matches` first.
    """
    if isinstance(resource, ResourceList):
        resource[:] = data
    elif isinstance(resource, ResourceDict):
        for key in [key for key in resource if key not in data]:
            del resource[key]
        # Shallow: nested objects are replaced, not merged
        resource.update(data)
    else:
        resource.value = data
    return resource


class CacheEntry:
    """Owns one resource and keeps it in sync with fresh data."""

    def __init__(self, key: str, data: Any):
        self.key = key
        self.resource = create_resource(data)

    def refresh(self, data: Any) -> Resource:
        """Apply freshly fetched data and return the (usually unchanged) resource."""
        if shape_matches(self.resource, data):
            return sync_resource(self.resource, data)

        # The server changed the shape of this payload; the old object
        # can't represent it, so hand out a new one from now on.
        logger.warning(
            "Cached %s for %s replaced by %s data",
            type(self.resource).__name__,
            self.key,
            type(data).__name__,
        )
        self.resource = create_resource(data)
        return self.resource


class ResourceCache:
    """Cache of read results keyed by :func:`openapi2sdk.urls.build_cache_key`.

    ``store`` may be any mutable mapping, so several clients can share
    entries. Entries are never handed out; callers only see resources.
    """

    def __init__(self, store: Optional[MutableMapping[str, CacheEntry]] = None):
        self._entries = store if store is not None else {}

    def get_or_create(self, key: str, data: Any) -> Resource:
        """Refresh the resource cached under ``key`` or create it."""
        entry = self._entries.get(key)

        if entry is not None:
            logger.debug("Cache hit: %s", key)
            return entry.refresh(data)

        logger.debug("Cache miss: %s", key)
        entry = CacheEntry(key, data)
        self._entries[key] = entry
        return entry.resource

    def clear(self) -> None:
        """Drop every entry. Resources already handed out stop being refreshed."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
