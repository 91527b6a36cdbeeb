"""URL, query string and cache key construction."""

import json
from collections.abc import Mapping
from typing import Any, List, Sequence, Tuple
from urllib.parse import quote, urlencode

from .matcher import Segment


def build_url(base_url: str, template: str, chain: Sequence[str]) -> str:
    """Substitute the chain's literals into the template's parameter segments.

    ``build_url("https://api.local", "/users/{id}", ["users", "42"])``
    gives ``https://api.local/users/42``. Slashes in the template are kept
    as written; substituted values are percent-encoded.
    """
    parts = template.split("/")
    position = 0

    for index, part in enumerate(parts):
        if not part:
            continue
        if Segment(part).is_parameter:
            parts[index] = quote(str(chain[position]), safe="")
        position += 1

    return base_url.rstrip("/") + "/".join(parts)


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, (list, tuple)):
        # Nested arrays flatten to comma-joined text, empty for null items
        return ",".join("" if item is None else _stringify(item) for item in value)
    return str(value)


def query_pairs(payload: Any) -> List[Tuple[str, str]]:
    """Flatten a read payload into ordered ``(name, value)`` pairs."""
    if not isinstance(payload, Mapping):
        return []

    pairs = []
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            # Arrays repeat the parameter name once per item
            pairs.extend((str(key), _stringify(item)) for item in value)
        else:
            pairs.append((str(key), _stringify(value)))
    return pairs


def build_query_string(payload: Any) -> str:
    """Serialize a payload to ``?a=1&b=2``, or ``""`` when there is nothing to send."""
    query = urlencode(query_pairs(payload))
    return f"?{query}" if query else ""


def canonical_payload(payload: Any) -> str:
    """Stable text form of a payload; key order does not matter."""
    if payload is None:
        return ""
    if isinstance(payload, (Mapping, list, tuple)):
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return str(payload)


def build_cache_key(template: str, chain: Sequence[str], payload: Any = None) -> str:
    """Cache key for a read of ``chain`` matched against ``template``."""
    return f"{template}|{'/'.join(chain)}|{canonical_payload(payload)}"
