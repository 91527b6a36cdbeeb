"""Exceptions raised by openapi2sdk."""

from typing import Sequence


class SDKError(Exception):
    """Base class for all openapi2sdk errors."""


class SpecLoadError(SDKError):
    """The OpenAPI document could not be fetched or parsed."""


class UnresolvedEndpoint(SDKError):
    """No declared path template matches an access chain."""

    def __init__(self, chain: Sequence[str]):
        self.chain = tuple(chain)
        super().__init__(f"No endpoint matches /{'/'.join(self.chain)}")


class UnsupportedMethod(SDKError):
    """The matched path template does not declare the requested verb."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"Method {method.upper()} not supported on {path}")


class InvalidResponseBody(SDKError):
    """A non-empty response body was not valid JSON."""

    def __init__(self, status: int, text: str):
        self.status = status
        self.text = text
        preview = text if len(text) <= 80 else text[:77] + "..."
        super().__init__(f"Response body is not valid JSON (HTTP {status}): {preview!r}")
