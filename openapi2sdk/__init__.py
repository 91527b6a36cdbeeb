"""openapi2sdk - Call OpenAPI-described APIs through a dynamic client."""

__version__ = "0.1.0"

from .cache import ResourceBox, ResourceCache, ResourceDict, ResourceList
from .client import ClientOptions, Endpoint, create_sdk, sdk_from_spec
from .errors import (
    InvalidResponseBody,
    SDKError,
    SpecLoadError,
    UnresolvedEndpoint,
    UnsupportedMethod,
)
from .generator import FacadeGenerator, GeneratedFacade
from .parser import OpenAPIParser, Operation, PathTemplate, Specification
from .runtime import RequestExecutor, ServerError, is_server_error
from .tokens import FileStore, MemoryStore, TokenStore
from .transport import RequestsTransport, TransportResponse

__all__ = [
    "create_sdk",
    "sdk_from_spec",
    "ClientOptions",
    "Endpoint",
    "ServerError",
    "is_server_error",
    "RequestExecutor",
    "ResourceCache",
    "ResourceList",
    "ResourceDict",
    "ResourceBox",
    "TokenStore",
    "MemoryStore",
    "FileStore",
    "RequestsTransport",
    "TransportResponse",
    "OpenAPIParser",
    "Specification",
    "PathTemplate",
    "Operation",
    "FacadeGenerator",
    "GeneratedFacade",
    "SDKError",
    "SpecLoadError",
    "UnresolvedEndpoint",
    "UnsupportedMethod",
    "InvalidResponseBody",
]
