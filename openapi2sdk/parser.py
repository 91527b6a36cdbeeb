"""OpenAPI document loading and the in-memory specification model."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from .errors import SpecLoadError
from .matcher import Segment, split_template
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

HTTP_METHODS = ('get', 'post', 'put', 'patch', 'delete', 'head', 'options')


@dataclass
class Parameter:
    """An operation parameter."""

    name: str
    location: str  # path, query, header, cookie
    required: bool = False
    description: str = ""
    schema_type: str = "string"
    default: Any = None
    enum: List[str] = field(default_factory=list)


@dataclass
class RequestBody:
    """Request body schema."""

    content_type: str = "application/json"
    required: bool = False
    properties: Dict[str, Any] = field(default_factory=dict)
    required_props: List[str] = field(default_factory=list)


@dataclass
class AuthScheme:
    """Authentication scheme."""

    name: str
    type: str  # apiKey, http, oauth2, openIdConnect
    location: str = ""  # header, query, cookie (for apiKey)
    scheme: str = ""  # bearer, basic (for http)
    param_name: str = ""  # name of the header/query param


@dataclass
class Operation:
    """One verb declared on a path template."""

    path: str
    method: str
    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None

    @property
    def payload_fields(self) -> List[str]:
        """Keys a payload may carry: query parameters, then body properties."""
        names = [p.name for p in self.parameters if p.location == "query"]
        if self.request_body:
            names.extend(n for n in self.request_body.properties if n not in names)
        return names

    @property
    def python_name(self) -> str:
        """Method name for this operation in generated code."""
        if self.operation_id:
            # getPetById -> get_pet_by_id
            return snake_case(self.operation_id)

        # Fallback: method + literal path parts, /users/{id} -> get_users_by_id
        segments = split_template(self.path)
        literals = [snake_case(s.text) for s in segments if not s.is_parameter]
        name = '_'.join([self.method.lower()] + literals)
        if segments and segments[-1].is_parameter:
            name += f"_by_{snake_case(segments[-1].name)}"
        return name


@dataclass(frozen=True)
class PathTemplate:
    """A declared path and the operations available on it."""

    path: str
    segments: Tuple[Segment, ...]
    operations: Dict[str, Operation]

    @property
    def methods(self) -> List[str]:
        return list(self.operations)

    def operation(self, method: str) -> Optional[Operation]:
        return self.operations.get(method.lower())


@dataclass(frozen=True)
class Specification:
    """A parsed OpenAPI document. Templates keep the document's order."""

    title: str
    version: str
    description: str = ""
    base_url: str = ""
    templates: Tuple[PathTemplate, ...] = ()
    auth_schemes: Tuple[AuthScheme, ...] = ()

    @property
    def paths(self) -> List[str]:
        """Template strings in declaration order."""
        return [t.path for t in self.templates]

    def template(self, path: str) -> Optional[PathTemplate]:
        for template in self.templates:
            if template.path == path:
                return template
        return None

    def operations(self) -> Iterator[Operation]:
        for template in self.templates:
            yield from template.operations.values()

    def group_by_tag(self) -> Dict[str, List[Operation]]:
        """Group operations by their tags."""
        groups: Dict[str, List[Operation]] = {}

        for operation in self.operations():
            tags = operation.tags or ["default"]
            for tag in tags:
                groups.setdefault(tag, []).append(operation)

        return groups


def snake_case(name: str) -> str:
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    name = re.sub(r'[^a-zA-Z0-9]+', '_', name).strip('_').lower()
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


class OpenAPIParser:
    """Parser for OpenAPI 3.x documents.

    URLs are fetched through ``transport`` so tests can serve documents
    without a network.
    """

    def __init__(self, transport: Optional[Transport] = None):
        self.transport = transport or RequestsTransport()

    def parse(self, source: Union[str, Path]) -> Specification:
        """Parse an OpenAPI document from a file path or URL."""
        raw = self.load(source)
        return self.parse_dict(raw)

    def load(self, source: Union[str, Path]) -> dict:
        """Load the raw document from a file or URL."""
        if isinstance(source, Path):
            source = str(source)

        if source.startswith(('http://', 'https://')):
            raw = self._load_url(source)
        else:
            raw = self._load_file(Path(source))

        if not isinstance(raw, dict):
            raise SpecLoadError(f"OpenAPI document at {source} is not an object")
        return raw

    def _load_url(self, url: str) -> Any:
        logger.debug("Fetching OpenAPI document %s", url)
        response = self.transport.request("GET", url, {"Accept": "application/json"})
        if not response.ok:
            raise SpecLoadError(f"Failed to fetch OpenAPI document: {url} ({response.status})")

        content = response.text
        try:
            # Detect format
            if url.endswith('.yaml') or url.endswith('.yml'):
                return yaml.safe_load(content)
            try:
                return json.loads(content)
            except json.JSONDecodeError:
                return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SpecLoadError(f"Unable to parse OpenAPI document at {url}: {e}") from e

    def _load_file(self, path: Path) -> Any:
        try:
            content = path.read_text()
        except OSError as e:
            raise SpecLoadError(f"Unable to read OpenAPI document {path}: {e}") from e

        try:
            if path.suffix in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SpecLoadError(f"Unable to parse OpenAPI document {path}: {e}") from e

    def parse_dict(self, raw: dict) -> Specification:
        """Parse a raw document dict into a Specification."""
        info = raw.get('info', {})

        # Get base URL from servers
        servers = raw.get('servers', [])
        base_url = servers[0].get('url', '') if servers else ""

        templates = self._parse_paths(raw.get('paths') or {}, raw)

        auth_schemes = self._parse_security_schemes(
            raw.get('components', {}).get('securitySchemes', {})
        )

        return Specification(
            title=info.get('title', 'API'),
            version=str(info.get('version', '1.0.0')),
            description=info.get('description', ''),
            base_url=base_url,
            templates=tuple(templates),
            auth_schemes=tuple(auth_schemes),
        )

    def _parse_paths(self, paths: dict, spec: dict) -> List[PathTemplate]:
        """Parse paths into templates, preserving declaration order."""
        templates = []

        for path, methods in paths.items():
            methods = methods or {}
            # Handle path-level parameters
            path_params = self._parse_parameters(
                methods.get('parameters', []), spec
            )

            operations = {}
            for method, details in methods.items():
                if method.lower() in HTTP_METHODS:
                    operations[method.lower()] = self._parse_operation(
                        path, method.upper(), details or {}, spec, path_params
                    )

            templates.append(PathTemplate(
                path=path,
                segments=split_template(path),
                operations=operations,
            ))

        return templates

    def _parse_operation(
        self,
        path: str,
        method: str,
        details: dict,
        spec: dict,
        path_params: List[Parameter]
    ) -> Operation:
        """Parse a single operation."""
        # Combine path-level and operation-level parameters
        params = path_params.copy()
        params.extend(
            self._parse_parameters(details.get('parameters', []), spec)
        )

        request_body = None
        if 'requestBody' in details:
            request_body = self._parse_request_body(details['requestBody'], spec)

        return Operation(
            path=path,
            method=method,
            operation_id=details.get('operationId', ''),
            summary=details.get('summary', ''),
            description=details.get('description', ''),
            tags=details.get('tags', []),
            parameters=params,
            request_body=request_body,
        )

    def _parse_parameters(self, params: list, spec: dict) -> List[Parameter]:
        """Parse parameters."""
        result = []

        for param in params:
            if '$ref' in param:
                param = self._resolve_ref(param['$ref'], spec)

            schema = param.get('schema', {})

            result.append(Parameter(
                name=param.get('name', ''),
                location=param.get('in', 'query'),
                required=param.get('required', False),
                description=param.get('description', ''),
                schema_type=schema.get('type', 'string'),
                default=schema.get('default'),
                enum=schema.get('enum', []),
            ))

        return result

    def _parse_request_body(self, body: dict, spec: dict) -> RequestBody:
        """Parse request body."""
        if '$ref' in body:
            body = self._resolve_ref(body['$ref'], spec)

        content = body.get('content', {})

        # Prefer JSON
        content_type = 'application/json'
        if content_type not in content:
            content_type = next(iter(content.keys()), 'application/json')

        schema = content.get(content_type, {}).get('schema', {})

        if '$ref' in schema:
            schema = self._resolve_ref(schema['$ref'], spec)

        return RequestBody(
            content_type=content_type,
            required=body.get('required', False),
            properties=schema.get('properties', {}),
            required_props=schema.get('required', []),
        )

    def _parse_security_schemes(self, schemes: dict) -> List[AuthScheme]:
        """Parse security schemes."""
        result = []

        for name, details in schemes.items():
            scheme_type = details.get('type', '')

            auth = AuthScheme(name=name, type=scheme_type)

            if scheme_type == 'apiKey':
                auth.location = details.get('in', 'header')
                auth.param_name = details.get('name', '')
            elif scheme_type == 'http':
                auth.scheme = details.get('scheme', 'bearer')

            result.append(auth)

        return result

    def _resolve_ref(self, ref: str, spec: dict) -> dict:
        """Resolve a local $ref pointer."""
        if not ref.startswith('#/'):
            return {}

        current = spec
        for part in ref[2:].split('/'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return {}

        return current if isinstance(current, dict) else {}
