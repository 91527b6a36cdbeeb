"""Typed facade generator.

Renders a Python module with one method per documented operation. The
methods only spell out the access chain; every call still goes through
the dynamic client, so caching and token handling behave the same.
"""

import keyword
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from jinja2 import Template

from .matcher import split_template
from .parser import Operation, Specification, snake_case
from .runtime import VERBS

RESERVED_ARGS = {"self", "payload"}
RESERVED_METHODS = {"sdk", "connect"}


@dataclass
class FacadeMethod:
    """A generated method."""

    name: str
    verb: str
    path: str
    args: List[str] = field(default_factory=list)
    chain: List[str] = field(default_factory=list)  # Python expressions
    help: str = ""
    fields: List[str] = field(default_factory=list)  # documented payload keys

    @property
    def signature(self) -> str:
        return ", ".join(["self"] + self.args + ["payload=None"])

    @property
    def target(self) -> str:
        """Expression selecting the endpoint, e.g. ``self.sdk['pet'][pet_id]``."""
        return "self.sdk" + "".join(f"[{part}]" for part in self.chain)


@dataclass
class GeneratedFacade:
    """A generated facade module."""

    name: str
    class_name: str
    version: str = "1.0.0"
    description: str = ""
    source: str = ""
    methods: List[FacadeMethod] = field(default_factory=list)

    @property
    def source_literal(self) -> str:
        """Python literal for the default document source."""
        return repr(self.source) if self.source else "None"

    def to_python(self) -> str:
        """Generate Python code for the facade."""
        return FACADE_TEMPLATE.render(facade=self)

    def save(self, path: Union[Path, str]) -> None:
        """Save the generated module to a file."""
        Path(path).write_text(self.to_python())


class FacadeGenerator:
    """Generates a facade module from a parsed OpenAPI document."""

    def generate(self, spec: Specification, name: str, source: str = "") -> GeneratedFacade:
        """Generate a facade from a parsed document."""
        methods = []
        used = set()

        for operation in spec.operations():
            if operation.method.lower() not in VERBS:
                continue
            method = self._generate_method(operation)
            method.name = self._unique(method.name, used)
            methods.append(method)

        return GeneratedFacade(
            name=name,
            class_name=self._class_name(name),
            version=spec.version,
            description=self._clean_text(spec.title) or name,
            source=source,
            methods=methods,
        )

    def _generate_method(self, operation: Operation) -> FacadeMethod:
        """Generate one method from an operation."""
        args = []
        chain = []

        for segment in split_template(operation.path):
            if segment.is_parameter:
                arg = self._identifier(snake_case(segment.name), args)
                args.append(arg)
                chain.append(arg)
            else:
                chain.append(repr(segment.text))

        help_text = (
            self._clean_text(operation.summary)
            or self._clean_text(operation.description)
            or f"{operation.method} {operation.path}"
        )

        return FacadeMethod(
            name=self._identifier(operation.python_name, RESERVED_METHODS),
            verb=operation.method.lower(),
            path=operation.path,
            args=args,
            chain=chain,
            help=help_text,
            fields=[self._clean_text(name) for name in operation.payload_fields],
        )

    def _identifier(self, name: str, taken) -> str:
        """Make ``name`` usable as a Python argument/method name."""
        if keyword.iskeyword(name) or name in RESERVED_ARGS:
            name += "_"
        while name in taken:
            name += "_"
        return name

    def _unique(self, name: str, used: set) -> str:
        candidate = name
        counter = 2
        while candidate in used:
            candidate = f"{name}_{counter}"
            counter += 1
        used.add(candidate)
        return candidate

    def _class_name(self, name: str) -> str:
        """petstore -> PetstoreClient, my-api -> MyApiClient"""
        words = re.split(r'[^a-zA-Z0-9]+', name)
        base = "".join(w[:1].upper() + w[1:] for w in words if w) or "Api"
        if base[0].isdigit():
            base = f"Api{base}"
        return f"{base}Client"

    def _clean_text(self, text: str) -> str:
        """Normalize free-text fields so they are safe in generated docstrings."""
        if not text:
            return ""
        text = re.sub(r"\s+", " ", str(text)).strip()
        return text.replace("\\", "\\\\").replace('"""', "'''")


FACADE_TEMPLATE_STR = '''"""{{ facade.name }} - {{ facade.description }} (v{{ facade.version }})

Auto-generated by openapi2sdk. Do not edit manually.
"""

from openapi2sdk import create_sdk


class {{ facade.class_name }}:
    """{{ facade.description }}"""

    def __init__(self, sdk):
        self.sdk = sdk

    @classmethod
    def connect(cls, source={{ facade.source_literal }}, **options):
        """Load the OpenAPI document and wrap a new client."""
        if source is None:
            raise ValueError("source is required")
        return cls(create_sdk(source, **options))
{%- for m in facade.methods %}

    def {{ m.name }}({{ m.signature }}):
        """{{ m.help }}

        {{ m.verb | upper }} {{ m.path }}
{%- if m.fields %}

        Payload: {{ m.fields | join(", ") }}
{%- endif %}
        """
        return {{ m.target }}.{{ m.verb }}(payload)
{%- endfor %}
'''

FACADE_TEMPLATE = Template(FACADE_TEMPLATE_STR)
