"""Path template matching."""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .errors import UnresolvedEndpoint


@dataclass(frozen=True)
class Segment:
    """One ``/``-separated part of a path template."""

    text: str

    @property
    def is_parameter(self) -> bool:
        return len(self.text) > 2 and self.text.startswith("{") and self.text.endswith("}")

    @property
    def name(self) -> str:
        """Parameter name without braces, or the literal text."""
        return self.text[1:-1] if self.is_parameter else self.text

    def matches(self, literal: str) -> bool:
        # Parameters accept anything, literals must be exact
        return self.is_parameter or self.text == literal


def split_template(template: str) -> Tuple[Segment, ...]:
    """Split ``/users/{id}`` into its non-empty segments."""
    return tuple(Segment(part) for part in template.split("/") if part)


def template_matches(segments: Sequence[Segment], chain: Sequence[str]) -> bool:
    """Check whether a chain of literals fits a template, position by position."""
    if len(segments) != len(chain):
        return False
    return all(segment.matches(literal) for segment, literal in zip(segments, chain))


def find_template(templates: Iterable[str], chain: Sequence[str]) -> Optional[str]:
    """Return the first template (in declaration order) matching ``chain``."""
    for template in templates:
        if template_matches(split_template(template), chain):
            return template
    return None


def resolve_template(templates: Iterable[str], chain: Sequence[str]) -> str:
    """Like :func:`find_template` but raises when nothing matches."""
    template = find_template(templates, chain)
    if template is None:
        raise UnresolvedEndpoint(chain)
    return template
