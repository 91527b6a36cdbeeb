"""Tests for path template matching."""

import pytest

from openapi2sdk.errors import UnresolvedEndpoint
from openapi2sdk.matcher import (
    Segment,
    find_template,
    resolve_template,
    split_template,
)

TEMPLATES = [
    "/auth/login",
    "/users",
    "/users/me",
    "/users/{id}",
    "/users/{id}/posts/{postId}",
]


class TestSegment:
    """Tests for template segments."""

    def test_parameter_segment(self):
        """Braced segments are parameters."""
        segment = Segment("{id}")

        assert segment.is_parameter
        assert segment.name == "id"
        assert segment.matches("42069")

    def test_literal_segment(self):
        """Literal segments only match themselves."""
        segment = Segment("users")

        assert not segment.is_parameter
        assert segment.matches("users")
        assert not segment.matches("Users")

    def test_split_drops_empty_parts(self):
        """Leading and trailing slashes don't produce segments."""
        assert split_template("/users/{id}/") == (Segment("users"), Segment("{id}"))


class TestFindTemplate:
    """Tests for matching access chains to templates."""

    def test_parameter_matches_any_literal(self):
        """A parameter position accepts any value."""
        assert find_template(TEMPLATES, ["users", "42069"]) == "/users/{id}"

    def test_length_must_match(self):
        """Extra segments don't match a shorter template."""
        assert find_template(["/users/{id}"], ["users", "42069", "extra"]) is None

    def test_literals_match_exactly(self):
        """Literal positions must be equal."""
        assert find_template(TEMPLATES, ["auth", "login"]) == "/auth/login"
        assert find_template(TEMPLATES, ["auth", "logout"]) is None

    def test_multiple_parameters(self):
        """Every parameter position is filled positionally."""
        assert find_template(TEMPLATES, ["users", "1", "posts", "2"]) == "/users/{id}/posts/{postId}"

    def test_first_declared_match_wins(self):
        """Declaration order breaks ties between literal and parameter paths."""
        assert find_template(TEMPLATES, ["users", "me"]) == "/users/me"
        assert find_template(["/users/{id}", "/users/me"], ["users", "me"]) == "/users/{id}"

    def test_empty_chain_matches_root(self):
        """The root template has no segments."""
        assert find_template(["/users", "/"], []) == "/"

    def test_resolve_raises_with_chain(self):
        """Unmatched chains raise an error naming the attempted path."""
        with pytest.raises(UnresolvedEndpoint) as exc_info:
            resolve_template(TEMPLATES, ["nope", "1"])

        assert exc_info.value.chain == ("nope", "1")
        assert "/nope/1" in str(exc_info.value)
