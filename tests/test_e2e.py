"""End-to-end tests for the openapi2sdk command."""

import json
import subprocess
import sys

import pytest
from click.testing import CliRunner

from openapi2sdk import cli, create_sdk

from conftest import FIXTURES, FakeTransport


@pytest.fixture
def fake_api(monkeypatch):
    """Route the CLI's client through a FakeTransport."""
    transport = FakeTransport()

    def fake_create_sdk(spec, **options):
        return create_sdk(spec, transport=transport, **options)

    monkeypatch.setattr(cli, "create_sdk", fake_create_sdk)
    return transport


class TestCLIEndToEnd:
    """End-to-end tests for the openapi2sdk command."""

    def test_help_command(self):
        """openapi2sdk --help works."""
        result = subprocess.run(
            [sys.executable, "-m", "openapi2sdk", "--help"],
            capture_output=True,
            text=True
        )

        assert result.returncode == 0
        assert "call" in result.stdout.lower()

    def test_version_command(self):
        """openapi2sdk --version works."""
        result = subprocess.run(
            [sys.executable, "-m", "openapi2sdk", "--version"],
            capture_output=True,
            text=True
        )

        assert result.returncode == 0
        assert "0.1.0" in result.stdout

    def test_inspect_file(self):
        """inspect lists paths by tag."""
        result = subprocess.run(
            [sys.executable, "-m", "openapi2sdk", "inspect", str(FIXTURES / "petstore.yaml")],
            capture_output=True,
            text=True
        )

        assert result.returncode == 0
        assert "OpenAPI Petstore" in result.stdout
        assert "/pet/{petId}" in result.stdout

    def test_inspect_lists_parameters_and_body(self):
        """inspect shows each operation's parameters and body fields."""
        result = CliRunner().invoke(cli.main, ["inspect", str(FIXTURES / "petstore.yaml")])

        assert result.exit_code == 0
        assert "params: petId" in result.output
        assert "params: status" in result.output
        assert "body: id, name, status" in result.output

    def test_generate_to_file(self, tmp_path):
        """generate writes an importable facade module."""
        output = tmp_path / "petstore_client.py"
        result = subprocess.run(
            [
                sys.executable, "-m", "openapi2sdk",
                "generate",
                str(FIXTURES / "petstore.yaml"),
                "--name", "petstore",
                "--output", str(output)
            ],
            capture_output=True,
            text=True
        )

        assert result.returncode == 0
        assert output.exists()
        compile(output.read_text(), str(output), "exec")

    def test_missing_spec_fails(self, tmp_path):
        """Errors exit with status 1."""
        result = CliRunner().invoke(cli.main, ["inspect", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCallCommand:
    """Tests for calling endpoints from the command line."""

    def test_get_by_segments(self, fake_api):
        """Path segments are joined into a chain."""
        fake_api.add("GET", "http://petstore.swagger.io/v2/pet/7", {"id": 7, "name": "Rex"})

        result = CliRunner().invoke(cli.main, ["call", str(FIXTURES / "petstore.yaml"), "pet", "7"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"id": 7, "name": "Rex"}

    def test_slash_path_and_query(self, fake_api):
        """Slash-separated paths work and --data becomes the query for GET."""
        result = CliRunner().invoke(
            cli.main,
            ["call", str(FIXTURES / "petstore.yaml"), "pet/findByStatus", "-d", '{"status": "sold"}'],
        )

        assert result.exit_code == 0
        assert fake_api.calls[0].url == "http://petstore.swagger.io/v2/pet/findByStatus?status=sold"

    def test_post_with_token_from_env(self, fake_api):
        """--token falls back to the environment."""
        result = CliRunner().invoke(
            cli.main,
            ["call", str(FIXTURES / "petstore.yaml"), "pet", "-X", "post", "-d", '{"name": "Rex"}'],
            env={"OPENAPI2SDK_TOKEN": "env-token"},
        )

        assert result.exit_code == 0
        call = fake_api.calls[0]
        assert call.method == "POST"
        assert call.body == '{"name":"Rex"}'
        assert call.headers["Authorization"] == "Bearer env-token"

    def test_server_error_exit_code(self, fake_api):
        """Server errors print the error body and exit 1."""
        fake_api.add("GET", "http://petstore.swagger.io/v2/pet/0", {"message": "Pet not found"}, status=404)

        result = CliRunner().invoke(cli.main, ["call", str(FIXTURES / "petstore.yaml"), "pet", "0"])

        assert result.exit_code == 1
        assert "HTTP 404" in result.output
        assert "Pet not found" in result.output

    def test_unknown_path(self, fake_api):
        """Resolution failures exit 1 without a request."""
        result = CliRunner().invoke(cli.main, ["call", str(FIXTURES / "petstore.yaml"), "nope"])

        assert result.exit_code == 1
        assert "No endpoint matches /nope" in result.output
        assert fake_api.calls == []

    def test_table_output(self, fake_api):
        """Table output renders rows."""
        fake_api.add("GET", "http://petstore.swagger.io/v2/store/inventory", {"sold": 2, "pending": 1})

        result = CliRunner().invoke(
            cli.main,
            ["call", str(FIXTURES / "petstore.yaml"), "store", "inventory", "--output", "table"],
        )

        assert result.exit_code == 0
        assert "sold" in result.output
        assert "pending" in result.output


@pytest.mark.integration
def test_live_api():
    """Talks to a real API; the /get path needs item access."""
    sdk = create_sdk("https://httpbin.org/spec.json", base_url="https://httpbin.org")

    result = sdk["get"].get({"foo": "bar"})

    assert result["args"]["foo"] == "bar"
