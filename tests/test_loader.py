"""Tests for schema loading."""

import httpx
import pytest
from pydantic import ValidationError

from gql_nsgen.core.errors import SchemaLoadError
from gql_nsgen.core.loader import SchemaSource, fetch_schema, load_schema, load_schema_file

SDL = "type Query { ok: Boolean }"


class TestSchemaSource:
    """Tests for SchemaSource validation."""

    def test_path(self, tmp_path):
        source = SchemaSource(path=tmp_path / "schema.graphql")
        assert source.label.endswith("schema.graphql")

    def test_url_with_token_and_branch(self):
        source = SchemaSource(url="http://localhost:8000", token="t", branch="main")
        assert source.label == "http://localhost:8000"

    def test_requires_exactly_one_selector(self, tmp_path):
        with pytest.raises(ValidationError, match="exactly one"):
            SchemaSource()
        with pytest.raises(ValidationError, match="exactly one"):
            SchemaSource(path=tmp_path, url="http://localhost:8000")

    def test_token_needs_url(self, tmp_path):
        with pytest.raises(ValidationError, match="only valid with 'url'"):
            SchemaSource(path=tmp_path / "schema.graphql", branch="main")


class TestLoadSchemaFile:
    """Tests for reading schema files."""

    def test_reads_file(self, tmp_path):
        path = tmp_path / "schema.graphql"
        path.write_text(SDL, encoding="utf-8")
        assert load_schema_file(path) == SDL
        assert load_schema(SchemaSource(path=path)) == SDL

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaLoadError) as exc_info:
            load_schema_file(tmp_path / "missing.graphql")
        assert "missing.graphql" in exc_info.value.source


class TestFetchSchema:
    """Tests for fetching from a server."""

    def test_fetch(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=SDL)

        text = fetch_schema(
            "http://infrahub.local:8000/",
            token="secret",
            branch="feature-x",
            transport=httpx.MockTransport(handler),
        )

        assert text == SDL
        request = requests[0]
        assert request.url.path == "/schema.graphql"
        assert request.url.params["branch"] == "feature-x"
        assert request.headers["X-INFRAHUB-KEY"] == "secret"

    def test_no_branch_no_token(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=SDL)

        fetch_schema("http://infrahub.local", transport=httpx.MockTransport(handler))
        assert "branch" not in requests[0].url.params
        assert "X-INFRAHUB-KEY" not in requests[0].headers

    def test_http_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, text="denied"))
        with pytest.raises(SchemaLoadError) as exc_info:
            fetch_schema("http://infrahub.local", transport=transport)
        assert "HTTP 401" in str(exc_info.value)
        assert exc_info.value.source == "http://infrahub.local/schema.graphql"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SchemaLoadError, match="connection refused"):
            fetch_schema("http://infrahub.local", transport=httpx.MockTransport(handler))

    def test_load_schema_from_url(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=SDL))
        assert load_schema(SchemaSource(url="http://infrahub.local"), transport=transport) == SDL
