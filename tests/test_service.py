"""
Tests for the service module.

Tests the schema fetcher, request handler error classification, and the
dbdiagram.io client with mocked HTTP sessions.
"""

from unittest.mock import MagicMock

import pytest
import requests

from dbml_augment.models import DEFAULT_INVALID_SOURCE_MESSAGE, ServiceConfig
from dbml_augment.service import (
    DbDiagramClient,
    DiagramServiceError,
    EmptySchemaError,
    MissingInputError,
    SchemaRequestHandler,
    SchemaSourceFetcher,
    UpstreamUnavailableError,
)

SCHEMA = 'Table "users" { id int }\nTable "orders" { id int\n user_id int }'


def make_response(status_code=200, text="", json_data=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestSchemaSourceFetcher:
    """Tests for SchemaSourceFetcher."""

    def test_build_url_encodes_target(self):
        fetcher = SchemaSourceFetcher(ServiceConfig(schema_api_url="http://api/schema/{url}?format=dbml"))
        assert (
            fetcher.build_url("https://my.app/x?y=1")
            == "http://api/schema/https%3A%2F%2Fmy.app%2Fx%3Fy%3D1?format=dbml"
        )

    def test_fetch(self, session):
        session.get.return_value = make_response(text=SCHEMA)
        fetcher = SchemaSourceFetcher(ServiceConfig(request_timeout=7), session=session)

        assert fetcher.fetch("https://my.app") == SCHEMA
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 7

    def test_non_success_status(self, session):
        session.get.return_value = make_response(status_code=404, text="not found")
        fetcher = SchemaSourceFetcher(session=session)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            fetcher.fetch("https://not.an.app")
        assert exc_info.value.message == DEFAULT_INVALID_SOURCE_MESSAGE
        assert exc_info.value.status_code == 400

    def test_transport_error(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        fetcher = SchemaSourceFetcher(session=session)

        with pytest.raises(UpstreamUnavailableError):
            fetcher.fetch("https://my.app")


class TestSchemaRequestHandler:
    """Tests for SchemaRequestHandler error classification."""

    @pytest.fixture
    def fetcher(self):
        return MagicMock(spec=SchemaSourceFetcher)

    def test_success(self, fetcher):
        fetcher.fetch.return_value = SCHEMA
        status, payload = SchemaRequestHandler(fetcher=fetcher).handle("https://my.app")

        assert status == 200
        assert payload == {"dbml": SCHEMA + "\n\nRef: orders.user_id > users.id"}

    @pytest.mark.parametrize("url", [None, ""])
    def test_missing_url(self, fetcher, url):
        status, payload = SchemaRequestHandler(fetcher=fetcher).handle(url)

        assert status == 400
        assert payload == {"error": "URL is required"}
        fetcher.fetch.assert_not_called()

    def test_upstream_unavailable(self, fetcher):
        fetcher.fetch.side_effect = UpstreamUnavailableError(DEFAULT_INVALID_SOURCE_MESSAGE)
        status, payload = SchemaRequestHandler(fetcher=fetcher).handle("https://my.app")

        assert status == 400
        assert payload == {"error": DEFAULT_INVALID_SOURCE_MESSAGE}

    @pytest.mark.parametrize("text", ["", "   \n  ", "Enum status { active }", "%%%"])
    def test_empty_or_invalid_schema(self, fetcher, text):
        fetcher.fetch.return_value = text
        handler = SchemaRequestHandler(fetcher=fetcher)

        with pytest.raises(EmptySchemaError):
            handler.process("https://my.app")

        status, payload = handler.handle("https://my.app")
        assert status == 400
        assert payload == {"error": DEFAULT_INVALID_SOURCE_MESSAGE}

    def test_custom_message(self, fetcher):
        fetcher.fetch.return_value = ""
        config = ServiceConfig(invalid_source_message="Not a schema source.")
        status, payload = SchemaRequestHandler(config, fetcher=fetcher).handle("https://my.app")

        assert payload == {"error": "Not a schema source."}

    def test_internal_failure(self, fetcher):
        fetcher.fetch.side_effect = RuntimeError("boom")
        status, payload = SchemaRequestHandler(fetcher=fetcher).handle("https://my.app")

        assert status == 500
        assert payload == {"error": "boom"}

    def test_sanitized_before_augment(self, fetcher):
        fetcher.fetch.return_value = SCHEMA.replace("user_id", "user_%id")
        result = SchemaRequestHandler(fetcher=fetcher).process("https://my.app")

        assert "%" not in result.dbml
        assert result.dbml.endswith("Ref: orders.user_id > users.id")


class TestDbDiagramClient:
    """Tests for DbDiagramClient."""

    @pytest.fixture
    def config(self):
        return ServiceConfig(dbdiagram_token="tok", dbdiagram_api_url="https://api.dbdiagram.io/v1/")

    def test_create(self, config, session):
        session.post.side_effect = [
            make_response(json_data={"id": "abc123"}),
            make_response(json_data={"url": "https://dbdiagram.io/e/abc123"}),
        ]
        link = DbDiagramClient(config, session=session).create(SCHEMA)

        assert link.diagram_id == "abc123"
        assert link.to_dict() == {"diagramId": "abc123", "embedUrl": "https://dbdiagram.io/e/abc123"}

        first, second = session.post.call_args_list
        assert first.args[0] == "https://api.dbdiagram.io/v1/diagrams"
        assert first.kwargs["json"] == {"name": "Database Schema Diagram", "content": SCHEMA}
        assert first.kwargs["headers"]["dbdiagram-access-token"] == "tok"
        assert second.args[0] == "https://api.dbdiagram.io/v1/embed_link/abc123"
        assert second.kwargs["json"]["detailLevel"] == "All"

    def test_missing_dbml(self, config, session):
        with pytest.raises(MissingInputError) as exc_info:
            DbDiagramClient(config, session=session).create("")
        assert exc_info.value.message == "DBML content is required"

    def test_missing_token(self, session):
        with pytest.raises(DiagramServiceError) as exc_info:
            DbDiagramClient(ServiceConfig(), session=session).create(SCHEMA)
        assert exc_info.value.message == "dbDiagram API token not configured"
        session.post.assert_not_called()

    def test_api_error(self, config, session):
        session.post.return_value = make_response(status_code=422, text="x" * 1000)

        with pytest.raises(DiagramServiceError) as exc_info:
            DbDiagramClient(config, session=session).create(SCHEMA)
        assert exc_info.value.message == "dbDiagram API error: 422 " + "x" * 500
        assert exc_info.value.status_code == 500
