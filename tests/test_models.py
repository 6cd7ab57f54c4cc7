"""Tests for core data models."""

import tempfile
from pathlib import Path

import pytest

from dbml_augment.models import (
    DEFAULT_INVALID_SOURCE_MESSAGE,
    DEFAULT_SCHEMA_API_URL,
    AugmentResult,
    GeneratedRelationship,
    ReferenceKey,
    ServiceConfig,
)


class TestReferenceKey:
    """Tests for ReferenceKey."""

    def test_str(self):
        key = ReferenceKey("orders", "user_id", "users", "id")
        assert str(key) == "orders.user_id-users.id"

    def test_default_target_field(self):
        assert ReferenceKey("orders", "user_id", "users") == ReferenceKey("orders", "user_id", "users", "id")

    def test_hashable(self):
        keys = {ReferenceKey("a", "b_id", "b"), ReferenceKey("a", "b_id", "b")}
        assert len(keys) == 1


class TestGeneratedRelationship:
    """Tests for GeneratedRelationship."""

    def test_to_dbml(self):
        rel = GeneratedRelationship(table="orders", field_name="user_id", referenced_table="users")
        assert rel.to_dbml() == "Ref: orders.user_id > users.id"

    def test_key_targets_id(self):
        rel = GeneratedRelationship(table="orders", field_name="user_id", referenced_table="users")
        assert rel.key == ReferenceKey("orders", "user_id", "users", "id")


class TestAugmentResult:
    """Tests for AugmentResult."""

    def test_to_dict(self):
        result = AugmentResult(
            dbml="Table \"users\" {}",
            tables=["users"],
            generated=[GeneratedRelationship("orders", "user_id", "users")],
        )
        data = result.to_dict()

        assert data["tables"] == ["users"]
        assert data["existing_references"] == 0
        assert data["generated"][0]["referenced_table"] == "users"


class TestServiceConfig:
    """Tests for ServiceConfig."""

    def test_defaults(self):
        config = ServiceConfig()
        assert config.schema_api_url == DEFAULT_SCHEMA_API_URL
        assert config.invalid_source_message == DEFAULT_INVALID_SOURCE_MESSAGE
        assert config.dbdiagram_token is None

    def test_requires_url_placeholder(self):
        with pytest.raises(ValueError):
            ServiceConfig(schema_api_url="https://example.com/schema")

    def test_serialization(self):
        config = ServiceConfig(request_timeout=5, dbdiagram_token="secret")
        restored = ServiceConfig.from_dict(config.to_dict())

        assert restored == config

    def test_load_from_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text(
                "schema_api_url: http://localhost:9000/schema/{url}\n"
                "request_timeout: 12\n"
                "diagram_name: Team Schema\n"
            )
            config = ServiceConfig.load(path, environ={})

        assert config.schema_api_url == "http://localhost:9000/schema/{url}"
        assert config.request_timeout == 12
        assert config.diagram_name == "Team Schema"

    def test_environment_overrides_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text("request_timeout: 12\n")
            config = ServiceConfig.load(
                path,
                environ={
                    "DBML_AUGMENT_REQUEST_TIMEOUT": "3.5",
                    "DBDIAGRAM_API_TOKEN": "tok",
                },
            )

        assert config.request_timeout == 3.5
        assert config.dbdiagram_token == "tok"

    def test_missing_file_uses_defaults(self):
        config = ServiceConfig.load(Path("/nonexistent/config.yaml"), environ={})
        assert config == ServiceConfig()
