"""
Core data models for the dbml_augment package.

Defines the structures that flow through one augmentation request
(table declarations, field entries, reference keys, generated relationships)
and the service configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_API_URL = "https://bubble-schema-api.onrender.com/api/schema/{url}?format=dbml"
DEFAULT_INVALID_SOURCE_MESSAGE = (
    "The URL you entered isn't a Bubble app. Please enter a URL of a Bubble app."
)


@dataclass(frozen=True)
class TableDeclaration:
    """A `Table "<name>" { ... }` block: its name and raw field body."""
    name: str
    body: str


@dataclass(frozen=True)
class FieldEntry:
    """One field line of a table body."""
    name: str
    type: str


@dataclass(frozen=True)
class ReferenceKey:
    """Deduplication identity of a relationship statement."""
    source_table: str
    source_field: str
    target_table: str
    target_field: str = "id"

    def __str__(self) -> str:
        return f"{self.source_table}.{self.source_field}-{self.target_table}.{self.target_field}"


@dataclass(frozen=True)
class GeneratedRelationship:
    """A relationship synthesized from a foreign-key naming convention."""
    table: str
    field_name: str
    referenced_table: str

    @property
    def key(self) -> ReferenceKey:
        return ReferenceKey(self.table, self.field_name, self.referenced_table, "id")

    def to_dbml(self) -> str:
        """Render as a DBML many-to-one `Ref:` line."""
        return f"Ref: {self.table}.{self.field_name} > {self.referenced_table}.id"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "field": self.field_name,
            "referenced_table": self.referenced_table,
            "referenced_field": "id",
        }


@dataclass
class AugmentResult:
    """Outcome of running the inference pipeline over one document."""
    dbml: str
    tables: List[str] = field(default_factory=list)
    existing_references: int = 0
    generated: List[GeneratedRelationship] = field(default_factory=list)
    table_notes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dbml": self.dbml,
            "tables": list(self.tables),
            "existing_references": self.existing_references,
            "generated": [g.to_dict() for g in self.generated],
            "table_notes": dict(self.table_notes),
        }


@dataclass
class ServiceConfig:
    """Configuration for the schema host service and its collaborators."""
    schema_api_url: str = DEFAULT_SCHEMA_API_URL
    request_timeout: float = 30.0
    invalid_source_message: str = DEFAULT_INVALID_SOURCE_MESSAGE

    # dbdiagram.io
    dbdiagram_api_url: str = "https://api.dbdiagram.io/v1"
    dbdiagram_token: Optional[str] = None
    diagram_name: str = "Database Schema Diagram"

    ENV_OVERRIDES = {
        "DBML_AUGMENT_SCHEMA_API_URL": "schema_api_url",
        "DBML_AUGMENT_REQUEST_TIMEOUT": "request_timeout",
        "DBDIAGRAM_API_TOKEN": "dbdiagram_token",
    }

    def __post_init__(self):
        if isinstance(self.request_timeout, str):
            self.request_timeout = float(self.request_timeout)
        if "{url}" not in self.schema_api_url:
            raise ValueError(f"schema_api_url must contain a {{url}} placeholder: {self.schema_api_url}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "schema_api_url": self.schema_api_url,
            "request_timeout": self.request_timeout,
            "invalid_source_message": self.invalid_source_message,
            "dbdiagram_api_url": self.dbdiagram_api_url,
            "dbdiagram_token": self.dbdiagram_token,
            "diagram_name": self.diagram_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ServiceConfig:
        """Create from dictionary, ignoring unknown keys."""
        defaults = cls()
        return cls(
            schema_api_url=data.get("schema_api_url", defaults.schema_api_url),
            request_timeout=data.get("request_timeout", defaults.request_timeout),
            invalid_source_message=data.get("invalid_source_message", defaults.invalid_source_message),
            dbdiagram_api_url=data.get("dbdiagram_api_url", defaults.dbdiagram_api_url),
            dbdiagram_token=data.get("dbdiagram_token", defaults.dbdiagram_token),
            diagram_name=data.get("diagram_name", defaults.diagram_name),
        )

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> ServiceConfig:
        """
        Load configuration from an optional YAML file and the environment.

        Environment variables take precedence over file values.

        Args:
            path: Optional YAML file with top-level config keys
            environ: Environment mapping (defaults to os.environ)

        Returns:
            ServiceConfig
        """
        data: Dict[str, Any] = {}

        if path:
            path = Path(path)
            if path.exists():
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
                logger.info(f"Loaded service configuration from {path}")
            else:
                logger.warning(f"Configuration file not found: {path}")

        environ = os.environ if environ is None else environ
        for env_name, attr in cls.ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                data[attr] = value

        return cls.from_dict(data)
