"""
Host service around the inference engine.

Fetches schemas from the extraction API, classifies failures, and exposes
the JSON endpoints. The web framework is imported lazily through
`get_app_factory` so the CLI and handler work without it loaded.
"""

from dbml_augment.service.errors import (
    DiagramServiceError,
    EmptySchemaError,
    MissingInputError,
    SchemaServiceError,
    UpstreamUnavailableError,
)
from dbml_augment.service.schema_source import SchemaSourceFetcher
from dbml_augment.service.diagram import DbDiagramClient, DiagramLink
from dbml_augment.service.handler import SchemaRequestHandler


def get_app_factory():
    """Get the create_app factory (requires FastAPI)."""
    from dbml_augment.service.api import create_app
    return create_app


__all__ = [
    "SchemaServiceError",
    "MissingInputError",
    "UpstreamUnavailableError",
    "EmptySchemaError",
    "DiagramServiceError",
    "SchemaSourceFetcher",
    "DbDiagramClient",
    "DiagramLink",
    "SchemaRequestHandler",
    "get_app_factory",
]
