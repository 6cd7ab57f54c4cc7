"""
Errors raised by the schema host service.

The inference engine itself never raises; these classify failures that
happen around it (missing input, upstream fetch, unusable content).
"""

from __future__ import annotations

from typing import Any, Dict


class SchemaServiceError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class MissingInputError(SchemaServiceError):
    """No source URL or DBML text was supplied."""

    status_code = 400


class UpstreamUnavailableError(SchemaServiceError):
    """The schema source could not be fetched or answered with an error status."""

    status_code = 400


class EmptySchemaError(SchemaServiceError):
    """The fetched text is empty or declares no tables."""

    status_code = 400


class DiagramServiceError(SchemaServiceError):
    """The diagram API is not configured or rejected the request."""

    status_code = 500
