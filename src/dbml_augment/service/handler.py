"""
Request handler for the schema endpoint.

Classifies fetch and validation failures before the inference engine runs,
then returns a status code and JSON payload.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from dbml_augment.discovery import DbmlParser, RelationshipInferrer
from dbml_augment.models import AugmentResult, ServiceConfig
from dbml_augment.service.errors import (
    EmptySchemaError,
    MissingInputError,
    SchemaServiceError,
)
from dbml_augment.service.schema_source import SchemaSourceFetcher

logger = logging.getLogger(__name__)


class SchemaRequestHandler:
    """
    Fetches a schema for a URL and augments it with inferred relationships.

    Error classification:
    - MissingInput: no URL (400)
    - UpstreamUnavailable: fetch failed or non-2xx (400)
    - EmptyOrInvalidSchema: empty text or no tables (400)
    - anything else: InternalFailure (500) with the raw description
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        fetcher: Optional[SchemaSourceFetcher] = None,
        parser: Optional[DbmlParser] = None,
    ):
        self.config = config or ServiceConfig()
        self.fetcher = fetcher or SchemaSourceFetcher(self.config)
        self.parser = parser or DbmlParser()

    def process(self, url: Optional[str]) -> AugmentResult:
        """
        Fetch, validate and augment.

        Raises:
            SchemaServiceError: on any classified failure
        """
        if not url:
            raise MissingInputError("URL is required")

        dbml = self.fetcher.fetch(url)

        if not dbml or not dbml.strip():
            logger.warning("Empty DBML returned")
            raise EmptySchemaError(self.config.invalid_source_message)

        dbml = self.parser.sanitize(dbml)
        if not self.parser.extract_table_names(dbml):
            logger.warning("DBML contains no table declarations")
            raise EmptySchemaError(self.config.invalid_source_message)

        return RelationshipInferrer(dbml, parser=self.parser).augment()

    def handle(self, url: Optional[str]) -> Tuple[int, Dict[str, Any]]:
        """Return (status_code, payload) for a schema request."""
        try:
            result = self.process(url)
        except SchemaServiceError as e:
            return e.status_code, e.to_dict()
        except Exception as e:
            logger.exception("Unexpected failure while processing schema")
            return 500, {"error": str(e) or "An unknown error occurred"}

        return 200, {"dbml": result.dbml}
