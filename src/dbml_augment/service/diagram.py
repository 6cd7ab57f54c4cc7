"""
dbdiagram.io client for turning DBML into an embeddable diagram.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from dbml_augment.models import ServiceConfig
from dbml_augment.service.errors import DiagramServiceError, MissingInputError

logger = logging.getLogger(__name__)


@dataclass
class DiagramLink:
    """A created diagram and the URL to embed it."""
    diagram_id: str
    embed_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"diagramId": self.diagram_id, "embedUrl": self.embed_url}


class DbDiagramClient:
    """Creates diagrams and embed links through the dbdiagram.io API."""

    EMBED_OPTIONS = {
        "detailLevel": "All",
        "darkMode": "true",
        "highlight": "false",
        "enabled": "true",
    }

    ERROR_BODY_LIMIT = 500

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ServiceConfig()
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "dbdiagram-access-token": self.config.dbdiagram_token or "",
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: Dict[str, Any], label: str) -> Dict[str, Any]:
        url = f"{self.config.dbdiagram_api_url.rstrip('/')}/{path}"
        try:
            response = self.session.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise DiagramServiceError(f"{label} error: {e}") from e

        if not response.ok:
            body = response.text[: self.ERROR_BODY_LIMIT]
            logger.error(f"{label} error - status: {response.status_code}")
            raise DiagramServiceError(f"{label} error: {response.status_code} {body}")

        return response.json()

    def create(self, dbml: str) -> DiagramLink:
        """
        Create a diagram from DBML and an embed link for it.

        Args:
            dbml: Schema text

        Returns:
            DiagramLink

        Raises:
            MissingInputError: dbml is empty
            DiagramServiceError: token missing or API failure
        """
        if not dbml:
            raise MissingInputError("DBML content is required")
        if not self.config.dbdiagram_token:
            raise DiagramServiceError("dbDiagram API token not configured")

        logger.info(f"Creating dbdiagram (DBML length: {len(dbml)})")
        diagram = self._post(
            "diagrams",
            {"name": self.config.diagram_name, "content": dbml},
            "dbDiagram API",
        )
        diagram_id = str(diagram["id"])

        embed = self._post(f"embed_link/{diagram_id}", self.EMBED_OPTIONS, "dbDiagram embed API")

        return DiagramLink(diagram_id=diagram_id, embed_url=embed["url"])
