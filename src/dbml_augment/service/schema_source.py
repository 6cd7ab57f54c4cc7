"""
Schema source fetcher.

Retrieves raw DBML for an app URL from the external schema extraction API.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import requests

from dbml_augment.models import ServiceConfig
from dbml_augment.service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class SchemaSourceFetcher:
    """Fetches DBML text from the schema extraction service."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ServiceConfig()
        self.session = session or requests.Session()

    def build_url(self, target_url: str) -> str:
        """Substitute the percent-encoded target into the API URL template."""
        return self.config.schema_api_url.format(url=quote(target_url, safe=""))

    def fetch(self, target_url: str) -> str:
        """
        Fetch raw DBML for a target app.

        Args:
            target_url: URL of the app whose schema is requested

        Returns:
            Response body text (may be empty)

        Raises:
            UpstreamUnavailableError: transport failure or non-2xx status
        """
        api_url = self.build_url(target_url)
        logger.info(f"Requesting schema: {api_url}")

        try:
            response = self.session.get(api_url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.warning(f"Schema API request failed: {e}")
            raise UpstreamUnavailableError(self.config.invalid_source_message) from e

        if not response.ok:
            logger.warning(f"Schema API error - status: {response.status_code}")
            raise UpstreamUnavailableError(self.config.invalid_source_message)

        text = response.text
        logger.debug(f"DBML length: {len(text)}")
        return text
