"""Lectern dictionary service client.

Lectern serves versioned data dictionaries. The validator only needs one
call: fetch a dictionary by name and version.

References:
    - Lectern: https://github.com/overture-stack/lectern
"""

import logging
from typing import Any

import requests
from pydantic import ValidationError

from pdcm_validator.clients.base import DEFAULT_TIMEOUT, HTTPClientBase
from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.exceptions import ConfigurationException

logger = logging.getLogger(__name__)


class LecternClient(HTTPClientBase):
    """Client for a Lectern dictionary service.

    Example:
        >>> with LecternClient("http://localhost:3000") as client:
        ...     dictionary = client.load_dictionary("CancerModels_Dictionary", "1.0")
        ...     print(dictionary.schema_names)
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, **kwargs: Any):
        super().__init__(base_url, timeout=timeout, **kwargs)

    def _fetch_error(self, name: str, version: str) -> ConfigurationException:
        return ConfigurationException(
            f"Could not fetch dictionary from {self.base_url}. "
            f"Check that Lectern is running and that a dictionary named [{name}] with version {version} exists."
        )

    def fetch_dictionary(self, name: str, version: str) -> dict[str, Any]:
        """Fetch the raw dictionary document.

        Args:
            name: Dictionary name
            version: Dictionary version

        Returns:
            The dictionary as a JSON object

        Raises:
            ConfigurationException: If the service is unreachable or has no such dictionary
        """
        url = f"{self.base_url}/dictionaries"
        try:
            body = self._get_json(url, params={"name": name, "version": version})
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to fetch dictionary {name} {version}: {e}")
            raise self._fetch_error(name, version) from e

        # The listing endpoint answers with a list; a direct lookup with an object
        if isinstance(body, list):
            body = body[0] if body else None
        if not isinstance(body, dict):
            logger.error(f"No dictionary {name} {version} returned by {url}")
            raise self._fetch_error(name, version)
        return body

    def load_dictionary(self, name: str, version: str) -> Dictionary:
        """Fetch and parse a dictionary.

        Raises:
            ConfigurationException: If fetching fails or the document is not a valid dictionary
        """
        logger.info(f"Fetching validation dictionary. Name: {name} - Version: {version}")
        body = self.fetch_dictionary(name, version)
        try:
            dictionary = Dictionary.model_validate(body)
        except ValidationError as e:
            raise ConfigurationException(f"Dictionary [{name}] version {version} is not valid: {e}") from e
        logger.info("Dictionary fetched successfully")
        return dictionary
