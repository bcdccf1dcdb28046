"""Runtime configuration.

Settings are read from environment variables. A ``.env`` file in the working
directory is loaded first, so local overrides do not need to be exported.

Environment variables:
    LECTERN_URL: Base URL of the Lectern dictionary service
    DICTIONARY_NAME: Name of the dictionary to validate against
    DICTIONARY_VERSION: Version of that dictionary
    HTTP_TIMEOUT: Timeout in seconds for dictionary requests
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_LECTERN_URL = "http://localhost:3000"
DEFAULT_DICTIONARY_NAME = "CancerModels_Dictionary"
DEFAULT_DICTIONARY_VERSION = "1.0"
DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Validator settings.

    Attributes:
        lectern_url: Base URL of the Lectern service
        dictionary_name: Dictionary used for validation
        dictionary_version: Dictionary version used for validation
        http_timeout: Request timeout in seconds
    """

    lectern_url: str = DEFAULT_LECTERN_URL
    dictionary_name: str = DEFAULT_DICTIONARY_NAME
    dictionary_version: str = DEFAULT_DICTIONARY_VERSION
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> Settings:
        """Build settings from the environment.

        Args:
            load_env_file: If True, load ``.env`` before reading variables

        Returns:
            Settings with defaults for anything not set

        Raises:
            ValueError: If HTTP_TIMEOUT is not a number
        """
        if load_env_file:
            load_dotenv()

        timeout = os.environ.get("HTTP_TIMEOUT")
        return cls(
            lectern_url=os.environ.get("LECTERN_URL", DEFAULT_LECTERN_URL).rstrip("/"),
            dictionary_name=os.environ.get("DICTIONARY_NAME", DEFAULT_DICTIONARY_NAME),
            dictionary_version=os.environ.get("DICTIONARY_VERSION", DEFAULT_DICTIONARY_VERSION),
            http_timeout=float(timeout) if timeout else DEFAULT_HTTP_TIMEOUT,
        )
