"""Holder for the dictionary used in validations.

The service publishes an immutable ``DictionarySnapshot``. Loading a new
dictionary replaces the snapshot with one attribute assignment, so a
validation that already took the previous snapshot keeps using it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.exceptions import ConfigurationException

logger = logging.getLogger(__name__)

NOT_INITIALIZED_MESSAGE = "Validator Service not initialized, you should call create first."


class DictionaryProvider(Protocol):
    """Anything that can load a dictionary by name and version."""

    def load_dictionary(self, name: str, version: str) -> Dictionary:
        """Load a dictionary or raise ConfigurationException."""
        ...


class FileDictionaryProvider:
    """Loads a dictionary from a JSON file on disk.

    The file may hold a single dictionary or a list of dictionaries (the shape
    Lectern answers with); the entry matching name and version is used.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_dictionary(self, name: str, version: str) -> Dictionary:
        try:
            with self.path.open(encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationException(f"Could not read dictionary file {self.path}: {e}") from e

        candidates = document if isinstance(document, list) else [document]
        for candidate in candidates:
            try:
                dictionary = Dictionary.model_validate(candidate)
            except ValidationError as e:
                raise ConfigurationException(f"Dictionary file {self.path} is not valid: {e}") from e
            if dictionary.name == name and dictionary.version == version:
                return dictionary

        raise ConfigurationException(
            f"Dictionary file {self.path} does not contain a dictionary named [{name}] with version {version}."
        )


@dataclass(frozen=True)
class DictionarySnapshot:
    """A published dictionary together with the identity it was requested under."""

    dictionary: Dictionary
    name: str
    version: str
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DictionaryService:
    """Loads dictionaries through a provider and publishes the current one.

    Example:
        >>> service = DictionaryService(LecternClient("http://localhost:3000"))
        >>> service.load_validation_dictionary("CancerModels_Dictionary", "1.0")
        >>> snapshot = service.current()
    """

    def __init__(self, provider: DictionaryProvider):
        self.provider = provider
        self._snapshot: DictionarySnapshot | None = None

    def load_validation_dictionary(self, name: str, version: str) -> DictionarySnapshot:
        """Fetch a dictionary and make it the one used for validations.

        Raises:
            ConfigurationException: If the provider cannot supply the dictionary
        """
        dictionary = self.provider.load_dictionary(name, version)
        snapshot = DictionarySnapshot(dictionary=dictionary, name=name, version=version)
        self._snapshot = snapshot
        logger.info(f"Using dictionary {name} version {version} ({len(dictionary.schemas)} schemas)")
        return snapshot

    def reload(self) -> DictionarySnapshot:
        """Load the current dictionary name and version again.

        Raises:
            ConfigurationException: If nothing was loaded before or the reload fails
        """
        current = self.current()
        return self.load_validation_dictionary(current.name, current.version)

    def current(self) -> DictionarySnapshot:
        """Return the published snapshot.

        Raises:
            ConfigurationException: If no dictionary has been loaded yet
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise ConfigurationException(NOT_INITIALIZED_MESSAGE)
        return snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None
