"""Tests for the Lectern dictionary client."""

import os
from unittest.mock import MagicMock

import pytest
import requests

from pdcm_validator.clients.lectern import LecternClient
from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.exceptions import ConfigurationException

LECTERN_URL = "http://mocked-url/lectern"
EXPECTED_ERROR = (
    f"Could not fetch dictionary from {LECTERN_URL}. Check that Lectern is running and that a "
    "dictionary named [CancerModels_Dictionary] with version 1.0 exists."
)


def _client(body=None, error: Exception | None = None) -> tuple[LecternClient, MagicMock]:
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        response.json.return_value = body
    session.get.return_value = response
    return LecternClient(LECTERN_URL, session=session), session


class TestLecternClient:
    """Tests for the Lectern dictionary client."""

    def test_load_dictionary_from_list(self, dictionary_doc) -> None:
        """Test that the first dictionary of a list answer is used."""
        client, session = _client([dictionary_doc])

        dictionary = client.load_dictionary("CancerModels_Dictionary", "1.0")

        assert isinstance(dictionary, Dictionary)
        assert dictionary.schema_names == ["patient", "patient_sample", "cell_model"]
        session.get.assert_called_once_with(
            f"{LECTERN_URL}/dictionaries",
            params={"name": "CancerModels_Dictionary", "version": "1.0"},
            timeout=client.timeout,
        )

    def test_load_dictionary_from_object(self, dictionary_doc) -> None:
        """Test that a single dictionary object answer is accepted."""
        client, _ = _client(dictionary_doc)
        assert client.load_dictionary("CancerModels_Dictionary", "1.0").name == "CancerModels_Dictionary"

    def test_empty_list_is_configuration_error(self) -> None:
        """Test that an empty answer raises the fetch error message."""
        client, _ = _client([])

        with pytest.raises(ConfigurationException) as exc_info:
            client.load_dictionary("CancerModels_Dictionary", "1.0")

        assert exc_info.value.message == EXPECTED_ERROR

    def test_connection_error_is_configuration_error(self) -> None:
        """Test that a connection failure becomes a non-operational error."""
        client, _ = _client(error=requests.ConnectionError("refused"))

        with pytest.raises(ConfigurationException) as exc_info:
            client.load_dictionary("CancerModels_Dictionary", "1.0")

        assert exc_info.value.message == EXPECTED_ERROR
        assert exc_info.value.is_operational is False

    def test_http_error_is_configuration_error(self) -> None:
        """Test that a non-2xx answer becomes a configuration error."""
        client, session = _client({})
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")

        with pytest.raises(ConfigurationException, match="Check that Lectern is running"):
            client.load_dictionary("CancerModels_Dictionary", "1.0")

    def test_invalid_document_is_configuration_error(self) -> None:
        """Test that a malformed dictionary document is rejected."""
        client, _ = _client([{"schemas": "not a list"}])

        with pytest.raises(ConfigurationException, match="is not valid"):
            client.load_dictionary("CancerModels_Dictionary", "1.0")

    def test_trailing_slash_removed(self) -> None:
        """Test that a trailing slash is stripped from the base URL."""
        client = LecternClient("http://localhost:3000/")
        assert client.base_url == "http://localhost:3000"
        client.close()

    @pytest.mark.integration
    def test_fetch_from_running_lectern(self) -> None:
        """Requires LECTERN_URL pointing at a Lectern with the configured dictionary."""
        url = os.environ.get("LECTERN_URL", "http://localhost:3000")
        name = os.environ.get("DICTIONARY_NAME", "CancerModels_Dictionary")
        version = os.environ.get("DICTIONARY_VERSION", "1.0")

        with LecternClient(url) as client:
            dictionary = client.load_dictionary(name, version)

        assert dictionary.name == name
        assert len(dictionary.schemas) > 0
