"""API clients for external services."""

from pdcm_validator.clients.lectern import LecternClient

__all__ = ["LecternClient"]
