"""Error types shared by the validator.

Two families of errors matter to callers:

- Operational errors (``BadRequestException``): the submitted data or request
  is wrong. They are reported back with a specific message and the process
  keeps serving.
- Non-operational errors (``ConfigurationException``, ``WorkbookFormatError``
  and anything unexpected): the service is misconfigured or the upload could
  not be parsed at all. They are reported with a generic payload and
  the process is expected to stop.
"""

from __future__ import annotations

from typing import Any

HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_SERVER_ERROR = 500

CRITICAL_ERROR_NAME = "Internal server error"
CRITICAL_ERROR_MESSAGE = "Application will shut down. Please inform the admin team."


class AppError(Exception):
    """Base application error.

    Attributes:
        name: Short human-readable error category
        http_code: Status code a transport layer should answer with
        is_operational: Whether the process can keep serving after this error
    """

    name: str = "Error"
    http_code: int = HTTP_INTERNAL_SERVER_ERROR
    is_operational: bool = True

    def __init__(self, message: str, http_code: int | None = None):
        super().__init__(message)
        self.message = message
        if http_code is not None:
            self.http_code = http_code


class BadRequestException(AppError):
    """The request or its content cannot be validated as submitted.

    Examples: no file uploaded, wrong content type, sheets without a matching
    schema, a schema validator that rejected the batch.
    """

    name = "Bad request error"
    http_code = HTTP_BAD_REQUEST
    is_operational = True


class WorkbookFormatError(AppError):
    """The uploaded bytes could not be parsed as an Excel workbook.

    This is a structural failure of the upload, not a validation result, and
    is handled like any other non-operational error.
    """

    name = "Workbook format error"
    http_code = HTTP_INTERNAL_SERVER_ERROR
    is_operational = False


class ConfigurationException(AppError):
    """Error in the configuration of the server.

    Examples: the dictionary service is not reachable, the dictionary or version
    does not exist, the service was used before a dictionary was loaded, or a
    field referenced by a validation error is not in the dictionary.
    """

    name = "Server configuration error"
    http_code = HTTP_INTERNAL_SERVER_ERROR
    is_operational = False


def is_operational(error: BaseException) -> bool:
    """Return True if the process may keep running after ``error``."""
    return isinstance(error, AppError) and error.is_operational


def error_payload(error: BaseException) -> dict[str, Any]:
    """Build the user-visible payload for an error.

    Operational errors expose their own name and message. Anything else gets
    the generic critical payload with the original message under ``details``.
    """
    if isinstance(error, AppError) and error.is_operational:
        return {"name": error.name, "message": error.message}
    return {
        "name": CRITICAL_ERROR_NAME,
        "message": CRITICAL_ERROR_MESSAGE,
        "details": str(error),
    }


def error_status_code(error: BaseException) -> int:
    """Status code for ``error`` (500 for anything that is not an ``AppError``)."""
    if isinstance(error, AppError):
        return error.http_code
    return HTTP_INTERNAL_SERVER_ERROR
