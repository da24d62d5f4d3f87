"""Exception hierarchy for the log service client."""

from __future__ import annotations

import json
from typing import Any


class SlsError(Exception):
    """Base class of every error raised by the client."""


class RequestError(SlsError):
    """The request could not be built, encoded, compressed or signed."""


class MissingParameterError(RequestError):
    """A required request parameter was not given."""

    def __init__(self, parameter: str) -> None:
        super().__init__(f"missing required parameter: {parameter}")
        self.parameter = parameter


class ResponseError(SlsError):
    """A successful HTTP response could not be decoded."""

    def __init__(self, message: str, request_id: str | None = None) -> None:
        text = message if request_id is None else f"{message} (request id: {request_id})"
        super().__init__(text)
        self.message = message
        self.request_id = request_id


class ServerError(SlsError):
    """The server answered with a non-200 status."""

    def __init__(
        self,
        http_status: int,
        error_code: str,
        error_message: str,
        request_id: str | None = None,
    ) -> None:
        super().__init__(
            f"server error: status={http_status}, code={error_code}, "
            f"message={error_message}, request_id={request_id}"
        )
        self.http_status = http_status
        self.error_code = error_code
        self.error_message = error_message
        self.request_id = request_id


class NetworkError(SlsError):
    """The HTTP exchange failed before a response was received."""


def server_error_from_response(
    status: int, request_id: str | None, body: bytes
) -> ServerError:
    """Build a ServerError from an error response body."""
    text = body.decode("utf-8", errors="replace")
    error_code = ""
    error_message = text
    try:
        payload: Any = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error_code = str(payload.get("errorCode", ""))
        error_message = str(payload.get("errorMessage", text))
    return ServerError(status, error_code, error_message, request_id)


def check_required(**kwargs: Any) -> None:
    """Raise MissingParameterError for the first argument that is None."""
    for name, value in kwargs.items():
        if value is None:
            raise MissingParameterError(name)