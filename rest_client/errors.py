"""Error types raised by rest-client.

Every stage of the request pipeline raises a subclass of RestClientError, so
callers can catch the whole family at once or a single failure mode.
"""

from __future__ import annotations

import httpx

from rest_client.models import Response


class RestClientError(Exception):
    """Base class for rest-client errors."""


class ConfigError(RestClientError):
    """Raised when a ClientConfig cannot be turned into a transport."""


class RequestBuildError(RestClientError):
    """Raised when a Request cannot be turned into a transport request."""


class InvalidMethod(RequestBuildError):
    """Raised when the method is not a valid HTTP token."""

    def __init__(self, method: str) -> None:
        super().__init__(f"invalid method {method!r}")
        self.method = method


class TransportError(RestClientError):
    """Raised when executing a request fails (connection error, timeout, etc.).

    The message is the underlying httpx error text, unmodified, so callers
    can match on it. The httpx exception is available as __cause__.
    """

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.__cause__, httpx.TimeoutException)


class BodyReadError(RestClientError):
    """Raised when the response body cannot be read."""


class RestError(RestClientError):
    """A completed response that the caller treats as a failure.

    Never raised by this library; callers construct it, usually for 4xx/5xx
    responses. str(error) is exactly the response body.
    """

    def __init__(self, response: Response) -> None:
        super().__init__(response.body)
        self.response = response

    @classmethod
    def from_response(cls, response: Response) -> RestError | None:
        """Return a RestError for status codes >= 400, None otherwise."""
        if response.status_code >= 400:
            return cls(response)
        return None
