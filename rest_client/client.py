"""Client - Executes requests and runs the build/execute/normalize pipeline.

Usage:
    response = api(Request(method="GET", base_url="https://api.example.com/items"))

With a custom transport:
    with Client.from_config(ClientConfig(timeout=5.0)) as client:
        response = client.api(request)
        if response.status_code >= 400:
            raise RestError(response)

Each call is a single synchronous attempt: no retries, no backoff. A Client
may be shared between threads; httpx.Client is safe for concurrent use.
"""

from __future__ import annotations

import ssl
from typing import Any

import httpx
from loguru import logger

from rest_client.errors import ConfigError, TransportError
from rest_client.models import ClientConfig, Request, Response
from rest_client.request_builder import build_request_object
from rest_client.response_builder import build_response


def build_client_kwargs(config: ClientConfig) -> dict[str, Any]:
    """Build kwargs for httpx.Client including TLS configuration.

    Raises:
        ConfigError: If the cipher string is rejected by OpenSSL.
    """
    kwargs: dict[str, Any] = {
        "headers": config.headers,
        "follow_redirects": config.follow_redirects,
    }
    # Leaving timeout out keeps the httpx default; None would disable it.
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    if config.proxy:
        kwargs["proxy"] = config.proxy

    # Handle client certificate (mTLS)
    if config.cert and config.key:
        if config.key_password:
            kwargs["cert"] = (config.cert, config.key, config.key_password)
        else:
            kwargs["cert"] = (config.cert, config.key)

    # Handle ciphers - requires creating a custom SSL context
    if config.ciphers:
        ssl_context = ssl.create_default_context()
        try:
            ssl_context.set_ciphers(config.ciphers)
        except ssl.SSLError as e:
            raise ConfigError(f"Invalid cipher string '{config.ciphers}': {e}") from e

        if config.ca_bundle:
            ssl_context.load_verify_locations(config.ca_bundle)
        elif not config.verify_ssl:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE

        kwargs["verify"] = ssl_context
    # Handle server verification without custom ciphers
    elif config.ca_bundle:
        kwargs["verify"] = config.ca_bundle
    elif not config.verify_ssl:
        kwargs["verify"] = False

    return kwargs


class Client:
    """Wraps an httpx.Client and runs requests through it.

    A Client built without an httpx.Client (or via from_config) owns its
    transport and closes it in close(). A caller-supplied httpx.Client stays
    owned by the caller.
    """

    def __init__(self, http_client: httpx.Client | None = None) -> None:
        self._owns_http_client = http_client is None
        self.http_client = http_client if http_client is not None else httpx.Client()

    @classmethod
    def from_config(cls, config: ClientConfig) -> "Client":
        client = cls(httpx.Client(**build_client_kwargs(config)))
        client._owns_http_client = True
        return client

    def __enter__(self) -> "Client":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def make_request(self, request: httpx.Request) -> httpx.Response:
        """Send request, returning the response with its body still unread.

        The caller must close the returned response; build_response does.
        Client-level default headers fill in any the request does not set.

        Raises:
            TransportError: If the request fails (connection error, timeout,
                TLS failure, etc.). The message is httpx's own text.
                Also raised when this Client has been closed.
        """
        for key, value in self.http_client.headers.multi_items():
            request.headers.setdefault(key, value)

        if self.http_client.is_closed:
            raise TransportError("Cannot send a request, as the client has been closed.")

        logger.debug("Sending {} {}", request.method, request.url)
        try:
            return self.http_client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.warning("{} {} failed: {}", request.method, request.url, e)
            raise TransportError(str(e)) from e

    def api(self, request: Request) -> Response:
        """Build, send and normalize request.

        Stops at the first failing stage. Non-2xx responses are returned, not
        raised; wrap them in RestError to treat them as failures.

        Raises:
            InvalidMethod: If request.method is not a valid HTTP token.
            RequestBuildError: If the URL or headers are rejected.
            TransportError: If sending fails.
            BodyReadError: If the response body cannot be read.
        """
        http_request = build_request_object(request, self.http_client.headers)
        raw = self.make_request(http_request)
        return build_response(raw)

    send = api


# Shared default; it does not own its transport, so close() leaves it usable.
DEFAULT_CLIENT = Client(httpx.Client())


def make_request(request: httpx.Request) -> httpx.Response:
    """Send request with the default client."""
    return DEFAULT_CLIENT.make_request(request)


def api(request: Request) -> Response:
    """Run request through the default client."""
    return DEFAULT_CLIENT.api(request)
