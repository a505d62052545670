"""Request Builder - Turns a declarative Request into an httpx.Request.

Applies query parameters, copies caller headers verbatim, and defaults the
Content-Type to application/json when a body is present and the caller did
not set one.
"""

from __future__ import annotations

import re

import httpx

from rest_client.errors import InvalidMethod, RequestBuildError
from rest_client.models import Method, Request
from rest_client.query import add_query_parameters

DEFAULT_CONTENT_TYPE = "application/json"

# RFC 9110 section 5.6.2: method = token, token = 1*tchar
_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def validate_method(method: str) -> str:
    """Return the method to send, raising InvalidMethod if it is not a token.

    An empty method means GET. The token is returned as given; httpx.Request
    uppercases it, so "get" goes on the wire as GET.
    """
    if method == "":
        return Method.GET.value
    if not _TOKEN.fullmatch(method):
        raise InvalidMethod(method)
    return method


def build_request_object(
    request: Request,
    default_headers: httpx.Headers | None = None,
) -> httpx.Request:
    """Build a transport-ready request.

    default_headers (usually the sending client's headers) fill in names the
    request does not set. They count as caller-supplied, so a default
    Content-Type among them wins over application/json.

    Raises:
        InvalidMethod: If request.method is not a valid HTTP token.
        RequestBuildError: If httpx rejects the URL or a header.
    """
    method = validate_method(request.method)
    url = add_query_parameters(request.base_url, request.query_params)

    try:
        http_request = httpx.Request(
            method=method,
            url=url,
            headers=request.headers,
            content=request.body or None,
        )
    except httpx.InvalidURL as e:
        raise RequestBuildError(f"invalid URL {url!r}: {e}") from e
    except UnicodeEncodeError as e:
        # httpx requires ASCII header names and values
        raise RequestBuildError(
            f"non-ASCII character {e.object[e.start:e.end]!r} in request headers"
        ) from e

    if default_headers:
        for key, value in default_headers.multi_items():
            http_request.headers.setdefault(key, value)

    # httpx.Headers lookups are case-insensitive
    if request.body and "content-type" not in http_request.headers:
        http_request.headers["Content-Type"] = DEFAULT_CONTENT_TYPE

    return http_request
