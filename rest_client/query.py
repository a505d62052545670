"""Query string encoding."""

from __future__ import annotations


def add_query_parameters(base_url: str, params: dict[str, str]) -> str:
    """Append params to base_url as ?k=v&k2=v2, keys sorted.

    Values are not percent-encoded; callers escape them beforehand if needed.
    """
    if not params:
        return base_url
    query = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return f"{base_url}?{query}"
