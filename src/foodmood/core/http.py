"""
HTTP helpers shared by the Maps client and the ID-token verifier.

Both only ever issue JSON GETs, so this stays tiny:
- `get_json`: one GET with a fixed User-Agent and timeout; non-2xx raises.
- `retry_after_seconds`: read a server's `Retry-After` hint off an HTTP error.

Callers own the failure policy (the Maps client retries, the verifier answers "no user").
"""

from __future__ import annotations

from typing import Any

import httpx

USER_AGENT = "foodmood/0.1.0 (+https://local)"


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """GET `url` and return the decoded JSON body.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the body is not JSON.
    """
    with httpx.Client(timeout=timeout_seconds, headers={"User-Agent": USER_AGENT}) as client:
        resp = client.get(url, params=params, headers=headers)
    resp.raise_for_status()
    return resp.json()


def retry_after_seconds(exc: httpx.HTTPStatusError) -> float | None:
    """Return the numeric `Retry-After` of a failed response, if the server sent one."""
    value = exc.response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
