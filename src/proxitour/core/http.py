"""
HTTP helpers.

The only outbound HTTP the proximity core makes is confirming that a landmark
photo URL resolves. Provider APIs (Places, tour generation, TTS) are called by
other services.
"""

from __future__ import annotations

import httpx


DEFAULT_USER_AGENT = "proxitour/0.1.0 (+https://local)"


def head_ok(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> bool:
    """HEAD `url` (following redirects) and report whether it answered 2xx.

    Raises:
        httpx.HTTPError: On transport errors.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)

    with httpx.Client(timeout=timeout_seconds, follow_redirects=True) as client:
        resp = client.head(url, headers=request_headers)
        return resp.is_success
