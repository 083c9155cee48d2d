"""Thin JSON-over-HTTP helpers built on requests."""

from __future__ import annotations

import logging
from typing import Any

import requests

from src.errors import HttpStatusError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "pet-heaven/0.1 (+animal welfare; non-commercial)"


def build_session(headers: dict[str, str] | None = None) -> requests.Session:
    """Create a requests session with default JSON headers.

    Args:
        headers: Extra headers merged over the defaults.

    Returns:
        Configured requests.Session.
    """
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
    )
    if headers:
        session.headers.update(headers)
    return session


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    source: str = "API",
    timeout: float | None = None,
    **kwargs: Any,
) -> Any:
    """Send a request and decode the JSON body.

    Args:
        session: Session used to send the request.
        method: HTTP method.
        url: Absolute URL.
        source: Service name used in error messages.
        timeout: Optional request timeout in seconds; None waits indefinitely.
        **kwargs: Passed through to ``session.request``.

    Returns:
        Decoded JSON payload, or None for an empty body.

    Raises:
        TransportError: If the service cannot be reached or returns invalid JSON.
        HttpStatusError: If the service answers with a non-2xx status.
    """
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as err:
        raise TransportError(f"Failed to reach {source} at {url}: {err}") from err

    if not response.ok:
        logger.warning("%s %s -> %d %s", method, url, response.status_code, response.reason)
        raise HttpStatusError(
            response.status_code,
            response.reason or "",
            source=source,
            detail=_error_detail(response),
        )

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as err:
        raise TransportError(f"{source} returned invalid JSON from {url}") from err


def _error_detail(response: requests.Response) -> str | None:
    """Pull a human-readable message out of an error body, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in ("error_description", "msg", "message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None
