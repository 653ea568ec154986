"""Bearer-token authenticated GET shared by the Jira and Bitbucket providers."""

import logging

import httpx

logger = logging.getLogger(__name__)

TIMEOUT = httpx.Timeout(30.0, connect=10.0)


def _log_error_body(response: httpx.Response) -> None:
    try:
        body = response.text
    except (httpx.StreamError, UnicodeDecodeError) as exc:
        logger.debug("Could not read error response: %s", exc)
        return
    if body:
        logger.warning("Error response: %s", body)


def get(url: str, token: str | None) -> str | None:
    """GET url and return the body, or None on any failure.

    A blank token skips the request. Non-200 responses and transport errors
    are logged, never raised.
    """
    if not token or not token.strip():
        logger.debug("No token configured, skipping request to %s", url)
        return None

    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }
    try:
        response = httpx.get(url, headers=headers, timeout=TIMEOUT)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Request to %s failed: %s", url, exc)
        return None

    if response.status_code != 200:
        logger.warning("API request failed with response code: %s", response.status_code)
        _log_error_body(response)
        return None
    return response.text
