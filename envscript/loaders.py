"""Script body loaders: local files and HTTP resources.

Uses httpx for remote fetches. The response is streamed inside a context
manager so it is closed on every path, including read failures.
"""

from __future__ import annotations

import logging
import os
import re
from urllib.parse import urlsplit

import httpx

from .errors import FileReadError, HTTPRequestError, ResponseReadError, URLParseError

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def read_file(path: str | os.PathLike[str], encoding: str = "utf-8") -> str:
    """Read a whole file as text, line endings untouched. Raises FileReadError."""
    logger.debug("script: reading %s", path)
    try:
        with open(path, encoding=encoding, newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(f"failed to get script from file {path}: {exc}") from exc


def parse_url(link: str) -> httpx.URL:
    """Parse *link* as a URL without touching the network. Raises URLParseError.

    httpx quietly percent-encodes or drops some bad input, so the result is
    also checked for a scheme and host, a clean host and valid ``%`` escapes.
    """
    try:
        url = httpx.URL(link)
    except (httpx.InvalidURL, TypeError) as exc:
        raise URLParseError(f"could not parse {link!r} as a url: {exc}") from exc

    try:
        netloc = urlsplit(link).netloc
    except ValueError as exc:
        raise URLParseError(f"could not parse {link!r} as a url: {exc}") from exc

    if not url.scheme:
        problem = "missing protocol scheme"
    elif not url.host:
        problem = "missing host"
    elif any(ch.isspace() or not ch.isprintable() for ch in netloc):
        problem = "invalid character in host name"
    elif _BAD_ESCAPE.search(link):
        problem = "invalid URL escape"
    else:
        return url
    raise URLParseError(f"could not parse {link!r} as a url: {problem}")


def fetch_url(
    link: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
    check_status: bool = False,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """GET *link* and return the response body as text.

    Args:
        link: http or https URL.
        client: Client to send the request with. A temporary one is created
            (and closed) when omitted; it follows up to 10 redirects.
        timeout: Transport timeout in seconds for a temporary client.
            ``None`` waits indefinitely. Ignored when *client* is given.
        check_status: Raise HTTPRequestError on non-2xx responses instead of
            returning the error body.
        transport: Transport for a temporary client (proxies, mocks).
            Ignored when *client* is given.

    Raises:
        URLParseError: *link* is malformed.
        HTTPRequestError: the request could not be completed.
        ResponseReadError: the body could not be read or decoded.
    """
    url = parse_url(link)
    if client is None:
        with httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        ) as owned:
            return _get_body(owned, url, check_status)
    return _get_body(client, url, check_status)


def _get_body(client: httpx.Client, url: httpx.URL, check_status: bool) -> str:
    logger.debug("script: fetching %s", url)
    try:
        with client.stream("GET", url) as response:
            if not response.is_success:
                if check_status:
                    raise HTTPRequestError(
                        f"could not get script from {url}: HTTP {response.status_code}"
                    )
                logger.warning(
                    "script: %s returned HTTP %d, using response body as script",
                    url,
                    response.status_code,
                )
            try:
                body = response.read()
                return body.decode(response.encoding or "utf-8")
            except (httpx.HTTPError, UnicodeDecodeError, LookupError) as exc:
                raise ResponseReadError(
                    f"could not read the downloaded script from {url}: {exc}"
                ) from exc
    except httpx.RequestError as exc:
        raise HTTPRequestError(f"could not get script from {url}: {exc}") from exc
