from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

import httpx

from tikgrab.errors import ResolveError
from tikgrab.logging import get_logger

log = get_logger(__name__)


def resolve_redirect(
    url: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 15.0,
) -> str:
    """Follow a single redirect hop, e.g. ``vm.tiktok.com`` short links.

    Returns the ``Location`` target for a 3xx answer and ``url`` itself for
    anything else. The target is not requested again.
    """
    own_client = client is None
    c = client or httpx.Client(timeout=timeout)
    try:
        # Body is never read; only the status line and headers matter.
        with c.stream("GET", url, follow_redirects=False) as r:
            status = r.status_code
            location = r.headers.get("location")
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ResolveError(f"Could not resolve {url}: {exc}") from exc
    finally:
        if own_client:
            c.close()

    if 300 <= status < 400 and location:
        target = urljoin(url, location)
        log.debug(f"{url} -> {target} ({status})")
        return target
    return url
