"""Shared httpx client construction and retry policy."""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from pubreconcile.audit.helpers import get_package_version

__all__ = [
    "HttpClientFactory",
    "TransientHttpError",
    "transient_retry",
    "default_timeout",
    "default_limits",
    "user_agent",
]


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(connect=10.0, read=30.0, write=10.0, pool=10.0)


def default_limits() -> httpx.Limits:
    return httpx.Limits(max_connections=10, max_keepalive_connections=5)


def user_agent() -> str:
    return f"pubreconcile/{get_package_version()}"


class HttpClientFactory:
    """Creates httpx clients with shared defaults.

    Keep one client per source for the whole run; do not create per request.
    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    @staticmethod
    def client(
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> httpx.AsyncClient:
        merged = {"User-Agent": user_agent()}
        merged.update(headers or {})
        return httpx.AsyncClient(
            base_url=base_url or "",
            headers=merged,
            timeout=default_timeout(),
            limits=default_limits(),
            follow_redirects=True,
            transport=transport,
        )


TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


def transient_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, max=10.0) + wait_random(0, 0.5),
        retry=retry_if_exception_type(TransientHttpError),
    )
