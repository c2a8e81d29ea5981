from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from . import config
from .concurrency import BlockingRunner
from .errors import RequestError
from .logging import get_logger

JSON_CONTENT_TYPE = "application/json"
# Every request is treated as fresh; callers cannot re-enable caching.
NO_CACHE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}
HTTP_OK_MIN = 200
HTTP_OK_MAX = 299


def build_headers(headers: Mapping[str, str] | None = None) -> dict[str, str]:
    """Content-Type first so an explicit caller value overrides it."""
    merged: dict[str, str] = {"Content-Type": JSON_CONTENT_TYPE}
    if headers:
        merged.update(headers)
    merged.update(NO_CACHE_HEADERS)
    return merged


@dataclass
class HttpClient:
    """Async JSON client for the issue tracking service.

    The only state held is the connection pool; concurrent calls from several
    controllers need no coordination.
    """

    base_url: str = field(default_factory=lambda: config.API_BASE_URL)
    session: requests.Session | None = None
    runner: BlockingRunner | None = None
    _session: requests.Session = field(init=False, repr=False)
    _runner: BlockingRunner = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._runner = self.runner or BlockingRunner()

    def url_for(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None,
        headers: Mapping[str, str] | None,
        expect_body: bool,
    ) -> Any:
        url = self.url_for(path)
        logger = get_logger()
        start = time.perf_counter()
        try:
            response = self._session.request(
                method,
                url,
                json=json_body,
                headers=build_headers(headers),
            )
        except requests.RequestException:
            logger.log_request(method, url, None, (time.perf_counter() - start) * 1000)
            raise
        logger.log_request(
            method, url, response.status_code, (time.perf_counter() - start) * 1000
        )
        if not HTTP_OK_MIN <= response.status_code <= HTTP_OK_MAX:
            raise RequestError(response.status_code, response.reason or "")
        if not expect_body or not response.content:
            return None
        return response.json()

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        json_body: Any | None = None,
        headers: Mapping[str, str] | None = None,
        expect_body: bool = True,
    ) -> Any:
        return await self._runner.run(
            self._send,
            method,
            path,
            json_body=json_body,
            headers=headers,
            expect_body=expect_body,
        )

    def close(self) -> None:
        # injected session/runner belong to the caller
        if self.runner is None:
            self._runner.close()
        if self.session is None:
            self._session.close()

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["HttpClient", "NO_CACHE_HEADERS", "build_headers"]
