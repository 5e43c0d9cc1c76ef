"""Outbound HTTP shared by the search provider adapters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlsplit

import httpx

from searchbot.search.errors import ProtocolError, TransientNetworkError

if TYPE_CHECKING:
    from searchbot.config.schema import SearchConfig

_HTTP_URL_RE = re.compile(r"^https?:")


def is_absolute_http_url(url: Any) -> bool:
    """Check whether a result URL is an absolute http(s) URL."""
    return isinstance(url, str) and bool(_HTTP_URL_RE.match(url))


def query_param(url: str, name: str) -> str:
    """Return the first value of a query-string parameter, or an empty string."""
    values = parse_qs(urlsplit(url).query).get(name)
    return values[0] if values else ""


@dataclass(frozen=True, slots=True)
class ClientHeaders:
    """Client identification presented on every outbound request."""

    user_agent: str
    accept_language: str = ""

    @classmethod
    def from_config(cls, config: SearchConfig) -> ClientHeaders:
        return cls(user_agent=config.user_agent, accept_language=config.accept_language)

    def as_dict(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.accept_language:
            headers["Accept-Language"] = self.accept_language
        return headers


class HttpFetcher:
    """Issue provider requests and translate httpx failures into search errors."""

    def __init__(self, headers: ClientHeaders, timeout: float = 10.0):
        self.headers = headers
        self.timeout = timeout

    async def get_text(self, url: str, *, params: dict[str, Any] | None = None) -> str:
        response = await self._send("GET", url, params=params)
        return response.text

    async def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        response = await self._send("GET", url, params=params)
        return self._decode_json(response, url)

    async def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._send("POST", url, payload=payload, headers=headers)
        return self._decode_json(response, url)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        request_headers = {**self.headers.as_dict(), **(headers or {})}
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                if method == "POST":
                    response = await client.post(
                        url,
                        json=payload,
                        headers=request_headers,
                        timeout=self.timeout,
                    )
                else:
                    response = await client.get(
                        url,
                        params=params,
                        headers=request_headers,
                        timeout=self.timeout,
                    )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientNetworkError(
                f"{method} {url} returned status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransientNetworkError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _decode_json(response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(f"{url} did not return JSON") from e
