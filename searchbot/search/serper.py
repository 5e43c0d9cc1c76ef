"""Serper Search API adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from searchbot.search.errors import ProtocolError
from searchbot.search.http import HttpFetcher, is_absolute_http_url
from searchbot.search.models import ResultItem

if TYPE_CHECKING:
    from searchbot.config.schema import SerperProviderConfig


def extract_records(records: list[Any]) -> list[ResultItem]:
    """Normalize {title, link|url, snippet|description} records."""
    items: list[ResultItem] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        url = record.get("link") or record.get("url") or ""
        if not is_absolute_http_url(url):
            continue
        items.append(
            ResultItem(
                title=record.get("title") or "",
                description=record.get("snippet") or record.get("description") or "",
                url=url,
            )
        )
    return items


class SerperProvider:
    """JSON-API provider backed by google.serper.dev."""

    name = "serper"

    def __init__(self, fetcher: HttpFetcher, config: SerperProviderConfig, api_key: str):
        self.fetcher = fetcher
        self.config = config
        self.api_key = api_key

    async def fetch(self, term: str) -> list[Any]:
        payload = await self.fetcher.post_json(
            self.config.base_url,
            payload={"q": term, "num": self.config.count},
            headers={
                "Content-Type": "application/json",
                "X-API-KEY": self.api_key,
            },
        )
        organic = payload.get("organic") if isinstance(payload, dict) else None
        if not isinstance(organic, list):
            raise ProtocolError("serper payload has no organic results")
        return organic

    def extract(self, raw: list[Any]) -> list[ResultItem]:
        return extract_records(raw)
