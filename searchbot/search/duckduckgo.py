"""DuckDuckGo search adapter (vqd handshake + d.js results endpoint)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup

from searchbot.search.errors import ProtocolError, SearchError
from searchbot.search.http import HttpFetcher, is_absolute_http_url, query_param
from searchbot.search.models import ResultItem

if TYPE_CHECKING:
    from searchbot.config.schema import DuckDuckGoProviderConfig

SAFESEARCH_LEVELS = {"on": 1, "moderate": -1, "off": -2}


def extract_vqd(html: str) -> str:
    """Scrape the vqd token from the preload link or preload script."""
    soup = BeautifulSoup(html, "html.parser")
    candidates = []
    link = soup.select_one("#deep_preload_link")
    if link is not None:
        candidates.append(link.get("href") or "")
    script = soup.select_one("#deep_preload_script")
    if script is not None:
        candidates.append(script.get("src") or "")

    for url in candidates:
        vqd = query_param(url, "vqd")
        if vqd:
            return vqd
    raise ProtocolError("duckduckgo page has no vqd token")


def extract_duckduckgo(payload: Any) -> list[ResultItem]:
    """Map d.js results ({t, a, u}) to result items."""
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        raise ProtocolError("duckduckgo payload has no results array")

    items: list[ResultItem] = []
    for entry in results:
        if not isinstance(entry, dict):
            continue
        url = entry.get("u") or ""
        if not is_absolute_http_url(url):
            continue
        items.append(
            ResultItem(
                title=entry.get("t") or "",
                description=_strip_tags(entry.get("a")),
                url=url,
            )
        )
    return items


def _strip_tags(fragment: Any) -> str:
    if not isinstance(fragment, str):
        return ""
    return BeautifulSoup(fragment, "html.parser").get_text()


def bing_market(region: str) -> str:
    """Turn a kl region like "wt-wt" into the bing_market form "wt-WT"."""
    parts = region.split("-")
    return f"{parts[0]}-{parts[-1].upper()}"


class DuckDuckGoProvider:
    """Script-payload provider: two requests per term."""

    name = "ddg"

    def __init__(self, fetcher: HttpFetcher, config: DuckDuckGoProviderConfig):
        self.fetcher = fetcher
        self.config = config

    async def fetch(self, term: str) -> Any:
        region = self.config.region
        try:
            page = await self.fetcher.get_text(
                self.config.base_url,
                params={
                    "q": term,
                    "kl": region,
                    "p": SAFESEARCH_LEVELS.get(self.config.safesearch, -2),
                },
            )
            vqd = extract_vqd(page)
            return await self.fetcher.get_json(
                self.config.results_url,
                params={
                    "q": term,
                    "kl": region,
                    "l": region,
                    "bing_market": bing_market(region),
                    "s": 0,
                    "vqd": vqd,
                    "o": "json",
                    "sp": 0,
                },
            )
        except ProtocolError:
            raise
        except SearchError as e:
            raise ProtocolError(f"duckduckgo handshake failed: {e}") from e

    def extract(self, raw: Any) -> list[ResultItem]:
        return extract_duckduckgo(raw)
