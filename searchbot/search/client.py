"""Unified search client with pluggable providers."""

import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

from searchbot.search.duckduckgo import DuckDuckGoProvider
from searchbot.search.errors import SearchConfigError, UnknownProviderError
from searchbot.search.google import GoogleProvider
from searchbot.search.http import ClientHeaders, HttpFetcher
from searchbot.search.models import ResultItem
from searchbot.search.runner import (
    DigestProvider,
    RetryPolicy,
    SearchProvider,
    run_digests,
    run_queries,
)
from searchbot.search.serper import SerperProvider
from searchbot.search.summary import summarize

if TYPE_CHECKING:
    from searchbot.config.schema import SearchConfig

ProviderName = Literal["google", "ddg", "serper"]


def _build_google(client: "SearchClient") -> SearchProvider:
    return GoogleProvider(client.fetcher, client.config.providers.google)


def _build_ddg(client: "SearchClient") -> SearchProvider:
    return DuckDuckGoProvider(client.fetcher, client.config.providers.ddg)


def _build_serper(client: "SearchClient") -> SearchProvider:
    provider_cfg = client.config.providers.serper
    api_key = provider_cfg.api_key or os.environ.get("SERPER_API_KEY", "")
    if not api_key:
        raise SearchConfigError(
            "serper api key not configured "
            "(set search.providers.serper.apiKey or SERPER_API_KEY)"
        )
    return SerperProvider(client.fetcher, provider_cfg, api_key)


class SearchClient:
    """Provider dispatcher for search, summary and digest requests."""

    _BUILDERS: dict[ProviderName, Callable[["SearchClient"], SearchProvider]] = {
        "google": _build_google,
        "ddg": _build_ddg,
        "serper": _build_serper,
    }
    _ALIASES: dict[str, ProviderName] = {"duckduckgo": "ddg"}

    def __init__(self, config: "SearchConfig | None" = None, fetcher: HttpFetcher | None = None):
        from searchbot.config.schema import SearchConfig

        self.config = config or SearchConfig()
        self.fetcher = fetcher or HttpFetcher(
            ClientHeaders.from_config(self.config),
            timeout=self.config.timeout_seconds,
        )
        self.policy = RetryPolicy.from_config(self.config)

    @classmethod
    def providers(cls) -> list[str]:
        return sorted(cls._BUILDERS)

    def get_provider(self, name: str) -> SearchProvider:
        """Resolve a provider name (or alias) to a configured provider."""
        key = (name or "").strip().lower()
        key = self._ALIASES.get(key, key)
        builder = self._BUILDERS.get(key)
        if builder is None:
            raise UnknownProviderError(f"unknown search provider: {name}")
        return builder(self)

    async def search(self, provider: str, *terms: str) -> list[ResultItem]:
        """Search every term with one provider; never fails on provider errors."""
        return await run_queries(self.get_provider(provider), terms, self.policy)

    async def search_summary(self, provider: str, show_url: bool = True, *terms: str) -> str:
        """Search, deduplicate by URL and render the results as text."""
        return summarize(await self.search(provider, *terms), show_url)

    async def search_digest(
        self,
        show_url: bool = True,
        *terms: str,
        provider: str = "google",
    ) -> str:
        """Flatten each term's raw results page into prose."""
        resolved = self.get_provider(provider)
        if not isinstance(resolved, DigestProvider):
            raise UnknownProviderError(f"{resolved.name} does not support digests")
        return await run_digests(resolved, terms, show_url, self.policy)
