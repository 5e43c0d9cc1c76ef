import httpx
import pytest

from searchbot.config.schema import DEFAULT_USER_AGENT, SearchConfig
from searchbot.search.client import SearchClient
from searchbot.search.duckduckgo import DuckDuckGoProvider
from searchbot.search.errors import SearchConfigError, UnknownProviderError
from searchbot.search.serper import SerperProvider

GOOGLE_PAGE = (
    '<html><body><div id="main">'
    "<div><span>header</span></div>"
    '<div><a href="/url?q=https://one.example.com&amp;sa=U"><h3>One</h3></a><div><div>first</div></div></div>'
    '<div><a href="/url?q=https://two.example.com&amp;sa=U"><h3>Two</h3></a><div><div>second</div></div></div>'
    "</div></body></html>"
)


class FakeResponse:
    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self._error = error

    def raise_for_status(self) -> None:
        if self._error:
            raise self._error

    def json(self):
        raise ValueError("not json")


def _make_config(**overrides) -> SearchConfig:
    return SearchConfig(retry_delay_seconds=0, **overrides)


def _install_google_stub(monkeypatch, calls: list[dict], error: Exception | None = None) -> None:
    class StubClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, url, params=None, headers=None, timeout=None):
            calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
            return FakeResponse(GOOGLE_PAGE, error=error)

    monkeypatch.setattr("searchbot.search.http.httpx.AsyncClient", StubClient)


@pytest.mark.asyncio
async def test_google_search_with_browser_headers(monkeypatch) -> None:
    calls: list[dict] = []
    _install_google_stub(monkeypatch, calls)

    client = SearchClient(_make_config())
    items = await client.search("google", "python")

    assert [item.title for item in items] == ["One", "Two"]
    assert calls[0]["url"] == "https://www.google.com/search"
    assert calls[0]["params"] == {"q": "python"}
    assert calls[0]["headers"]["User-Agent"] == DEFAULT_USER_AGENT
    assert calls[0]["timeout"] == 10.0


@pytest.mark.asyncio
async def test_multiple_terms_are_merged_and_summarized(monkeypatch) -> None:
    calls: list[dict] = []
    _install_google_stub(monkeypatch, calls)

    client = SearchClient(_make_config())
    items = await client.search("google", "a", "b")
    summary = await client.search_summary("google", False, "a", "b")

    assert len(items) == 4
    assert summary == "One\nfirst\n\nTwo\nsecond"


@pytest.mark.asyncio
async def test_provider_outage_yields_empty_results(monkeypatch) -> None:
    calls: list[dict] = []
    _install_google_stub(monkeypatch, calls, error=httpx.HTTPError("boom"))

    client = SearchClient(_make_config())

    assert await client.search("google", "fail") == []
    assert await client.search_summary("google", True, "fail") == ""
    assert len(calls) == 6


@pytest.mark.asyncio
async def test_google_digest(monkeypatch) -> None:
    _install_google_stub(monkeypatch, [])

    client = SearchClient(_make_config())
    text = await client.search_digest(False, "python")

    assert text == "header\n\nOne\nfirst\n\nTwo\nsecond"


@pytest.mark.asyncio
async def test_digest_requires_markup_provider() -> None:
    client = SearchClient(_make_config())

    with pytest.raises(UnknownProviderError):
        await client.search_digest(True, "python", provider="ddg")


@pytest.mark.asyncio
async def test_unknown_provider() -> None:
    client = SearchClient(_make_config())

    with pytest.raises(UnknownProviderError, match="unknown search provider: bing"):
        await client.search("bing", "python")


def test_duckduckgo_alias_resolves_to_ddg() -> None:
    client = SearchClient(_make_config())

    assert isinstance(client.get_provider("DuckDuckGo"), DuckDuckGoProvider)


def test_serper_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("SERPER_API_KEY", raising=False)
    client = SearchClient(_make_config())

    with pytest.raises(SearchConfigError, match="serper api key not configured"):
        client.get_provider("serper")


def test_serper_api_key_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SERPER_API_KEY", "env-key")
    client = SearchClient(_make_config())

    provider = client.get_provider("serper")

    assert isinstance(provider, SerperProvider)
    assert provider.api_key == "env-key"


def test_retry_policy_comes_from_config() -> None:
    client = SearchClient(_make_config(retry_attempts=5))

    assert client.policy.attempts == 5
    assert client.policy.delay_s == 0
