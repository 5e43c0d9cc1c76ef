import asyncio

import pytest

from searchbot.search.errors import ProtocolError, TransientNetworkError
from searchbot.search.models import ResultItem
from searchbot.search.runner import RetryPolicy, run_digests, run_queries

pytestmark = pytest.mark.asyncio

NO_WAIT = RetryPolicy(attempts=3, delay_s=0.0)


def _item(url: str) -> ResultItem:
    return ResultItem(title=url, description="d", url=url)


class ScriptedProvider:
    """Provider whose per-term behavior is a list of outcomes, one per attempt."""

    name = "scripted"

    def __init__(self, outcomes: dict[str, list], delays: dict[str, float] | None = None):
        self.outcomes = outcomes
        self.delays = delays or {}
        self.attempts: dict[str, int] = {}
        self.completed: list[str] = []

    async def fetch(self, term: str):
        self.attempts[term] = self.attempts.get(term, 0) + 1
        if term in self.delays:
            await asyncio.sleep(self.delays[term])
        outcome = self.outcomes[term].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        self.completed.append(term)
        return outcome

    def extract(self, raw):
        if raw == "malformed":
            raise ProtocolError("no results container")
        return [_item(url) for url in raw]

    def digest(self, raw, show_url: bool) -> str:
        prefix = "url:" if show_url else ""
        return "\n".join(f"{prefix}{url}" for url in raw)


async def test_always_failing_term_returns_empty_after_exact_budget() -> None:
    provider = ScriptedProvider({"t": [TransientNetworkError("down")] * 5})

    result = await run_queries(provider, ["t"], NO_WAIT)

    assert result == []
    assert provider.attempts["t"] == 3


async def test_retry_then_success() -> None:
    provider = ScriptedProvider(
        {"t": [TransientNetworkError("timeout"), "malformed", ["https://ok.com"]]}
    )

    result = await run_queries(provider, ["t"], NO_WAIT)

    assert [item.url for item in result] == ["https://ok.com"]
    assert provider.attempts["t"] == 3


async def test_output_follows_term_order_not_completion_order() -> None:
    provider = ScriptedProvider(
        {"slow": [["https://slow.com"]], "fast": [["https://fast.com"]]},
        delays={"slow": 0.05},
    )

    result = await run_queries(provider, ["slow", "fast"], NO_WAIT)

    assert provider.completed == ["fast", "slow"]
    assert [item.url for item in result] == ["https://slow.com", "https://fast.com"]


async def test_failed_term_does_not_affect_others() -> None:
    provider = ScriptedProvider(
        {
            "a": [["https://a.com"]],
            "b": [RuntimeError("boom")] * 3,
            "c": [["https://c1.com", "https://c2.com"]],
        }
    )

    result = await run_queries(provider, ["a", "b", "c"], NO_WAIT)

    assert [item.url for item in result] == ["https://a.com", "https://c1.com", "https://c2.com"]


async def test_terms_run_concurrently() -> None:
    provider = ScriptedProvider(
        {f"t{i}": [["https://x.com"]] for i in range(5)},
        delays={f"t{i}": 0.05 for i in range(5)},
    )
    loop = asyncio.get_running_loop()

    start = loop.time()
    await run_queries(provider, [f"t{i}" for i in range(5)], NO_WAIT)

    assert loop.time() - start < 0.2


async def test_backoff_sleeps_between_attempts(monkeypatch) -> None:
    slept: list[float] = []

    async def fake_sleep(delay: float) -> None:
        slept.append(delay)

    provider = ScriptedProvider({"t": [TransientNetworkError("x")] * 3})
    policy = RetryPolicy(attempts=3, delay_s=0.5, backoff=2.0, jitter=0.0)
    monkeypatch.setattr("searchbot.search.runner.asyncio.sleep", fake_sleep)

    await run_queries(provider, ["t"], policy)

    assert slept == [0.5, 1.0]


async def test_delay_grows_exponentially_with_bounded_jitter() -> None:
    policy = RetryPolicy(attempts=4, delay_s=1.0, backoff=2.0, jitter=0.1)

    assert 4.0 <= policy.delay_for(3) <= 4.4
    assert RetryPolicy(delay_s=0.0).delay_for(2) == 0.0


async def test_digests_join_per_term_text_in_order() -> None:
    provider = ScriptedProvider(
        {
            "a": [["https://a.com"]],
            "b": [TransientNetworkError("x")] * 3,
            "c": [["https://c.com"]],
        },
        delays={"a": 0.03},
    )

    text = await run_digests(provider, ["a", "b", "c"], show_url=True, policy=NO_WAIT)

    assert text == "url:https://a.com\n\n---\n\n\n\n---\n\nurl:https://c.com"
