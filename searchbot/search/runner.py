"""Fan a provider out over several query terms with bounded retries."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from loguru import logger

from searchbot.search.models import ResultItem

if TYPE_CHECKING:
    from searchbot.config.schema import SearchConfig

T = TypeVar("T")

DIGEST_SEPARATOR = "\n\n---\n\n"


class SearchProvider(Protocol):
    """fetch/extract pair implemented by every provider variant."""

    name: str

    async def fetch(self, term: str) -> Any: ...

    def extract(self, raw: Any) -> list[ResultItem]: ...


@runtime_checkable
class DigestProvider(Protocol):
    """Providers that can also flatten a raw page into prose."""

    name: str

    async def fetch(self, term: str) -> Any: ...

    def digest(self, raw: Any, show_url: bool) -> str: ...


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Sequential attempts per term, exponential backoff with jitter between them."""

    attempts: int = 3
    delay_s: float = 0.5
    backoff: float = 2.0
    jitter: float = 0.1

    @classmethod
    def from_config(cls, config: SearchConfig) -> RetryPolicy:
        return cls(
            attempts=config.retry_attempts,
            delay_s=config.retry_delay_seconds,
            backoff=config.retry_backoff,
            jitter=config.retry_jitter,
        )

    def delay_for(self, attempt: int) -> float:
        """Wait before the attempt following `attempt` (1-based)."""
        if self.delay_s <= 0:
            return 0.0
        base = self.delay_s * (self.backoff ** (attempt - 1))
        return base + random.uniform(0, base * self.jitter)


async def run_queries(
    provider: SearchProvider,
    terms: Sequence[str],
    policy: RetryPolicy | None = None,
) -> list[ResultItem]:
    """Search every term concurrently; results concatenated in term order."""
    policy = policy or RetryPolicy()

    async def _one(term: str) -> list[ResultItem]:
        async def _attempt() -> list[ResultItem]:
            return provider.extract(await provider.fetch(term))

        return await _with_retry(_attempt, provider.name, term, policy, default=[])

    per_term = await asyncio.gather(*(_one(term) for term in terms))
    return [item for items in per_term for item in items]


async def run_digests(
    provider: DigestProvider,
    terms: Sequence[str],
    show_url: bool = True,
    policy: RetryPolicy | None = None,
) -> str:
    """Build one prose digest per term concurrently and join them in term order."""
    policy = policy or RetryPolicy()

    async def _one(term: str) -> str:
        async def _attempt() -> str:
            return provider.digest(await provider.fetch(term), show_url)

        return await _with_retry(_attempt, provider.name, term, policy, default="")

    digests = await asyncio.gather(*(_one(term) for term in terms))
    return DIGEST_SEPARATOR.join(digests)


async def _with_retry(
    attempt_fn: Callable[[], Awaitable[T]],
    provider_name: str,
    term: str,
    policy: RetryPolicy,
    *,
    default: T,
) -> T:
    attempts = max(1, policy.attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await attempt_fn()
        except Exception as e:
            if attempt == attempts:
                logger.error(
                    "{} search for {!r} failed after {} attempts: {}",
                    provider_name,
                    term,
                    attempts,
                    e,
                )
                break
            delay_s = policy.delay_for(attempt)
            logger.warning(
                "{} search for {!r} failed (attempt {}/{}), retrying in {:.2f}s: {}",
                provider_name,
                term,
                attempt,
                attempts,
                delay_s,
                e,
            )
            if delay_s:
                await asyncio.sleep(delay_s)
    return default
