"""Google HTML results page adapter."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from searchbot.search.errors import ProtocolError
from searchbot.search.http import HttpFetcher, is_absolute_http_url, query_param
from searchbot.search.models import ResultItem

if TYPE_CHECKING:
    from searchbot.config.schema import GoogleProviderConfig

# Shows up wherever Google served text in an encoding we decoded wrongly.
REPLACEMENT_CHAR = "\ufffd"

_REDIRECT_PREFIXES = ("/url", "/search")
_BLANK_RUN_RE = re.compile(r"\n{2,}")


def extract_google(html: str, skip_blocks: int = 1) -> list[ResultItem]:
    """Extract result items from the top-level blocks of the #main container."""
    blocks = _result_blocks(html)[skip_blocks:]
    while blocks and not blocks[0].contents:
        blocks.pop(0)
    if not blocks:
        raise ProtocolError("google page has no result blocks")

    items: list[ResultItem] = []
    for block in blocks:
        item = _extract_block(block)
        if item is not None:
            items.append(item)
    return items


def extract_google_digest(html: str, show_url: bool = True) -> str:
    """Flatten the #main container into prose, one paragraph group per block."""
    blocks = _result_blocks(html)
    text = "\n\n".join(_render_block(block, show_url) for block in blocks).strip()
    return _BLANK_RUN_RE.sub("\n\n", text).replace(REPLACEMENT_CHAR, "")


def _result_blocks(html: str) -> list[Tag]:
    soup = BeautifulSoup(html, "html.parser")
    main = soup.select_one("#main")
    if main is None:
        raise ProtocolError("google page has no #main container")
    return main.find_all("div", recursive=False)


def _extract_block(block: Tag) -> ResultItem | None:
    link = block.find("a")
    if link is None:
        return None

    href = link.get("href") or ""
    if not href.startswith(_REDIRECT_PREFIXES):
        return None

    url = query_param(href, "q")
    if not is_absolute_http_url(url):
        return None

    heading = link.find("h3")
    title = heading.get_text().strip() if heading else ""
    return ResultItem(
        title=title or None,
        description=_trailing_text(block),
        url=url,
    )


def _trailing_text(block: Tag) -> str:
    children = block.find_all(True, recursive=False)
    if not children:
        return ""
    container = children[-1]
    inner = container.find_all(True, recursive=False)
    target = inner[-1] if inner else container
    return target.get_text().replace(REPLACEMENT_CHAR, "").strip()


def _render_block(block: Tag, show_url: bool) -> str:
    rendered = _render(block, show_url)
    return "" if rendered is None else rendered


def _render(element: Tag, show_url: bool) -> str | None:
    """Render an element depth-first. None means the enclosing block is pruned."""
    href = element.get("href") or ""
    if href.startswith("/search"):
        return None

    children = element.find_all(True, recursive=False)
    if children:
        parts: list[str] = []
        for child in children:
            rendered = _render(child, show_url)
            if rendered is None:
                return None
            parts.append(rendered)
        text = "\n".join(parts).strip()
    else:
        text = element.get_text().strip()

    if show_url and href.startswith("/url"):
        url = query_param(href, "q")
        if url:
            return f"{url}\n{text}"
    return text


class GoogleProvider:
    """Markup-tree provider: scrape the plain HTML results page."""

    name = "google"

    def __init__(self, fetcher: HttpFetcher, config: GoogleProviderConfig):
        self.fetcher = fetcher
        self.config = config

    async def fetch(self, term: str) -> str:
        return await self.fetcher.get_text(self.config.base_url, params={"q": term})

    def extract(self, raw: str) -> list[ResultItem]:
        return extract_google(raw, skip_blocks=self.config.skip_blocks)

    def digest(self, raw: str, show_url: bool) -> str:
        return extract_google_digest(raw, show_url=show_url)
