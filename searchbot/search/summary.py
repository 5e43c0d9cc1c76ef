"""Merge result items by URL and render them as plain text."""

from collections.abc import Iterable

from searchbot.search.models import ResultItem


def deduplicate(items: Iterable[ResultItem]) -> list[ResultItem]:
    """Keep one item per URL: first-seen position, last-seen content."""
    pages: dict[str, ResultItem] = {}
    for item in items:
        pages[item.url] = item
    return list(pages.values())


def render_item(item: ResultItem, show_url: bool = True) -> str:
    lines: list[str] = []
    if show_url:
        lines.append(item.url)
    if item.title:
        lines.append(item.title)
    lines.append(item.description)
    return "\n".join(lines)


def summarize(items: Iterable[ResultItem], show_url: bool = True) -> str:
    """
    Render deduplicated items as text blocks separated by a blank line.

    Blocks that render to identical text are collapsed even when their URLs
    differ, so with show_url=False mirrored pages appear once.
    """
    blocks = (render_item(item, show_url) for item in deduplicate(items))
    return "\n\n".join(dict.fromkeys(blocks))
