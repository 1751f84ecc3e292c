"""BeautifulSoup-backed page document with change notifications."""

import asyncio
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from colruyt_nutrition.services.watcher import Indicator, MutationStream, Page, PageElement


@dataclass
class SoupIndicator(Indicator):
    """Indicator rendered as a ``div`` inside the document."""

    tag: Tag
    document: BeautifulSoup

    def set_text(self, text: str) -> None:
        self.tag.clear()
        self.tag.append(text)

    def set_reading(self, value: str, annotation: str) -> None:
        self.tag.clear()
        self.tag.append(f"{value} ")
        sub = self.document.new_tag("sub")
        sub.string = annotation
        self.tag.append(sub)


@dataclass(eq=False)
class SoupElement(PageElement):
    """Page element wrapping a BeautifulSoup tag."""

    tag: Tag
    document: BeautifulSoup

    def get_attribute(self, name: str) -> str | None:
        value = self.tag.get(name)
        return value if isinstance(value, str) else None

    def add_marker(self, marker: str) -> None:
        classes = list(self.tag.get("class") or [])
        if marker not in classes:
            classes.append(marker)
        self.tag["class"] = classes

    def align_right(self) -> None:
        style = (self.tag.get("style") or "").strip().rstrip(";")
        declarations = [style] if style else []
        declarations.append("text-align: right")
        self.tag["style"] = "; ".join(declarations)

    def prepend_indicator(self, text: str) -> SoupIndicator:
        div = self.document.new_tag("div")
        div.string = text
        self.tag.insert(0, div)
        return SoupIndicator(tag=div, document=self.document)


class SoupPage(Page):
    """In-memory HTML document that notifies subscribers when it changes."""

    def __init__(self, html: str) -> None:
        self.document = BeautifulSoup(html, "html.parser")
        self._subscribers: list[asyncio.Queue[int]] = []
        self._batches = 0

    def query_all(self, selector: str) -> list[PageElement]:
        return [SoupElement(tag, self.document) for tag in self.document.select(selector)]

    def insert_html(self, parent_selector: str, html: str) -> None:
        """Append an HTML fragment to the first match of ``parent_selector``."""
        parent = self.document.select_one(parent_selector)
        if parent is None:
            raise LookupError(f"No element matches {parent_selector!r}")
        fragment = BeautifulSoup(html, "html.parser")
        for child in list(fragment.contents):
            parent.append(child.extract())
        self.notify()

    def notify(self) -> None:
        """Report one batch of changes to every subscriber."""
        self._batches += 1
        for queue in self._subscribers:
            queue.put_nowait(self._batches)

    def mutations(self) -> "SoupSubscription":
        queue: asyncio.Queue[int] = asyncio.Queue()
        self._subscribers.append(queue)
        return SoupSubscription(page=self, queue=queue)

    def unsubscribe(self, queue: "asyncio.Queue[int]") -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    async def wait_for(self, selector: str, within: PageElement) -> PageElement:
        scope = within.tag if isinstance(within, SoupElement) else self.document
        queue: asyncio.Queue[int] = asyncio.Queue()
        self._subscribers.append(queue)
        try:
            while True:
                found = scope.select_one(selector)
                if found is not None:
                    return SoupElement(found, self.document)
                await queue.get()
        finally:
            self.unsubscribe(queue)

    def to_html(self) -> str:
        return str(self.document)


@dataclass(eq=False)
class SoupSubscription(MutationStream):
    """Change batches of a ``SoupPage``, until closed."""

    page: SoupPage
    queue: "asyncio.Queue[int]"

    def __aiter__(self) -> "SoupSubscription":
        return self

    async def __anext__(self) -> int:
        return await self.queue.get()

    def close(self) -> None:
        self.page.unsubscribe(self.queue)
