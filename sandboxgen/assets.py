"""Extract the body fragment and external resources from an HTML entry."""

from __future__ import annotations

from html.parser import HTMLParser
from typing import List, Optional, Tuple

from .models import HtmlInfo

_EXTERNAL_PREFIXES = ("http://", "https://", "//")

# Elements that belong to an implied <head> when <head> and <body> are omitted.
_HEAD_TAGS = frozenset({"base", "link", "meta", "noscript", "script", "style", "title"})
_STRUCTURAL_TAGS = frozenset({"html", "head", "body"})


class _DocumentParser(HTMLParser):
    """Records landmark offsets and resource references while tokenizing."""

    def __init__(self, document: str) -> None:
        super().__init__(convert_charrefs=True)
        self._document = document
        self._line_starts = _line_starts(document)
        self.html_open_end: Optional[int] = None
        self.html_close_start: Optional[int] = None
        self.head_close_end: Optional[int] = None
        self.body_open_end: Optional[int] = None
        self.body_close_start: Optional[int] = None
        # First offset of body content when <body> is implied.
        self.content_start: Optional[int] = None
        self.resources: List[Tuple[int, str]] = []
        self._open_head_tags = 0

    def handle_starttag(self, tag, attrs):
        start = self._offset()
        end = start + len(self.get_starttag_text() or "")
        if tag == "html" and self.html_open_end is None:
            self.html_open_end = end
        elif tag == "body" and self.body_open_end is None:
            self.body_open_end = end
        self._mark_content(tag, start)
        if tag in _HEAD_TAGS and tag not in ("base", "link", "meta"):
            self._open_head_tags += 1
        self._collect(tag, dict(attrs), start)

    def handle_startendtag(self, tag, attrs):
        start = self._offset()
        self._mark_content(tag, start)
        self._collect(tag, dict(attrs), start)

    def handle_data(self, data):
        if self.content_start is not None or self._open_head_tags or not data.strip():
            return
        self.content_start = self._offset() + len(data) - len(data.lstrip())

    def handle_endtag(self, tag):
        start = self._offset()
        if tag in _HEAD_TAGS and self._open_head_tags:
            self._open_head_tags -= 1
        if tag == "head" and self.head_close_end is None:
            close = self._document.find(">", start)
            self.head_close_end = close + 1 if close >= 0 else start
        elif tag == "body" and self.body_open_end is not None and self.body_close_start is None:
            self.body_close_start = start
        elif tag == "html" and self.html_close_start is None:
            self.html_close_start = start

    def _mark_content(self, tag: str, offset: int) -> None:
        if self.content_start is not None or self._open_head_tags:
            return
        if tag not in _HEAD_TAGS and tag not in _STRUCTURAL_TAGS:
            self.content_start = offset

    def _collect(self, tag: str, attrs: dict, offset: int) -> None:
        url: Optional[str] = None
        if tag == "link":
            rel = (attrs.get("rel") or "").lower().split()
            if not rel or "stylesheet" in rel:
                url = attrs.get("href")
        elif tag == "script":
            url = attrs.get("src")
        if url and url.strip().startswith(_EXTERNAL_PREFIXES):
            self.resources.append((offset, url.strip()))

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column


def _line_starts(document: str) -> List[int]:
    starts = [0]
    index = document.find("\n")
    while index >= 0:
        starts.append(index + 1)
        index = document.find("\n", index + 1)
    return starts


def extract_html_info(document: Optional[str]) -> HtmlInfo:
    """Split an HTML document into its body markup and external resource URLs.

    The body is the inner markup of ``<body>``; without an explicit body the
    implied one is used: everything after ``</head>``, or, when ``<head>`` is
    omitted too, everything from the first element or text that is not head
    content. A bare fragment is therefore its own body. Resources are absolute URLs referenced by
    ``<link>`` stylesheets and ``<script src>`` outside the body, in first-seen
    order with duplicates removed. Body-level references stay in the body
    markup, which keeps extraction idempotent on its own output.
    """
    if not document:
        return HtmlInfo(body=None, external_resources=[])

    parser = _DocumentParser(document)
    try:
        parser.feed(document)
        parser.close()
    except AssertionError:
        # Older parsers assert on malformed marked sections; keep what was seen.
        pass

    start, end = _body_region(parser, len(document))
    resources: List[str] = []
    seen = set()
    for offset, url in parser.resources:
        if start <= offset < end or url in seen:
            continue
        seen.add(url)
        resources.append(url)

    return HtmlInfo(body=document[start:end].strip(), external_resources=resources)


def _body_region(parser: _DocumentParser, length: int) -> Tuple[int, int]:
    if parser.body_open_end is not None:
        start = parser.body_open_end
        if parser.body_close_start is not None:
            return start, parser.body_close_start
        if parser.html_close_start is not None and parser.html_close_start >= start:
            return start, parser.html_close_start
        return start, length

    end = parser.html_close_start if parser.html_close_start is not None else length
    if parser.head_close_end is not None:
        start = parser.head_close_end
    elif parser.content_start is not None:
        # Leading head-only elements belong to the implied <head>.
        start = parser.content_start
    else:
        start = end
    return start, max(start, end)


__all__ = ["extract_html_info"]
