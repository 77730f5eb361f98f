"""Markdown rendering of doc comments with cross-reference hooks."""

from __future__ import annotations

import xml.etree.ElementTree as etree
from typing import Callable, Sequence

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.util import AtomicString, code_escape

Resolve = Callable[[str], etree.Element]

# `[:code:]` spans run before backticks so their contents stay literal.
CODE_SPAN_PATTERN = r"\[:((?:.|\n)*?):\]"
CODE_SPAN_PRIORITY = 195

# Bare `[name]` spans run after inline/reference links have had their turn.
IMPLICIT_LINK_PATTERN = r"\[([^\[\]\s\x02\x03][^\[\]\n\x02\x03]*)\]"
IMPLICIT_LINK_PRIORITY = 115


class CodeSpanProcessor(InlineProcessor):
    """Renders `[:...:]` as an inline code element."""

    def handleMatch(self, m, data):  # type: ignore[override]
        element = etree.Element("code")
        element.text = AtomicString(code_escape(m.group(1)))
        return element, m.start(0), m.end(0)


class ImplicitLinkProcessor(InlineProcessor):
    """Hands every bare `[name]` to a resolver callback."""

    def __init__(self, pattern: str, md: Markdown, resolve: Resolve) -> None:
        super().__init__(pattern, md)
        self.resolve = resolve

    def handleMatch(self, m, data):  # type: ignore[override]
        return self.resolve(m.group(1).strip()), m.start(0), m.end(0)


class CrossReferenceExtension(Extension):
    """Registers the code-span syntax and the implicit-link resolver."""

    def __init__(self, resolve: Resolve, **kwargs) -> None:
        self.resolve = resolve
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802 - markdown API
        md.inlinePatterns.register(
            CodeSpanProcessor(CODE_SPAN_PATTERN, md), "apidoc_code_span", CODE_SPAN_PRIORITY
        )
        md.inlinePatterns.register(
            ImplicitLinkProcessor(IMPLICIT_LINK_PATTERN, md, self.resolve),
            "apidoc_implicit_link",
            IMPLICIT_LINK_PRIORITY,
        )


class CommentRenderer:
    """Converts raw comment text to HTML.

    A converter is built per call so the resolver is always bound to the
    context of the comment being rendered.
    """

    def __init__(self, extensions: Sequence[str | Extension] = ()) -> None:
        self.extensions = list(extensions)

    def to_html(self, text: str, resolve: Resolve) -> str:
        converter = Markdown(extensions=[CrossReferenceExtension(resolve), *self.extensions])
        return converter.convert(text)


__all__ = ["CommentRenderer", "CrossReferenceExtension"]
