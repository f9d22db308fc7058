"""Structured document tree produced by the report and serialized by ``visual.html``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(slots=True)
class Text:
    text: str


@dataclass(slots=True)
class Image:
    src: str
    style: str = ""


@dataclass(slots=True)
class Link:
    href: str
    children: list[Node] = field(default_factory=list)

    @property
    def text(self) -> str:
        return plain_text(self.children)


@dataclass(slots=True)
class Heading:
    level: int
    children: list[Node] = field(default_factory=list)

    @property
    def text(self) -> str:
        return plain_text(self.children)


@dataclass(slots=True)
class Paragraph:
    children: list[Node] = field(default_factory=list)


@dataclass(slots=True)
class ListItem:
    children: list[Node] = field(default_factory=list)

    @property
    def text(self) -> str:
        return plain_text(self.children)


@dataclass(slots=True)
class OrderedList:
    items: list[ListItem] = field(default_factory=list)


Node = Union[Text, Image, Link, Heading, Paragraph, ListItem, OrderedList]


@dataclass(slots=True)
class Document:
    children: list[Node] = field(default_factory=list)

    def headings(self, level: int) -> list[Heading]:
        return [n for n in self.children if isinstance(n, Heading) and n.level == level]


def plain_text(nodes: list[Node]) -> str:
    """Concatenated text content, ignoring images."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, (Link, Heading, Paragraph, ListItem)):
            parts.append(plain_text(node.children))
        elif isinstance(node, OrderedList):
            parts.append(plain_text(list(node.items)))
    return "".join(parts)
