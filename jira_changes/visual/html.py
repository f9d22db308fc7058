"""Serialize report documents to an HTML fragment."""

from __future__ import annotations

from html import escape

from jira_changes.features.changes_report.document import (
    Document,
    Heading,
    Image,
    Link,
    ListItem,
    Node,
    OrderedList,
    Paragraph,
    Text,
)


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _render(node: Node) -> str:
    if isinstance(node, Text):
        return escape(node.text, quote=False)
    if isinstance(node, Image):
        style = f' style="{_attr(node.style)}"' if node.style else ""
        return f'<img src="{_attr(node.src)}"{style}/>'
    if isinstance(node, Link):
        return f'<a href="{_attr(node.href)}">{_render_all(node.children)}</a>'
    if isinstance(node, Heading):
        return f"<h{node.level}>{_render_all(node.children)}</h{node.level}>"
    if isinstance(node, Paragraph):
        return f"<p>{_render_all(node.children)}</p>"
    if isinstance(node, ListItem):
        return f"<li>{_render_all(node.children)}</li>"
    if isinstance(node, OrderedList):
        return "<ol>" + "".join(_render(item) for item in node.items) + "</ol>"
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


def _render_all(nodes: list[Node]) -> str:
    return "".join(_render(n) for n in nodes)


def render_html(document: Document) -> str:
    return "\n".join(_render(node) for node in document.children)
