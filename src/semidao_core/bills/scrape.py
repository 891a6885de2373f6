"""Declarative row extraction over a parsed HTML page.

A listing is described as a list of FieldRule objects, one per output field.
scrape() applies every rule to every row matched by a CSS selector and
returns one dict per row. Rows are never filtered: a header row made of
<th> cells still yields a dict, with empty text for every <td> rule.

Examples:
    >>> rules = [FieldRule("ref", sel="td:nth-child(2)")]
    >>> scrape(soup, rules, "table#billTable tr")
    [{'ref': 'REF123'}]

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag


@dataclass(frozen=True)
class FieldRule:
    """One column extractor.

    Per row, nodes are selected with ``sel`` (the row itself when None), then:
    - ``fn`` receives the selected nodes and returns the value, or
    - ``attr`` reads that attribute from the first node, or
    - the nodes' concatenated, trimmed text is taken.
    ``parse`` is applied to the result in every case.

    Attributes:
        name: Output key.
        sel: CSS selector relative to the row.
        parse: Converter applied to the raw value.
        attr: Attribute to read instead of text.
        fn: Custom reader over the selected nodes.

    """

    name: str
    sel: str | None = None
    parse: Callable[[Any], Any] | None = None
    attr: str | None = None
    fn: Callable[[list[Tag]], Any] | None = None


def attr_to_str(attr: Any) -> str | None:
    """Convert a BeautifulSoup attribute value to a string (None if absent)."""
    if attr is None:
        return None
    if isinstance(attr, list):
        return " ".join(str(a) for a in attr)
    return str(attr)


def first_attr(nodes: Sequence[Tag], name: str) -> str | None:
    """Return attribute ``name`` of the first node, None if no node or no attribute."""
    if not nodes:
        return None
    return attr_to_str(nodes[0].get(name))


def node_text(nodes: Sequence[Tag]) -> str:
    """Concatenate the text of all nodes and trim it."""
    return "".join(n.get_text() for n in nodes).strip()


def extract_field(row: Tag, rule: FieldRule) -> Any:
    """Apply a single rule to a single row."""
    nodes = row.select(rule.sel) if rule.sel else [row]
    if rule.fn is not None:
        value = rule.fn(nodes)
    elif rule.attr is not None:
        value = first_attr(nodes, rule.attr)
    else:
        value = node_text(nodes)
    if rule.parse is not None:
        value = rule.parse(value)
    return value


def scrape(
    soup: BeautifulSoup | Tag,
    rules: Sequence[FieldRule],
    row_selector: str,
) -> list[dict[str, Any]]:
    """Apply ``rules`` to every node matched by ``row_selector``.

    Args:
        soup: Parsed page (or any subtree).
        rules: Field extractors, applied in order.
        row_selector: CSS selector for the rows.

    Returns:
        One dict per row, in document order.

    """
    return [
        {rule.name: extract_field(row, rule) for rule in rules}
        for row in soup.select(row_selector)
    ]
