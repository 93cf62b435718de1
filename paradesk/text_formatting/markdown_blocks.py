"""
A small, closed view of Markdown block structure, built on marko with the GFM
extension (for task-list checkboxes). Downstream code matches on these node kinds
instead of on marko's open-ended element classes, so the rest of Markdown syntax
stays marko's business.
"""

import html
from dataclasses import dataclass, field
from typing import List, Optional

import marko
from marko import block, inline


gfm_markdown = marko.Markdown(extensions=["gfm"])
"""Parser with GitHub-flavored extensions, including `- [x]` task list items."""


@dataclass(frozen=True)
class TextRun:
    """A leaf run of visible text."""

    text: str


@dataclass(frozen=True)
class ParagraphBlock:
    children: List["BlockNode"] = field(default_factory=list)


@dataclass(frozen=True)
class ListItemBlock:
    """
    A list item. `checked` is True or False for task list items (`- [x]`, `- [ ]`)
    and None for plain items (`- foo`).
    """

    checked: Optional[bool] = None
    children: List["BlockNode"] = field(default_factory=list)


@dataclass(frozen=True)
class ListBlock:
    ordered: bool = False
    children: List[ListItemBlock] = field(default_factory=list)


@dataclass(frozen=True)
class RootBlock:
    children: List["BlockNode"] = field(default_factory=list)


@dataclass(frozen=True)
class OtherBlock:
    """
    Any other block or inline element (headings, quotes, emphasis, links, etc.).
    Keeps its children so visible text is still reachable.
    """

    kind: str
    children: List["BlockNode"] = field(default_factory=list)


BlockNode = RootBlock | ListBlock | ListItemBlock | ParagraphBlock | TextRun | OtherBlock


def _checkbox_state(item: block.ListItem) -> Optional[bool]:
    # The GFM extension records the checkbox on the item's leading paragraph.
    if item.children and isinstance(item.children[0], block.Paragraph):
        return getattr(item.children[0], "checked", None)
    return None


def _convert_children(element) -> List[BlockNode]:
    children = getattr(element, "children", None)
    if isinstance(children, list):
        return [convert_element(child) for child in children]
    return []


def convert_element(element) -> BlockNode:
    """
    Convert a parsed marko element (block or inline) to a `BlockNode`.
    """
    match element:
        case block.Document():
            return RootBlock(children=_convert_children(element))
        case block.List():
            items = [
                convert_element(child)
                for child in element.children
                if isinstance(child, block.ListItem)
            ]
            return ListBlock(ordered=element.ordered, children=items)  # type: ignore
        case block.ListItem():
            return ListItemBlock(
                checked=_checkbox_state(element), children=_convert_children(element)
            )
        case block.Paragraph():
            return ParagraphBlock(children=_convert_children(element))
        case inline.RawText():
            # Entity and numeric character references are kept raw by the parser.
            return TextRun(text=html.unescape(element.children))
        case inline.Literal() | inline.CodeSpan():
            return TextRun(text=element.children)
        case inline.LineBreak():
            # A hard break carries no text of its own.
            return TextRun(text="\n" if element.soft else "")
        case inline.Image() | inline.InlineHTML():
            # Alt text and raw HTML aren't visible text.
            return OtherBlock(kind=type(element).__name__)
        case _:
            return OtherBlock(kind=type(element).__name__, children=_convert_children(element))


def parse_blocks(markdown: str) -> RootBlock:
    """
    Parse Markdown text into a block tree. Malformed Markdown degrades the way
    CommonMark does (as plain paragraphs), it is never an error.
    """
    document = gfm_markdown.parse(markdown)
    root = convert_element(document)
    assert isinstance(root, RootBlock)
    return root


def flatten_text(node: BlockNode) -> str:
    """
    Plain text of a node: all leaf text runs concatenated in document order, with
    formatting markup dropped.
    """
    match node:
        case TextRun(text=text):
            return text
        case _:
            return "".join(flatten_text(child) for child in node.children)


def first_child(node: BlockNode, kind: type) -> Optional[BlockNode]:
    """
    First direct child of the given kind, if any.
    """
    for child in getattr(node, "children", []):
        if isinstance(child, kind):
            return child
    return None


## Tests


def test_parse_blocks_structure():
    root = parse_blocks("# Title\n\n- [ ] one\n  - [x] two\n- three\n\nAfter.\n")
    lists = [child for child in root.children if isinstance(child, ListBlock)]
    assert len(lists) == 1
    items = lists[0].children
    assert [item.checked for item in items] == [False, None]

    sub_list = first_child(items[0], ListBlock)
    assert isinstance(sub_list, ListBlock)
    assert sub_list.children[0].checked is True
    assert flatten_text(sub_list.children[0].children[0]).strip() == "two"


def test_flatten_text_drops_markup():
    root = parse_blocks("- Read **the** [docs](https://example.com) and `run` it\n")
    item = root.children[0].children[0]  # type: ignore
    paragraph = first_child(item, ParagraphBlock)
    assert paragraph is not None
    assert flatten_text(paragraph) == "Read the docs and run it"


def test_flatten_text_empty():
    assert flatten_text(RootBlock()) == ""
    assert flatten_text(ParagraphBlock()) == ""
    assert flatten_text(parse_blocks("")) == ""


def test_ordered_list_and_escapes():
    root = parse_blocks("1. [x] \\[pinned\\] done\n2. next\n")
    lst = root.children[0]
    assert isinstance(lst, ListBlock) and lst.ordered
    assert lst.children[0].checked is True
    assert flatten_text(lst.children[0]).strip() == "[pinned] done"
