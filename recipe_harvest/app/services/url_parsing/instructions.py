"""schema.org instruction shapes.

``recipeInstructions`` shows up as plain strings, arrays, ``HowToStep``,
``HowToSection``, ``ItemList`` and assorted vendor objects. Every JSON value is
classified into exactly one node type below, and ``flatten_instructions``
handles each node type explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from recipe_harvest.app.services.url_parsing.constants import (
    INSTRUCTION_TEXT_FIELDS,
    MIN_INSTRUCTION_LENGTH,
)
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    clean_instruction,
    clean_markup_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmptyNode:
    pass


@dataclass(frozen=True)
class TextNode:
    text: str


@dataclass(frozen=True)
class StepListNode:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class StepNode:
    text: str


@dataclass(frozen=True)
class SectionNode:
    name: str
    children: Any


@dataclass(frozen=True)
class ItemListNode:
    children: Any


@dataclass(frozen=True)
class OpaqueNode:
    strings: Tuple[str, ...]


InstructionNode = Union[
    EmptyNode, TextNode, StepListNode, StepNode, SectionNode, ItemListNode, OpaqueNode
]


def _types_of(obj: dict) -> List[str]:
    raw = obj.get("@type")
    types = raw if isinstance(raw, list) else [raw]
    return [str(t).rsplit("/", 1)[-1].lower() for t in types if t]


def _first_text(obj: dict, fields) -> str:
    for field in fields:
        value = obj.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _children(obj: dict):
    for key in ("itemListElement", "hasStep"):
        if obj.get(key):
            return obj[key]
    return None


def classify_instruction(node) -> InstructionNode:
    """Map a raw JSON value onto one of the instruction node types."""
    if node is None or node == "" or node == [] or node == {}:
        return EmptyNode()
    if isinstance(node, str):
        return TextNode(node)
    if isinstance(node, list):
        return StepListNode(tuple(node))
    if not isinstance(node, dict):
        return EmptyNode()

    types = _types_of(node)
    children = _children(node)
    if "howtostep" in types or "howtodirection" in types:
        text = _first_text(node, ("text", "name", "description"))
        if text:
            return StepNode(text)
        if children is not None:
            return ItemListNode(children)
    if "howtosection" in types and children is not None:
        return SectionNode(_first_text(node, ("name",)), children)
    if "itemlist" in types and children is not None:
        return ItemListNode(children)
    if "listitem" in types and isinstance(node.get("item"), (dict, list, str)):
        return ItemListNode(node["item"])
    if children is not None:
        return ItemListNode(children)
    if node.get("position") is not None:
        text = _first_text(node, ("text", "name", "description"))
        if text:
            return StepNode(text)

    text = _first_text(node, INSTRUCTION_TEXT_FIELDS)
    if text:
        return StepNode(text)
    strings = tuple(
        value for value in node.values() if isinstance(value, str) and len(value) > 10
    )
    if strings:
        return OpaqueNode(strings)
    return EmptyNode()


def _split_lines(text: str) -> List[str]:
    # One string holding every step, one per line.
    lines = [clean_markup_text(line) for line in text.replace("\r", "\n").split("\n")]
    return [line for line in lines if line]


def _flatten(node: InstructionNode, depth: int) -> List[str]:
    if depth > 25:
        logger.debug("Instruction nesting too deep; stopping at depth %d", depth)
        return []
    if isinstance(node, EmptyNode):
        return []
    if isinstance(node, TextNode):
        return _split_lines(node.text)
    if isinstance(node, StepNode):
        return [clean_markup_text(node.text)]
    if isinstance(node, StepListNode):
        steps: List[str] = []
        for item in node.items:
            steps.extend(_flatten(classify_instruction(item), depth + 1))
        return steps
    if isinstance(node, SectionNode):
        return _flatten(classify_instruction(node.children), depth + 1)
    if isinstance(node, ItemListNode):
        return _flatten(classify_instruction(node.children), depth + 1)
    if isinstance(node, OpaqueNode):
        return [clean_markup_text(text) for text in node.strings]
    raise TypeError(f"Unhandled instruction node: {type(node).__name__}")


def flatten_instructions(value) -> List[str]:
    """Flatten any recipeInstructions value into cleaned step strings."""
    raw_steps = _flatten(classify_instruction(value), 0)
    steps = []
    for raw in raw_steps:
        step = clean_instruction(raw)
        if len(step) > MIN_INSTRUCTION_LENGTH:
            steps.append(step)
    return steps
