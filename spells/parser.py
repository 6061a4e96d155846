import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .errors import IndentError, ParseError
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)

DEFAULT_TAG = "div"
COMPONENT_MARKER = "@"

Attribute = Tuple[str, Optional[str]]


@dataclass
class Element:
    """
    One node of a parsed Spells document.

    ``content`` is exactly one of: ``None`` (empty), a list of child elements,
    or a string of raw inner text.
    """

    tag_name: str = DEFAULT_TAG
    id: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    content: Union[None, List["Element"], str] = None

    @property
    def children(self) -> List["Element"]:
        return self.content if isinstance(self.content, list) else []

    @property
    def text(self) -> Optional[str]:
        return self.content if isinstance(self.content, str) else None

    @property
    def is_empty(self) -> bool:
        return self.content is None


class Frame:
    """Components visible to one block being parsed (and the blocks nested in it)."""

    def __init__(self):
        self.components: Dict[str, Element] = {}

    def define(self, template: Element):
        # The first definition of a name in a scope is the one that's used
        self.components.setdefault(template.tag_name, template)

    def get(self, name: str) -> Optional[Element]:
        return self.components.get(name)


def _unique(items: list) -> list:
    """Removes duplicates, keeping the first occurrence of each item."""
    return list(dict.fromkeys(items))


def hydrate(instance: Element, template: Element) -> Element:
    """
    Builds the element an instantiation is replaced with: the template's content,
    merged with the instance's id, classes and attributes. The instance's tag name
    becomes a class so it can be styled at the usage site.
    """
    return Element(
        tag_name=DEFAULT_TAG,
        id=instance.id if instance.id is not None else template.id,
        classes=_unique([instance.tag_name] + instance.classes + template.classes),
        attributes=_unique(instance.attributes + template.attributes),
        content=copy.deepcopy(template.content),
    )


class Parser:
    """
    Builds the element tree from a token stream.

    Components are lexically scoped: a definition is visible to the rest of the
    block it's defined in, including nested blocks, and nowhere else.
    """

    def __init__(self):
        self.frames: List[Frame] = []

    def parse(self, tokenizer: Tokenizer) -> List[Element]:
        start_indent = tokenizer.consume_indent()
        if start_indent.count != 0:
            raise IndentError(
                f"Expected 0 indentation at the start of the file, found {start_indent.count}.",
                tokenizer.line_number,
            )
        return self.parse_block(tokenizer, 0)

    def parse_block(self, tokenizer: Tokenizer, indent: int) -> List[Element]:
        """Parses sibling elements at ``indent`` until the indentation drops below it."""
        self.frames.append(Frame())
        elements: List[Element] = []
        try:
            while True:
                parsed = self.parse_element(tokenizer, indent)
                if parsed is None:
                    break

                element, is_component = parsed
                if not is_component:
                    elements.append(element)
                elif element.is_empty:
                    template = self.find_component(element.tag_name)
                    if template is not None:
                        elements.append(hydrate(element, template))
                    else:
                        logger.debug("Dropping unknown component '%s'.", element.tag_name)
                else:
                    self.frames[-1].define(element)

                # A dedent landing between two levels still continues this block
                if tokenizer.peek_indent().count < indent:
                    break
        finally:
            self.frames.pop()

        return elements

    def parse_element(self, tokenizer: Tokenizer, indent: int) -> Optional[Tuple[Element, bool]]:
        """
        Parses a single element: its header line, then either its literal text
        or its children. Returns ``(element, is_component)``, or ``None`` once
        there's nothing left to parse.
        """
        token = tokenizer.peek()
        if token is None:
            return None

        element = Element()
        if not token.is_symbol(".", "#", "("):
            element.tag_name = tokenizer.consume().text

        is_component = False
        has_literal_text = False
        has_inline_text = False
        while True:
            token = tokenizer.peek()
            if token is None:
                break

            if token.is_symbol("#"):
                tokenizer.consume()
                name = tokenizer.consume()
                if name is None:
                    raise ParseError("Expected an id after '#'.", tokenizer.line_number)
                element.id = name.text
            elif token.is_symbol("."):
                tokenizer.consume()
                name = tokenizer.consume()
                if name is not None:
                    element.classes.append(name.text)
                    continue
                has_literal_text = True
                element.content = self._parse_literal_text(tokenizer, indent)
                break
            elif token.is_symbol("("):
                tokenizer.consume()
                if self._parse_attributes(tokenizer, element):
                    is_component = True
            else:
                element.content = tokenizer.consume_line()
                has_inline_text = True
                break

        if not has_literal_text and tokenizer.peek_indent().count > indent:
            if has_inline_text:
                raise ParseError(
                    f"'{element.tag_name}' has inline text and can't also have nested elements.",
                    tokenizer.line_number,
                )
            inner_indent = tokenizer.consume_indent().count
            children = self.parse_block(tokenizer, inner_indent)
            if children:
                element.content = children

        return element, is_component

    def find_component(self, name: str) -> Optional[Element]:
        """Looks a component up from the innermost scope outwards."""
        for frame in reversed(self.frames):
            template = frame.get(name)
            if template is not None:
                return template
        return None

    # --- Helper Methods ---

    def _parse_attributes(self, tokenizer: Tokenizer, element: Element) -> bool:
        """
        Reads attributes up to the closing ``)``; line breaks are allowed in
        between. Returns whether the component marker was among them.
        """
        is_component = False
        while True:
            token = tokenizer.consume_ignore_newline()
            if token is None:
                raise ParseError("Unterminated attribute list.", tokenizer.line_number)
            if token.is_symbol(")"):
                break
            if token.is_symbol(",", "="):
                raise ParseError(
                    f"Expected an attribute name, found '{token.text}'.", tokenizer.line_number
                )

            name = token.text
            value = None
            following = tokenizer.peek_ignore_newline()
            if following is not None and following.is_symbol("="):
                tokenizer.consume_ignore_newline()
                value_token = tokenizer.consume_ignore_newline()
                if value_token is None or value_token.is_symbol(",", ")"):
                    raise ParseError(
                        f"Expected a value for attribute '{name}'.", tokenizer.line_number
                    )
                value = value_token.text

            if name == COMPONENT_MARKER:
                is_component = True
            element.attributes.append((name, value))

            following = tokenizer.peek_ignore_newline()
            if following is not None and following.is_symbol(","):
                tokenizer.consume_ignore_newline()
        return is_component

    def _parse_literal_text(self, tokenizer: Tokenizer, indent: int) -> Optional[str]:
        """
        Reads the indented lines after a trailing ``.`` verbatim. Indentation past
        the first line's is kept as leading spaces, and blank lines are kept.
        """
        if tokenizer.peek_indent().count <= indent:
            return None

        base_indent = tokenizer.consume_indent().count
        parts: List[str] = []
        while True:
            parts.append(tokenizer.consume_line())
            next_indent = tokenizer.peek_indent()
            if next_indent.count <= indent:
                break
            parts.append("\n" * (next_indent.blank_lines + 1))
            parts.append(" " * max(0, next_indent.count - base_indent))
            tokenizer.consume_indent()
        return "".join(parts)
