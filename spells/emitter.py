from typing import List, Optional

from .parser import Element
from .render import Renderer, render_text

DOCTYPE = "<!DOCTYPE html>"
INDENT_WIDTH = 2

# Tags that never get a closing tag
VOID_TAGS = frozenset(["br", "img", "meta", "wbr"])

_VARIABLE_OPEN = "@{"
_VARIABLE_CLOSE = "}"


def lookup_variable(name: str, element_stack: List[Element], skip: Optional[int] = None) -> str:
    """
    Finds the value of the closest attribute called ``name``, starting at the
    innermost element. Surrounding double quotes are removed. Missing
    variables are empty.

    ``skip`` is the index of an attribute of the innermost element to leave out,
    so an attribute never resolves to its own value.
    """
    for depth, element in enumerate(reversed(element_stack)):
        for index, (attr_name, value) in enumerate(element.attributes):
            if attr_name != name or value is None:
                continue
            if depth == 0 and index == skip:
                continue
            if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
                return value[1:-1]
            return value
    return ""


def interpolate(value: str, element_stack: List[Element], skip: Optional[int] = None) -> str:
    """Replaces each ``@{name}`` in an attribute value; an unclosed ``@{`` is left as is."""
    out: List[str] = []
    position = 0
    while True:
        start = value.find(_VARIABLE_OPEN, position)
        if start == -1:
            break
        end = value.find(_VARIABLE_CLOSE, start + len(_VARIABLE_OPEN))
        if end == -1:
            break
        name = "".join(value[start + len(_VARIABLE_OPEN):end].split())
        out.append(value[position:start])
        out.append(lookup_variable(name, element_stack, skip))
        position = end + len(_VARIABLE_CLOSE)
    out.append(value[position:])
    return "".join(out)


class Emitter:
    """Serializes an element tree to HTML."""

    def __init__(self, renderer: Renderer, pretty: bool = False):
        self.renderer = renderer
        self.pretty = pretty

    def emit(self, elements: List[Element]) -> str:
        out: List[str] = [DOCTYPE]
        if self.pretty:
            out.append("\n")
        self._emit_elements(out, [], elements, 0)
        return "".join(out)

    def _emit_elements(self, out: List[str], element_stack: List[Element], elements: List[Element], depth: int):
        for element in elements:
            element_stack.append(element)
            self._emit_element(out, element_stack, depth)
            element_stack.pop()

    def _emit_element(self, out: List[str], element_stack: List[Element], depth: int):
        element = element_stack[-1]
        indent = " " * (depth * INDENT_WIDTH) if self.pretty else ""

        # Opening tag
        out.append(f"{indent}<{element.tag_name}")
        if element.id is not None:
            out.append(f' id="{element.id}"')
        for index, (name, value) in enumerate(element.attributes):
            out.append(f" {name}")
            if value is not None:
                out.append("=" + interpolate(value, element_stack, skip=index))
        if element.classes:
            out.append(f' class="{" ".join(element.classes)}"')
        out.append(">")

        # Content
        if element.text is not None:
            if self.pretty:
                out.append("\n")
            out.append(render_text(element.tag_name, element.text, self.renderer))
            if self.pretty:
                out.append("\n")
        elif element.children:
            if self.pretty:
                out.append("\n")
            self._emit_elements(out, element_stack, element.children, depth + 1)

        # Closing tag
        if element.tag_name not in VOID_TAGS:
            out.append(f"{indent}</{element.tag_name}>")

        if self.pretty:
            out.append("\n")
