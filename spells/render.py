import re
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.rules_inline import StateInline

Renderer = Callable[[str], str]

# Tags whose inner text is emitted exactly as written
PLAINTEXT_TAGS = frozenset(["style", "css", "script"])

_LIST_ITEM = re.compile(r"^([ \t]*)~(?!~)[ \t]?", re.MULTILINE)
_IMAGE = re.compile(r"%\((.*?)\)%")


# --- Dialect rules ---

def _list_items(state: StateCore):
    """``~ item`` lines are bullet list items."""
    state.src = _LIST_ITEM.sub(r"\1- ", state.src)


def _image(state: StateInline, silent: bool) -> bool:
    """``%(path)%`` is a full-width image relative to the page."""
    if state.src[state.pos] != "%":
        return False
    match = _IMAGE.match(state.src, state.pos, state.posMax)
    if match is None:
        return False
    if not silent:
        token = state.push("html_inline", "", 0)
        token.content = f"<img src=\"./{match.group(1)}\" style='width:100%'>"
    state.pos = match.end()
    return True


def _trailing_break(state: StateInline, silent: bool) -> bool:
    """A ``\\`` ending a block is a line break, not a literal backslash."""
    if state.src[state.pos] != "\\" or state.pos + 1 != state.posMax:
        return False
    if not silent:
        state.push("hardbreak", "br", 0)
    state.pos += 1
    return True


def spells_dialect(md: MarkdownIt):
    """markdown-it plugin adding the Spells additions to CommonMark."""
    md.core.ruler.before("block", "spells_list_items", _list_items)
    md.inline.ruler.before("emphasis", "spells_image", _image)
    md.inline.ruler.before("escape", "spells_trailing_break", _trailing_break)


_markdown = MarkdownIt("commonmark").use(spells_dialect)


def render_plain(text: str) -> str:
    return text


def render_markdown(text: str) -> str:
    """
    Renders document text as CommonMark plus the Spells additions: ``~`` list
    items, ``%(path)%`` images and a trailing ``\\`` as a line break.
    A single paragraph is rendered without its ``<p>`` wrapper, since it
    already sits inside its element's tag.
    """
    if not text:
        return text

    env: dict = {}
    tokens = _markdown.parse(text, env)
    if len(tokens) == 3 and tokens[0].type == "paragraph_open":
        tokens = tokens[1:2]
    return _markdown.renderer.render(tokens, _markdown.options, env).rstrip("\n")


RENDERERS: Mapping[str, Renderer] = MappingProxyType({
    "markdown": render_markdown,
    "plain": render_plain,
})


def get_renderer(name: str, extra: Optional[Mapping[str, Renderer]] = None) -> Renderer:
    """Looks a renderer up by name; ``extra`` renderers take precedence over the built-ins."""
    renderers = {**RENDERERS, **(extra or {})}
    try:
        return renderers[name]
    except KeyError:
        raise ValueError(
            f"Unknown renderer '{name}'. Available: {', '.join(sorted(renderers))}."
        ) from None


def render_text(tag_name: str, text: str, renderer: Renderer) -> str:
    """Document text goes through ``renderer``; plaintext tags are passed through."""
    if tag_name in PLAINTEXT_TAGS:
        return text
    return renderer(text)
