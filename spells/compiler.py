import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .emitter import Emitter
from .parser import Element, Parser
from .render import Renderer, get_renderer
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileOptions:
    """
    pretty: indent the output and put each element on its own line.
    renderer: name of the renderer applied to document text (see ``spells.render``).
    renderers: extra named renderers, taking precedence over the built-in ones.
    """

    pretty: bool = False
    renderer: str = "markdown"
    renderers: Mapping[str, Renderer] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        self.text_renderer()

    def text_renderer(self) -> Renderer:
        return get_renderer(self.renderer, self.renderers)


class SpellsCompiler:
    """
    Spells Compiler
    Compiles Spells source code to HTML.

    Features:
    - Indentation-based hierarchy, tag names defaulting to div
    - Id (#), class (.) and attribute list (...) modifiers
    - Single-line text and multi-line literal text blocks (trailing .)
    - Scoped components: (@) with a body defines, (@) without one instantiates
    - @{name} variables in attribute values, resolved from enclosing attributes
    - Markdown-style rendering of document text, except in style/css/script
    - Fatal errors for bad indentation and malformed syntax (CompileError)
    """

    def __init__(self, options: Optional[CompileOptions] = None):
        self.options: CompileOptions = options or CompileOptions()

    def parse(self, source: str) -> List[Element]:
        """Parses source into its element tree, with components already hydrated."""
        return Parser().parse(Tokenizer(source))

    def compile(self, source: str) -> str:
        """Compiles Spells source code to HTML."""
        elements = self.parse(source)
        emitter = Emitter(self.options.text_renderer(), pretty=self.options.pretty)
        html = emitter.emit(elements)
        logger.debug("Compiled %d top-level element(s) to %d characters.", len(elements), len(html))
        return html

    def compile_file(self, path: Union[str, Path]) -> str:
        """Reads a Spells file (UTF-8) and compiles it."""
        source = Path(path).read_text(encoding="utf-8")
        return self.compile(source)


def compile_source(source: str, options: Optional[CompileOptions] = None) -> str:
    return SpellsCompiler(options).compile(source)


def compile_file(path: Union[str, Path], options: Optional[CompileOptions] = None) -> str:
    return SpellsCompiler(options).compile_file(path)
