from .compiler import CompileOptions, SpellsCompiler, compile_file, compile_source
from .errors import CompileError, IndentError, ParseError

__all__ = [
    "CompileError",
    "CompileOptions",
    "IndentError",
    "ParseError",
    "SpellsCompiler",
    "compile_file",
    "compile_source",
]
