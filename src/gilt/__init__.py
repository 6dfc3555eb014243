"""gilt - indentation-based markup shorthand compiled to Jinja2 templates.

    html
      body
        h1#title.big Hello
        = user.name

compiles to ``<html><body><h1 id="title" class="big">Hello</h1>{{user.name}}</body></html>``
which Jinja2 then renders with runtime data.
"""

from gilt._version import __version__
from gilt.compiler import (
    Compiler,
    FileLoader,
    StringLoader,
    compile_file,
    compile_string,
    generate_string,
)
from gilt.config import GiltConfig
from gilt.errors import (
    CompileHandoffError,
    CompositionError,
    GiltError,
    StructureError,
    TemplateSyntaxError,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "FileLoader",
    "StringLoader",
    "compile_file",
    "compile_string",
    "generate_string",
    # Config
    "GiltConfig",
    # Errors
    "GiltError",
    "TemplateSyntaxError",
    "StructureError",
    "CompositionError",
    "CompileHandoffError",
]
