"""Gilt Compiler - resolves, serializes and hands templates to Jinja2."""

from gilt.compiler.compiler import Compiler, compile_file, compile_string, generate_string
from gilt.compiler.loader import FileLoader, Loader, StringLoader
from gilt.compiler.renderer import Renderer
from gilt.compiler.resolver import Resolver

__all__ = [
    "Compiler",
    "FileLoader",
    "Loader",
    "Renderer",
    "Resolver",
    "StringLoader",
    "compile_file",
    "compile_string",
    "generate_string",
]
