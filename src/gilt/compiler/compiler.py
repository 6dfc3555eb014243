"""Compiler - turns gilt templates into compiled Jinja2 templates.

Pipeline per template:

1. The resolver loads the source and parses it, following ``extends``.
2. The renderer serializes the tree, splicing ``block`` overrides and
   ``include`` targets, into markup with ``{{ ... }}`` placeholders.
3. The text is handed to Jinja2, which compiles it.

Step 3 is where gilt stops: rendering with data is Jinja2's job.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional

import jinja2

from gilt.compiler.extensions import get_gilt_jinja_env
from gilt.compiler.loader import FileLoader, Loader, StringLoader
from gilt.compiler.renderer import Renderer
from gilt.compiler.resolver import Resolver
from gilt.config import GiltConfig
from gilt.errors import CompileHandoffError

log = logging.getLogger(__name__)


class Compiler:
    """Compiles gilt templates to Jinja2 templates.

    Args:
        config: Compiler settings. Defaults if omitted.
        loader: Template source. Defaults to a FileLoader built from config.
        helpers: Callables exposed to the compiled templates.
    """

    def __init__(
        self,
        config: Optional[GiltConfig] = None,
        loader: Optional[Loader] = None,
        helpers: Optional[Dict[str, Callable[..., Any]]] = None,
    ):
        self.config = config or GiltConfig()
        self.loader: Loader = loader or FileLoader(
            self.config.base_dir, self.config.extension
        )
        self.resolver = Resolver(
            self.loader,
            expression_marks=self.config.expression_marks,
            cache=self.config.cache,
        )
        self.renderer = Renderer(
            self.resolver,
            variable_start=self.config.variable_start,
            variable_end=self.config.variable_end,
        )
        self.env = get_gilt_jinja_env(self.config, helpers)
        self._compiled: Dict[str, jinja2.Template] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_strings(
        cls,
        templates: Mapping[str, str],
        config: Optional[GiltConfig] = None,
        helpers: Optional[Dict[str, Callable[..., Any]]] = None,
    ) -> "Compiler":
        """Create a compiler over an in-memory name -> source table."""
        return cls(config=config, loader=StringLoader(templates), helpers=helpers)

    def generate(self, name: str) -> str:
        """Parse ``name`` and return the generated markup text.

        Raises:
            GiltError: If the template or anything it references is invalid.
        """
        template = self.resolver.parse(name)
        return self.renderer.render(template)

    def compile(self, name: str) -> jinja2.Template:
        """Generate ``name`` and compile the result with Jinja2.

        Raises:
            GiltError: If generation fails.
            CompileHandoffError: If Jinja2 rejects the generated text.
        """
        identifier = self.loader.resolve(name)

        if self.config.cache:
            with self._lock:
                cached = self._compiled.get(identifier)
            if cached is not None:
                log.debug(f"Compiled template cache hit: {identifier}")
                return cached

        text = self.generate(name)
        compiled = self.handoff(text, identifier)

        if self.config.cache:
            with self._lock:
                compiled = self._compiled.setdefault(identifier, compiled)
        return compiled

    def handoff(self, text: str, identifier: str = "") -> jinja2.Template:
        """Compile generated text with Jinja2."""
        log.debug(f"Handing {identifier or 'template'} to Jinja2 ({len(text)} chars)")
        try:
            return self.env.from_string(text)
        except jinja2.TemplateSyntaxError as exc:
            raise CompileHandoffError(
                exc.message or str(exc), line_no=exc.lineno, path=identifier or None
            ) from exc

    def render(self, name: str, data: Optional[Mapping[str, Any]] = None) -> str:
        """Compile ``name`` and render it with ``data``."""
        return self.compile(name).render(**dict(data or {}))

    def clear_cache(self) -> None:
        with self._lock:
            self._compiled.clear()
        self.resolver.clear()


def generate_string(source: str, config: Optional[GiltConfig] = None) -> str:
    """Generate markup from a single self-contained template source."""
    return Compiler.from_strings({"<string>": source}, config=config).generate(
        "<string>"
    )


def compile_file(
    path: str,
    config: Optional[GiltConfig] = None,
    helpers: Optional[Dict[str, Callable[..., Any]]] = None,
) -> jinja2.Template:
    """Compile the template file at ``path``."""
    return Compiler(config=config, helpers=helpers).compile(path)


def compile_string(
    templates: Mapping[str, str],
    name: str,
    config: Optional[GiltConfig] = None,
    helpers: Optional[Dict[str, Callable[..., Any]]] = None,
) -> jinja2.Template:
    """Compile template ``name`` from an in-memory table of sources."""
    return Compiler.from_strings(templates, config=config, helpers=helpers).compile(name)
