"""Resolver - loads and links the templates a template refers to.

``extends`` targets are parsed while the referencing template is parsed and
linked into a super/sub chain. ``include`` targets are parsed when the
renderer reaches them and may be cached by identifier.

Parent templates are never cached: linking writes ``parent.sub``, so a
shared parent would end up pointing at whichever child was parsed last.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Sequence, Tuple

from gilt.ast.node import DEFAULT_EXPRESSION_MARKS
from gilt.ast.parser import Parser
from gilt.ast.template import Template
from gilt.compiler.loader import Loader
from gilt.errors import CompositionError

log = logging.getLogger(__name__)


class Resolver:
    """Parses templates through a loader and resolves references between them.

    Args:
        loader: Maps names to identifiers and identifiers to source text.
        expression_marks: Delimiter pairs that mark a whole line as an action.
        cache: Keep parsed include targets by identifier.
    """

    def __init__(
        self,
        loader: Loader,
        expression_marks: Sequence[Tuple[str, str]] = DEFAULT_EXPRESSION_MARKS,
        cache: bool = False,
    ):
        self.loader = loader
        self.parser = Parser(self, expression_marks)
        self.cache = cache
        self._includes: Dict[str, Template] = {}
        self._lock = threading.Lock()

    def parse(
        self,
        name: str,
        current: Optional[Template] = None,
        chain: Tuple[str, ...] = (),
    ) -> Template:
        """Load and parse the template ``name`` refers to.

        Args:
            name: Template name or path, as written by the caller or directive.
            current: Template containing the reference, for relative paths.
            chain: Identifiers of the templates being extended, innermost last.

        Returns:
            The parsed template.

        Raises:
            CompositionError: If the source can't be loaded.
        """
        identifier = self.loader.resolve(name, current)
        return self._parse_identifier(identifier, chain)

    def resolve_super(
        self, name: str, template: Template, chain: Tuple[str, ...]
    ) -> Template:
        """Parse the parent named by ``template``'s ``extends`` line.

        Raises:
            CompositionError: If the parent is missing or already in ``chain``.
        """
        identifier = self.loader.resolve(name, template)
        if identifier in chain:
            cycle = " -> ".join(chain + (identifier,))
            raise CompositionError(f"cyclic extends: {cycle}")

        log.debug(f"Template {template.path} extends {identifier}")
        return self._parse_identifier(identifier, chain)

    def resolve_include(self, name: str, template: Optional[Template]) -> Template:
        """Parse (or fetch from cache) the target of an ``include`` line."""
        identifier = self.loader.resolve(name, template)

        if self.cache:
            with self._lock:
                cached = self._includes.get(identifier)
            if cached is not None:
                log.debug(f"Include cache hit: {identifier}")
                return cached

        included = self._parse_identifier(identifier, ())

        if self.cache:
            with self._lock:
                included = self._includes.setdefault(identifier, included)
        return included

    def clear(self) -> None:
        """Drop all cached include targets."""
        with self._lock:
            self._includes.clear()

    def _parse_identifier(self, identifier: str, chain: Tuple[str, ...]) -> Template:
        source = self.loader.load(identifier)
        log.debug(f"Parsing template {identifier}")
        return self.parser.parse(source, identifier, chain)
