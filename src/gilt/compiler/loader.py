"""Loaders - map extends/include operands to template sources."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Union

from gilt.ast.template import Template
from gilt.errors import CompositionError

log = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".gilt"


def is_dir_relative(path: str) -> bool:
    """Whether ``path`` is relative to the referencing template's directory."""
    return path.startswith("./") or path.startswith("../")


def is_absolute(path: str) -> bool:
    return path.startswith("/")


class Loader(Protocol):
    """Source provider used by the resolver."""

    def resolve(self, name: str, current: Optional[Template] = None) -> str:
        """Map a directive operand to a template identifier."""
        ...

    def load(self, identifier: str) -> str:
        """Return the source of ``identifier`` or raise CompositionError."""
        ...


class FileLoader:
    """Loads templates from the filesystem.

    Paths starting with ``./`` or ``../`` are taken relative to the directory
    of the template that references them, paths starting with ``/`` are
    absolute, and anything else is looked up under ``base_dir``. The extension
    is appended when the path does not already carry it.

    Args:
        base_dir: Directory for paths that are neither relative nor absolute.
        extension: Template file extension.
    """

    def __init__(
        self,
        base_dir: Union[str, Path] = "",
        extension: str = DEFAULT_EXTENSION,
    ):
        self.base_dir = str(base_dir).rstrip("/") if str(base_dir) else ""
        self.extension = extension

    def resolve(self, name: str, current: Optional[Template] = None) -> str:
        path = name
        if is_dir_relative(path):
            path = (current.dir if current is not None else "./") + path
        elif not is_absolute(path) and self.base_dir:
            path = f"{self.base_dir}/{path}"

        if self.extension and not path.endswith(self.extension):
            path += self.extension
        return posixpath.normpath(path)

    def load(self, identifier: str) -> str:
        log.debug(f"Reading template file {identifier}")
        try:
            data = Path(identifier).read_bytes()
        except FileNotFoundError as exc:
            raise CompositionError(f"template not found: {identifier}") from exc
        except OSError as exc:
            raise CompositionError(
                f"could not read template {identifier}: {exc}"
            ) from exc

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CompositionError(
                f"template is not valid UTF-8: {identifier}"
            ) from exc


class StringLoader:
    """Serves templates from an in-memory name -> source table.

    Names are used verbatim: no extension and no directory handling.
    """

    def __init__(self, templates: Mapping[str, str]):
        self.templates: Dict[str, str] = dict(templates)

    def resolve(self, name: str, current: Optional[Template] = None) -> str:
        return name

    def load(self, identifier: str) -> str:
        try:
            return self.templates[identifier]
        except KeyError:
            raise CompositionError(f"template not found: {identifier}") from None
