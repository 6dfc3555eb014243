"""Gilt Exceptions

Every failure while parsing, resolving or compiling a template is fatal to
that template and surfaces as one of these.
"""

from __future__ import annotations


class GiltError(Exception):
    """Base exception for all gilt errors."""

    def __init__(
        self,
        message: str,
        line_no: int | None = None,
        path: str | None = None,
    ) -> None:
        self.message = message
        self.line_no = line_no
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        text = self.message
        if self.line_no is not None:
            text += f" (line no: {self.line_no})"
        if self.path:
            text += f" [template: {self.path}]"
        return text


class TemplateSyntaxError(GiltError):
    """Raised when a single line is malformed (ids, names, parameters)."""

    pass


class StructureError(GiltError):
    """Raised when lines do not fit together (indentation, headers)."""

    pass


class CompositionError(GiltError):
    """Raised when an extends/include target can't be loaded or forms a cycle."""

    pass


class CompileHandoffError(GiltError):
    """Raised when Jinja2 rejects the generated template text."""

    pass
