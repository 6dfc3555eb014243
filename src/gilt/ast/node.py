"""Node model - one parsed template line, plus the containers that own nodes.

A Node is created from a single source line. Its ``kind`` is decided once, at
construction, from the line itself and from its parent; the tag shorthand
(``tag#id.class key=value [single] free text``) is only parsed for tags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence, Tuple

from gilt.ast.tokenizer import tokenize
from gilt.errors import TemplateSyntaxError

if TYPE_CHECKING:
    from gilt.ast.template import Template


COMMENT_PREFIX = "//"
RAW_CONTENT_TAGS = ("script", "style")
INCLUDE_PARAMS_START = 2

# (start, end) pairs that wrap a whole-line action for the template engine
DEFAULT_EXPRESSION_MARKS: Tuple[Tuple[str, str], ...] = (("{{", "}}"), ("{%", "%}"))


class Kind(str, Enum):
    """What a line means."""

    TAG = "tag"
    CONTENT = "content"
    BLOCK = "block"
    EXPRESSION = "expression"
    OUTPUT_EXPRESSION = "outputExpression"
    LITERAL = "literal"
    INCLUDE = "include"
    COMMENT = "comment"


class ChildAppendable(Protocol):
    """Anything the tree builder can attach parsed nodes to."""

    def append_child(self, child: "Node") -> None: ...


class EmbedMap(Dict[str, str]):
    """Literal values passed to an included template.

    Built from ``key=value`` include parameters and applied to the included
    template's rendered text, where ``%{key}`` is replaced by the value.
    """

    PLACEHOLDER = re.compile(r"%\{([^}]*)\}")

    @classmethod
    def from_tokens(
        cls, tokens: Sequence[str], line_no: Optional[int] = None
    ) -> "EmbedMap":
        embed_map = cls()
        for token in tokens:
            kv = token.split("=")
            if len(kv) != 2:
                raise TemplateSyntaxError(
                    "the parameter did not have = and a key-value could not be "
                    f"derived [parameter: {token}]",
                    line_no=line_no,
                )
            embed_map[_trim_quotes(kv[0])] = _trim_quotes(kv[1])
        return embed_map

    def embed(self, text: str) -> str:
        """Replace known ``%{key}`` placeholders in ``text``."""
        if not self:
            return text
        return self.PLACEHOLDER.sub(lambda m: self.get(m.group(1), m.group(0)), text)


@dataclass(eq=False)
class Block:
    """A named override body defined by a template that extends another."""

    name: str
    nodes: List["Node"] = field(default_factory=list)
    template: Optional["Template"] = field(default=None, repr=False)

    def append_child(self, child: "Node") -> None:
        self.nodes.append(child)


@dataclass(eq=False)
class Node:
    """One line of a template and the lines nested under it."""

    text: str
    tokens: List[str]
    line_no: int
    indent: int
    parent: Optional["Node"] = field(default=None, repr=False)
    children: List["Node"] = field(default_factory=list, repr=False)
    kind: Kind = Kind.TAG
    tag: str = ""
    id: str = ""
    classes: List[str] = field(default_factory=list)
    # Insertion ordered: attributes render in source order
    attributes: Dict[str, str] = field(default_factory=dict)
    single_attributes: List[str] = field(default_factory=list)
    text_values: List[str] = field(default_factory=list)
    raw_content: bool = False
    embed_map: EmbedMap = field(default_factory=EmbedMap, repr=False)
    template: Optional["Template"] = field(default=None, repr=False)
    block: Optional[Block] = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        text: str,
        line_no: int,
        indent: int,
        parent: Optional["Node"] = None,
        template: Optional["Template"] = None,
        block: Optional[Block] = None,
        expression_marks: Sequence[Tuple[str, str]] = DEFAULT_EXPRESSION_MARKS,
    ) -> "Node":
        """Build a node from one source line.

        Args:
            text: The line as it appears in the source (indentation included).
            line_no: 1-based line number, used in error messages.
            indent: Indentation depth of the line.
            parent: The enclosing node, or None for a root line.
            template: Owning template for root lines.
            block: Owning block for the first level of a block body.
            expression_marks: Delimiter pairs that make a line an action line.

        Returns:
            The classified and parsed node.

        Raises:
            TemplateSyntaxError: If the line is malformed.
        """
        trimmed = text.strip()
        node = cls(
            text=trimmed,
            tokens=tokenize(trimmed),
            line_no=line_no,
            indent=indent,
            parent=parent,
            template=template,
            block=block,
        )
        node.kind = node._classify(expression_marks)
        if node.kind is Kind.CONTENT:
            node.text = text
            node.raw_content = True
        node._parse()
        return node

    # -- classification -----------------------------------------------------

    def _classify(self, expression_marks: Sequence[Tuple[str, str]]) -> Kind:
        if self.parent is not None and (
            self.parent.raw_content or self.parent.kind is Kind.CONTENT
        ):
            return Kind.CONTENT

        head = self.tokens[0] if self.tokens else ""
        if head == "block":
            return Kind.BLOCK
        if head == "include":
            return Kind.INCLUDE
        if head == "|":
            return Kind.LITERAL
        for start, end in expression_marks:
            if self.text.startswith(start) and self.text.endswith(end):
                return Kind.EXPRESSION
        if head == "=":
            return Kind.OUTPUT_EXPRESSION
        return Kind.TAG

    @property
    def is_comment(self) -> bool:
        return self.text.startswith(COMMENT_PREFIX)

    @property
    def effective_kind(self) -> Kind:
        """The kind used for output: comments silence any other kind."""
        return Kind.COMMENT if self.is_comment else self.kind

    # -- token-level parsing ------------------------------------------------

    def _parse(self) -> None:
        if self.is_comment:
            return

        if self.kind is Kind.BLOCK and len(self.tokens) < 2:
            raise TemplateSyntaxError(
                "block element does not have a name", line_no=self.line_no
            )
        if self.kind is Kind.INCLUDE:
            if len(self.tokens) < 2:
                raise TemplateSyntaxError(
                    "include element does not have a path", line_no=self.line_no
                )
            self.embed_map = EmbedMap.from_tokens(
                self.tokens[INCLUDE_PARAMS_START:], line_no=self.line_no
            )
        if self.kind is not Kind.TAG:
            return

        self._parse_first_token(self.tokens[0])
        for token in self.tokens[1:]:
            if self.text_values:
                self.text_values.append(token)
            elif "=" in token:
                self._append_attribute(token)
            elif token.startswith("[") and token.endswith("]"):
                self.single_attributes.append(token[1:-1])
            else:
                self.text_values.append(token)

    def _parse_first_token(self, token: str) -> None:
        if token == "javascript:":
            self._set_tag("script")
            self._append_attribute("type=text/javascript")
        else:
            self._set_tag(token)

    def _set_tag(self, token: str) -> None:
        self.tag = token.split("#")[0].split(".")[0] or "div"

        id_parts = token.split("#")
        if len(id_parts) > 2:
            raise self._multiple_ids_error()
        if len(id_parts) == 2:
            self._set_id(id_parts[1].split(".")[0])

        for part in token.split(".")[1:]:
            self._append_class(part.split("#")[0])

        if self.tag in RAW_CONTENT_TAGS or token.endswith("."):
            self.raw_content = True

    def _set_id(self, value: str) -> None:
        if self.id:
            raise self._multiple_ids_error()
        self.id = value

    def _multiple_ids_error(self) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            "multiple ids are not allowed on one element", line_no=self.line_no
        )

    def _append_class(self, value: str) -> None:
        if value:
            self.classes.append(value)

    def _append_attribute(self, token: str) -> None:
        key, _, value = token.partition("=")
        value = _unquote(value)
        if key == "id":
            self._set_id(value)
        elif key == "class":
            self._append_class(value)
        else:
            self.attributes[key] = value

    # -- tree ---------------------------------------------------------------

    def append_child(self, child: "Node") -> None:
        self.children.append(child)

    def owner_template(self) -> Optional["Template"]:
        """The template this node belongs to, found through parents and blocks."""
        node = self
        while node.parent is not None:
            node = node.parent
        if node.block is not None:
            return node.block.template
        return node.template

    @property
    def name(self) -> str:
        """Block name or include path (second token)."""
        return self.tokens[1] if len(self.tokens) > 1 else ""

    @property
    def text_value(self) -> str:
        return " ".join(self.text_values)

    @property
    def literal_value(self) -> str:
        return " ".join(self.tokens[1:])


def _unquote(value: str) -> str:
    if len(value) > 1 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def _trim_quotes(value: str) -> str:
    return value.removeprefix('"').removesuffix('"')
