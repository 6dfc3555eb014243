"""Template - the parsed result of one source file or string."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gilt.ast.node import Block, Node


@dataclass(eq=False)
class Template:
    """Root nodes, override blocks and inheritance links of one template.

    ``super`` points at the template this one extends and ``sub`` at the
    template extending this one. Both are set together when an ``extends``
    line is resolved, so the links always form a simple chain.
    """

    path: str
    nodes: List[Node] = field(default_factory=list)
    blocks: Dict[str, Block] = field(default_factory=dict)
    super: Optional["Template"] = field(default=None, repr=False)
    sub: Optional["Template"] = field(default=None, repr=False)

    def append_child(self, node: Node) -> None:
        self.nodes.append(node)

    def add_block(self, block: Block) -> None:
        block.template = self
        self.blocks[block.name] = block

    def extend(self, parent: "Template") -> None:
        """Link this template under ``parent``."""
        parent.sub = self
        self.super = parent

    @property
    def dir(self) -> str:
        """Directory part of ``path`` with a trailing slash ("./" if none)."""
        head, sep, _ = self.path.rpartition("/")
        if not sep:
            return "./"
        return f"{head}/"

    @property
    def root(self) -> "Template":
        """The outermost template of the extends chain."""
        tpl = self
        while tpl.super is not None:
            tpl = tpl.super
        return tpl
