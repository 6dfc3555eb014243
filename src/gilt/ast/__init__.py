"""Gilt AST - tokenizer, node model and tree builder."""

from gilt.ast.node import Block, ChildAppendable, EmbedMap, Kind, Node
from gilt.ast.parser import Parser
from gilt.ast.template import Template
from gilt.ast.tokenizer import tokenize

__all__ = [
    "Block",
    "ChildAppendable",
    "EmbedMap",
    "Kind",
    "Node",
    "Parser",
    "Template",
    "tokenize",
]
