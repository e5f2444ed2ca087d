"""
Source text to syntax tree.

Modules:
    nodes:
        Frozen dataclasses for every node kind, and ``NODE_TYPES``.

    grammar:
        Tokenizer and recursive-descent parser.
"""

from . import nodes
from .grammar import KEYWORDS, parse, parse_expression, tokenize

__all__ = ["KEYWORDS", "nodes", "parse", "parse_expression", "tokenize"]
