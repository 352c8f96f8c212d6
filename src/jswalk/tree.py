"""Shared helpers for working with the lark Tree/Token nodes the parser builds.

Every syntax node is a ``lark.Tree`` whose ``data`` is the node kind; leaf
payloads (names, operators, literal text) are ``lark.Token`` children.
"""
from __future__ import annotations
from typing import List, Optional, TypeGuard
from typing_extensions import TypeAlias

from lark import Token, Tree

Node: TypeAlias = Tree | Token


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_meta(node: object) -> Optional[object]:
    if not is_tree(node):
        return None

    meta = node.meta
    return None if getattr(meta, "empty", True) else meta

