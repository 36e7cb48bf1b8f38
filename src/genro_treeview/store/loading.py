# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Conversion between plain data and TreeNode hierarchies.

Node dicts use the keys of the widget data model::

    {
        'id': 'docs',
        'label': 'Documents',
        'icon': 'folder',
        'children': [{'id': 'a', 'label': 'a.txt'}],
    }

Both ``hasChildren`` and ``has_children`` are accepted for lazy nodes.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..node import TreeNode

_KEY_ALIASES = {'hasChildren': 'has_children'}

_NODE_KEYS = frozenset(
    ('id', 'label', 'children', 'icon', 'disabled', 'selectable',
     'lazy', 'has_children', 'data')
)


def node_from_dict(source: dict[str, Any]) -> TreeNode:
    """Build a TreeNode (and its subtree) from a node dict.

    Args:
        source: Node dict. 'id' is required, other keys are optional.

    Returns:
        The new TreeNode.

    Raises:
        ValueError: If 'id' is missing or an unknown key is present.
    """
    kwargs = {_KEY_ALIASES.get(key, key): value for key, value in source.items()}
    unknown = set(kwargs) - _NODE_KEYS
    if unknown:
        raise ValueError(f"Unknown node key(s): {', '.join(sorted(unknown))}")
    if 'id' not in kwargs:
        raise ValueError(f"Node dict must have an 'id', got keys {sorted(source)}")
    children = kwargs.pop('children', None) or []
    node = TreeNode(**kwargs)
    node.children = load_nodes(children)
    return node


def as_node(source: TreeNode | dict[str, Any]) -> TreeNode:
    """Return source as a TreeNode, converting dicts.

    Raises:
        TypeError: If source is neither a TreeNode nor a dict.
    """
    if isinstance(source, TreeNode):
        return source
    if isinstance(source, dict):
        return node_from_dict(source)
    raise TypeError(f"node must be TreeNode or dict, not {type(source).__name__}")


def load_nodes(source: Iterable[TreeNode | dict[str, Any]] | dict[str, Any]) -> list[TreeNode]:
    """Convert a list of node dicts (or a single root dict) to TreeNodes."""
    if isinstance(source, dict):
        return [node_from_dict(source)]
    return [as_node(item) for item in source]


def node_as_dict(node: TreeNode) -> dict[str, Any]:
    """Convert a TreeNode subtree to a plain dict.

    Only non-default fields are emitted, so the output round-trips
    through node_from_dict.
    """
    result: dict[str, Any] = {'id': node.id, 'label': node.label}
    if node.icon is not None:
        result['icon'] = node.icon
    if node.disabled:
        result['disabled'] = True
    if not node.selectable:
        result['selectable'] = False
    if node.lazy:
        result['lazy'] = True
    if node.has_children:
        result['hasChildren'] = True
    if node.data is not None:
        result['data'] = node.data
    if node.children:
        result['children'] = [node_as_dict(child) for child in node.children]
    return result
