# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView node class."""

from __future__ import annotations

from typing import Any, Iterator

#: Fields that may be changed on a live node via update().
UPDATABLE_FIELDS = frozenset(
    ('label', 'icon', 'disabled', 'selectable', 'lazy', 'has_children', 'data')
)


class TreeNode:
    """A node in a tree-view hierarchy.

    Each node has:
    - id: Identifier, unique across the whole tree
    - label: Display text, used for search matching
    - children: Ordered list of child TreeNode
    - disabled / selectable: Interaction gates (never affect visibility)
    - lazy / has_children: Marks a node whose children are fetched on demand
    - icon: Optional icon name forwarded to rendered rows
    - data: Opaque caller payload, never inspected by the engine

    Example:
        >>> node = TreeNode('docs', 'Documents', children=[TreeNode('a', 'a.txt')])
        >>> node.is_leaf
        False
        >>> node.children[0].label
        'a.txt'
    """

    __slots__ = (
        'id', 'label', 'children', 'icon', 'disabled', 'selectable',
        'lazy', 'has_children', 'data',
    )

    def __init__(
        self,
        id: str,
        label: str = '',
        children: list[TreeNode] | None = None,
        icon: str | None = None,
        disabled: bool = False,
        selectable: bool = True,
        lazy: bool = False,
        has_children: bool = False,
        data: Any = None,
    ) -> None:
        """Initialize a TreeNode.

        Args:
            id: The node's unique identifier.
            label: Display text. Defaults to the id when empty.
            children: Optional list of child nodes.
            icon: Optional icon name.
            disabled: If True, the node ignores interaction.
            selectable: If False, select() on the node is a no-op.
            lazy: If True together with has_children, children are not loaded yet.
            has_children: Whether a lazy node is known to own children.
            data: Arbitrary payload carried along with the node.
        """
        self.id = id
        self.label = label or id
        self.children = list(children) if children else []
        self.icon = icon
        self.disabled = disabled
        self.selectable = selectable
        self.lazy = lazy
        self.has_children = has_children
        self.data = data

    def __repr__(self) -> str:
        return f"TreeNode({self.id!r}, {self.label!r}, children={len(self.children)})"

    @property
    def is_pending_lazy(self) -> bool:
        """True if this node still waits for its children to be fetched.

        Children added by hand before the fetch completes do not count as
        loaded: the flag is cleared only when the fetched children arrive.
        """
        return self.lazy and self.has_children

    @property
    def is_branch(self) -> bool:
        """True if this node is expandable (has or will have children)."""
        return bool(self.children) or self.is_pending_lazy

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children and none to fetch."""
        return not self.is_branch

    def iter_subtree(self) -> Iterator[TreeNode]:
        """Yield this node and all its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def update(self, **fields: Any) -> None:
        """Set updatable fields on the node.

        Args:
            **fields: Any of label, icon, disabled, selectable, lazy,
                has_children, data.

        Raises:
            TypeError: If a field is unknown or structural (id, children).
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update node field(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self, name, value)
