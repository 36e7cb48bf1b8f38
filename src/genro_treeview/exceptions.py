# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView exceptions."""

from __future__ import annotations


class TreeViewError(Exception):
    """Base exception for TreeView errors."""

    pass


class NotFoundError(TreeViewError, KeyError):
    """Raised when an operation references a node id absent from the store."""

    def __init__(self, node_id: str | None) -> None:
        super().__init__(f"Node '{node_id}' not found")
        self.node_id = node_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class CycleError(TreeViewError):
    """Raised when a reparent would make a node its own descendant."""

    def __init__(self, node_id: str, target_id: str) -> None:
        super().__init__(
            f"Cannot move '{node_id}' under '{target_id}': "
            f"'{target_id}' is '{node_id}' or one of its descendants"
        )
        self.node_id = node_id
        self.target_id = target_id


class DisabledNodeError(TreeViewError):
    """Raised when a mutation is attempted on a disabled node."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' is disabled")
        self.node_id = node_id


class DuplicateIdError(TreeViewError):
    """Raised when an insertion would introduce a duplicate node id."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node id '{node_id}' already exists")
        self.node_id = node_id


class LazyLoadError(TreeViewError):
    """Raised when a lazy load handle is settled twice or misused."""

    pass
