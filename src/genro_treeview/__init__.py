# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeView - State engine for hierarchical tree views.

A lightweight, zero-dependency library holding the data and state model of a
tree-view widget (expansion, search, selection, tri-state checks, drag and
drop, lazy loading) independently of any UI toolkit.
"""

__version__ = "0.1.0"

from .engine import TreeRow, TreeViewEngine
from .exceptions import (
    CycleError,
    DisabledNodeError,
    DuplicateIdError,
    LazyLoadError,
    NotFoundError,
    TreeViewError,
)
from .lazy import LazyLoad, LoadStatus
from .mutation import MutationGateway
from .node import TreeNode
from .selection import SelectionCoordinator
from .state import TreeState, TreeStateSnapshot
from .store import NodeStore
from .subscription import TreeEvent
from .visibility import VisibilityResolver, resolve_visible

__all__ = [
    # Core classes
    "TreeViewEngine",
    "TreeRow",
    "TreeNode",
    "NodeStore",
    # State
    "TreeState",
    "TreeStateSnapshot",
    "TreeEvent",
    # Components
    "VisibilityResolver",
    "resolve_visible",
    "SelectionCoordinator",
    "MutationGateway",
    "LazyLoad",
    "LoadStatus",
    # Exceptions
    "TreeViewError",
    "NotFoundError",
    "CycleError",
    "DisabledNodeError",
    "DuplicateIdError",
    "LazyLoadError",
]
