# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Store package - The canonical node tree.

The package is organized into:
- core: NodeStore class with lookup, structural mutation, and walking
- loading: Functions converting node dicts to TreeNode hierarchies and back

Example:
    >>> from genro_treeview.store import NodeStore
    >>> store = NodeStore([{'id': 'root', 'children': [{'id': 'a'}]}])
    >>> store.path_to_root('a')
    ['root']
"""

from .core import NodeStore, check_index
from .loading import load_nodes, node_as_dict, node_from_dict

__all__ = ["NodeStore", "check_index", "load_nodes", "node_as_dict", "node_from_dict"]
