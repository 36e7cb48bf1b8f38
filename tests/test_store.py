# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeNode, NodeStore and source loading."""

import pytest

from genro_treeview import (
    DuplicateIdError,
    NodeStore,
    NotFoundError,
    TreeNode,
)
from genro_treeview.store import load_nodes, node_as_dict, node_from_dict


def sample_source():
    """root -> [A -> [A1, A2], B]"""
    return [
        {'id': 'root', 'label': 'Root', 'children': [
            {'id': 'A', 'label': 'Folder A', 'children': [
                {'id': 'A1', 'label': 'first'},
                {'id': 'A2', 'label': 'leaf'},
            ]},
            {'id': 'B', 'label': 'Folder B'},
        ]},
    ]


class TestTreeNode:
    """Tests for TreeNode."""

    def test_create_node_defaults(self):
        """Test node creation with default values."""
        node = TreeNode('item')
        assert node.id == 'item'
        assert node.label == 'item'
        assert node.children == []
        assert node.icon is None
        assert node.disabled is False
        assert node.selectable is True
        assert node.lazy is False
        assert node.has_children is False
        assert node.data is None

    def test_is_leaf_and_branch(self):
        """Test is_leaf / is_branch with and without children."""
        leaf = TreeNode('leaf', 'Leaf')
        branch = TreeNode('branch', 'Branch', children=[leaf])
        assert leaf.is_leaf is True
        assert branch.is_branch is True
        assert branch.is_leaf is False

    def test_unloaded_lazy_node_is_expandable(self):
        """Test a lazy node with has_children is never a leaf before loading."""
        node = TreeNode('remote', lazy=True, has_children=True)
        assert node.is_pending_lazy is True
        assert node.is_leaf is False

    def test_lazy_without_has_children_is_leaf(self):
        """Test lazy alone does not make a node expandable."""
        node = TreeNode('remote', lazy=True)
        assert node.is_leaf is True

    def test_iter_subtree_preorder(self):
        """Test iter_subtree yields the node then descendants in pre-order."""
        node = node_from_dict(sample_source()[0])
        assert [n.id for n in node.iter_subtree()] == ['root', 'A', 'A1', 'A2', 'B']

    def test_update_fields(self):
        """Test update() on allowed fields."""
        node = TreeNode('item', 'Old')
        node.update(label='New', disabled=True, data={'x': 1})
        assert node.label == 'New'
        assert node.disabled is True
        assert node.data == {'x': 1}

    def test_update_structural_field_raises(self):
        """Test update() rejects id and children."""
        node = TreeNode('item')
        with pytest.raises(TypeError, match="children, id"):
            node.update(id='other', children=[])

    def test_repr(self):
        """Test string representation."""
        assert 'item' in repr(TreeNode('item', 'Item'))


class TestLoading:
    """Tests for node dict conversion."""

    def test_node_from_dict_nested(self):
        """Test nested dicts become a TreeNode hierarchy."""
        node = node_from_dict(sample_source()[0])
        assert node.id == 'root'
        assert [c.id for c in node.children] == ['A', 'B']
        assert [c.label for c in node.children[0].children] == ['first', 'leaf']

    def test_has_children_alias(self):
        """Test camelCase hasChildren is accepted."""
        node = node_from_dict({'id': 'r', 'lazy': True, 'hasChildren': True})
        assert node.has_children is True
        assert node.is_pending_lazy is True

    def test_missing_id_raises(self):
        """Test a dict without id is rejected."""
        with pytest.raises(ValueError, match="must have an 'id'"):
            node_from_dict({'label': 'nameless'})

    def test_unknown_key_raises(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown node key"):
            node_from_dict({'id': 'x', 'colour': 'red'})

    def test_load_nodes_single_dict(self):
        """Test a single dict is loaded as one root."""
        nodes = load_nodes({'id': 'only'})
        assert [n.id for n in nodes] == ['only']

    def test_load_nodes_invalid_type(self):
        """Test a non-dict, non-node item raises TypeError."""
        with pytest.raises(TypeError, match="must be TreeNode or dict"):
            load_nodes(['oops'])

    def test_node_as_dict_round_trip(self):
        """Test node_as_dict output loads back to the same structure."""
        source = {
            'id': 'r', 'label': 'R', 'icon': 'folder', 'lazy': True,
            'hasChildren': True, 'disabled': True, 'selectable': False,
            'data': {'k': 1},
        }
        assert node_as_dict(node_from_dict(source)) == source


class TestNodeStoreLookup:
    """Tests for NodeStore lookup operations."""

    def test_len_counts_all_nodes(self):
        """Test len() is the total node count, not the root count."""
        store = NodeStore(sample_source())
        assert len(store) == 5
        assert [n.id for n in store] == ['root']

    def test_find_by_id(self):
        """Test find_by_id finds nested nodes."""
        store = NodeStore(sample_source())
        assert store.find_by_id('A2').label == 'leaf'

    def test_find_by_id_missing_raises(self):
        """Test find_by_id raises NotFoundError."""
        store = NodeStore(sample_source())
        with pytest.raises(NotFoundError, match="'zzz' not found") as exc_info:
            store.find_by_id('zzz')
        assert exc_info.value.node_id == 'zzz'

    def test_not_found_is_key_error(self):
        """Test NotFoundError can be caught as KeyError."""
        store = NodeStore()
        with pytest.raises(KeyError):
            store.find_by_id('zzz')

    def test_get_with_default(self):
        """Test get() returns default instead of raising."""
        store = NodeStore(sample_source())
        assert store.get('zzz') is None
        assert store.get('zzz', 'dflt') == 'dflt'
        assert store.get('B').id == 'B'

    def test_contains(self):
        """Test membership by id."""
        store = NodeStore(sample_source())
        assert 'A1' in store
        assert 'zzz' not in store

    def test_find_parent(self):
        """Test find_parent for nested and root-level nodes."""
        store = NodeStore(sample_source())
        assert store.find_parent('A1').id == 'A'
        assert store.find_parent('root') is None

    def test_find_parent_missing_raises(self):
        """Test find_parent on unknown id."""
        store = NodeStore(sample_source())
        with pytest.raises(NotFoundError):
            store.find_parent('zzz')

    def test_path_to_root_nearest_first(self):
        """Test path_to_root returns ancestors nearest-first."""
        store = NodeStore(sample_source())
        assert store.path_to_root('A1') == ['A', 'root']
        assert store.path_to_root('root') == []

    def test_path_to_root_missing_raises(self):
        """Test path_to_root on unknown id."""
        store = NodeStore(sample_source())
        with pytest.raises(NotFoundError):
            store.path_to_root('zzz')

    def test_depth_and_index(self):
        """Test depth_of and index_of."""
        store = NodeStore(sample_source())
        assert store.depth_of('A2') == 2
        assert store.index_of('A2') == 1
        assert store.index_of('root') == 0

    def test_walk_preorder_with_depth(self):
        """Test walk yields (node, depth) in pre-order."""
        store = NodeStore(sample_source())
        assert [(n.id, d) for n, d in store.walk()] == [
            ('root', 0), ('A', 1), ('A1', 2), ('A2', 2), ('B', 1),
        ]

    def test_descendant_ids(self):
        """Test subtree and descendant id listing."""
        store = NodeStore(sample_source())
        assert store.subtree_ids('A') == ['A', 'A1', 'A2']
        assert store.descendant_ids('A') == ['A1', 'A2']
        assert store.descendant_ids('B') == []


class TestNodeStoreSource:
    """Tests for NodeStore source parameter."""

    def test_source_duplicate_id_raises(self):
        """Test a source repeating an id is rejected."""
        with pytest.raises(DuplicateIdError, match="'x'"):
            NodeStore([{'id': 'x'}, {'id': 'p', 'children': [{'id': 'x'}]}])

    def test_source_from_store_is_deep_copy(self):
        """Test copying another NodeStore does not share nodes."""
        original = NodeStore(sample_source())
        copy = NodeStore(original)
        assert copy.all_ids() == original.all_ids()
        assert copy.find_by_id('A') is not original.find_by_id('A')

    def test_source_invalid_type(self):
        """Test invalid source type."""
        with pytest.raises(TypeError, match="must be list, dict, or NodeStore"):
            NodeStore('invalid')

    def test_as_list(self):
        """Test export to plain dicts."""
        store = NodeStore([{'id': 'p', 'label': 'P', 'children': [{'id': 'c', 'label': 'C'}]}])
        assert store.as_list() == [
            {'id': 'p', 'label': 'P', 'children': [{'id': 'c', 'label': 'C'}]},
        ]


class TestNodeStoreMutation:
    """Tests for NodeStore structural operations."""

    def test_insert_child_appends(self):
        """Test insert_child appends by default."""
        store = NodeStore(sample_source())
        store.insert_child('A', TreeNode('A3', 'third'))
        assert [n.id for n in store.children_of('A')] == ['A1', 'A2', 'A3']
        assert store.find_parent('A3').id == 'A'

    def test_insert_child_at_index(self):
        """Test insert_child respects index, preserving sibling order."""
        store = NodeStore(sample_source())
        store.insert_child('A', {'id': 'A0'}, index=0)
        store.insert_child('A', {'id': 'Amid'}, index=-1)
        assert [n.id for n in store.children_of('A')] == ['A0', 'A1', 'Amid', 'A2']

    def test_insert_root_level(self):
        """Test parent_id None inserts at root level."""
        store = NodeStore(sample_source())
        store.insert_child(None, {'id': 'other'})
        assert [n.id for n in store] == ['root', 'other']
        assert store.find_parent('other') is None

    def test_insert_subtree_is_indexed(self):
        """Test descendants of an inserted node are found by id."""
        store = NodeStore(sample_source())
        store.insert_child('B', {'id': 'B1', 'children': [{'id': 'B1a'}]})
        assert store.path_to_root('B1a') == ['B1', 'B', 'root']

    def test_insert_missing_parent_raises(self):
        """Test insert under an unknown parent leaves the store unchanged."""
        store = NodeStore(sample_source())
        with pytest.raises(NotFoundError):
            store.insert_child('zzz', {'id': 'new'})
        assert 'new' not in store

    def test_insert_duplicate_raises_and_leaves_store(self):
        """Test a subtree containing an existing id is rejected atomically."""
        store = NodeStore(sample_source())
        with pytest.raises(DuplicateIdError, match="'A1'"):
            store.insert_child('B', {'id': 'fresh', 'children': [{'id': 'A1'}]})
        assert 'fresh' not in store
        assert store.children_of('B') == []
        assert store.find_parent('A1').id == 'A'

    def test_insert_non_int_index_raises(self):
        """Test a non-int index is rejected before anything is inserted."""
        store = NodeStore(sample_source())
        with pytest.raises(TypeError, match="index must be int or None, not str"):
            store.insert_child('A', {'id': 'new'}, 'first')
        assert 'new' not in store
        assert len(store) == 5

    def test_remove_returns_subtree_size(self):
        """Test remove drops the whole subtree."""
        store = NodeStore(sample_source())
        assert store.remove('A') == 3
        assert 'A1' not in store
        assert [n.id for n in store.children_of('root')] == ['B']

    def test_remove_missing_raises(self):
        """Test remove on unknown id."""
        store = NodeStore(sample_source())
        with pytest.raises(NotFoundError):
            store.remove('zzz')

    def test_detach_returns_intact_subtree(self):
        """Test detach removes the subtree and returns it whole."""
        store = NodeStore(sample_source())
        node = store.detach('A')
        assert [n.id for n in node.iter_subtree()] == ['A', 'A1', 'A2']
        assert 'A1' not in store
        store.insert_child('B', node)
        assert store.path_to_root('A2') == ['A', 'B', 'root']

    def test_replace_children(self):
        """Test replace_children swaps children and returns dropped ids."""
        store = NodeStore(sample_source())
        removed = store.replace_children('A', [{'id': 'X'}, {'id': 'Y'}])
        assert removed == ['A1', 'A2']
        assert [n.id for n in store.children_of('A')] == ['X', 'Y']
        assert 'A1' not in store

    def test_replace_children_may_reuse_outgoing_ids(self):
        """Test ids leaving in the same replace do not count as duplicates."""
        store = NodeStore(sample_source())
        store.replace_children('A', [{'id': 'A2'}])
        assert store.find_parent('A2').id == 'A'

    def test_replace_children_keeps_passed_back_children(self):
        """Test current children passed back are kept and not reported dropped."""
        store = NodeStore(sample_source())
        kept = store.children_of('A')[1]
        removed = store.replace_children('A', [kept, {'id': 'X'}])
        assert removed == ['A1']
        assert [n.id for n in store.children_of('A')] == ['A2', 'X']
        assert store.find_parent('A2').id == 'A'

    def test_replace_children_duplicate_raises(self):
        """Test replace_children rejects ids living elsewhere."""
        store = NodeStore(sample_source())
        with pytest.raises(DuplicateIdError):
            store.replace_children('A', [{'id': 'B'}])
        assert [n.id for n in store.children_of('A')] == ['A1', 'A2']

    def test_replace_children_missing_raises(self):
        """Test replace_children on unknown id."""
        store = NodeStore()
        with pytest.raises(NotFoundError):
            store.replace_children('zzz', [])
