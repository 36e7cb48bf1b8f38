# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FileBrowser - Example text renderer driven by TreeViewEngine.

A didactic example showing how a renderer consumes get_visible_rows()
and how a data source answers lazy load requests.
"""

from __future__ import annotations

from genro_treeview import LazyLoad, TreeViewEngine

REMOTE_FILES = {
    'shared': [
        {'id': 'shared/notes.txt', 'label': 'notes.txt', 'icon': 'file'},
        {'id': 'shared/todo.md', 'label': 'todo.md', 'icon': 'file'},
    ],
}


class FileBrowser:
    """A file tree printed as text.

    Example:
        >>> browser = FileBrowser()
        >>> browser.engine.toggle_expand('home')
        >>> browser.engine.toggle_expand('shared')  # fetched on demand
        >>> print(browser.render())
    """

    def __init__(self):
        self.engine = TreeViewEngine(
            [
                {'id': 'home', 'label': 'home', 'icon': 'folder', 'children': [
                    {'id': 'home/readme.md', 'label': 'readme.md', 'icon': 'file'},
                    {'id': 'home/report.pdf', 'label': 'report.pdf', 'icon': 'file'},
                ]},
                {'id': 'shared', 'label': 'shared', 'icon': 'folder',
                 'lazy': True, 'hasChildren': True},
            ],
            multiple=True,
            loader=self.fetch,
        )

    def fetch(self, load: LazyLoad) -> None:
        """Answer a lazy load synchronously from the fake remote listing."""
        children = REMOTE_FILES.get(load.node_id)
        if children is None:
            load.fail(LookupError(f"no listing for {load.node_id}"))
        else:
            load.resolve(children)

    def render(self) -> str:
        lines = []
        for row in self.engine.get_visible_rows():
            if row.is_leaf:
                marker = ' '
            else:
                marker = '-' if row.is_expanded else '+'
            if row.is_checked:
                box = '[x]'
            elif row.is_indeterminate:
                box = '[~]'
            else:
                box = '[ ]'
            selected = ' *' if row.is_selected else ''
            lines.append(f"{'    ' * row.depth}{marker} {box} {row.label}{selected}")
        return '\n'.join(lines)


if __name__ == '__main__':
    browser = FileBrowser()
    browser.engine.toggle_expand('home')
    browser.engine.toggle_expand('shared')
    browser.engine.set_checked('home/readme.md', True)
    browser.engine.select('shared/todo.md')
    print(browser.render())
    print()
    browser.engine.search('re')
    print(browser.render())
