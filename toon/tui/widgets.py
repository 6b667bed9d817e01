"""TOON TUI Widgets - Panels for the TOON viewer."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Label, Static, Tree
from textual.widgets.tree import TreeNode

from toon.notation import PATH_SEPARATOR
from toon.options import Delimiter
from toon.primitives import encode_primitive


def describe(value: Any) -> str:
    """Short kind label for a node."""
    if isinstance(value, dict):
        return f"{{{len(value)}}}"
    if isinstance(value, list):
        return f"[{len(value)}]"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return type(value).__name__


def child_path(parent: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    return f"{parent}{PATH_SEPARATOR}{key}" if parent else key


def iter_paths(value: Any, path: str = ""):
    """Yield (path, value) for every node below the root, depth first."""
    if isinstance(value, dict):
        items = value.items()
    elif isinstance(value, list):
        items = enumerate(value)
    else:
        return
    for key, child in items:
        p = child_path(path, key)
        yield p, child
        yield from iter_paths(child, p)


class SummaryPanel(Static):
    """Sidebar panel showing file facts and the decoded shape."""

    DEFAULT_CSS = """
    SummaryPanel {
        width: 32;
        border: solid $accent;
        padding: 1;
        overflow-y: auto;
    }
    SummaryPanel .summary-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }
    SummaryPanel .summary-key {
        color: $text-muted;
    }
    SummaryPanel .summary-val {
        color: $text;
    }
    SummaryPanel .status-valid {
        color: $success;
        text-style: bold;
    }
    """

    def __init__(self, file_name: str, facts: dict[str, str], **kwargs) -> None:
        super().__init__(**kwargs)
        self._file_name = file_name
        self._facts = facts

    def compose(self) -> ComposeResult:
        yield Label(self._file_name, classes="summary-title")
        yield Label("Decoded: OK", classes="status-valid")
        yield Label("")  # spacer
        for key, val in self._facts.items():
            display = val if len(val) <= 24 else val[:21] + "..."
            yield Label(f"{key}:", classes="summary-key")
            yield Label(f"  {display}", classes="summary-val")


class DocumentTree(Tree):
    """Expandable tree of the decoded document."""

    DEFAULT_CSS = """
    DocumentTree {
        width: 1fr;
        border: solid $accent;
    }
    """

    class NodeChosen(Message):
        """Fired when a node is highlighted or selected."""

        def __init__(self, path: str, value: Any) -> None:
            self.path = path
            self.value = value
            super().__init__()

    def __init__(self, document: Any, **kwargs) -> None:
        super().__init__(Text(describe(document)), data=("", document), **kwargs)
        self._document = document

    def on_mount(self) -> None:
        self.show_document(self._document)

    def show_document(self, document: Any, only: set[str] | None = None) -> None:
        """Rebuild the tree. ``only`` restricts it to those paths and their ancestors."""
        self.clear()
        self.root.set_label(Text(describe(document)))
        self.root.data = ("", document)
        self._add_children(self.root, "", document, only)
        self.root.expand()
        if only is not None:
            self.root.expand_all()

    def _add_children(self, node: TreeNode, path: str, value: Any, only: set[str] | None) -> None:
        if isinstance(value, dict):
            items = value.items()
        elif isinstance(value, list):
            items = enumerate(value)
        else:
            return
        for key, child in items:
            p = child_path(path, key)
            if only is not None and p not in only:
                continue
            if isinstance(child, (dict, list)):
                label = Text(f"{key}: {describe(child)}")
                if child:
                    branch = node.add(label, data=(p, child))
                    self._add_children(branch, p, child, only)
                else:
                    node.add_leaf(label, data=(p, child))
            else:
                token = encode_primitive(child, Delimiter.COMMA.value)
                node.add_leaf(Text(f"{key}: {token}"), data=(p, child))

    def on_tree_node_highlighted(self, event: Tree.NodeHighlighted) -> None:
        if event.node.data is not None:
            path, value = event.node.data
            self.post_message(self.NodeChosen(path, value))

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if event.node.data is not None:
            path, value = event.node.data
            self.post_message(self.NodeChosen(path, value))


class DetailPanel(Static):
    """Shows the selected node re-encoded as TOON."""

    DEFAULT_CSS = """
    DetailPanel {
        width: 1fr;
        border: solid $accent;
        padding: 1;
        overflow: auto;
    }
    DetailPanel .detail-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    DetailPanel .detail-body {
        color: $text;
    }
    """

    current_path = reactive("")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._title_widget: Label | None = None
        self._body_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._title_widget = Label("Select a node", classes="detail-title")
        self._body_widget = Static("", classes="detail-body", markup=False)
        yield self._title_widget
        yield self._body_widget

    def show_value(self, path: str, value: Any) -> None:
        from toon.codec import encode

        self.current_path = path
        if self._title_widget:
            self._title_widget.update(f"--- {path or '(root)'} ({describe(value)}) ---")
        if self._body_widget:
            self._body_widget.update(encode(value) or "(empty)")
        self.scroll_home()
