"""TOON TUI Viewer - Main Textual app with 3-panel layout."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input

from toon.codec import load
from toon.tui.widgets import DetailPanel, DocumentTree, SummaryPanel, describe, iter_paths


def search_paths(document: Any, query: str) -> set[str]:
    """Paths whose key path or scalar value contains ``query``, plus their ancestors."""
    query = query.lower()
    matches: set[str] = set()
    for path, value in iter_paths(document):
        hit = query in path.lower()
        if not hit and not isinstance(value, (dict, list)):
            hit = query in str(value).lower()
        if hit:
            matches.add(path)
    keep = set(matches)
    for path, _ in iter_paths(document):
        if any(m.startswith((path + ".", path + "[")) for m in matches):
            keep.add(path)
    return keep


class ToonViewerApp(App):
    """TUI viewer for .toon files. Summary, tree and detail panels."""

    TITLE = "TOON Viewer"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-area {
        height: 1fr;
    }
    #search-bar {
        dock: bottom;
        display: none;
        height: 3;
        padding: 0 1;
    }
    #search-bar.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("slash", "toggle_search", "Search", show=True),
        Binding("escape", "close_search", "Close search", show=False),
        Binding("e", "expand_all", "Expand", show=True),
        Binding("c", "collapse_all", "Collapse", show=True),
    ]

    def __init__(self, toon_path: str | Path, **kwargs) -> None:
        super().__init__(**kwargs)
        self._toon_path = Path(toon_path)
        self._document: Any = None

    def compose(self) -> ComposeResult:
        self._document = load(self._toon_path)
        text = self._toon_path.read_text(encoding="utf-8")
        self.title = f"TOON Viewer - {self._toon_path.name}"

        facts = {
            "root": describe(self._document),
            "nodes": str(sum(1 for _ in iter_paths(self._document))),
            "lines": str(len(text.splitlines())),
            "bytes": str(self._toon_path.stat().st_size),
        }

        yield Header()
        with Horizontal(id="main-area"):
            yield SummaryPanel(self._toon_path.name, facts, id="summary")
            yield DocumentTree(self._document, id="tree")
            yield DetailPanel(id="detail")
        yield Input(placeholder="Search keys and values... (Escape to close)", id="search-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#detail", DetailPanel).show_value("", self._document)
        self.query_one("#tree", DocumentTree).focus()

    def on_document_tree_node_chosen(self, event: DocumentTree.NodeChosen) -> None:
        self.query_one("#detail", DetailPanel).show_value(event.path, event.value)

    def action_expand_all(self) -> None:
        self.query_one("#tree", DocumentTree).root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#tree", DocumentTree)
        tree.root.collapse_all()
        tree.root.expand()

    def action_toggle_search(self) -> None:
        """Show/hide the search bar."""
        search = self.query_one("#search-bar", Input)
        search.toggle_class("visible")
        if search.has_class("visible"):
            search.focus()
        else:
            self.action_close_search()

    def action_close_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.remove_class("visible")
        search.value = ""
        tree = self.query_one("#tree", DocumentTree)
        tree.show_document(self._document)
        tree.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Filter the tree to matching paths."""
        if event.input.id != "search-bar":
            return
        query = event.value.strip()
        tree = self.query_one("#tree", DocumentTree)
        if not query:
            tree.show_document(self._document)
            return
        tree.show_document(self._document, only=search_paths(self._document, query))


def run_viewer(path: str | Path) -> None:
    """Launch the TOON TUI viewer."""
    path = Path(path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        load(path)
    except ValueError as e:
        print(f"Error: Not a valid TOON file: {e}", file=sys.stderr)
        sys.exit(1)

    app = ToonViewerApp(path)
    app.run()
