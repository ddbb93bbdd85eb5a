"""Scene2 TUI Viewer - Main Textual app with 3-panel layout."""

from __future__ import annotations

import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input

from scene2.document import Scene2Chunk, Scene2Document
from scene2.reader import Scene2Reader
from scene2.tui.widgets import ChunkList, HeaderPanel, PropsPanel


class Scene2ViewerApp(App):
    """TUI viewer for scene2.bin files: header, chunk list, properties."""

    TITLE = "Scene2 Viewer"
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
        Binding("j", "next_chunk", "Next", show=True),
        Binding("k", "prev_chunk", "Prev", show=True),
    ]

    def __init__(self, doc: Scene2Document, path: str | Path = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._doc = doc
        self._path = Path(path)
        self._all_chunks: list[Scene2Chunk] = list(doc.iter_chunks())

    def compose(self) -> ComposeResult:
        self.title = f"Scene2 Viewer - {self._path.name}"

        yield Header()

        with Horizontal(id="main-area"):
            yield HeaderPanel(self._doc, id="header")
            yield ChunkList(self._all_chunks, id="chunks")
            yield PropsPanel(id="props")

        yield Input(placeholder="Filter by name or type... (Escape to close)", id="search-bar")
        yield Footer()

    def on_mount(self) -> None:
        if self._all_chunks:
            self.query_one("#props", PropsPanel).show_chunk(self._all_chunks[0])
            self.query_one("#chunks", ChunkList).focus()

    def on_chunk_list_chunk_selected(self, event: ChunkList.ChunkSelected) -> None:
        self.query_one("#props", PropsPanel).show_chunk(event.chunk)

    def action_next_chunk(self) -> None:
        self.query_one("#chunks", ChunkList).action_cursor_down()

    def action_prev_chunk(self) -> None:
        self.query_one("#chunks", ChunkList).action_cursor_up()

    def action_toggle_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.toggle_class("visible")
        if search.has_class("visible"):
            search.focus()
        else:
            search.value = ""
            self._update_chunk_list(self._all_chunks)
            self.query_one("#chunks", ChunkList).focus()

    def action_close_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.remove_class("visible")
        search.value = ""
        self._update_chunk_list(self._all_chunks)
        self.query_one("#chunks", ChunkList).focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search-bar":
            return
        query = event.value.lower().strip()
        if not query:
            self._update_chunk_list(self._all_chunks)
            return
        self._update_chunk_list([
            c for c in self._all_chunks
            if query in c.name.lower() or query in c.type.value.lower()
        ])

    def _update_chunk_list(self, chunks: list[Scene2Chunk]) -> None:
        old = self.query_one("#chunks", ChunkList)
        new_list = ChunkList(chunks, id="chunks")
        old.remove()
        self.query_one("#main-area", Horizontal).mount(new_list, before="#props")
        if chunks:
            self.query_one("#props", PropsPanel).show_chunk(chunks[0])


def run_viewer(path: str | Path) -> None:
    """Launch the Scene2 TUI viewer."""
    path = Path(path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        doc = Scene2Reader.read(path)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = Scene2ViewerApp(doc, path)
    app.run()
