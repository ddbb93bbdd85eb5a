"""Scene2 TUI Widgets - Panels for the scene viewer."""

from __future__ import annotations

import json
from dataclasses import asdict

from textual.app import ComposeResult
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Label, ListItem, ListView, Static

from scene2.document import Scene2Chunk, Scene2Document
from scene2.props import HeaderProps, InitScriptProps, ScriptProps


class HeaderPanel(Static):
    """Sidebar panel with the scene header and section counts."""

    DEFAULT_CSS = """
    HeaderPanel {
        width: 32;
        border: solid $accent;
        padding: 1;
        overflow-y: auto;
    }
    HeaderPanel .header-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }
    HeaderPanel .header-key {
        color: $text-muted;
    }
    HeaderPanel .header-val {
        color: $text;
    }
    HeaderPanel .header-missing {
        color: $error;
        text-style: bold;
    }
    """

    def __init__(self, doc: Scene2Document, **kwargs) -> None:
        super().__init__(**kwargs)
        self._doc = doc

    def compose(self) -> ComposeResult:
        content = self._doc.header.content
        props = content.props if content is not None else None
        if not isinstance(props, HeaderProps):
            yield Label("No header", classes="header-missing")
        else:
            title = props.text if len(props.text) <= 24 else props.text[:21] + "..."
            yield Label(title or "(untitled)", classes="header-title")
            for key in ("view_distance", "camera_distance", "near_clipping", "far_clipping"):
                yield Label(f"{key}:", classes="header-key")
                yield Label(f"  {getattr(props, key):g}", classes="header-val")

        yield Label("")

        for section in self._doc.sections:
            yield Label(f"{section.name}:", classes="header-key")
            yield Label(f"  {len(section.chunks)} chunks", classes="header-val")


class ChunkList(ListView):
    """Chunks of the scene in file order."""

    DEFAULT_CSS = """
    ChunkList {
        width: 40;
        border: solid $accent;
    }
    ChunkList > ListItem {
        padding: 0 1;
    }
    ChunkList > ListItem.--highlight {
        background: $accent;
    }
    """

    class ChunkSelected(Message):
        """Fired when a chunk is highlighted or selected."""

        def __init__(self, chunk: Scene2Chunk, index: int) -> None:
            self.chunk = chunk
            self.index = index
            super().__init__()

    def __init__(self, chunks: list[Scene2Chunk], **kwargs) -> None:
        self._chunks = chunks
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        for chunk in self._chunks:
            yield ListItem(Label(f"{chunk.type.value}: {chunk.name}"))

    def _post_current(self) -> None:
        idx = self.index or 0
        if 0 <= idx < len(self._chunks):
            self.post_message(self.ChunkSelected(self._chunks[idx], idx))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        self._post_current()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self._post_current()


class PropsPanel(Static):
    """Decoded properties of the current chunk; scripts shown as text."""

    DEFAULT_CSS = """
    PropsPanel {
        border: solid $accent;
        padding: 1;
        overflow: auto;
    }
    PropsPanel .props-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    """

    current_chunk = reactive("")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._title_widget: Label | None = None
        self._body_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._title_widget = Label("Select a chunk", classes="props-title")
        self._body_widget = Static("")
        yield self._title_widget
        yield self._body_widget

    def show_chunk(self, chunk: Scene2Chunk) -> None:
        self.current_chunk = chunk.name
        if self._title_widget:
            modified = " (modified)" if chunk.is_modified else ""
            self._title_widget.update(f"--- {chunk.type.value}: {chunk.name}{modified} ---")
        if self._body_widget:
            self._body_widget.update(self._render_props(chunk))
        self.scroll_home()

    @staticmethod
    def _render_props(chunk: Scene2Chunk) -> str | object:
        from rich.syntax import Syntax

        props = chunk.props
        if props is None:
            return f"{chunk.size} bytes, no decoded properties"
        if isinstance(props, (ScriptProps, InitScriptProps)):
            return props.script
        return Syntax(json.dumps(asdict(props), indent=2, ensure_ascii=False), "json", theme="monokai")
