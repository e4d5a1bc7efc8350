"""Full-screen painting of the preview component."""

from __future__ import annotations

from typing import ClassVar

from rich.console import Console
from rich.style import Style
from rich.text import Text

from preview.controller import PreviewView
from shared.constants import PreviewState

TITLE_STYLE = Style(color='white', bgcolor='blue', bold=True)
KEY_STYLE = Style(color='cyan', bold=True)
MUTED_STYLE = Style(color='bright_black')
ERROR_STYLE = Style(color='red', bold=True)
LOADING_STYLE = Style(color='yellow')


def control_bar(view: PreviewView) -> Text:
    sep = Text('  │  ', style=MUTED_STYLE)
    return Text.assemble(
        ('Zoom: ', MUTED_STYLE), ('-', KEY_STYLE), (f' {view.zoom:.1f} ', MUTED_STYLE), ('+', KEY_STYLE),
        sep,
        ('Pan: ', MUTED_STYLE), ('←', KEY_STYLE), ' ', ('↑', KEY_STYLE), ' ', ('↓', KEY_STYLE), ' ', ('→', KEY_STYLE),
        sep,
        (f'Style: {view.style}', MUTED_STYLE), ' ', ('s', KEY_STYLE), '/', ('S', KEY_STYLE),
        sep,
        (f'{view.protocol}', MUTED_STYLE),
        sep,
        ('r', KEY_STYLE), (' refresh  ', MUTED_STYLE), ('esc', KEY_STYLE), (' close', MUTED_STYLE),
    )


class PreviewScreen:
    """Paints title, control bar, status line and the frame.

    The frame is written to the terminal unmodified so that graphics escape
    sequences produced by the helpers reach the emulator.
    """

    spinner_frames: ClassVar[list[str]] = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.last_view: PreviewView | None = None
        self._spin = 0

    @property
    def size(self) -> tuple[int, int]:
        size = self.console.size
        return size.width, size.height

    def tick(self) -> None:
        """Advance the spinner; repaints only while loading."""
        self._spin = (self._spin + 1) % len(self.spinner_frames)
        if self.last_view is not None and self.last_view.state is PreviewState.LOADING:
            self.paint(self.last_view)

    def status_line(self, view: PreviewView) -> Text | None:
        if view.state is PreviewState.ERROR:
            return Text(view.status, style=ERROR_STYLE)
        if view.state is PreviewState.LOADING:
            return Text(f'{self.spinner_frames[self._spin]} {view.status}', style=LOADING_STYLE)
        return None

    def paint(self, view: PreviewView) -> None:
        self.last_view = view
        self.console.clear()
        if view.state is PreviewState.CLOSED:
            return
        self.console.print(Text(f' Layer Preview: {view.title} ', style=TITLE_STYLE))
        self.console.print()
        self.console.print(control_bar(view), no_wrap=True, overflow='ellipsis')
        self.console.print()
        status = self.status_line(view)
        if status is not None:
            self.console.print(status)
        if view.state is PreviewState.READY and view.frame:
            self.console.file.write(view.frame)
        self.console.file.flush()
