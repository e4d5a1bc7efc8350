"""Terminal front end for the map preview."""
from tui.app import run_terminal
from tui.keys import KeyDecoder, decode_keys
from tui.screen import PreviewScreen

__all__ = [
    'KeyDecoder',
    'PreviewScreen',
    'decode_keys',
    'run_terminal',
]
