"""Shared constants and enums."""
from shared.constants import Command, PreviewState, Protocol, command_for_key

__all__ = [
    'Command',
    'PreviewState',
    'Protocol',
    'command_for_key',
]
