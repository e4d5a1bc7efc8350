"""Tests for tui.keys."""

import pytest

from shared.constants import Command, command_for_key
from tui.keys import KeyDecoder, decode_keys


class TestDecodeKeys:
    """Tests for decode_keys function."""

    @pytest.mark.parametrize(
        ('data', 'expected'),
        [
            ('\x1b[A', ['up']),
            ('\x1b[B', ['down']),
            ('\x1b[C', ['right']),
            ('\x1b[D', ['left']),
            ('\x1bOA', ['up']),
            ('\x1bOD', ['left']),
        ],
    )
    def test_arrows(self, data, expected):
        assert decode_keys(data) == expected

    def test_plain_characters(self):
        assert decode_keys('+-sSr') == ['+', '-', 's', 'S', 'r']

    def test_lone_escape(self):
        assert decode_keys('\x1b') == ['esc']

    def test_burst_of_keys(self):
        assert decode_keys('+\x1b[C\x1b[Cq') == ['+', 'right', 'right', 'q']

    def test_unknown_sequence_skipped(self):
        # F5 and Shift+Up
        assert decode_keys('\x1b[15~a\x1b[1;2Ab') == ['a', 'b']


class TestKeyDecoder:
    """Tests for KeyDecoder across several reads."""

    def test_arrow_split_after_escape(self):
        decoder = KeyDecoder()
        assert decoder.feed('\x1b') == []
        assert decoder.pending
        assert decoder.feed('[A') == ['up']
        assert not decoder.pending

    def test_arrow_split_inside_sequence(self):
        decoder = KeyDecoder()
        assert decoder.feed('+\x1b[') == ['+']
        assert decoder.feed('D-') == ['left', '-']

    def test_unknown_sequence_split(self):
        decoder = KeyDecoder()
        assert decoder.feed('\x1b[15') == []
        assert decoder.feed('~r') == ['r']

    def test_flush_reports_lone_escape(self):
        decoder = KeyDecoder()
        decoder.feed('\x1b')
        assert decoder.flush() == ['esc']
        assert not decoder.pending
        assert decoder.flush() == []

    def test_flush_drops_partial_sequence(self):
        decoder = KeyDecoder()
        decoder.feed('\x1b[1;')
        assert decoder.flush() == []


class TestKeyBindings:
    """Tests for command_for_key mapping."""

    @pytest.mark.parametrize(
        ('key', 'command'),
        [
            ('+', Command.ZOOM_IN),
            ('=', Command.ZOOM_IN),
            ('-', Command.ZOOM_OUT),
            ('up', Command.PAN_UP),
            ('k', Command.PAN_UP),
            ('down', Command.PAN_DOWN),
            ('j', Command.PAN_DOWN),
            ('left', Command.PAN_LEFT),
            ('h', Command.PAN_LEFT),
            ('right', Command.PAN_RIGHT),
            ('l', Command.PAN_RIGHT),
            ('s', Command.NEXT_STYLE),
            ('S', Command.PREV_STYLE),
            ('r', Command.REFRESH),
            ('esc', Command.CLOSE),
            ('q', Command.CLOSE),
        ],
    )
    def test_bound_keys(self, key, command):
        assert command_for_key(key) is command

    @pytest.mark.parametrize('key', ['x', 'Q', 'R', '1', ' '])
    def test_unbound_keys(self, key):
        assert command_for_key(key) is None
