"""Tests for preview.protocol module."""

import pytest

from preview.protocol import FixedProtocol, ProtocolDetector
from shared.constants import Protocol


def _which_from(available):
    return lambda name: f'/usr/bin/{name}' if name in available else None


class TestProtocolDetector:
    """Tests for ProtocolDetector.detect preference order."""

    def test_nothing_available_is_ascii(self):
        detector = ProtocolDetector(environ={'TERM': 'xterm-256color'}, which=_which_from(set()))
        assert detector.detect() is Protocol.ASCII

    def test_empty_environment_is_ascii(self):
        detector = ProtocolDetector(environ={}, which=_which_from(set()))
        assert detector.detect() is Protocol.ASCII

    @pytest.mark.parametrize(
        'environ',
        [{'TERM': 'xterm-kitty'}, {'TERM': 'xterm', 'KITTY_WINDOW_ID': '3'}],
    )
    def test_native_terminal_wins(self, environ):
        detector = ProtocolDetector(environ=environ, which=_which_from({'img2sixel', 'chafa'}))
        assert detector.detect() is Protocol.NATIVE

    def test_empty_window_id_is_not_native(self):
        detector = ProtocolDetector(environ={'KITTY_WINDOW_ID': ''}, which=_which_from(set()))
        assert detector.detect() is Protocol.ASCII

    def test_sixel_helper_preferred_over_general(self):
        detector = ProtocolDetector(environ={}, which=_which_from({'img2sixel', 'chafa'}))
        assert detector.detect() is Protocol.SIXEL_HELPER

    def test_general_helper(self):
        detector = ProtocolDetector(environ={}, which=_which_from({'chafa'}))
        assert detector.detect() is Protocol.GENERAL_HELPER

    def test_uses_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv('TERM', 'xterm-kitty')
        assert ProtocolDetector(which=_which_from(set())).detect() is Protocol.NATIVE


class TestFixedProtocol:
    def test_always_returns_given_protocol(self):
        assert FixedProtocol(Protocol.SIXEL_HELPER).detect() is Protocol.SIXEL_HELPER
