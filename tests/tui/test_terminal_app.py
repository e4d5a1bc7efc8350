"""Tests for tui.app terminal loop."""

import asyncio
import contextlib
import io
import os
import sys
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from preview.controller import MapPreviewController
from preview.protocol import FixedProtocol
from shared.constants import PreviewState, Protocol
from tui.app import run_terminal
from tui.screen import PreviewScreen


async def _never(req):
    await asyncio.Event().wait()


def _screen():
    return PreviewScreen(Console(file=io.StringIO(), width=80, height=24, force_terminal=False))


class TestRunTerminal:
    @pytest.mark.asyncio
    async def test_requires_tty(self):
        stdin = MagicMock()
        stdin.isatty.return_value = False
        ctrl = MapPreviewController(_never, 'demo', 'roads', detector=FixedProtocol(Protocol.ASCII))
        with pytest.raises(RuntimeError, match='interactive terminal'):
            await run_terminal(ctrl, _screen(), stdin=stdin)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == 'win32', reason='needs a pseudo terminal')
    async def test_keys_from_terminal_reach_controller(self):
        master, slave = os.openpty()
        stdin = MagicMock()
        stdin.isatty.return_value = True
        stdin.fileno.return_value = slave
        screen = _screen()
        ctrl = MapPreviewController(
            _never, 'demo', 'roads', detector=FixedProtocol(Protocol.ASCII), on_change=screen.paint,
        )
        try:
            task = asyncio.ensure_future(run_terminal(ctrl, screen, stdin=stdin))
            await asyncio.sleep(0.05)
            os.write(master, b'+\x1b[C')
            await asyncio.sleep(0.05)
            assert ctrl.viewport.zoom == 2.5
            assert ctrl.viewport.center_lon > 0
            os.write(master, b'q')
            await asyncio.wait_for(task, 2)
            assert ctrl.state is PreviewState.CLOSED
            assert (ctrl.cols, ctrl.rows) == (80, 24)
        finally:
            os.close(master)
            os.close(slave)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == 'win32', reason='needs a pseudo terminal')
    async def test_arrow_split_across_reads_is_not_escape(self):
        master, slave = os.openpty()
        stdin = MagicMock()
        stdin.isatty.return_value = True
        stdin.fileno.return_value = slave
        ctrl = MapPreviewController(_never, 'demo', 'roads', detector=FixedProtocol(Protocol.ASCII))
        try:
            with patch('tui.app.ESC_TIMEOUT_S', 1.0):
                task = asyncio.ensure_future(run_terminal(ctrl, _screen(), stdin=stdin))
                await asyncio.sleep(0.05)
                os.write(master, b'\x1b')
                await asyncio.sleep(0.05)
                os.write(master, b'[C')
                await asyncio.sleep(0.05)
                assert ctrl.state is not PreviewState.CLOSED
                assert ctrl.viewport.center_lon > 0
                os.write(master, b'q')
                await asyncio.wait_for(task, 2)
        finally:
            os.close(master)
            os.close(slave)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == 'win32', reason='needs a pseudo terminal')
    async def test_lone_escape_closes_after_timeout(self):
        master, slave = os.openpty()
        stdin = MagicMock()
        stdin.isatty.return_value = True
        stdin.fileno.return_value = slave
        ctrl = MapPreviewController(_never, 'demo', 'roads', detector=FixedProtocol(Protocol.ASCII))
        try:
            task = asyncio.ensure_future(run_terminal(ctrl, _screen(), stdin=stdin))
            await asyncio.sleep(0.05)
            os.write(master, b'\x1b')
            await asyncio.wait_for(task, 2)
            assert ctrl.state is PreviewState.CLOSED
        finally:
            os.close(master)
            os.close(slave)

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == 'win32', reason='needs os.pipe and add_reader')
    async def test_end_of_input_closes_preview(self):
        read_fd, write_fd = os.pipe()
        stdin = MagicMock()
        stdin.isatty.return_value = True
        stdin.fileno.return_value = read_fd
        ctrl = MapPreviewController(_never, 'demo', 'roads', detector=FixedProtocol(Protocol.ASCII))
        try:
            with patch('tui.app.cbreak_mode', lambda fd: contextlib.nullcontext()):
                task = asyncio.ensure_future(run_terminal(ctrl, _screen(), stdin=stdin))
                await asyncio.sleep(0.05)
                os.close(write_fd)
                write_fd = None
                await asyncio.wait_for(task, 2)
            assert ctrl.state is PreviewState.CLOSED
        finally:
            os.close(read_fd)
            if write_fd is not None:
                os.close(write_fd)
