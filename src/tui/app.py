from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
import termios
import tty
from typing import TextIO

from preview.controller import MapPreviewController
from preview.messages import KeyPressed, Resized
from tui.keys import ESC_TIMEOUT_S, KeyDecoder
from tui.screen import PreviewScreen

logger = logging.getLogger(__name__)

SPINNER_INTERVAL_S = 0.1


@contextlib.contextmanager
def cbreak_mode(fd: int):
    """Посимвольный ввод без эха; восстанавливает режим терминала на выходе."""
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


async def _spin(screen: PreviewScreen, controller: MapPreviewController) -> None:
    while not controller.closed:
        await asyncio.sleep(SPINNER_INTERVAL_S)
        screen.tick()


async def run_terminal(
    controller: MapPreviewController,
    screen: PreviewScreen,
    stdin: TextIO | None = None,
) -> None:
    """
    Run the preview in the current terminal until it is closed.

    Keystrokes and resizes are posted to the controller's mailbox from
    loop callbacks; the controller's dispatcher does all the work.
    """
    stdin = stdin or sys.stdin
    if not stdin.isatty():
        msg = 'Map preview needs an interactive terminal on stdin'
        raise RuntimeError(msg)

    loop = asyncio.get_running_loop()
    fd = stdin.fileno()
    decoder = KeyDecoder()
    esc_timer: asyncio.TimerHandle | None = None

    def _post_keys(keys: list[str]) -> None:
        for key in keys:
            controller.post_nowait(KeyPressed(key))

    def _flush_pending() -> None:
        _post_keys(decoder.flush())

    def _on_input() -> None:
        nonlocal esc_timer
        try:
            data = os.read(fd, 1024)
        except BlockingIOError:
            return
        except OSError:
            # EIO после обрыва терминала
            data = b''
        if esc_timer is not None:
            esc_timer.cancel()
            esc_timer = None
        if not data:
            # EOF: терминал закрыт, дальше читать нечего
            logger.info('Terminal input closed, closing preview')
            loop.remove_reader(fd)
            controller.post_nowait(KeyPressed('q'))
            return
        _post_keys(decoder.feed(data.decode('utf-8', errors='ignore')))
        if decoder.pending:
            esc_timer = loop.call_later(ESC_TIMEOUT_S, _flush_pending)

    def _on_resize() -> None:
        cols, rows = screen.size
        logger.debug('Terminal resized to %dx%d', cols, rows)
        controller.post_nowait(Resized(cols, rows))

    controller.set_size(*screen.size)
    console = screen.console
    with cbreak_mode(fd):
        console.set_alt_screen(True)
        console.show_cursor(False)
        loop.add_reader(fd, _on_input)
        with contextlib.suppress(NotImplementedError, AttributeError):
            loop.add_signal_handler(signal.SIGWINCH, _on_resize)
        spinner = asyncio.create_task(_spin(screen, controller))
        try:
            await controller.run()
        finally:
            spinner.cancel()
            if esc_timer is not None:
                esc_timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await spinner
            loop.remove_reader(fd)
            with contextlib.suppress(NotImplementedError, AttributeError):
                loop.remove_signal_handler(signal.SIGWINCH)
            console.show_cursor(True)
            console.set_alt_screen(False)
