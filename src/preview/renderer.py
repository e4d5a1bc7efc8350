"""Raster-to-terminal rendering with a fixed fallback chain.

Each protocol tier has one strategy. A failing strategy raises RenderError
and the frame is produced by the software ASCII renderer instead, which
never fails (undecodable input becomes a placeholder string).
"""

from __future__ import annotations

import contextlib
import io
import logging
import os
import subprocess
import tempfile
from collections.abc import Callable, Iterator
from typing import Any

import numpy as np
from PIL import Image, UnidentifiedImageError

from preview.sizing import grid_size
from shared.constants import (
    ALPHA_THRESHOLD,
    BLANK_GLYPH,
    DECODE_ERROR_FRAME,
    GENERAL_HELPER,
    GLYPH_RAMP,
    HELPER_TIMEOUT_S,
    SIXEL_HELPER,
    Protocol,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., 'subprocess.CompletedProcess[bytes]']


class RenderError(RuntimeError):
    """A helper-based strategy could not produce a frame."""


def render_ascii(data: bytes, cols: int, rows: int) -> str:
    """
    Программный рендер: одна ячейка на символ.

    Для каждой ячейки берётся ближайший пиксель источника
    floor(i * extent / grid), ограниченный последним пикселем.
    Прозрачные пиксели дают пробел, остальные символ по средней яркости
    RGB: чем темнее пиксель, тем плотнее символ.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = np.asarray(img.convert('RGBA'), dtype=np.int32)
    except (UnidentifiedImageError, OSError, ValueError):
        logger.warning('Failed to decode preview image (%d bytes)', len(data))
        return DECODE_ERROR_FRAME

    src_h, src_w = rgba.shape[:2]
    if cols <= 0 or rows <= 0 or src_w == 0 or src_h == 0:
        return ''

    xs = np.minimum(np.arange(cols) * src_w // cols, src_w - 1)
    ys = np.minimum(np.arange(rows) * src_h // rows, src_h - 1)
    sampled = rgba[ys[:, None], xs[None, :]]

    luminance = sampled[..., :3].sum(axis=2) // 3
    levels = len(GLYPH_RAMP) - 1
    indices = (255 - luminance) * levels // 255
    glyphs = np.array(list(GLYPH_RAMP))[indices]
    glyphs[sampled[..., 3] < ALPHA_THRESHOLD] = BLANK_GLYPH

    return ''.join(''.join(row) + '\n' for row in glyphs)


class ImageRenderer:
    """Turns PNG bytes into a terminal-printable frame for a given protocol."""

    def __init__(self, runner: Runner = subprocess.run, timeout: float = HELPER_TIMEOUT_S) -> None:
        self._runner = runner
        self._timeout = timeout
        self._strategies: dict[Protocol, Callable[[bytes, int, int], str]] = {
            Protocol.NATIVE: self._render_native,
            Protocol.SIXEL_HELPER: self._render_sixel,
            Protocol.GENERAL_HELPER: self._render_general,
            Protocol.ASCII: self._render_ascii,
        }
        missing = set(Protocol) - set(self._strategies)
        if missing:
            msg = f'No render strategy for {sorted(p.value for p in missing)}'
            raise TypeError(msg)

    def render(self, protocol: Protocol, data: bytes, cols: int, rows: int) -> str:
        """Render for the component size cols x rows (terminal cells)."""
        if not data:
            return ''
        if protocol is not Protocol.ASCII:
            try:
                return self._strategies[protocol](data, cols, rows)
            except RenderError as exc:
                logger.info('Render via %s failed (%s), falling back to ASCII', protocol.value, exc)
        return self._render_ascii(data, cols, rows)

    # Strategies

    def _render_ascii(self, data: bytes, cols: int, rows: int) -> str:
        return render_ascii(data, *grid_size(cols, rows, ascii_mode=True))

    def _render_native(self, data: bytes, cols: int, rows: int) -> str:
        size = '{}x{}'.format(*grid_size(cols, rows))
        with _temp_png(data) as path:
            try:
                return self._run([
                    GENERAL_HELPER, '--format', 'kitty', '--size', size,
                    '--colors', 'full', '--color-space', 'rgb', path,
                ])
            except RenderError as exc:
                logger.debug('Kitty output failed (%s), retrying with symbols', exc)
            return self._run([
                GENERAL_HELPER, '--format', 'symbols', '--size', size,
                '--colors', 'full', path,
            ])

    def _render_sixel(self, data: bytes, cols: int, rows: int) -> str:
        return self._run([SIXEL_HELPER, '-'], stdin=data)

    def _render_general(self, data: bytes, cols: int, rows: int) -> str:
        size = '{}x{}'.format(*grid_size(cols, rows))
        with _temp_png(data) as path:
            return self._run([GENERAL_HELPER, '--size', size, '--colors', 'full', path])

    def _run(self, args: list[str], stdin: bytes | None = None) -> str:
        kwargs: dict[str, Any] = {'capture_output': True, 'timeout': self._timeout, 'check': False}
        if stdin is not None:
            kwargs['input'] = stdin
        try:
            proc = self._runner(args, **kwargs)
        except (OSError, subprocess.SubprocessError) as exc:
            raise RenderError(f'{args[0]}: {exc}') from exc
        if proc.returncode != 0:
            raise RenderError(f'{args[0]} exited with {proc.returncode}')
        try:
            out = proc.stdout.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise RenderError(f'{args[0]} produced undecodable output') from exc
        if not out.strip():
            raise RenderError(f'{args[0]} produced no output')
        return out


@contextlib.contextmanager
def _temp_png(data: bytes) -> Iterator[str]:
    """Writes the image to a temporary .png for helpers that need a path."""
    try:
        with tempfile.NamedTemporaryFile(
            prefix='geoserver-preview-', suffix='.png', delete=False,
        ) as tmp:
            path = tmp.name
            tmp.write(data)
    except OSError as exc:
        raise RenderError(f'cannot write temporary image: {exc}') from exc
    try:
        yield path
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)
