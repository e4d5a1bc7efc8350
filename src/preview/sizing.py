from __future__ import annotations

from shared.constants import (
    CELL_HEIGHT_PX,
    CELL_WIDTH_PX,
    GRID_CHROME_COLS,
    GRID_CHROME_ROWS,
    MAX_ASCII_COLS,
    MAX_ASCII_ROWS,
    MAX_GRID_COLS,
    MAX_GRID_ROWS,
    MAX_PIXEL_HEIGHT,
    MAX_PIXEL_WIDTH,
    MIN_GRID_COLS,
    MIN_GRID_ROWS,
    MIN_PIXEL_HEIGHT,
    MIN_PIXEL_WIDTH,
    PIXEL_CHROME_COLS,
    PIXEL_CHROME_ROWS,
)


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def pixel_size(cols: int, rows: int) -> tuple[int, int]:
    """Размер запрашиваемого изображения (px) для области cols x rows ячеек.

    Ячейка терминала примерно вдвое выше, чем шире, поэтому по высоте
    берётся вдвое больший множитель.
    """
    width = _clamp((cols - PIXEL_CHROME_COLS) * CELL_WIDTH_PX, MIN_PIXEL_WIDTH, MAX_PIXEL_WIDTH)
    height = _clamp((rows - PIXEL_CHROME_ROWS) * CELL_HEIGHT_PX, MIN_PIXEL_HEIGHT, MAX_PIXEL_HEIGHT)
    return width, height


def grid_size(cols: int, rows: int, *, ascii_mode: bool = False) -> tuple[int, int]:
    """Размер сетки символов под изображение за вычетом заголовка и панели."""
    max_cols = MAX_ASCII_COLS if ascii_mode else MAX_GRID_COLS
    max_rows = MAX_ASCII_ROWS if ascii_mode else MAX_GRID_ROWS
    return (
        _clamp(cols - GRID_CHROME_COLS, MIN_GRID_COLS, max_cols),
        _clamp(rows - GRID_CHROME_ROWS, MIN_GRID_ROWS, max_rows),
    )
