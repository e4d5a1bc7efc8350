"""Geographic viewport and style selection for the map preview.

Pure state and arithmetic, no I/O. The bounding box is derived from the
center and zoom level and is never assigned directly.
"""

from __future__ import annotations

from collections.abc import Sequence

from domain.models import BBox
from shared.constants import (
    DEFAULT_ZOOM,
    MAX_ZOOM,
    MIN_ZOOM,
    PAN_FRACTION,
    WORLD_HEIGHT_DEG,
    WORLD_MAX_LAT,
    WORLD_MAX_LON,
    WORLD_MIN_LAT,
    WORLD_MIN_LON,
    WORLD_WIDTH_DEG,
    ZOOM_STEP,
)


def bbox_for(center_lon: float, center_lat: float, zoom: float) -> BBox:
    """
    Охват окна для центра и уровня приближения.

    Zoom 0 соответствует всему миру, каждый уровень уменьшает охват вдвое.
    Если край выходит за пределы мира, окно сдвигается целиком (размер
    сохраняется): сначала по долготе, затем по широте.
    """
    scale = 1.0 / (2.0**zoom)
    width = WORLD_WIDTH_DEG * scale
    height = WORLD_HEIGHT_DEG * scale

    min_x = center_lon - width / 2
    min_y = center_lat - height / 2
    max_x = center_lon + width / 2
    max_y = center_lat + height / 2

    if min_x < WORLD_MIN_LON:
        min_x = WORLD_MIN_LON
        max_x = min_x + width
    if max_x > WORLD_MAX_LON:
        max_x = WORLD_MAX_LON
        min_x = max_x - width
    if min_y < WORLD_MIN_LAT:
        min_y = WORLD_MIN_LAT
        max_y = min_y + height
    if max_y > WORLD_MAX_LAT:
        max_y = WORLD_MAX_LAT
        min_y = max_y - height

    return (min_x, min_y, max_x, max_y)


class Viewport:
    """Center, zoom and derived bbox of the preview window."""

    def __init__(
        self,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        zoom: float = DEFAULT_ZOOM,
    ) -> None:
        self.center_lon = float(center_lon)
        self.center_lat = float(center_lat)
        self.zoom = min(max(float(zoom), MIN_ZOOM), MAX_ZOOM)
        self._bbox: BBox = (0.0, 0.0, 0.0, 0.0)
        self.recompute_bbox()

    @property
    def bbox(self) -> BBox:
        return self._bbox

    @property
    def width(self) -> float:
        return self._bbox[2] - self._bbox[0]

    @property
    def height(self) -> float:
        return self._bbox[3] - self._bbox[1]

    def recompute_bbox(self) -> BBox:
        self._bbox = bbox_for(self.center_lon, self.center_lat, self.zoom)
        return self._bbox

    def set_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float) -> None:
        """Центрирует окно на середине охвата слоя."""
        self.center_lon = (min_x + max_x) / 2
        self.center_lat = (min_y + max_y) / 2
        self.recompute_bbox()

    def zoom_in(self) -> bool:
        if self.zoom >= MAX_ZOOM:
            return False
        self.zoom = min(self.zoom + ZOOM_STEP, MAX_ZOOM)
        self.recompute_bbox()
        return True

    def zoom_out(self) -> bool:
        if self.zoom <= MIN_ZOOM:
            return False
        self.zoom = max(self.zoom - ZOOM_STEP, MIN_ZOOM)
        self.recompute_bbox()
        return True

    def pan_up(self) -> None:
        self.center_lat += self.height * PAN_FRACTION
        self.recompute_bbox()

    def pan_down(self) -> None:
        self.center_lat -= self.height * PAN_FRACTION
        self.recompute_bbox()

    def pan_left(self) -> None:
        self.center_lon -= self.width * PAN_FRACTION
        self.recompute_bbox()

    def pan_right(self) -> None:
        self.center_lon += self.width * PAN_FRACTION
        self.recompute_bbox()

    def __repr__(self) -> str:
        return (
            f'Viewport(center=({self.center_lon:.6f}, {self.center_lat:.6f}), '
            f'zoom={self.zoom:.1f}, bbox={self._bbox})'
        )


class StyleSelection:
    """Cyclic cursor over the layer's style names; empty means server default."""

    def __init__(self, names: Sequence[str] = ()) -> None:
        self.names: list[str] = list(names)
        self.index = 0

    def set_styles(self, names: Sequence[str]) -> None:
        self.names = list(names)
        self.index = 0

    @property
    def current(self) -> str:
        if not self.names:
            return ''
        return self.names[self.index % len(self.names)]

    @property
    def label(self) -> str:
        return self.current or 'default'

    def next(self) -> None:
        if self.names:
            self.index = (self.index + 1) % len(self.names)

    def prev(self) -> None:
        if self.names:
            self.index = (self.index - 1) % len(self.names)
