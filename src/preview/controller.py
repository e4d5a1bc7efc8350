"""Map preview component: viewport commands, fetch coordination, frames.

All state lives in one MapPreviewController and is mutated only by the
dispatcher task, which drains a bounded mailbox. Network fetches run as
separate tasks that post FetchCompleted back into the mailbox. A result
is committed only if its request still matches the current viewport and
style; anything older is dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from domain.models import BBox, FetchRequest, FetchResult, LayerMetadata
from preview.messages import FetchCompleted, KeyPressed, Message, MetadataLoaded, Resized
from preview.protocol import ProtocolDetector
from preview.renderer import ImageRenderer
from preview.sizing import pixel_size
from preview.viewport import StyleSelection, Viewport
from shared.constants import (
    DEFAULT_PIXEL_HEIGHT,
    DEFAULT_PIXEL_WIDTH,
    DEFAULT_ZOOM,
    MAILBOX_SIZE,
    PROTOCOL_LABELS,
    Command,
    PreviewState,
    Protocol,
    command_for_key,
)

logger = logging.getLogger(__name__)

FetchFn = Callable[[FetchRequest], Awaitable[FetchResult]]
MetadataFn = Callable[[], Awaitable[LayerMetadata]]


@dataclass(frozen=True)
class PreviewView:
    """Read-only snapshot handed to the front end after every change."""

    title: str
    zoom: float
    style: str
    protocol: str
    state: PreviewState
    error: str
    frame: str

    @property
    def status(self) -> str:
        if self.state is PreviewState.ERROR:
            return f'Error: {self.error}'
        if self.state is PreviewState.LOADING:
            return 'Loading map...'
        return ''


class MapPreviewController:
    def __init__(
        self,
        fetch: FetchFn,
        workspace: str,
        layer: str,
        *,
        load_metadata: MetadataFn | None = None,
        styles: list[str] | None = None,
        bounds: BBox | None = None,
        zoom: float = DEFAULT_ZOOM,
        detector: ProtocolDetector | None = None,
        renderer: ImageRenderer | None = None,
        on_change: Callable[[PreviewView], None] | None = None,
        on_close: Callable[[], None] | None = None,
        mailbox_size: int = MAILBOX_SIZE,
    ) -> None:
        self.workspace = workspace
        self.layer = layer
        self._fetch = fetch
        self._load_metadata = load_metadata
        self._detector = detector or ProtocolDetector()
        self._renderer = renderer or ImageRenderer()
        self._on_change = on_change
        self._on_close = on_close

        self.viewport = Viewport(zoom=zoom)
        if bounds is not None:
            self.viewport.set_bounds(*bounds)
        self.styles = StyleSelection(styles or [])
        self.protocol: Protocol = self._detector.detect()

        self.state = PreviewState.LOADING
        self.error = ''
        self.frame = ''
        self._image_data: bytes | None = None

        self.cols = 0
        self.rows = 0
        self.pixel_width = DEFAULT_PIXEL_WIDTH
        self.pixel_height = DEFAULT_PIXEL_HEIGHT

        self._mailbox: asyncio.Queue[Message] = asyncio.Queue(maxsize=mailbox_size)
        self._tasks: set[asyncio.Task[None]] = set()

    # --- Public API

    @property
    def closed(self) -> bool:
        return self.state is PreviewState.CLOSED

    def view(self) -> PreviewView:
        return PreviewView(
            title=f'{self.workspace}:{self.layer}',
            zoom=self.viewport.zoom,
            style=self.styles.label,
            protocol=PROTOCOL_LABELS[self.protocol],
            state=self.state,
            error=self.error,
            frame=self.frame,
        )

    def set_size(self, cols: int, rows: int) -> None:
        self.cols = cols
        self.rows = rows
        self.pixel_width, self.pixel_height = pixel_size(cols, rows)

    def redetect_protocol(self) -> Protocol:
        """Повторное определение протокола (например, после смены терминала)."""
        self.protocol = self._detector.detect()
        self._rerender()
        self._notify()
        return self.protocol

    def post_nowait(self, msg: Message) -> bool:
        """Post from synchronous code (stdin reader, signal handler)."""
        try:
            self._mailbox.put_nowait(msg)
        except asyncio.QueueFull:
            logger.warning('Preview mailbox full, dropping %r', msg)
            return False
        return True

    async def post(self, msg: Message) -> None:
        await self._mailbox.put(msg)

    async def run(self) -> None:
        """Dispatcher loop; returns once the preview is closed."""
        self._spawn(self._metadata_task())
        self._notify()
        try:
            while not self.closed:
                msg = await self._mailbox.get()
                self.dispatch(msg)
        finally:
            await self._cancel_tasks()

    def dispatch(self, msg: Message) -> None:
        if self.closed:
            return
        if isinstance(msg, KeyPressed):
            self._handle_key(msg.key)
        elif isinstance(msg, FetchCompleted):
            self._handle_fetch_completed(msg.request, msg.result)
        elif isinstance(msg, MetadataLoaded):
            self._handle_metadata(msg.metadata)
        elif isinstance(msg, Resized):
            self.set_size(msg.cols, msg.rows)
            self._rerender()
            self._notify()
        else:
            logger.debug('Ignoring unknown message %r', msg)

    def close(self) -> None:
        if self.closed:
            return
        self.state = PreviewState.CLOSED
        self.frame = ''
        logger.info('Preview %s:%s closed', self.workspace, self.layer)
        if self._on_close is not None:
            self._on_close()

    # --- Handlers

    def _handle_key(self, key: str) -> None:
        cmd = command_for_key(key)
        if cmd is None:
            return
        if cmd is Command.CLOSE:
            self.close()
            self._notify()
            return

        if cmd is Command.ZOOM_IN:
            self.viewport.zoom_in()
        elif cmd is Command.ZOOM_OUT:
            self.viewport.zoom_out()
        elif cmd is Command.PAN_UP:
            self.viewport.pan_up()
        elif cmd is Command.PAN_DOWN:
            self.viewport.pan_down()
        elif cmd is Command.PAN_LEFT:
            self.viewport.pan_left()
        elif cmd is Command.PAN_RIGHT:
            self.viewport.pan_right()
        elif cmd is Command.NEXT_STYLE:
            self.styles.next()
        elif cmd is Command.PREV_STYLE:
            self.styles.prev()
        # Command.REFRESH: окно не меняется, только повторный запрос
        self.request_map()

    def _handle_metadata(self, metadata: LayerMetadata) -> None:
        if metadata.bounds is not None:
            self.viewport.set_bounds(*metadata.bounds)
        if metadata.styles:
            self.styles.set_styles(metadata.styles)
        logger.info(
            'Layer metadata applied: bounds=%s styles=%s', metadata.bounds, metadata.styles,
        )
        self.request_map()

    def _handle_fetch_completed(self, req: FetchRequest, result: FetchResult) -> None:
        if not self._is_current(req):
            logger.debug('Discarding stale result for bbox %s', req.bbox)
            return
        if result.ok:
            assert result.data is not None
            self._image_data = result.data
            self.error = ''
            self.state = PreviewState.READY
            self._rerender()
            logger.info('Committed frame for bbox %s (%d bytes)', req.bbox, len(result.data))
        else:
            self._image_data = None
            self.frame = ''
            self.error = result.error or 'unknown error'
            self.state = PreviewState.ERROR
            logger.warning('Map fetch failed: %s', self.error)
        self._notify()

    # --- Fetching

    def current_request(self) -> FetchRequest:
        return FetchRequest(
            workspace=self.workspace,
            layer=self.layer,
            style=self.styles.current,
            pixel_width=self.pixel_width,
            pixel_height=self.pixel_height,
            bbox=self.viewport.bbox,
        )

    def request_map(self) -> FetchRequest:
        """Сбрасывает кадр, переходит в LOADING и запускает новый запрос."""
        req = self.current_request()
        self.frame = ''
        self._image_data = None
        self.error = ''
        self.state = PreviewState.LOADING
        logger.info('Fetching %s style=%r bbox=%s', req.layers_param, req.style, req.bbox)
        self._spawn(self._fetch_task(req))
        self._notify()
        return req

    def _is_current(self, req: FetchRequest) -> bool:
        return req.bbox == self.viewport.bbox and req.style == self.styles.current

    async def _fetch_task(self, req: FetchRequest) -> None:
        try:
            result = await self._fetch(req)
        except Exception as exc:
            logger.exception('Unexpected error while fetching %s', req.layers_param)
            result = FetchResult(error=str(exc) or type(exc).__name__)
        await self._mailbox.put(FetchCompleted(req, result))

    async def _metadata_task(self) -> None:
        metadata = LayerMetadata()
        if self._load_metadata is not None:
            try:
                metadata = await self._load_metadata()
            except Exception:
                logger.exception('Failed to load metadata for %s:%s', self.workspace, self.layer)
        await self._mailbox.put(MetadataLoaded(metadata))

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _cancel_tasks(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # --- Rendering

    def _rerender(self) -> None:
        if self._image_data is None or self.state is not PreviewState.READY:
            return
        self.frame = self._renderer.render(self.protocol, self._image_data, self.cols, self.rows)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.view())
