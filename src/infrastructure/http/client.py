from __future__ import annotations

import logging
import ssl
from typing import Any
from urllib.parse import quote

import aiohttp
import certifi
from pydantic import ValidationError

from domain.models import FetchRequest, FetchResult, LayerMetadata
from shared.constants import (
    HTTP_FORBIDDEN,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_TIMEOUT_S,
    HTTP_UNAUTHORIZED,
    REST_TIMEOUT_S,
    WMS_FORMAT,
    WMS_REQUEST,
    WMS_SERVICE,
    WMS_SRS,
    WMS_VERSION,
)

logger = logging.getLogger(__name__)


def make_http_session(username: str, password: str) -> aiohttp.ClientSession:
    # Создать SSL-контекст с сертификатами из certifi
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    return aiohttp.ClientSession(
        connector=connector,
        auth=aiohttp.BasicAuth(username, password),
    )


def _q(value: str) -> str:
    return quote(value, safe=':/')


def build_request_url(base_url: str, req: FetchRequest) -> str:
    """URL запроса WMS GetMap для снимка окна просмотра."""
    min_x, min_y, max_x, max_y = req.bbox
    return (
        f'{base_url.rstrip("/")}/wms?SERVICE={WMS_SERVICE}&VERSION={WMS_VERSION}'
        f'&REQUEST={WMS_REQUEST}&LAYERS={_q(req.layers_param)}&STYLES={_q(req.style)}'
        f'&FORMAT={_q(WMS_FORMAT)}&TRANSPARENT=true&SRS={WMS_SRS}'
        f'&WIDTH={req.pixel_width}&HEIGHT={req.pixel_height}'
        f'&BBOX={min_x:f},{min_y:f},{max_x:f},{max_y:f}'
    )


class WmsClient:
    """Authenticated access to one map server: GetMap images and layer metadata.

    The aiohttp session is created lazily inside the running event loop and
    must be released with close().
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout_s: float = HTTP_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self._username = username
        self._password = password
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = make_http_session(self._username, self._password)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch(self, req: FetchRequest) -> FetchResult:
        """Один GET GetMap. Ошибки сети и HTTP возвращаются в FetchResult.error."""
        url = build_request_url(self.base_url, req)
        logger.debug('GetMap %s', url)
        try:
            async with self.session.get(url, timeout=self._timeout) as resp:
                if resp.status != HTTP_OK:
                    body = await resp.text(errors='replace')
                    return FetchResult(error=f'WMS error ({resp.status}): {body.strip()}')
                data = await resp.read()
        except TimeoutError:
            return FetchResult(error=f'WMS request timed out after {self._timeout.total:g}s')
        except aiohttp.ClientError as exc:
            return FetchResult(error=f'WMS request failed: {exc}')
        if not data:
            return FetchResult(error='WMS returned an empty image')
        return FetchResult(data=data)

    async def fetch_layer_metadata(self, workspace: str, layer: str) -> LayerMetadata:
        """
        Охват и стили слоя через REST API сервера.

        Сначала /rest/layers/<ws>:<layer>.json (стиль по умолчанию и
        дополнительные стили), затем ресурс слоя (featureType или coverage)
        по ссылке href за latLonBoundingBox. Некорректный охват отбрасывается,
        стили при этом сохраняются. Любая другая ошибка даёт пустые
        метаданные: предпросмотр откроется с мировым охватом.
        """
        try:
            layer_doc = await self._get_json(f'{self.base_url}/rest/layers/{workspace}:{layer}.json')
            styles = parse_layer_styles(layer_doc)
            bounds = None
            href = layer_doc.get('layer', {}).get('resource', {}).get('href')
            if href:
                bounds = parse_resource_bounds(await self._get_json(href))
            try:
                return LayerMetadata(bounds=bounds, styles=styles)
            except ValidationError:
                # Вырожденный охват (например, слой из одной точки): стили сохраняются
                logger.warning('Ignoring invalid bounds %s for %s:%s', bounds, workspace, layer)
                return LayerMetadata(styles=styles)
        except (aiohttp.ClientError, TimeoutError, RuntimeError, ValueError) as exc:
            logger.warning('Layer metadata for %s:%s unavailable: %s', workspace, layer, exc)
            return LayerMetadata()

    async def _get_json(self, url: str) -> dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=REST_TIMEOUT_S)
        headers = {'Accept': 'application/json'}
        async with self.session.get(url, timeout=timeout, headers=headers) as resp:
            sc = resp.status
            if sc == HTTP_OK:
                doc = await resp.json(content_type=None)
                if not isinstance(doc, dict):
                    msg = f'Unexpected JSON from {url}'
                    raise ValueError(msg)
                return doc
            if sc in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
                msg = 'Invalid credentials for the map server'
                raise RuntimeError(msg)
            if sc == HTTP_NOT_FOUND:
                msg = f'Not found: {url}'
                raise RuntimeError(msg)
            msg = f'Map server error (HTTP {sc})'
            raise RuntimeError(msg)


def parse_layer_styles(doc: dict[str, Any]) -> list[str]:
    """Стиль по умолчанию первым, затем дополнительные, без повторов."""
    layer = doc.get('layer', {})
    names: list[str] = []
    default = layer.get('defaultStyle', {}).get('name')
    if default:
        names.append(default)
    extra = layer.get('styles', {}) or {}
    items = extra.get('style', []) if isinstance(extra, dict) else []
    if isinstance(items, dict):
        items = [items]
    for item in items:
        name = item.get('name') if isinstance(item, dict) else None
        if name and name not in names:
            names.append(name)
    return names


def parse_resource_bounds(doc: dict[str, Any]) -> tuple[float, float, float, float] | None:
    resource = doc.get('featureType') or doc.get('coverage') or {}
    box = resource.get('latLonBoundingBox')
    if not box:
        return None
    try:
        return (float(box['minx']), float(box['miny']), float(box['maxx']), float(box['maxy']))
    except (KeyError, TypeError, ValueError):
        logger.debug('Malformed latLonBoundingBox: %r', box)
        return None
