"""Messages consumed by the preview dispatcher."""

from __future__ import annotations

from dataclasses import dataclass

from domain.models import FetchRequest, FetchResult, LayerMetadata


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class MetadataLoaded:
    metadata: LayerMetadata


@dataclass(frozen=True)
class FetchCompleted:
    request: FetchRequest
    result: FetchResult


@dataclass(frozen=True)
class Resized:
    cols: int
    rows: int


Message = KeyPressed | MetadataLoaded | FetchCompleted | Resized
