from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# [minX, minY, maxX, maxY] в градусах EPSG:4326
BBox = tuple[float, float, float, float]


class ConnectionProfile(BaseModel):
    """Параметры подключения к серверу карт."""

    model_config = {
        'extra': 'ignore',  # игнорировать лишние поля из профилей
    }

    # Базовый URL сервера (без завершающего '/')
    url: str
    username: str = 'admin'
    # Пароль может отсутствовать в файле и браться из окружения
    password: str = ''

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(('http://', 'https://')):
            msg = 'URL сервера должен начинаться с http:// или https://'
            raise ValueError(msg)
        return v.rstrip('/')


class LayerMetadata(BaseModel):
    """Метаданные слоя, нужные предпросмотру: охват и список стилей."""

    bounds: BBox | None = None
    styles: list[str] = []

    @field_validator('bounds')
    @classmethod
    def validate_bounds(cls, v: BBox | None) -> BBox | None:
        if v is None:
            return v
        min_x, min_y, max_x, max_y = v
        if not (min_x < max_x and min_y < max_y):
            msg = f'Некорректный охват слоя: {v}'
            raise ValueError(msg)
        return v


class FetchRequest(BaseModel):
    """Снимок параметров запроса на момент его выдачи."""

    model_config = ConfigDict(frozen=True)

    workspace: str
    layer: str
    style: str = ''
    pixel_width: int
    pixel_height: int
    bbox: BBox

    @property
    def layers_param(self) -> str:
        return f'{self.workspace}:{self.layer}'


class FetchResult(BaseModel):
    """Результат одного запроса: байты изображения либо текст ошибки."""

    data: bytes | None = None
    error: str | None = None

    @model_validator(mode='after')
    def check_exclusive(self) -> 'FetchResult':
        if (self.data is None) == (self.error is None):
            msg = 'FetchResult must carry exactly one of data or error'
            raise ValueError(msg)
        return self

    @property
    def ok(self) -> bool:
        return self.error is None
