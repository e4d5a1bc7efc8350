from enum import Enum

# Имя приложения (каталоги конфигурации и логов)
APP_NAME = 'geoserver-preview'

# --- Геометрия окна просмотра (EPSG:4326, градусы)

# Мировой охват по долготе и широте
WORLD_MIN_LON = -180.0
WORLD_MAX_LON = 180.0
WORLD_MIN_LAT = -90.0
WORLD_MAX_LAT = 90.0

# Полная ширина/высота мира (zoom 0)
WORLD_WIDTH_DEG = WORLD_MAX_LON - WORLD_MIN_LON
WORLD_HEIGHT_DEG = WORLD_MAX_LAT - WORLD_MIN_LAT

# Границы и шаг приближения (дробные уровни допустимы)
MIN_ZOOM = 0.0
MAX_ZOOM = 20.0
ZOOM_STEP = 0.5

# Уровень приближения при открытии предпросмотра
DEFAULT_ZOOM = 2.0

# Доля текущего охвата, на которую сдвигается центр при панорамировании
PAN_FRACTION = 0.125

# --- WMS

WMS_SERVICE = 'WMS'
WMS_VERSION = '1.1.1'
WMS_REQUEST = 'GetMap'
WMS_FORMAT = 'image/png'
WMS_SRS = 'EPSG:4326'

# Таймаут запроса изображения (секунды)
HTTP_TIMEOUT_S = 30

# Таймаут запросов метаданных слоя через REST (секунды)
REST_TIMEOUT_S = 10

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404

# --- Размеры изображения и сетки символов

# Примерный размер ячейки терминала в пикселях (ширина, высота)
CELL_WIDTH_PX = 8
CELL_HEIGHT_PX = 16

# Отступы под рамку при расчёте размера запрашиваемого изображения (ячейки)
PIXEL_CHROME_COLS = 20
PIXEL_CHROME_ROWS = 10

# Пределы размера запрашиваемого изображения (px)
MIN_PIXEL_WIDTH = 256
MAX_PIXEL_WIDTH = 1024
MIN_PIXEL_HEIGHT = 192
MAX_PIXEL_HEIGHT = 768

# Размер изображения до первого SetSize (px)
DEFAULT_PIXEL_WIDTH = 800
DEFAULT_PIXEL_HEIGHT = 600

# Отступы под заголовок и панель управления (ячейки)
GRID_CHROME_COLS = 4
GRID_CHROME_ROWS = 8

# Пределы сетки символов для графических помощников
MIN_GRID_COLS = 40
MAX_GRID_COLS = 120
MIN_GRID_ROWS = 15
MAX_GRID_ROWS = 50

# Пределы сетки символов для программного ASCII-рендера
MAX_ASCII_COLS = 100
MAX_ASCII_ROWS = 40

# --- ASCII-рендер

# Пиксели с альфой ниже порога выводятся пробелом
ALPHA_THRESHOLD = 128

# Символы от разреженного (светлый) к плотному (тёмный)
GLYPH_RAMP = ' .:-=+*#%@'
BLANK_GLYPH = ' '

# Заглушка вместо кадра при невозможности декодировать PNG
DECODE_ERROR_FRAME = '[Image decode error]'

# --- Внешние помощники и окружение

# Помощник для sixel-графики (читает изображение со stdin)
SIXEL_HELPER = 'img2sixel'
# Универсальный конвертер растра в терминальную графику
GENERAL_HELPER = 'chafa'

# Предельное время работы помощника на один кадр (секунды)
HELPER_TIMEOUT_S = 15

ENV_TERM = 'TERM'
ENV_KITTY_WINDOW_ID = 'KITTY_WINDOW_ID'
NATIVE_TERM_SIGNATURE = 'kitty'

ENV_PASSWORD = 'GEOSERVER_PASSWORD'

# Ёмкость очереди сообщений диспетчера
MAILBOX_SIZE = 64


class Protocol(str, Enum):
    """Уровень графических возможностей терминала (по убыванию качества)."""

    NATIVE = 'native'
    SIXEL_HELPER = 'sixel'
    GENERAL_HELPER = 'general'
    ASCII = 'ascii'


PROTOCOL_LABELS: dict[Protocol, str] = {
    Protocol.NATIVE: 'Kitty',
    Protocol.SIXEL_HELPER: 'Sixel',
    Protocol.GENERAL_HELPER: 'Chafa',
    Protocol.ASCII: 'ASCII',
}


class PreviewState(str, Enum):
    LOADING = 'loading'
    READY = 'ready'
    ERROR = 'error'
    CLOSED = 'closed'


class Command(str, Enum):
    """Действия, привязанные к клавишам."""

    CLOSE = 'close'
    ZOOM_IN = 'zoom_in'
    ZOOM_OUT = 'zoom_out'
    PAN_UP = 'pan_up'
    PAN_DOWN = 'pan_down'
    PAN_LEFT = 'pan_left'
    PAN_RIGHT = 'pan_right'
    REFRESH = 'refresh'
    NEXT_STYLE = 'next_style'
    PREV_STYLE = 'prev_style'


KEY_BINDINGS: dict[str, Command] = {
    'esc': Command.CLOSE,
    'q': Command.CLOSE,
    '+': Command.ZOOM_IN,
    '=': Command.ZOOM_IN,
    '-': Command.ZOOM_OUT,
    '_': Command.ZOOM_OUT,
    'up': Command.PAN_UP,
    'k': Command.PAN_UP,
    'down': Command.PAN_DOWN,
    'j': Command.PAN_DOWN,
    'left': Command.PAN_LEFT,
    'h': Command.PAN_LEFT,
    'right': Command.PAN_RIGHT,
    'l': Command.PAN_RIGHT,
    'r': Command.REFRESH,
    's': Command.NEXT_STYLE,
    'S': Command.PREV_STYLE,
}


def command_for_key(key: str) -> Command | None:
    """Возвращает команду для клавиши или None для неизвестных клавиш."""
    return KEY_BINDINGS.get(key)
