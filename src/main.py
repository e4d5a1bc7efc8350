"""Entry point: interactive terminal preview of a map server layer."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from domain.models import ConnectionProfile
from domain.profiles import load_profile
from infrastructure.http.client import WmsClient
from preview.controller import MapPreviewController
from preview.protocol import FixedProtocol, ProtocolDetector
from shared.constants import APP_NAME, DEFAULT_ZOOM, ENV_PASSWORD, Protocol
from tui.app import run_terminal
from tui.screen import PreviewScreen

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2


def setup_logging(debug: bool = False) -> Path:
    """Configure logging to a file under the user state dir.

    stdout belongs to the terminal UI, so nothing is logged there.

    Returns:
        Path of the log file.
    """
    state_base = Path(os.getenv('XDG_STATE_HOME') or Path.home() / '.local' / 'state') / APP_NAME
    log_dir = state_base / 'log'
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / 'preview.log'

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.FileHandler(str(log_file), encoding='utf-8')],
        force=True,
    )
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description='Интерактивный предпросмотр слоя сервера карт в терминале',
    )
    parser.add_argument('workspace', help='Рабочая область (workspace)')
    parser.add_argument('layer', help='Имя слоя')
    conn = parser.add_argument_group('подключение')
    conn.add_argument('--profile', help='Имя профиля подключения или путь к .toml')
    conn.add_argument('--url', help='Базовый URL сервера, например http://localhost:8080/geoserver')
    conn.add_argument('--user', default=None, help='Имя пользователя')
    conn.add_argument('--password', default=None, help=f'Пароль (или переменная {ENV_PASSWORD})')
    view = parser.add_argument_group('просмотр')
    view.add_argument(
        '--style', action='append', dest='styles', default=None,
        help='Стиль (можно указать несколько раз)',
    )
    view.add_argument(
        '--bbox', nargs=4, type=float, metavar=('MINX', 'MINY', 'MAXX', 'MAXY'),
        help='Охват слоя, если метаданные недоступны',
    )
    view.add_argument('--zoom', type=float, default=DEFAULT_ZOOM, help='Начальный уровень приближения')
    view.add_argument(
        '--protocol',
        choices=['auto', *(p.value for p in Protocol)],
        default='auto',
        help='Способ вывода изображения (по умолчанию определяется автоматически)',
    )
    view.add_argument(
        '--no-metadata', action='store_true',
        help='Не запрашивать охват и стили слоя через REST API',
    )
    parser.add_argument('--debug', action='store_true', help='Подробный лог')
    return parser


def resolve_profile(args: argparse.Namespace) -> ConnectionProfile:
    """Профиль из --profile, дополненный/переопределённый аргументами CLI."""
    data: dict[str, str] = {}
    if args.profile:
        data = load_profile(args.profile).model_dump()
    if args.url:
        data['url'] = args.url
    if args.user:
        data['username'] = args.user
    if args.password is not None:
        data['password'] = args.password
    elif not data.get('password') and os.getenv(ENV_PASSWORD):
        data['password'] = os.environ[ENV_PASSWORD]
    if 'url' not in data:
        msg = 'Не задан сервер: укажите --profile или --url'
        raise ValueError(msg)
    return ConnectionProfile.model_validate(data)


async def run_preview(args: argparse.Namespace, profile: ConnectionProfile) -> int:
    client = WmsClient(profile.url, profile.username, profile.password)
    detector = ProtocolDetector() if args.protocol == 'auto' else FixedProtocol(Protocol(args.protocol))
    screen = PreviewScreen()

    async def _load_metadata():
        return await client.fetch_layer_metadata(args.workspace, args.layer)

    controller = MapPreviewController(
        client.fetch,
        args.workspace,
        args.layer,
        load_metadata=None if args.no_metadata else _load_metadata,
        styles=args.styles,
        bounds=tuple(args.bbox) if args.bbox else None,
        zoom=args.zoom,
        detector=detector,
        on_change=screen.paint,
    )
    try:
        await run_terminal(controller, screen)
    finally:
        await client.close()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    log_file = setup_logging(args.debug)
    logger.info('Starting %s for %s:%s', APP_NAME, args.workspace, args.layer)

    try:
        profile = resolve_profile(args)
    except (FileNotFoundError, ValueError) as e:
        # ValidationError is a ValueError subclass
        detail = e.errors()[0]['msg'] if isinstance(e, ValidationError) else str(e)
        print(f'{APP_NAME}: {detail}', file=sys.stderr)
        logger.error('Configuration error: %s', detail)
        return EXIT_CONFIG

    try:
        return asyncio.run(run_preview(args, profile))
    except KeyboardInterrupt:
        return EXIT_OK
    except RuntimeError as e:
        print(f'{APP_NAME}: {e}', file=sys.stderr)
        logger.error('Preview failed: %s', e, exc_info=True)
        print(f'See log: {log_file}', file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
