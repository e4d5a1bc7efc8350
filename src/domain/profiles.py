import logging
import os
from pathlib import Path

import tomlkit

from domain.models import ConnectionProfile
from shared.constants import APP_NAME, ENV_PASSWORD

logger = logging.getLogger(__name__)


def _user_profiles_dir() -> Path:
    """
    Determine profiles directory.

    1) If <project_root>/configs/profiles exists, use it (run-from-repo setups).
    2) Otherwise, fall back to $XDG_CONFIG_HOME/geoserver-preview/profiles
       or ~/.config/geoserver-preview/profiles when XDG_CONFIG_HOME is not set.
    """
    project_root = Path(__file__).resolve().parent.parent.parent
    local_profiles = project_root / 'configs' / 'profiles'
    if local_profiles.exists():
        return local_profiles

    return (
        Path(os.getenv('XDG_CONFIG_HOME') or (Path.home() / '.config'))
        / APP_NAME
        / 'profiles'
    )


def ensure_profiles_dir() -> Path:
    profiles_dir = _user_profiles_dir()
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir


def list_profiles() -> list[str]:
    """Список имён профилей без расширения."""
    folder = ensure_profiles_dir()
    return sorted(p.stem for p in folder.glob('*.toml') if p.is_file())


def profile_path(name: str) -> Path:
    """Путь к файлу профиля по имени."""
    return ensure_profiles_dir() / f'{name}.toml'


def load_profile(name_or_path: str) -> ConnectionProfile:
    """
    Загрузка и валидация профиля TOML -> ConnectionProfile.

    Поддерживает как имя профиля (без .toml) из каталога profiles,
    так и абсолютный/относительный путь до TOML файла.
    Пустой пароль подменяется значением переменной GEOSERVER_PASSWORD.
    """
    p = Path(name_or_path)
    path = (
        p if p.suffix.lower() == '.toml' and p.exists() else profile_path(name_or_path)
    )
    if not path.exists():
        msg = f'Профиль не найден: {path}'
        raise FileNotFoundError(msg)
    data = tomlkit.parse(path.read_text(encoding='utf-8')).unwrap()

    if not data.get('password'):
        env_password = os.getenv(ENV_PASSWORD)
        if env_password:
            data['password'] = env_password

    profile = ConnectionProfile.model_validate(data)
    logger.info('Loaded connection profile %s (url=%s, user=%s)', path.stem, profile.url, profile.username)
    return profile


def save_profile(name: str, profile: ConnectionProfile, *, include_password: bool = False) -> Path:
    """Сохранение профиля в TOML (пароль по умолчанию не сохраняется)."""
    path = profile_path(name)
    data = profile.model_dump()
    if not include_password:
        data.pop('password', None)
    path.write_text(tomlkit.dumps(data), encoding='utf-8')
    return path


def delete_profile(name: str) -> None:
    """Удаление файла профиля, если он существует."""
    path = profile_path(name)
    if path.exists():
        path.unlink()
