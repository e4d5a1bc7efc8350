"""Tests for domain.profiles (TOML connection profiles)."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from domain.models import ConnectionProfile
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_profile,
    profile_path,
    save_profile,
)


@pytest.fixture
def profiles_dir(tmp_path):
    folder = tmp_path / 'profiles'
    with patch('domain.profiles._user_profiles_dir', return_value=folder):
        yield folder


@pytest.fixture(autouse=True)
def _no_env_password(monkeypatch):
    monkeypatch.delenv('GEOSERVER_PASSWORD', raising=False)


class TestProfilesDir:
    """Tests for ensure_profiles_dir and profile_path."""

    def test_directory_created(self, profiles_dir):
        assert ensure_profiles_dir() == profiles_dir
        assert profiles_dir.is_dir()

    def test_profile_path(self, profiles_dir):
        assert profile_path('local') == profiles_dir / 'local.toml'

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        from domain import profiles

        monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path))
        with patch.object(profiles.Path, 'exists', return_value=False):
            result = profiles._user_profiles_dir()
        assert result == tmp_path / 'geoserver-preview' / 'profiles'


class TestSaveLoad:
    """Tests for save_profile / load_profile."""

    def test_roundtrip_without_password(self, profiles_dir):
        profile = ConnectionProfile(url='http://maps.local/geoserver', username='viewer', password='secret')
        path = save_profile('local', profile)
        assert 'secret' not in path.read_text(encoding='utf-8')
        loaded = load_profile('local')
        assert loaded.url == 'http://maps.local/geoserver'
        assert loaded.username == 'viewer'
        assert loaded.password == ''

    def test_include_password(self, profiles_dir):
        profile = ConnectionProfile(url='http://maps.local/geoserver', password='secret')
        save_profile('local', profile, include_password=True)
        assert load_profile('local').password == 'secret'

    def test_env_password_fills_missing(self, profiles_dir, monkeypatch):
        save_profile('local', ConnectionProfile(url='http://maps.local/geoserver'))
        monkeypatch.setenv('GEOSERVER_PASSWORD', 'from-env')
        assert load_profile('local').password == 'from-env'

    def test_load_by_path(self, tmp_path, profiles_dir):
        path = tmp_path / 'custom.toml'
        path.write_text('url = "https://maps.example.org/geoserver/"\nusername = "ro"\n', encoding='utf-8')
        profile = load_profile(str(path))
        assert profile.url == 'https://maps.example.org/geoserver'
        assert profile.username == 'ro'

    def test_missing_profile(self, profiles_dir):
        with pytest.raises(FileNotFoundError):
            load_profile('absent')

    def test_invalid_profile(self, profiles_dir):
        ensure_profiles_dir()
        profile_path('broken').write_text('url = "maps.local"\n', encoding='utf-8')
        with pytest.raises(ValidationError):
            load_profile('broken')


class TestListDelete:
    """Tests for list_profiles and delete_profile."""

    def test_list_sorted_names(self, profiles_dir):
        for name in ('zeta', 'alpha'):
            save_profile(name, ConnectionProfile(url='http://h'))
        (profiles_dir / 'notes.txt').write_text('x', encoding='utf-8')
        assert list_profiles() == ['alpha', 'zeta']

    def test_delete(self, profiles_dir):
        save_profile('gone', ConnectionProfile(url='http://h'))
        delete_profile('gone')
        delete_profile('gone')
        assert list_profiles() == []
