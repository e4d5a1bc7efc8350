"""Domain layer - models and connection profiles."""
from domain.models import (
    BBox,
    ConnectionProfile,
    FetchRequest,
    FetchResult,
    LayerMetadata,
)
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    'BBox',
    'ConnectionProfile',
    'FetchRequest',
    'FetchResult',
    'LayerMetadata',
    'delete_profile',
    'ensure_profiles_dir',
    'list_profiles',
    'load_profile',
    'save_profile',
]
