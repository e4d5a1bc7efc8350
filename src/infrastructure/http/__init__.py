"""HTTP client infrastructure."""
from infrastructure.http.client import (
    WmsClient,
    build_request_url,
    make_http_session,
    parse_layer_styles,
    parse_resource_bounds,
)

__all__ = [
    'WmsClient',
    'build_request_url',
    'make_http_session',
    'parse_layer_styles',
    'parse_resource_bounds',
]
