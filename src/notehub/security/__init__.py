"""Security utilities."""

from .jwt import create_access_token, decode_access_token, get_viewer_from_token

__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_viewer_from_token",
]
