"""Spotify Web API integration: OAuth, token cache, a thin client and response shaping."""

from .auth import SCOPES, SpotifyAuth, SpotifyAuthError
from .client import SpotifyAPIError, SpotifyClient
from .data_loader import SpotifyDataLoader
from .ids import SpotifyId, parse_id, parse_ids
from .token_manager import TokenInfo, TokenManager

__all__ = [
    "SCOPES",
    "SpotifyAPIError",
    "SpotifyAuth",
    "SpotifyAuthError",
    "SpotifyClient",
    "SpotifyDataLoader",
    "SpotifyId",
    "TokenInfo",
    "TokenManager",
    "parse_id",
    "parse_ids",
]
