"""One function per CLI operation. Each returns the JSON document to print."""

from .auth import cmd_auth_logout, cmd_auth_status
from .library import SAVE_ARTIST_ERROR, cmd_save
from .playlist import cmd_playlist_add, cmd_playlist_create, cmd_playlist_info, cmd_playlist_list
from .search import MAX_SEARCH_LIMIT, cmd_search

__all__ = [
    "MAX_SEARCH_LIMIT",
    "SAVE_ARTIST_ERROR",
    "cmd_auth_logout",
    "cmd_auth_status",
    "cmd_playlist_add",
    "cmd_playlist_create",
    "cmd_playlist_info",
    "cmd_playlist_list",
    "cmd_save",
    "cmd_search",
]
