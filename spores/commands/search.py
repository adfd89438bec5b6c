from typing import Any, Dict

from ..spotify_api.client import SpotifyClient
from ..spotify_api.data_loader import SpotifyDataLoader

MAX_SEARCH_LIMIT = 50


def cmd_search(client: SpotifyClient, query: str, item_type: str = "track", limit: int = 20) -> Dict[str, Any]:
    if not 1 <= int(limit) <= MAX_SEARCH_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_SEARCH_LIMIT}, got {limit}")
    return SpotifyDataLoader(client).search(query, item_type, limit=int(limit))
